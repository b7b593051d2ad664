"""
Tests for nba_data_service.models — Game/Team models and GamesSnapshot.

Covers:
  - Frozen models reject mutation
  - camelCase aliases on output, alias or field name accepted on input
  - GamesSnapshot.with_date() only fills an empty date
"""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from nba_data_service.models.game import Game, GameStatus, Team
from nba_data_service.models.snapshot import GamesSnapshot


class TestGame:
    def test_frozen(self, sample_game):
        with pytest.raises(ValidationError):
            sample_game.provider = "other"

    def test_default_status_is_scheduled(self):
        game = Game(id="x-1", provider="x", home_team=Team(id="team-1"), away_team=Team(id="team-2"))
        assert game.status is GameStatus.SCHEDULED

    def test_accepts_aliases(self):
        game = Game.model_validate({
            "id": "x-1",
            "provider": "x",
            "homeTeam": {"id": "team-1", "fullName": "Home Side"},
            "awayTeam": {"id": "team-2"},
            "startTime": "2024-01-15",
            "status": "FINAL",
        })
        assert game.home_team.full_name == "Home Side"
        assert game.status is GameStatus.FINAL


class TestGamesSnapshot:
    def test_payload_uses_camel_case(self, sample_snapshot):
        payload = sample_snapshot.to_payload()
        game = payload["games"][0]
        assert set(game) >= {"homeTeam", "awayTeam", "startTime"}
        assert game["meta"]["upstreamGameId"] == 1
        assert game["status"] == "FINAL"

    def test_to_json_two_space_indent(self, sample_snapshot):
        text = sample_snapshot.to_json()
        assert text.startswith('{\n  "date": "2024-01-15"')
        assert json.loads(text)["date"] == "2024-01-15"

    def test_with_date_fills_empty(self):
        assert GamesSnapshot().with_date("2024-01-15").date == "2024-01-15"

    def test_with_date_keeps_existing(self):
        snapshot = GamesSnapshot(date="2024-01-10")
        assert snapshot.with_date("2024-01-15").date == "2024-01-10"
