"""
Shared pytest fixtures for the nba-data-service test suite.

Provides:
  - ``fixed_now`` / ``clock``: a pinned UTC instant and a clock returning it.
  - ``snapshot_root``: a temporary storage root for snapshot tests.
  - Sample wire payloads and domain objects for use in multiple test modules.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

from nba_data_service.models.game import Game, GameMeta, GameStatus, Score, Team
from nba_data_service.models.snapshot import GamesSnapshot
from nba_data_service.utils.time_utils import Clock, fixed_clock

FIXED_NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


# ── Clock fixtures ────────────────────────────────────────────────────────────

@pytest.fixture
def fixed_now() -> datetime:
    """2024-01-15T12:00:00Z."""
    return FIXED_NOW


@pytest.fixture
def clock(fixed_now: datetime) -> Clock:
    return fixed_clock(fixed_now)


@pytest.fixture
def snapshot_root(tmp_path: Path) -> Path:
    root = tmp_path / "snapshots"
    root.mkdir()
    return root


# ── Wire payload factories ────────────────────────────────────────────────────

def team_payload(team_id: int, abbreviation: str, name: str, city: str) -> dict[str, Any]:
    return {
        "id": team_id,
        "abbreviation": abbreviation,
        "city": city,
        "conference": "East",
        "division": "Atlantic",
        "full_name": f"{city} {name}",
        "name": name,
    }


def game_payload(game_id: int, status: str = "Final", **overrides: Any) -> dict[str, Any]:
    """One upstream ``data`` entry; Celtics host Knicks unless overridden."""
    payload: dict[str, Any] = {
        "id": game_id,
        "date": "2024-01-15",
        "season": 2023,
        "status": status,
        "period": 4,
        "time": " Final ",
        "postseason": False,
        "home_team_score": 110,
        "visitor_team_score": 102,
        "home_team": team_payload(2, "BOS", "Celtics", "Boston"),
        "visitor_team": team_payload(20, "NYK", "Knicks", "New York"),
    }
    payload.update(overrides)
    return payload


def page_payload(game_ids: list[int], total_pages: int = 1) -> dict[str, Any]:
    return {
        "data": [game_payload(gid) for gid in game_ids],
        "meta": {"total_pages": total_pages, "per_page": 100},
    }


@pytest.fixture
def make_http_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.Client]:
    """Build an ``httpx.Client`` whose requests are answered by ``handler``."""

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(handler))

    return _make


# ── Domain object factories ───────────────────────────────────────────────────

def make_game(game_id: int = 1, status: GameStatus = GameStatus.FINAL) -> Game:
    return Game(
        id=f"balldontlie-{game_id}",
        provider="balldontlie",
        home_team=Team(id="team-2", name="Celtics", full_name="Boston Celtics", abbreviation="BOS"),
        away_team=Team(id="team-20", name="Knicks", full_name="New York Knicks", abbreviation="NYK"),
        start_time="2024-01-15",
        status=status,
        score=Score(home=110, away=102),
        meta=GameMeta(season="2023", upstream_game_id=game_id, period=4, time="Final"),
    )


@pytest.fixture
def sample_game() -> Game:
    return make_game()


@pytest.fixture
def sample_snapshot() -> GamesSnapshot:
    return GamesSnapshot(date="2024-01-15", games=[make_game(1), make_game(2)])


@pytest.fixture
def game_factory() -> Callable[..., Game]:
    """``game_factory(game_id, status)`` → a mapped ``Game``."""
    return make_game


@pytest.fixture
def page_factory() -> Callable[..., dict[str, Any]]:
    """``page_factory(game_ids, total_pages)`` → an upstream page body."""
    return page_payload


@pytest.fixture
def game_record_factory() -> Callable[..., dict[str, Any]]:
    """``game_record_factory(game_id, status, **overrides)`` → one ``data`` entry."""
    return game_payload
