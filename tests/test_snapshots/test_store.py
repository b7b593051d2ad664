"""
Tests for nba_data_service.snapshots.store.SnapshotStore.

Covers:
  - Write → load roundtrip yields the same snapshot
  - Missing embedded date filled from the filename
  - Error cases: unconfigured, empty date, missing file, undecodable file
  - has_games() and manifest()
"""

from __future__ import annotations

import json

import pytest

from nba_data_service.errors import ConfigurationError, InputValidationError, SnapshotDecodeError
from nba_data_service.models.snapshot import GamesSnapshot
from nba_data_service.snapshots.store import SnapshotStore
from nba_data_service.snapshots.writer import SnapshotWriter


class TestLoadGames:
    def test_roundtrip(self, snapshot_root, clock, sample_snapshot):
        SnapshotWriter(snapshot_root, clock=clock).write_games_snapshot("2024-01-15", sample_snapshot)
        assert SnapshotStore(snapshot_root).load_games("2024-01-15") == sample_snapshot

    def test_date_filled_from_filename(self, snapshot_root):
        games_dir = snapshot_root / "games"
        games_dir.mkdir()
        (games_dir / "2024-01-10.json").write_text(json.dumps({"games": []}), encoding="utf-8")

        snapshot = SnapshotStore(snapshot_root).load_games("2024-01-10")
        assert snapshot.date == "2024-01-10"
        assert snapshot.games == []

    def test_missing_file(self, snapshot_root):
        with pytest.raises(FileNotFoundError):
            SnapshotStore(snapshot_root).load_games("2024-01-15")

    def test_undecodable_file(self, snapshot_root):
        games_dir = snapshot_root / "games"
        games_dir.mkdir()
        (games_dir / "2024-01-15.json").write_text("[1, 2", encoding="utf-8")
        with pytest.raises(SnapshotDecodeError):
            SnapshotStore(snapshot_root).load_games("2024-01-15")

    def test_empty_date(self, snapshot_root):
        with pytest.raises(InputValidationError):
            SnapshotStore(snapshot_root).load_games("")

    @pytest.mark.parametrize("date", ["../manifest", "games/2024-01-15", ".."])
    def test_path_like_date_rejected(self, snapshot_root, clock, date):
        SnapshotWriter(snapshot_root, clock=clock).write_games_snapshot("2024-01-15", GamesSnapshot())
        with pytest.raises(InputValidationError):
            SnapshotStore(snapshot_root).load_games(date)

    def test_unconfigured(self):
        with pytest.raises(ConfigurationError):
            SnapshotStore(None).load_games("2024-01-15")


class TestHasGames:
    def test_present_and_absent(self, snapshot_root, clock):
        SnapshotWriter(snapshot_root, clock=clock).write_games_snapshot("2024-01-15", GamesSnapshot())
        store = SnapshotStore(snapshot_root)
        assert store.has_games("2024-01-15") is True
        assert store.has_games("2024-01-14") is False

    def test_unconfigured_or_empty_is_false(self, snapshot_root):
        assert SnapshotStore(None).has_games("2024-01-15") is False
        assert SnapshotStore(snapshot_root).has_games("") is False

    def test_path_like_date_rejected(self, snapshot_root):
        with pytest.raises(InputValidationError):
            SnapshotStore(snapshot_root).has_games("../manifest")


class TestManifest:
    def test_reads_written_manifest(self, snapshot_root, clock):
        SnapshotWriter(snapshot_root, retention_days=7, clock=clock).write_games_snapshot(
            "2024-01-15", GamesSnapshot()
        )
        manifest = SnapshotStore(snapshot_root).manifest()
        assert manifest.games.dates == ["2024-01-15"]
        assert manifest.retention.games_days == 7

    def test_missing_manifest_defaults(self, snapshot_root):
        manifest = SnapshotStore(snapshot_root, retention_days=3).manifest()
        assert manifest.games.dates == []
        assert manifest.retention.games_days == 3
