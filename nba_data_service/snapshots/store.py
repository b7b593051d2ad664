"""
Snapshot reader — loads persisted games snapshots from a storage root.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from nba_data_service.errors import ConfigurationError, SnapshotDecodeError
from nba_data_service.models.snapshot import GamesSnapshot
from nba_data_service.snapshots.manifest import DEFAULT_RETENTION_DAYS, Manifest, read_manifest
from nba_data_service.snapshots.paths import (
    PathLike,
    check_date_key,
    game_snapshot_path,
    manifest_path,
)

logger = logging.getLogger(__name__)


class SnapshotStore:
    """Read-only access to ``{base}/games/{date}.json`` and the manifest."""

    def __init__(
        self,
        base_path: Optional[PathLike],
        retention_days: int = DEFAULT_RETENTION_DAYS,
    ) -> None:
        self.base_path: Optional[Path] = Path(base_path) if base_path else None
        self.retention_days = retention_days

    def load_games(self, date: str) -> GamesSnapshot:
        """Load the games snapshot for ``date``.

        A snapshot whose embedded date is empty gets ``date`` filled in.

        Raises:
            ConfigurationError: The store has no storage root.
            InputValidationError: ``date`` is empty or not a plain filename stem.
            FileNotFoundError: No snapshot exists for ``date``.
            SnapshotDecodeError: The file is not a valid snapshot payload.
        """
        base = self._require_base()
        check_date_key(date)

        path = game_snapshot_path(base, date)
        raw = path.read_bytes()
        try:
            snapshot = GamesSnapshot.model_validate_json(raw)
        except ValidationError as exc:
            raise SnapshotDecodeError(f"Invalid snapshot file {path}: {exc}") from exc

        logger.debug("Snapshot loaded | date=%s | games=%d", date, len(snapshot.games))
        return snapshot.with_date(date)

    def has_games(self, date: str) -> bool:
        """True when a games snapshot file exists for ``date``.

        Raises:
            InputValidationError: ``date`` contains a path separator or is
                ``.`` / ``..``.
        """
        if self.base_path is None or not date:
            return False
        return game_snapshot_path(self.base_path, date).is_file()

    def manifest(self) -> Manifest:
        """Return the manifest, or a default one when missing or unreadable."""
        return read_manifest(manifest_path(self._require_base()), self.retention_days)

    def _require_base(self) -> Path:
        if self.base_path is None:
            raise ConfigurationError("snapshot store not configured")
        return self.base_path
