"""
Snapshot writer — persists day-keyed games snapshots and maintains the manifest.

One call to ``write_games_snapshot`` does, in order:
  1. Validate (configured root, date usable as a filename in ``games/``).
  2. Fill the snapshot's embedded date from ``date`` when empty.
  3. Write ``{base}/games/{date}.json`` atomically, unless the file already
     holds byte-identical content.
  4. Re-read the manifest (missing/corrupt → default), list the dates on
     disk, prune anything older than the retention window, and write the
     manifest back atomically.

Retention is a rolling window anchored at the UTC date of the injected clock:
a date ``d`` is pruned iff ``d < today_utc - retention_days``. Date strings
that do not parse as ``YYYY-MM-DD`` are never deleted.

There is no cross-process locking: two writers on one root race on the
manifest, and the last write wins.

Usage::

    writer = SnapshotWriter("data/snapshots", retention_days=14)
    result = writer.write_games_snapshot("2024-01-15", GamesSnapshot(games=games))
    print(result.retained_dates)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from nba_data_service.errors import ConfigurationError
from nba_data_service.models.snapshot import GamesSnapshot
from nba_data_service.snapshots.manifest import (
    DEFAULT_RETENTION_DAYS,
    GamesMeta,
    Manifest,
    ManifestStatus,
    Retention,
    load_manifest,
    write_manifest,
)
from nba_data_service.snapshots.paths import (
    SNAPSHOT_SUFFIX,
    PathLike,
    atomic_write_bytes,
    check_date_key,
    game_snapshot_path,
    games_dir,
    manifest_path,
)
from nba_data_service.utils.time_utils import Clock, parse_date, retention_cutoff, utcnow

if TYPE_CHECKING:
    from nba_data_service.config import SnapshotConfig

logger = logging.getLogger(__name__)


class PrunePolicy(str, Enum):
    """What to do when deleting an expired snapshot file fails."""

    BEST_EFFORT = "best_effort"  # log a warning, keep going
    FAIL_FAST   = "fail_fast"    # raise the OSError


@dataclass(frozen=True)
class WriteResult:
    """Outcome of one ``write_games_snapshot`` call.

    Attributes:
        date:           Date key that was written.
        path:           Snapshot file path.
        changed:        False when the existing file was byte-identical and
                        the rewrite was skipped.
        manifest_path:  Path of the manifest written afterwards.
        retained_dates: Dates listed in the new manifest (sorted).
        pruned_dates:   Dates removed by retention during this call.
    """

    date:           str
    path:           Path
    changed:        bool
    manifest_path:  Path
    retained_dates: list[str] = field(default_factory=list)
    pruned_dates:   list[str] = field(default_factory=list)


class SnapshotWriter:
    """Writes games snapshots under one storage root."""

    def __init__(
        self,
        base_path: Optional[PathLike],
        retention_days: int = DEFAULT_RETENTION_DAYS,
        clock: Clock = utcnow,
        prune_policy: PrunePolicy = PrunePolicy.BEST_EFFORT,
    ) -> None:
        """Initialise the writer.

        Args:
            base_path: Storage root. ``None`` or ``""`` leaves the writer
                unconfigured; every write then raises ``ConfigurationError``.
            retention_days: Rolling window in days; non-positive → 14.
            clock: Source of "now" for retention and ``lastRefreshed``.
            prune_policy: Handling of failed deletions during pruning.
        """
        self.base_path: Optional[Path] = Path(base_path) if base_path else None
        self.retention_days = retention_days if retention_days > 0 else DEFAULT_RETENTION_DAYS
        self.prune_policy = PrunePolicy(prune_policy)
        self._clock = clock

    @classmethod
    def from_config(cls, config: "SnapshotConfig", clock: Clock = utcnow) -> "SnapshotWriter":
        return cls(
            base_path=config.base_path,
            retention_days=config.retention_days,
            clock=clock,
            prune_policy=PrunePolicy(config.prune_policy),
        )

    # ── Public API ─────────────────────────────────────────────────────────────

    def write_games_snapshot(self, date: str, snapshot: GamesSnapshot) -> WriteResult:
        """Persist ``snapshot`` as the games file for ``date`` and refresh the manifest.

        Games are written in the order given.

        Args:
            date: ``YYYY-MM-DD`` key used for the filename.
            snapshot: Games to persist.

        Returns:
            ``WriteResult`` describing what changed.

        Raises:
            ConfigurationError: The writer has no storage root.
            InputValidationError: ``date`` is empty or not a plain filename
                stem (contains a path separator, or is ``.`` / ``..``).
            OSError: Writing the snapshot or manifest failed, or a prune
                deletion failed under ``PrunePolicy.FAIL_FAST``.
        """
        base = self._require_base()
        check_date_key(date)

        snapshot = snapshot.with_date(date)
        target = game_snapshot_path(base, date)
        data = snapshot.to_json().encode("utf-8")

        changed = True
        if target.is_file() and target.read_bytes() == data:
            changed = False
            logger.debug("Snapshot unchanged, skipping rewrite | date=%s", date)
        else:
            atomic_write_bytes(target, data)

        written_manifest, retained, pruned = self._update_manifest(base, date)

        logger.info(
            "Games snapshot written | date=%s | games=%d | changed=%s | pruned=%d",
            date, len(snapshot.games), changed, len(pruned),
        )
        return WriteResult(
            date=date,
            path=target,
            changed=changed,
            manifest_path=written_manifest,
            retained_dates=retained,
            pruned_dates=pruned,
        )

    def list_dates(self) -> list[str]:
        """Return the sorted date keys of ``*.json`` files under ``{base}/games``.

        Directories, temp files, and other extensions are ignored. A missing
        directory yields an empty list.
        """
        directory = games_dir(self._require_base())
        if not directory.is_dir():
            return []
        dates = {
            entry.name[: -len(SNAPSHOT_SUFFIX)]
            for entry in directory.iterdir()
            if entry.suffix == SNAPSHOT_SUFFIX and not entry.is_dir()
        }
        return sorted(dates)

    # ── Internals ──────────────────────────────────────────────────────────────

    def _require_base(self) -> Path:
        if self.base_path is None:
            raise ConfigurationError("snapshot writer not configured")
        return self.base_path

    def _update_manifest(self, base: Path, date: str) -> tuple[Path, list[str], list[str]]:
        load = load_manifest(manifest_path(base), self.retention_days, self._clock)
        if load.status is ManifestStatus.CORRUPT:
            logger.warning(
                "Manifest unreadable, rebuilding from disk | path=%s | error=%s",
                manifest_path(base), load.error,
            )

        now = self._clock()
        dates = self.list_dates()
        if date not in dates:
            dates.append(date)
        retained, pruned = self._prune(base, dates)

        manifest = Manifest(
            version=load.manifest.version,
            generated_at=load.manifest.generated_at,
            retention=Retention(games_days=self.retention_days),
            games=GamesMeta(dates=retained, last_refreshed=now),
        )
        return write_manifest(base, manifest, clock=self._clock), manifest.games.dates, pruned

    def _prune(self, base: Path, dates: list[str]) -> tuple[list[str], list[str]]:
        """Split ``dates`` into (retained, pruned), deleting pruned files."""
        cutoff = retention_cutoff(self._clock(), self.retention_days)
        retained: list[str] = []
        pruned: list[str] = []

        for date in dates:
            try:
                parsed = parse_date(date)
            except ValueError:
                retained.append(date)
                continue
            if parsed >= cutoff:
                retained.append(date)
                continue

            self._delete_snapshot(base, date)
            pruned.append(date)

        return sorted(retained), sorted(pruned)

    def _delete_snapshot(self, base: Path, date: str) -> None:
        path = game_snapshot_path(base, date)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            if self.prune_policy is PrunePolicy.FAIL_FAST:
                raise
            logger.warning("Failed to prune snapshot | date=%s | path=%s | error=%s", date, path, exc)
        else:
            logger.debug("Pruned snapshot | date=%s", date)
