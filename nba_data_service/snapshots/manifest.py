"""
Manifest store — the per-root index of which snapshot dates exist.

On-disk shape (``{base}/manifest.json``)::

    {
      "version": 1,
      "generatedAt": "2024-01-15T12:00:00Z",
      "retention": {"gamesDays": 14},
      "games": {
        "dates": ["2024-01-14", "2024-01-15"],
        "lastRefreshed": "2024-01-15T12:00:00Z"
      }
    }

Reads are tolerant: a missing or undecodable manifest yields a default one,
and the ``ManifestLoad`` result says which case occurred so callers can log
corruption instead of silently discarding it.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_serializer, field_validator

from nba_data_service.snapshots.paths import PathLike, atomic_write_bytes, manifest_path
from nba_data_service.utils.time_utils import Clock, format_timestamp, utcnow

logger = logging.getLogger(__name__)

MANIFEST_VERSION = 1
DEFAULT_RETENTION_DAYS = 14


# ── Models ────────────────────────────────────────────────────────────────────


class Retention(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    games_days: int = Field(default=DEFAULT_RETENTION_DAYS, alias="gamesDays")

    @field_validator("games_days")
    @classmethod
    def default_games_days(cls, v: int) -> int:
        return v if v > 0 else DEFAULT_RETENTION_DAYS


class GamesMeta(BaseModel):
    """Games section of the manifest.

    ``dates`` is always de-duplicated and sorted ascending.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    dates: list[str] = Field(default_factory=list)
    last_refreshed: Optional[datetime] = Field(default=None, alias="lastRefreshed")

    @field_validator("dates")
    @classmethod
    def sort_unique(cls, v: list[str]) -> list[str]:
        return sorted(set(v))

    @field_serializer("last_refreshed")
    def serialize_last_refreshed(self, v: Optional[datetime]) -> Optional[str]:
        return format_timestamp(v) if v is not None else None


class Manifest(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    version: int = MANIFEST_VERSION
    generated_at: Optional[datetime] = Field(default=None, alias="generatedAt")
    retention: Retention = Retention()
    games: GamesMeta = GamesMeta()

    @field_serializer("generated_at")
    def serialize_generated_at(self, v: Optional[datetime]) -> Optional[str]:
        return format_timestamp(v) if v is not None else None

    def to_json(self) -> str:
        """Serialize with camelCase keys, 2-space indent."""
        return json.dumps(self.model_dump(mode="json", by_alias=True), indent=2)


class ManifestStatus(str, Enum):
    """Outcome of a tolerant manifest read."""

    LOADED  = "loaded"
    MISSING = "missing"
    CORRUPT = "corrupt"  # unreadable or undecodable; defaulted


@dataclass(frozen=True)
class ManifestLoad:
    """Result of ``load_manifest``.

    Attributes:
        manifest: The decoded manifest, or a default one.
        status:   Which case produced ``manifest``.
        error:    The underlying exception for MISSING/CORRUPT, else None.
    """

    manifest: Manifest
    status:   ManifestStatus
    error:    Optional[Exception] = None


# ── Operations ────────────────────────────────────────────────────────────────


def default_manifest(retention_days: int, clock: Clock = utcnow) -> Manifest:
    """Return an empty manifest; non-positive retention defaults to 14 days."""
    return Manifest(
        version=MANIFEST_VERSION,
        generated_at=clock(),
        retention=Retention(games_days=retention_days),
        games=GamesMeta(dates=[], last_refreshed=None),
    )


def load_manifest(
    path: PathLike,
    default_retention_days: int = DEFAULT_RETENTION_DAYS,
    clock: Clock = utcnow,
) -> ManifestLoad:
    """Read a manifest without raising.

    Args:
        path: Manifest file path.
        default_retention_days: Retention used when a default is returned.
        clock: Stamps ``generated_at`` on a default manifest.

    Returns:
        ``ManifestLoad`` with status LOADED, MISSING, or CORRUPT.
    """
    try:
        raw = Path(path).read_bytes()
    except FileNotFoundError as exc:
        return ManifestLoad(default_manifest(default_retention_days, clock), ManifestStatus.MISSING, exc)
    except OSError as exc:
        return ManifestLoad(default_manifest(default_retention_days, clock), ManifestStatus.CORRUPT, exc)

    try:
        manifest = Manifest.model_validate_json(raw)
    except ValidationError as exc:
        return ManifestLoad(default_manifest(default_retention_days, clock), ManifestStatus.CORRUPT, exc)

    return ManifestLoad(manifest, ManifestStatus.LOADED)


def read_manifest(
    path: PathLike,
    default_retention_days: int = DEFAULT_RETENTION_DAYS,
    clock: Clock = utcnow,
) -> Manifest:
    """Like ``load_manifest`` but returns only the manifest."""
    return load_manifest(path, default_retention_days, clock).manifest


def write_manifest(base_path: PathLike, manifest: Manifest, clock: Clock = utcnow) -> Path:
    """Stamp ``generated_at`` and write ``{base}/manifest.json`` atomically.

    Returns:
        Path of the written manifest.
    """
    stamped = manifest.model_copy(update={"generated_at": clock()})
    path = manifest_path(base_path)
    atomic_write_bytes(path, stamped.to_json().encode("utf-8"))
    logger.debug("Manifest written | path=%s | dates=%d", path, len(stamped.games.dates))
    return path
