"""
Filesystem layout of a snapshot storage root, plus the atomic write helper.

Layout::

    {base}/
      manifest.json
      games/
        2024-01-14.json
        2024-01-15.json

Writes go to a uniquely named ``<target>.*.tmp`` file in the same directory,
are fsynced, and are then moved over the target with ``os.replace``. Readers
see either the old file or the new one, never a partial write.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import Union

from nba_data_service.errors import InputValidationError

GAMES_DIR = "games"
MANIFEST_FILENAME = "manifest.json"
SNAPSHOT_SUFFIX = ".json"
TEMP_SUFFIX = ".tmp"

PathLike = Union[str, Path]


def games_dir(base_path: PathLike) -> Path:
    return Path(base_path) / GAMES_DIR


def check_date_key(date: str) -> str:
    """Return ``date`` if it is usable as a snapshot filename stem.

    The key must be non-empty and a single path component: no separators and
    not ``.`` or ``..``. Anything else could resolve outside ``{base}/games``.

    Raises:
        InputValidationError: The key is empty or not a plain filename stem.
    """
    if not date:
        raise InputValidationError("snapshot date required")
    if (
        date in (".", "..")
        or PurePosixPath(date).name != date
        or PureWindowsPath(date).name != date
    ):
        raise InputValidationError(f"invalid snapshot date: {date!r}")
    return date


def game_snapshot_path(base_path: PathLike, date: str) -> Path:
    """Return ``{base}/games/{date}.json``; ``date`` must pass ``check_date_key``."""
    check_date_key(date)
    return games_dir(base_path) / f"{date}{SNAPSHOT_SUFFIX}"


def manifest_path(base_path: PathLike) -> Path:
    """Return ``{base}/manifest.json``."""
    return Path(base_path) / MANIFEST_FILENAME


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """Write ``data`` to ``path`` via a unique sibling temp file and ``os.replace``.

    Each call gets its own ``{name}.*.tmp`` file, so concurrent writers of one
    target never move each other's partial data into place. The temp file is
    fsynced before the rename. Parent directories are created as needed; on
    failure the temp file is removed and the original error propagates.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        dir=path.parent, prefix=f"{path.name}.", suffix=TEMP_SUFFIX, delete=False
    ) as tmp:
        tmp_path = Path(tmp.name)
        try:
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        except OSError:
            tmp.close()
            tmp_path.unlink(missing_ok=True)
            raise

    try:
        os.replace(tmp_path, path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise
