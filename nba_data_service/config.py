"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local secrets and env overrides (gitignored)
  4. Environment variables        — ``BALLDONTLIE_*``, ``SNAPSHOT_*``,
                                    ``NBA_DATA_*``

Entry point: ``load_config(config_path=None) -> AppConfig``

The CLI and every component factory receive an ``AppConfig`` instance —
never raw dicts or individual env var lookups scattered through the codebase.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

DEFAULT_RETENTION_DAYS = 14
VALID_PRUNE_POLICIES = frozenset({"best_effort", "fail_fast"})

# ── Sub-config models ─────────────────────────────────────────────────────────


class BalldontlieConfig(BaseModel):
    """How the upstream balldontlie API is reached."""

    model_config = ConfigDict(frozen=True)

    base_url: str = "https://api.balldontlie.io/v1"
    api_key: Optional[str] = None
    timezone: str = "America/New_York"
    max_pages: int = 5
    page_delay_seconds: float = 0.0
    timeout_seconds: float = 10.0

    @field_validator("max_pages")
    @classmethod
    def validate_max_pages(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"max_pages must be >= 1, got {v}.")
        return v

    @field_validator("page_delay_seconds", "timeout_seconds")
    @classmethod
    def non_negative_seconds(cls, v: float) -> float:
        if v < 0.0:
            raise ValueError(f"Seconds must be >= 0.0, got {v}.")
        return v


class SnapshotConfig(BaseModel):
    """Snapshot storage, retention, and backfill settings."""

    model_config = ConfigDict(frozen=True)

    base_path: str = "data/snapshots"
    retention_days: int = DEFAULT_RETENTION_DAYS
    prune_policy: str = "best_effort"
    sync_days: int = 7
    future_days: int = 7
    sync_interval_seconds: float = 90.0

    @field_validator("retention_days")
    @classmethod
    def default_retention(cls, v: int) -> int:
        return v if v > 0 else DEFAULT_RETENTION_DAYS

    @field_validator("prune_policy")
    @classmethod
    def validate_prune_policy(cls, v: str) -> str:
        if v not in VALID_PRUNE_POLICIES:
            raise ValueError(
                f"prune_policy must be one of {sorted(VALID_PRUNE_POLICIES)}, got '{v}'."
            )
        return v

    @field_validator("sync_days", "future_days")
    @classmethod
    def non_negative_days(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"Day counts must be >= 0, got {v}.")
        return v


class RetryConfig(BaseModel):
    """Caller-side retry policy wrapped around the upstream client."""

    model_config = ConfigDict(frozen=True)

    max_attempts: int = 3
    backoff_seconds: float = 0.2

    @field_validator("max_attempts")
    @classmethod
    def validate_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"max_attempts must be >= 1, got {v}.")
        return v


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: Optional[str] = None
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration — the single source of truth."""

    model_config = ConfigDict(frozen=True)

    balldontlie: BalldontlieConfig = BalldontlieConfig()
    snapshots: SnapshotConfig = SnapshotConfig()
    retry: RetryConfig = RetryConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent

# env var → (section, key, caster)
_ENV_OVERRIDES: dict[str, tuple[str, str, type]] = {
    "BALLDONTLIE_BASE_URL":    ("balldontlie", "base_url", str),
    "BALLDONTLIE_API_KEY":     ("balldontlie", "api_key", str),
    "BALLDONTLIE_TIMEZONE":    ("balldontlie", "timezone", str),
    "BALLDONTLIE_MAX_PAGES":   ("balldontlie", "max_pages", int),
    "BALLDONTLIE_PAGE_DELAY":  ("balldontlie", "page_delay_seconds", float),
    "SNAPSHOT_BASE_PATH":      ("snapshots", "base_path", str),
    "SNAPSHOT_RETENTION_DAYS": ("snapshots", "retention_days", int),
    "SNAPSHOT_SYNC_DAYS":      ("snapshots", "sync_days", int),
    "SNAPSHOT_FUTURE_DAYS":    ("snapshots", "future_days", int),
    "SNAPSHOT_SYNC_INTERVAL":  ("snapshots", "sync_interval_seconds", float),
    "NBA_DATA_LOG_LEVEL":      ("logging", "level", str),
}

# Numeric fields where 0 is a meaningful setting (no delay, no future window).
_ZERO_ALLOWED = frozenset({"page_delay_seconds", "future_days", "sync_interval_seconds"})


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    # 1. Load .env file (silently skip if missing)
    load_dotenv(dotenv_path=root / ".env", override=False)

    # 2. Load TOML config
    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    # 3. Apply environment variable overrides
    raw = _apply_env_overrides(raw)

    # 4. Build and validate AppConfig
    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variables listed in ``_ENV_OVERRIDES`` to ``raw``.

    Empty values are ignored. Numeric values that fail to parse or are
    negative are ignored too, and so is 0 outside ``_ZERO_ALLOWED``; the file
    default then applies.
    """
    for env_name, (section, key, caster) in _ENV_OVERRIDES.items():
        value = os.environ.get(env_name, "").strip()
        if not value:
            continue
        if caster is str:
            raw.setdefault(section, {})[key] = value
            continue
        try:
            parsed = caster(value)
        except ValueError:
            continue
        if parsed < 0 or (parsed == 0 and key not in _ZERO_ALLOWED):
            continue
        raw.setdefault(section, {})[key] = parsed

    if debug := os.environ.get("NBA_DATA_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    project = raw.pop("project", {})

    return AppConfig(
        balldontlie=BalldontlieConfig(**raw.get("balldontlie", {})),
        snapshots=SnapshotConfig(**raw.get("snapshots", {})),
        retry=RetryConfig(**raw.get("retry", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )
