"""
Tests for nba_data_service.config — layered TOML + environment configuration.

Covers:
  - Defaults from config/default.toml
  - local.toml merged over the base file
  - Environment overrides, including ignored empty / invalid / negative values
  - Zero accepted for delay, interval and future-window overrides
  - Model validation (retention defaulting, prune policy, log level)
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from nba_data_service.config import (
    _ENV_OVERRIDES,
    AppConfig,
    LoggingConfig,
    SnapshotConfig,
    load_config,
)

# ── Fixtures ───────────────────────────────────────────────────────────────────

_BASE_TOML = """
[project]
debug = false

[balldontlie]
base_url = "https://api.balldontlie.io/v1"
timezone = "America/New_York"
max_pages = 5

[snapshots]
base_path = "data/snapshots"
retention_days = 14

[logging]
level = "INFO"
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in list(_ENV_OVERRIDES) + ["NBA_DATA_DEBUG"]:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "default.toml"
    path.write_text(_BASE_TOML, encoding="utf-8")
    return path


# ── load_config ───────────────────────────────────────────────────────────────

class TestLoadConfig:
    def test_reads_file(self, config_file):
        config = load_config(config_file)
        assert isinstance(config, AppConfig)
        assert config.balldontlie.timezone == "America/New_York"
        assert config.snapshots.retention_days == 14
        assert config.balldontlie.api_key is None
        assert config.debug is False

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.toml")

    def test_local_toml_merged(self, config_file):
        (config_file.parent / "local.toml").write_text(
            '[snapshots]\nbase_path = "/tmp/nba"\n', encoding="utf-8"
        )
        config = load_config(config_file)
        assert config.snapshots.base_path == "/tmp/nba"
        assert config.snapshots.retention_days == 14

    def test_repo_default_toml_is_valid(self):
        root = Path(__file__).resolve().parent.parent
        config = load_config(root / "config" / "default.toml")
        assert config.snapshots.prune_policy == "best_effort"


# ── Environment overrides ─────────────────────────────────────────────────────

class TestEnvOverrides:
    def test_string_overrides(self, config_file, monkeypatch):
        monkeypatch.setenv("BALLDONTLIE_API_KEY", "abc123")
        monkeypatch.setenv("BALLDONTLIE_TIMEZONE", "America/Chicago")
        monkeypatch.setenv("SNAPSHOT_BASE_PATH", "/var/lib/nba")

        config = load_config(config_file)
        assert config.balldontlie.api_key == "abc123"
        assert config.balldontlie.timezone == "America/Chicago"
        assert config.snapshots.base_path == "/var/lib/nba"

    def test_numeric_overrides(self, config_file, monkeypatch):
        monkeypatch.setenv("BALLDONTLIE_MAX_PAGES", "2")
        monkeypatch.setenv("SNAPSHOT_RETENTION_DAYS", "30")
        monkeypatch.setenv("SNAPSHOT_SYNC_INTERVAL", "1.5")

        config = load_config(config_file)
        assert config.balldontlie.max_pages == 2
        assert config.snapshots.retention_days == 30
        assert config.snapshots.sync_interval_seconds == 1.5

    @pytest.mark.parametrize("value", ["", "abc", "0", "-4"])
    def test_bad_numeric_values_ignored(self, config_file, monkeypatch, value):
        monkeypatch.setenv("SNAPSHOT_RETENTION_DAYS", value)
        assert load_config(config_file).snapshots.retention_days == 14

    def test_zero_switches_off_delay_and_future_window(self, config_file, monkeypatch):
        (config_file.parent / "local.toml").write_text(
            "[balldontlie]\npage_delay_seconds = 2.0\n", encoding="utf-8"
        )
        monkeypatch.setenv("BALLDONTLIE_PAGE_DELAY", "0")
        monkeypatch.setenv("SNAPSHOT_FUTURE_DAYS", "0")
        monkeypatch.setenv("SNAPSHOT_SYNC_INTERVAL", "0")

        config = load_config(config_file)
        assert config.balldontlie.page_delay_seconds == 0.0
        assert config.snapshots.future_days == 0
        assert config.snapshots.sync_interval_seconds == 0.0

    @pytest.mark.parametrize("value", ["-1", "abc"])
    def test_bad_zero_allowed_values_ignored(self, config_file, monkeypatch, value):
        monkeypatch.setenv("SNAPSHOT_FUTURE_DAYS", value)
        assert load_config(config_file).snapshots.future_days == 7

    def test_debug_flag(self, config_file, monkeypatch):
        monkeypatch.setenv("NBA_DATA_DEBUG", "true")
        assert load_config(config_file).debug is True

    def test_log_level_override(self, config_file, monkeypatch):
        monkeypatch.setenv("NBA_DATA_LOG_LEVEL", "debug")
        assert load_config(config_file).logging.level == "DEBUG"


# ── Model validation ──────────────────────────────────────────────────────────

class TestModels:
    @pytest.mark.parametrize("days", [0, -1])
    def test_retention_defaults(self, days):
        assert SnapshotConfig(retention_days=days).retention_days == 14

    def test_bad_prune_policy(self):
        with pytest.raises(ValidationError):
            SnapshotConfig(prune_policy="sometimes")

    def test_bad_log_level(self):
        with pytest.raises(ValidationError):
            LoggingConfig(level="LOUD")

    def test_frozen(self):
        config = AppConfig()
        with pytest.raises(ValidationError):
            config.debug = True
