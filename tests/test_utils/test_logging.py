"""
Tests for nba_data_service.utils.logging.
"""

from __future__ import annotations

import io
import json
import logging
import sys

import pytest

from nba_data_service.config import LoggingConfig
from nba_data_service.utils.logging import _JsonFormatter, configure_logging


def _record(msg: str, *args, **extra) -> logging.LogRecord:
    record = logging.LogRecord("nba_data_service.test", logging.INFO, __file__, 1, msg, args, None)
    for key, val in extra.items():
        setattr(record, key, val)
    return record


class TestJsonFormatter:
    def test_core_fields(self):
        payload = json.loads(_JsonFormatter().format(_record("fetched %d games", 3)))
        assert payload["level"] == "INFO"
        assert payload["logger"] == "nba_data_service.test"
        assert payload["msg"] == "fetched 3 games"
        assert payload["ts"].endswith("Z")

    def test_extra_fields_included(self):
        payload = json.loads(_JsonFormatter().format(_record("x", date="2024-01-15")))
        assert payload["date"] == "2024-01-15"
        assert "args" not in payload


class TestConfigureLogging:
    @pytest.fixture(autouse=True)
    def restore_root(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        for handler in root.handlers:
            if handler not in handlers:
                handler.close()
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_file_handler_and_level(self, tmp_path):
        log_file = tmp_path / "logs" / "service.log"
        configure_logging(LoggingConfig(level="DEBUG", log_file=str(log_file)))

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert any(isinstance(h, logging.FileHandler) for h in root.handlers)
        assert log_file.parent.is_dir()
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_console_writes_to_stderr_by_default(self):
        configure_logging(LoggingConfig(level="INFO"))
        consoles = [
            h for h in logging.getLogger().handlers
            if type(h) is logging.StreamHandler
        ]
        assert [h.stream for h in consoles] == [sys.stderr]

    def test_json_lines_on_custom_stream(self):
        stream = io.StringIO()
        configure_logging(LoggingConfig(level="INFO", json_format=True), stream=stream)

        logging.getLogger("nba_data_service.test").info("synced %d dates", 2)

        payload = json.loads(stream.getvalue().strip())
        assert payload["msg"] == "synced 2 dates"
