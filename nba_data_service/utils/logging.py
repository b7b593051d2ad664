"""
Root logger setup for the CLI.

Library modules only ever call ``logging.getLogger(__name__)``; the CLI calls
``configure_logging`` once, before building a client, writer or syncer.

Console output goes to stderr. Stdout is reserved for command output such as
``fetch-games --json``, which must stay machine-readable.

With ``json_format = true`` under ``[logging]`` each record becomes one JSON
object per line::

    {"ts": "2024-01-15T15:00:00Z", "level": "WARNING",
     "logger": "nba_data_service.snapshots.sync", "msg": "Snapshot sync failed ..."}
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Optional, TextIO

if TYPE_CHECKING:
    from nba_data_service.config import LoggingConfig

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Per-request lines from the HTTP stack; page-level logs come from the client.
QUIET_LOGGERS = ("httpx", "httpcore")

# Attributes every LogRecord carries; anything else came in through extra=.
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


class _JsonFormatter(logging.Formatter):
    """One JSON object per record: ``ts``, ``level``, ``logger``, ``msg``,
    plus ``exc`` when an exception is attached and any ``extra=`` fields."""

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: dict = {
            "ts": ts.strftime(LOG_DATE_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        payload.update(
            (key, val)
            for key, val in record.__dict__.items()
            if key not in _RESERVED_ATTRS and not key.startswith("_")
        )
        return json.dumps(payload, default=str)


def build_formatter(json_format: bool) -> logging.Formatter:
    if json_format:
        return _JsonFormatter()
    return logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)


def configure_logging(config: "LoggingConfig", stream: Optional[TextIO] = None) -> None:
    """Install console (and optionally file) handlers on the root logger.

    Args:
        config: The ``[logging]`` section of ``AppConfig``.
        stream: Console target. Default: ``sys.stderr``.
    """
    level = getattr(logging, config.level.upper(), logging.INFO)
    formatter = build_formatter(config.json_format)

    handlers: list[logging.Handler] = [logging.StreamHandler(stream or sys.stderr)]
    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)

    logging.basicConfig(level=level, handlers=handlers, force=True)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
