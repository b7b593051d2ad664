"""
Time and date utilities for day-keyed snapshots.

Key concepts:
  - Clock: any zero-argument callable returning a timezone-aware ``datetime``.
    Every component that needs "now" takes one at construction so tests can
    pin the instant.
  - Date keys: snapshots are keyed by ``YYYY-MM-DD`` strings. "Today" depends
    on the timezone it is evaluated in, so resolution always goes through an
    explicit ``tzinfo``.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Callable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DATE_FORMAT = "%Y-%m-%d"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info.

    Prefer this over ``datetime.utcnow()`` (which returns naive datetimes).
    """
    return datetime.now(tz=timezone.utc)


def fixed_clock(instant: datetime) -> Clock:
    """Return a clock that always reports ``instant``.

    Naive datetimes are interpreted as UTC.
    """
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return lambda: instant


def parse_date(value: str) -> date:
    """Parse a strict ``YYYY-MM-DD`` date key.

    Raises:
        ValueError: If ``value`` is not a valid date in that format.
    """
    return datetime.strptime(value, DATE_FORMAT).date()


def format_date(value: date | datetime) -> str:
    """Format a date (or datetime, in its own timezone) as ``YYYY-MM-DD``."""
    return value.strftime(DATE_FORMAT)


def format_timestamp(value: datetime) -> str:
    """Format a datetime as an RFC 3339 UTC timestamp (``...Z``)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def resolve_timezone(name: Optional[str]) -> Optional[tzinfo]:
    """Return the ``tzinfo`` for an IANA name, or ``None`` if it is unknown.

    Empty or whitespace-only names resolve to ``None``.
    """
    if not name or not name.strip():
        return None
    try:
        return ZoneInfo(name.strip())
    except (ZoneInfoNotFoundError, ValueError, OSError):
        return None


def local_date(instant: datetime, tz: tzinfo) -> str:
    """Return the ``YYYY-MM-DD`` key for ``instant`` as seen in ``tz``."""
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return format_date(instant.astimezone(tz))


def utc_day_start(instant: datetime) -> date:
    """Return the UTC calendar date containing ``instant``."""
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc).date()


def retention_cutoff(instant: datetime, retention_days: int) -> date:
    """Return the oldest date kept under a rolling ``retention_days`` window.

    Dates strictly before the returned value are outside the window.
    """
    return utc_day_start(instant) - timedelta(days=retention_days)


def shift_days(instant: datetime, days: int) -> str:
    """Return the UTC date key ``days`` away from ``instant`` (negative = past)."""
    return format_date(utc_day_start(instant) + timedelta(days=days))
