"""
Snapshot syncer — one synchronous backfill pass over a window of dates.

Date window for a pass at instant ``now`` (UTC):
  - today and yesterday — always refetched, to pick up live and final scores
  - past days 2 .. days-1 — only when no snapshot exists yet
  - future days 1 .. future_days — only when no snapshot exists yet

Each date is fetched through the provider and handed to the writer. A failure
on one date is logged and recorded in the ``SyncReport``; the pass continues
with the next date. The syncer runs in the caller's thread; scheduling
repeated passes is left to the caller (cron, systemd timer, ...).
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from nba_data_service.ingestion.retry import GamesProvider
from nba_data_service.models.snapshot import GamesSnapshot
from nba_data_service.snapshots.store import SnapshotStore
from nba_data_service.snapshots.writer import SnapshotWriter
from nba_data_service.utils.time_utils import Clock, shift_days, utcnow

logger = logging.getLogger(__name__)

DEFAULT_SYNC_DAYS = 7
DEFAULT_FUTURE_DAYS = 7
DEFAULT_SYNC_INTERVAL_SECONDS = 90.0


@dataclass
class SyncReport:
    """What one ``sync`` pass did.

    Attributes:
        dates:   Dates attempted, in order.
        written: Dates whose snapshot was written.
        empty:   Dates the provider returned no games for (nothing written).
        failed:  Date → error text for fetch or write failures.
    """

    dates:   list[str] = field(default_factory=list)
    written: list[str] = field(default_factory=list)
    empty:   list[str] = field(default_factory=list)
    failed:  dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


class SnapshotSyncer:
    """Backfills games snapshots for a rolling window of dates.

    Args:
        provider: Anything with ``fetch_games(date, tz)``.
        writer: Destination writer; its root is also checked for existing
            snapshots.
        days: Size of the past window, counting today; non-positive → 7.
        future_days: Days ahead to prefetch; negative → 0.
        interval: Seconds to pause between dates; negative → 0.
        clock: Source of "now" when ``sync`` is called without one.
        sleep: Called with ``interval`` between dates.
    """

    def __init__(
        self,
        provider: GamesProvider,
        writer: SnapshotWriter,
        days: int = DEFAULT_SYNC_DAYS,
        future_days: int = DEFAULT_FUTURE_DAYS,
        interval: float = DEFAULT_SYNC_INTERVAL_SECONDS,
        clock: Clock = utcnow,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.provider = provider
        self.writer = writer
        self.days = days if days > 0 else DEFAULT_SYNC_DAYS
        self.future_days = max(future_days, 0)
        self.interval = max(interval, 0.0)
        self._store = SnapshotStore(writer.base_path)
        self._clock = clock
        self._sleep = sleep

    def build_dates(self, now: datetime) -> list[str]:
        """Return the dates a pass at ``now`` should fetch, in fetch order."""
        dates = [shift_days(now, 0), shift_days(now, -1)]

        for offset in range(2, self.days):
            date = shift_days(now, -offset)
            if not self._store.has_games(date):
                dates.append(date)

        for offset in range(1, self.future_days + 1):
            date = shift_days(now, offset)
            if not self._store.has_games(date):
                dates.append(date)

        return dates

    def sync(self, now: Optional[datetime] = None) -> SyncReport:
        """Run one backfill pass and return its report."""
        now = now or self._clock()
        dates = self.build_dates(now)
        report = SyncReport(dates=list(dates))

        logger.info(
            "Snapshot sync starting | dates=%d | past_days=%d | future_days=%d | interval=%.1fs",
            len(dates), self.days, self.future_days, self.interval,
        )

        for i, date in enumerate(dates):
            self._sync_date(date, report)
            if self.interval > 0 and i < len(dates) - 1:
                self._sleep(self.interval)

        logger.info(
            "Snapshot sync finished | written=%d | empty=%d | failed=%d",
            len(report.written), len(report.empty), len(report.failed),
        )
        return report

    def _sync_date(self, date: str, report: SyncReport) -> None:
        start = time.monotonic()
        try:
            games = self.provider.fetch_games(date, None)
        except Exception as exc:
            logger.warning("Snapshot sync fetch failed | date=%s | error=%s", date, exc)
            report.failed[date] = str(exc)
            return

        if not games:
            logger.warning("Snapshot sync received no games | date=%s", date)
            report.empty.append(date)
            return

        try:
            self.writer.write_games_snapshot(date, GamesSnapshot(date=date, games=games))
        except Exception as exc:
            logger.warning("Snapshot sync write failed | date=%s | error=%s", date, exc)
            report.failed[date] = str(exc)
            return

        report.written.append(date)
        logger.info(
            "Snapshot sync wrote date | date=%s | games=%d | duration_ms=%d",
            date, len(games), int((time.monotonic() - start) * 1000),
        )
