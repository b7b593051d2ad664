"""
balldontlie API client — paginated game fetches mapped to domain models.

API:   https://api.balldontlie.io/v1
Docs:  https://docs.balldontlie.io

Credential setup (.env, gitignored):
  BALLDONTLIE_API_KEY=your_key_here

The key is optional: without it no ``Authorization`` header is sent and the
upstream decides whether to serve the request.

Request shape::

    GET {base_url}/games?dates[]=YYYY-MM-DD&per_page=100&page=N
    Authorization: Bearer {api_key}

Failure classification (this client never retries):
  - 2xx with an undecodable body      → ``DecodeError``
  - 429 / 503                         → ``RateLimitError`` (with Retry-After)
  - any other non-2xx                 → ``UpstreamError``
  - connection errors and timeouts    → ``httpx.TransportError``, unchanged

A failure on any page fails the whole fetch; earlier pages are discarded.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from typing import TYPE_CHECKING, Callable, ClassVar, Optional

import httpx
from pydantic import ValidationError

from nba_data_service.errors import DecodeError, ProviderError, RateLimitError, UpstreamError
from nba_data_service.ingestion.balldontlie_types import PROVIDER_NAME, GamesPage
from nba_data_service.ingestion.mapper import map_games
from nba_data_service.models.game import Game
from nba_data_service.utils.time_utils import Clock, local_date, resolve_timezone, utcnow

if TYPE_CHECKING:
    from nba_data_service.config import BalldontlieConfig

logger = logging.getLogger(__name__)


def parse_retry_after(raw: Optional[str], now: datetime) -> timedelta:
    """Interpret a ``Retry-After`` header value.

    Tried first as a non-negative integer count of seconds, then as an
    HTTP-date measured from ``now``. Dates in the past, absent headers,
    values too large for a ``timedelta`` and anything unparseable all yield a
    zero duration.

    Args:
        raw: Header value, or ``None`` when the header is absent.
        now: The current instant (timezone-aware).

    Returns:
        Non-negative ``timedelta``.
    """
    raw = (raw or "").strip()
    if not raw:
        return timedelta(0)

    try:
        seconds = int(raw)
    except ValueError:
        seconds = None
    if seconds is not None:
        if seconds <= 0:
            return timedelta(0)
        try:
            return timedelta(seconds=seconds)
        except OverflowError:
            return timedelta(0)

    try:
        retry_at = parsedate_to_datetime(raw)
    except (TypeError, ValueError, IndexError, OverflowError):
        return timedelta(0)
    if retry_at.tzinfo is None:
        retry_at = retry_at.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    try:
        wait = retry_at - now
    except OverflowError:
        return timedelta(0)
    return wait if wait > timedelta(0) else timedelta(0)


class BalldontlieClient:
    """Fetches one day's games from balldontlie, page by page.

    Usage::

        client = BalldontlieClient(api_key=os.environ.get("BALLDONTLIE_API_KEY"))
        games = client.fetch_games()                    # today, America/New_York
        games = client.fetch_games("2024-01-15")        # explicit date
        games = client.fetch_games(tz="America/Los_Angeles")

    Attributes:
        base_url:   API root without trailing slash.
        api_key:    Bearer token, or ``None`` for unauthenticated access.
        max_pages:  Hard cap on requests per fetch, whatever ``total_pages``
            the upstream reports.
        page_delay: Seconds to pause between page requests (0 = none).
    """

    DEFAULT_BASE_URL: ClassVar[str] = "https://api.balldontlie.io/v1"
    DEFAULT_TIMEZONE: ClassVar[str] = "America/New_York"
    DEFAULT_MAX_PAGES: ClassVar[int] = 5
    DEFAULT_TIMEOUT: ClassVar[float] = 10.0
    PER_PAGE: ClassVar[int] = 100
    BODY_EXCERPT_LIMIT: ClassVar[int] = 512
    RATE_LIMIT_STATUSES: ClassVar[frozenset[int]] = frozenset({429, 503})

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timezone_name: Optional[str] = None,
        max_pages: Optional[int] = None,
        page_delay: float = 0.0,
        http_client: Optional[httpx.Client] = None,
        clock: Clock = utcnow,
        sleep: Callable[[float], None] = time.sleep,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialise the client.

        Args:
            base_url: API root. Default: ``DEFAULT_BASE_URL``.
            api_key: Bearer token; ``None`` or ``""`` sends no auth header.
            timezone_name: IANA zone used to decide "today" when no date is
                given. Default ``America/New_York``; unknown names → UTC.
            max_pages: Request cap per fetch; non-positive → 5.
            page_delay: Pause between page requests, in seconds.
            http_client: Injected ``httpx.Client`` (tests pass one built on
                ``httpx.MockTransport``). When omitted the client owns one
                with a ``timeout``-second timeout.
            clock: Source of the current instant.
            sleep: Called with ``page_delay`` between pages.
            timeout: Request timeout for the owned HTTP client.
        """
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self.api_key = api_key or None
        self.max_pages = max_pages if max_pages and max_pages > 0 else self.DEFAULT_MAX_PAGES
        self.page_delay = max(page_delay, 0.0)
        self._tz = resolve_timezone(timezone_name or self.DEFAULT_TIMEZONE) or timezone.utc
        self._clock = clock
        self._sleep = sleep
        self._owns_http = http_client is None
        self._http = http_client or httpx.Client(timeout=timeout)

    @classmethod
    def from_config(
        cls,
        config: "BalldontlieConfig",
        http_client: Optional[httpx.Client] = None,
        clock: Clock = utcnow,
    ) -> "BalldontlieClient":
        """Build a client from the ``[balldontlie]`` config section."""
        return cls(
            base_url=config.base_url,
            api_key=config.api_key,
            timezone_name=config.timezone,
            max_pages=config.max_pages,
            page_delay=config.page_delay_seconds,
            http_client=http_client,
            clock=clock,
            timeout=config.timeout_seconds,
        )

    # ── Public API ─────────────────────────────────────────────────────────────

    def resolve_date(self, date: Optional[str] = None, tz: Optional[str] = None) -> str:
        """Return the ``YYYY-MM-DD`` key a fetch for ``date``/``tz`` targets.

        A non-empty ``date`` is returned verbatim. Otherwise "today" is the
        clock's instant seen in ``tz``, falling back to the client's zone when
        ``tz`` is empty or unknown.
        """
        if date:
            return date
        loc = resolve_timezone(tz) or self._tz
        return local_date(self._clock(), loc)

    def fetch_games(self, date: Optional[str] = None, tz: Optional[str] = None) -> list[Game]:
        """Fetch and map all games for one date.

        Pages are requested strictly in sequence from page 1 until the
        reported ``total_pages`` or ``max_pages`` is reached, whichever comes
        first. When the upstream reports no total, a short or empty page ends
        the fetch. Results keep page order and upstream order within a page.

        Args:
            date: ``YYYY-MM-DD``; ``None``/``""`` means today (see
                ``resolve_date``).
            tz: Per-call timezone override for resolving today.

        Returns:
            Mapped games, possibly empty.

        Raises:
            DecodeError: A 2xx body could not be decoded.
            RateLimitError: The upstream answered 429 or 503.
            UpstreamError: Any other non-2xx answer.
            httpx.TransportError: Connection failure or timeout.
        """
        date_key = self.resolve_date(date, tz)
        games: list[Game] = []
        page = 1

        while True:
            body = self._fetch_page(date_key, page)
            games.extend(map_games(body.data))

            total_pages = body.meta.total_pages
            if total_pages > 0:
                if page >= total_pages or page >= self.max_pages:
                    break
            elif not body.data or len(body.data) < self.PER_PAGE or page >= self.max_pages:
                break

            if self.page_delay > 0:
                self._sleep(self.page_delay)
            page += 1

        logger.info(
            "balldontlie fetch complete | date=%s | pages=%d | games=%d",
            date_key, page, len(games),
        )
        return games

    def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "BalldontlieClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ── Internals ──────────────────────────────────────────────────────────────

    def _fetch_page(self, date_key: str, page: int) -> GamesPage:
        """Issue one page request and decode its body."""
        params = {"dates[]": date_key, "per_page": self.PER_PAGE, "page": page}
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}

        logger.debug("balldontlie request | date=%s | page=%d", date_key, page)
        response = self._http.get(f"{self.base_url}/games", params=params, headers=headers)

        if not response.is_success:
            raise self._classify_error(response)

        try:
            payload = response.json()
        except ValueError as exc:
            raise DecodeError(
                f"{PROVIDER_NAME}: malformed JSON on page {page}: {exc}",
                provider=PROVIDER_NAME,
            ) from exc

        try:
            return GamesPage.model_validate(payload)
        except ValidationError as exc:
            raise DecodeError(
                f"{PROVIDER_NAME}: unexpected response shape on page {page}: {exc}",
                provider=PROVIDER_NAME,
            ) from exc

    def _classify_error(self, response: httpx.Response) -> ProviderError:
        """Turn a non-2xx response into ``RateLimitError`` or ``UpstreamError``."""
        body = response.text[: self.BODY_EXCERPT_LIMIT].strip()
        message = f"{PROVIDER_NAME}: unexpected status {response.status_code}: {body}"

        if response.status_code in self.RATE_LIMIT_STATUSES:
            retry_after = parse_retry_after(response.headers.get("Retry-After"), self._clock())
            remaining = response.headers.get("X-Rate-Limit-Remaining", "")
            logger.warning(
                "balldontlie rate limited | status=%d | retry_after=%.0fs | remaining=%s",
                response.status_code, retry_after.total_seconds(), remaining or "?",
            )
            return RateLimitError(
                message=message,
                status_code=response.status_code,
                retry_after=retry_after,
                remaining=remaining,
                provider=PROVIDER_NAME,
            )

        logger.warning("balldontlie upstream error | status=%d", response.status_code)
        return UpstreamError(
            message=message,
            status_code=response.status_code,
            body=body,
            provider=PROVIDER_NAME,
        )
