"""
Caller-side retry wrapper for game providers.

The upstream client never retries on its own; callers that want retries wrap
it here. Any object with a ``fetch_games(date, tz)`` method can be wrapped.

Delay between attempts:
  - ``RateLimitError`` with a positive ``retry_after`` → exactly that wait.
  - otherwise → linear backoff ``attempt × backoff_seconds``, jittered into
    ``[base / 2, base]``.

Usage::

    provider = RetryingProvider(BalldontlieClient(api_key=key), max_attempts=3)
    games = provider.fetch_games("2024-01-15")
"""

from __future__ import annotations

import logging
import random
import time
from typing import TYPE_CHECKING, Callable, Optional, Protocol

import httpx
from tenacity import RetryCallState, Retrying, retry_if_exception_type, stop_after_attempt

from nba_data_service.errors import ProviderError, RateLimitError
from nba_data_service.models.game import Game

if TYPE_CHECKING:
    from nba_data_service.config import RetryConfig

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BACKOFF_SECONDS = 0.2

RETRYABLE_ERRORS = (ProviderError, httpx.TransportError)


class GamesProvider(Protocol):
    def fetch_games(self, date: Optional[str] = None, tz: Optional[str] = None) -> list[Game]:
        ...


class RetryingProvider:
    """Retries a provider's ``fetch_games`` on upstream failures.

    Args:
        provider: The wrapped provider.
        max_attempts: Total attempts including the first; non-positive → 3.
        backoff_seconds: Linear backoff base; non-positive → 0.2.
        sleep: Called with the delay in seconds between attempts.
        rng: Source of jitter. Pass a seeded ``random.Random`` in tests.
    """

    def __init__(
        self,
        provider: GamesProvider,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        backoff_seconds: float = DEFAULT_BACKOFF_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.provider = provider
        self.max_attempts = max_attempts if max_attempts > 0 else DEFAULT_MAX_ATTEMPTS
        self.backoff_seconds = backoff_seconds if backoff_seconds > 0 else DEFAULT_BACKOFF_SECONDS
        self._sleep = sleep
        self._rng = rng or random.Random()

    @classmethod
    def from_config(
        cls, provider: GamesProvider, config: "RetryConfig"
    ) -> "RetryingProvider":
        return cls(
            provider,
            max_attempts=config.max_attempts,
            backoff_seconds=config.backoff_seconds,
        )

    def fetch_games(self, date: Optional[str] = None, tz: Optional[str] = None) -> list[Game]:
        """Call the wrapped provider, retrying upstream failures.

        Raises:
            ProviderError | httpx.TransportError: The last error once all
                attempts are used up.
        """
        retrying = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self._wait,
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            sleep=self._sleep,
            before_sleep=self._log_retry,
            reraise=True,
        )
        try:
            return retrying(self.provider.fetch_games, date, tz)
        except RETRYABLE_ERRORS as exc:
            logger.warning(
                "Provider fetch failed | attempts=%d | error=%s", self.max_attempts, exc
            )
            raise

    def delay_for(self, attempt: int, error: BaseException) -> float:
        """Seconds to wait after failed attempt number ``attempt``."""
        if isinstance(error, RateLimitError):
            retry_after = error.retry_after.total_seconds()
            if retry_after > 0:
                return retry_after

        base = attempt * self.backoff_seconds
        half = base / 2
        return half + self._rng.uniform(0.0, half)

    def _wait(self, retry_state: RetryCallState) -> float:
        return self.delay_for(retry_state.attempt_number, retry_state.outcome.exception())

    def _log_retry(self, retry_state: RetryCallState) -> None:
        logger.warning(
            "Provider fetch retry | attempt=%d/%d | backoff=%.3fs | error=%s",
            retry_state.attempt_number,
            self.max_attempts,
            retry_state.next_action.sleep,
            retry_state.outcome.exception(),
        )
