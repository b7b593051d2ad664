"""
Error taxonomy for upstream fetches and snapshot persistence.

Upstream failures all derive from ``ProviderError``. ``RateLimitError`` also
carries the upstream backoff hint. Transport failures (``httpx.TransportError``)
are not wrapped and reach the caller unchanged.

Snapshot input problems are ``ValueError`` subclasses; a writer or reader built
without a storage root raises ``ConfigurationError``.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Optional


class InputValidationError(ValueError):
    """Bad or missing caller input, e.g. an empty snapshot date."""


class ConfigurationError(RuntimeError):
    """A component was used without the configuration it needs."""


class SnapshotDecodeError(ValueError):
    """A snapshot file on disk is not a valid snapshot payload."""


class ProviderError(Exception):
    """Base class for classified upstream failures."""

    def __init__(self, message: str, provider: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.provider = provider


class DecodeError(ProviderError):
    """A 2xx upstream response whose body could not be decoded."""


class UpstreamError(ProviderError):
    """A non-2xx upstream response that is not a rate limit."""

    def __init__(
        self,
        message: str,
        status_code: int,
        body: str = "",
        provider: str = "",
    ) -> None:
        super().__init__(message, provider=provider)
        self.status_code = status_code
        self.body = body

    def __str__(self) -> str:
        return f"{self.message} (status={self.status_code})"


class RateLimitError(ProviderError):
    """Upstream throttling (HTTP 429 or 503).

    Attributes:
        status_code: HTTP status that signalled the limit.
        retry_after: How long the upstream asked us to wait; zero when the
            response carried no usable ``Retry-After`` header.
        remaining:   Raw ``X-Rate-Limit-Remaining`` header value, or ``""``.
    """

    def __init__(
        self,
        message: str = "",
        status_code: int = 0,
        retry_after: Optional[timedelta] = None,
        remaining: str = "",
        provider: str = "",
    ) -> None:
        super().__init__(message or "provider rate limited", provider=provider)
        self.status_code = status_code
        self.retry_after = retry_after if retry_after is not None else timedelta(0)
        self.remaining = remaining

    def __str__(self) -> str:
        if self.status_code > 0:
            return f"{self.message} (status={self.status_code})"
        return self.message
