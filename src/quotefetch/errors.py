"""Exception hierarchy for quote fetching.

Every fetch failure is raised as exactly one ``FetchError`` subclass. The
hierarchy is flat on purpose: callers switch on the class (or ``kind``), never
on a chain of wrapped causes.
"""

from __future__ import annotations


class QuoteFetchError(Exception):
    """Base exception for all library errors."""


class ConfigError(QuoteFetchError, ValueError):
    """Raised when request configuration is invalid or missing."""


class FetchError(QuoteFetchError):
    """Base class for failures of a single fetch operation."""

    kind = "FetchError"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
        self.attempts = 0

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


class NetworkError(FetchError):
    """Transport failure or non-2xx HTTP status."""

    kind = "NetworkError"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ApiError(FetchError):
    """Failure reported by the remote service inside its response body."""

    kind = "ApiError"

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code

    def __str__(self) -> str:
        return f"API Error ({self.status_code}): {self.message}"


class ParseError(FetchError):
    """Malformed or unexpected response body."""

    kind = "ParseError"


class ValidationError(FetchError):
    """Invalid caller input, or a fetch that produced no data."""

    kind = "ValidationError"


class RateLimitError(FetchError):
    """HTTP 429 from the remote service."""

    kind = "RateLimitError"


class ProxyError(FetchError):
    """Proxy connection or authentication failure."""

    kind = "ProxyError"


class FetchTimeoutError(FetchError):
    """Transport call exceeded its timeout."""

    kind = "TimeoutError"


def is_retryable(error: FetchError) -> bool:
    """Return whether the retry controller may attempt the call again."""
    if isinstance(error, (RateLimitError, ProxyError, FetchTimeoutError)):
        return True
    if isinstance(error, NetworkError):
        return error.status_code is None or error.status_code >= 500
    return False
