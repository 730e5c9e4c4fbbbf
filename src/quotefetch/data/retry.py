"""Bounded retry with exponential backoff around the transport."""

from __future__ import annotations

import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

from quotefetch.config import RequestConfig
from quotefetch.data.transport import HttpResponse, Transport
from quotefetch.errors import FetchError, NetworkError, RateLimitError, is_retryable
from quotefetch.logging import FetchLogger


@dataclass(frozen=True)
class FetchRequest:
    """Fully built request; proxy and timeout come from the config."""

    url: str
    headers: Mapping[str, str] = field(default_factory=dict)


def backoff_delay_ms(attempt: int, config: RequestConfig) -> int:
    """Delay before retrying after the 0-based ``attempt`` failed."""
    return min(config.backoff_max_ms, config.backoff_base_ms * (2**attempt))


def classify_response(response: HttpResponse) -> FetchError | None:
    """Return the error for a non-success status, or None on 2xx."""
    status = response.status_code
    if 200 <= status < 300:
        return None
    if status == 429:
        return RateLimitError("rate limited by remote service (HTTP 429)")
    detail = response.body.strip()[:200] or "No response body"
    if 400 <= status < 500:
        return NetworkError(f"client error {status}: {detail}", status_code=status)
    if status >= 500:
        return NetworkError(f"server error {status}: {detail}", status_code=status)
    return NetworkError(f"unexpected status {status}", status_code=status)


def retry_after_ms(response: HttpResponse) -> int | None:
    """Numeric Retry-After header in milliseconds, if present."""
    for name, value in response.headers.items():
        if name.lower() != "retry-after":
            continue
        text = str(value).strip()
        if text.isdigit():
            return int(text) * 1000
    return None


class RetryController:
    """Drive a transport until success, a non-retryable error, or the budget."""

    def __init__(
        self,
        transport: Transport,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.transport = transport
        self.sleep = sleep
        self.log = FetchLogger("quotefetch.data.retry")

    def execute(
        self,
        request: FetchRequest,
        config: RequestConfig,
        max_retries: int | None = None,
    ) -> HttpResponse:
        """Return the first 2xx response.

        ``max_retries`` is the total attempt budget (at least one attempt is
        always made). When the budget runs out the last error is re-raised
        with its kind unchanged and ``attempts`` set.
        """
        budget = config.max_retries if max_retries is None else max_retries
        max_attempts = max(1, budget)
        proxy_label = config.proxy.redacted_url() if config.proxy else None

        for attempt in range(max_attempts):
            self.log.request(request.url, attempt + 1, max_attempts, proxy_label)
            response: HttpResponse | None = None
            try:
                response = self.transport.get(
                    request.url,
                    config.timeout_ms,
                    proxy=config.proxy,
                    headers=request.headers,
                )
            except FetchError as exc:
                error = exc
            else:
                classified = classify_response(response)
                if classified is None:
                    return response
                error = classified

            error.attempts = attempt + 1
            if not is_retryable(error):
                raise error
            if attempt + 1 >= max_attempts:
                error.message = f"{error.message} (gave up after {max_attempts} attempts)"
                raise error

            delay_ms = backoff_delay_ms(attempt, config)
            if isinstance(error, RateLimitError) and response is not None:
                hinted = retry_after_ms(response)
                if hinted is not None:
                    delay_ms = min(config.backoff_max_ms, max(delay_ms, hinted))
            self.log.retry(str(error), attempt + 1, max_attempts, delay_ms)
            if delay_ms > 0:
                self.sleep(delay_ms / 1000.0)

        raise NetworkError("max retries exceeded")
