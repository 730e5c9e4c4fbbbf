"""HTTP transport used by the retry controller."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol

import requests

from quotefetch.config import ProxyConfig
from quotefetch.errors import FetchTimeoutError, NetworkError, ProxyError

DEFAULT_HEADERS = {
    "Accept": "application/json",
    "Accept-Language": "en-US,en;q=0.9",
    "Connection": "keep-alive",
}


@dataclass(frozen=True)
class HttpResponse:
    """Status and raw body of a completed HTTP exchange."""

    status_code: int
    body: str
    headers: Mapping[str, str] = field(default_factory=dict)


class Transport(Protocol):
    """Single blocking GET; raises a FetchError on transport failure."""

    def get(
        self,
        url: str,
        timeout_ms: int,
        proxy: ProxyConfig | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> HttpResponse:
        """Return the response for any HTTP status."""


class RequestsTransport:
    """Transport backed by a requests session.

    The session ignores proxy environment variables; the proxy is passed
    explicitly on every call so concurrent calls may use different proxies.
    """

    def __init__(self, session: requests.Session | None = None) -> None:
        self.session = session or requests.Session()
        self.session.trust_env = False
        self.session.headers.update(DEFAULT_HEADERS)
        self.logger = logging.getLogger("quotefetch.data.transport")

    def get(
        self,
        url: str,
        timeout_ms: int,
        proxy: ProxyConfig | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> HttpResponse:
        proxies = self._proxies(proxy)
        self.logger.debug(
            "GET %s (timeout %sms, proxy %s)",
            url,
            timeout_ms,
            proxy.redacted_url() if proxy else "none",
        )
        try:
            response = self.session.get(
                url,
                headers=dict(headers or {}),
                timeout=timeout_ms / 1000.0,
                proxies=proxies,
            )
        except requests.exceptions.ProxyError as exc:
            raise ProxyError(f"proxy connection failed for {url}: {exc}") from exc
        except requests.Timeout as exc:
            raise FetchTimeoutError(f"request timed out after {timeout_ms}ms: {url}") from exc
        except requests.RequestException as exc:
            raise NetworkError(f"request failed for {url}: {exc}") from exc

        self.logger.debug(
            "GET %s -> %s (%s bytes)", url, response.status_code, len(response.content)
        )
        return HttpResponse(
            status_code=response.status_code,
            body=response.text,
            headers=dict(response.headers),
        )

    def close(self) -> None:
        self.session.close()

    @staticmethod
    def _proxies(proxy: ProxyConfig | None) -> dict[str, str]:
        if proxy is None:
            return {}
        proxy_url = proxy.url()
        return {"http": proxy_url, "https": proxy_url}
