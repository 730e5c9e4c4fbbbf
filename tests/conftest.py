from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from typing import Any

import pytest

from quotefetch.config import ProxyConfig
from quotefetch.data.transport import HttpResponse

START_TS = 1_704_067_200
DAY = 86_400


def build_chart_body(
    closes: list[float],
    *,
    start: int = START_TS,
    step: int = DAY,
    currency: str = "USD",
    exchange: str = "NMS",
    instrument_type: str = "EQUITY",
) -> str:
    timestamps = [start + step * position for position in range(len(closes))]
    payload = {
        "chart": {
            "result": [
                {
                    "meta": {
                        "currency": currency,
                        "exchangeName": exchange,
                        "instrumentType": instrument_type,
                    },
                    "timestamp": timestamps,
                    "indicators": {
                        "quote": [
                            {
                                "open": [close - 1 for close in closes],
                                "high": [close + 2 for close in closes],
                                "low": [close - 2 for close in closes],
                                "close": list(closes),
                                "volume": [1_000 + position for position in range(len(closes))],
                            }
                        ],
                        "adjclose": [{"adjclose": list(closes)}],
                    },
                }
            ],
            "error": None,
        }
    }
    return json.dumps(payload)


def build_summary_body(symbol: str = "AAPL") -> str:
    payload = {
        "quoteSummary": {
            "result": [
                {
                    "price": {
                        "symbol": symbol,
                        "longName": "Apple Inc.",
                        "shortName": "Apple",
                        "currency": "USD",
                        "exchangeName": "NasdaqGS",
                        "quoteType": "EQUITY",
                        "marketCap": {"raw": 3_000_000_000_000, "fmt": "3T"},
                        "regularMarketPrice": {"raw": 190.5, "fmt": "190.50"},
                    },
                    "summaryDetail": {
                        "trailingPE": {"raw": 29.4, "fmt": "29.40"},
                        "dividendYield": {"raw": 0.005, "fmt": "0.50%"},
                        "beta": {},
                        "volume": {"raw": 51_000_000, "fmt": "51M"},
                    },
                    "assetProfile": {
                        "sector": "Technology",
                        "industry": "Consumer Electronics",
                        "fullTimeEmployees": 161_000,
                    },
                }
            ],
            "error": None,
        }
    }
    return json.dumps(payload)


class ScriptedTransport:
    """Replays queued responses (or raises queued errors) and records calls."""

    def __init__(self, script: list[HttpResponse | Exception] | None = None) -> None:
        self.script = list(script or [])
        self.calls: list[dict[str, Any]] = []

    def get(
        self,
        url: str,
        timeout_ms: int,
        proxy: ProxyConfig | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> HttpResponse:
        self.calls.append(
            {"url": url, "timeout_ms": timeout_ms, "proxy": proxy, "headers": dict(headers or {})}
        )
        if not self.script:
            raise AssertionError(f"unexpected request: {url}")
        outcome = self.script.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class RoutingTransport:
    """Answers by the last path segment; safe to call from several threads."""

    def __init__(self, routes: Mapping[str, HttpResponse]) -> None:
        self.routes = dict(routes)
        self.urls: list[str] = []

    def get(
        self,
        url: str,
        timeout_ms: int,
        proxy: ProxyConfig | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> HttpResponse:
        _ = (timeout_ms, proxy, headers)
        self.urls.append(url)
        path = url.split("?", 1)[0]
        for fragment, response in self.routes.items():
            if path.endswith(f"/{fragment}"):
                return response
        return HttpResponse(status_code=404, body='{"chart": {"result": null}}')


@pytest.fixture
def chart_body() -> Callable[..., str]:
    return build_chart_body


@pytest.fixture
def summary_body() -> Callable[..., str]:
    return build_summary_body


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def scripted_transport() -> Callable[..., ScriptedTransport]:
    return ScriptedTransport


@pytest.fixture
def routing_transport() -> Callable[..., RoutingTransport]:
    return RoutingTransport
