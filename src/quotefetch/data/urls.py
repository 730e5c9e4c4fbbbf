"""Endpoint URL builders for the Yahoo Finance quote service."""

from __future__ import annotations

from collections.abc import Sequence
from urllib.parse import quote, urlencode

from quotefetch.domain.periods import Interval, Period

CHART_BASE_URL = "https://query1.finance.yahoo.com/v8/finance/chart"
SUMMARY_BASE_URL = "https://query2.finance.yahoo.com/v10/finance/quoteSummary"
SUMMARY_MODULES = (
    "price",
    "summaryDetail",
    "defaultKeyStatistics",
    "financialData",
    "assetProfile",
)


def chart_url(symbol: str, interval: Interval, period: Period) -> str:
    params = {
        "range": period.value,
        "interval": interval.value,
        "includePrePost": "false",
        "events": "div,splits",
    }
    return f"{CHART_BASE_URL}/{_encode_symbol(symbol)}?{urlencode(params)}"


def summary_url(symbol: str, modules: Sequence[str] = SUMMARY_MODULES) -> str:
    params = {"modules": ",".join(modules)}
    return f"{SUMMARY_BASE_URL}/{_encode_symbol(symbol)}?{urlencode(params)}"


def _encode_symbol(symbol: str) -> str:
    return quote(symbol.strip().upper(), safe="")
