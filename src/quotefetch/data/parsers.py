"""Response parsers turning raw bodies into typed records."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any, Protocol

from quotefetch.domain.models import Bar, InstrumentInfo
from quotefetch.errors import ApiError, ParseError


@dataclass(frozen=True)
class ChartPayload:
    """Bars plus the series-level metadata carried by a chart response."""

    bars: tuple[Bar, ...]
    currency: str | None = None
    exchange: str | None = None
    instrument_type: str | None = None


class ResponseParser(Protocol):
    """Parser contract consumed by the fetch client."""

    def parse_series(self, body: str, status_code: int = 200) -> ChartPayload:
        """Parse a chart body."""

    def parse_info(self, body: str, symbol: str, status_code: int = 200) -> InstrumentInfo:
        """Parse a summary body."""


class YahooResponseParser:
    """Parse Yahoo Finance ``chart`` and ``quoteSummary`` JSON."""

    def parse_series(self, body: str, status_code: int = 200) -> ChartPayload:
        payload = self._load(body)
        chart = payload.get("chart")
        if not isinstance(chart, dict):
            raise ParseError("response missing 'chart' object")
        self._raise_api_error(chart.get("error"), status_code)

        results = chart.get("result")
        if not results:
            return ChartPayload(bars=())
        if not isinstance(results, list) or not isinstance(results[0], dict):
            raise ParseError("'chart.result' must be a list of objects")
        result = results[0]
        meta = result.get("meta") or {}
        if not isinstance(meta, dict):
            raise ParseError("'chart.result[0].meta' must be an object")

        bars = self._bars(result)
        return ChartPayload(
            bars=bars,
            currency=_text(meta.get("currency")),
            exchange=_text(meta.get("exchangeName")) or _text(meta.get("fullExchangeName")),
            instrument_type=_text(meta.get("instrumentType")),
        )

    def parse_info(self, body: str, symbol: str, status_code: int = 200) -> InstrumentInfo:
        payload = self._load(body)
        summary = payload.get("quoteSummary")
        if not isinstance(summary, dict):
            raise ParseError("response missing 'quoteSummary' object")
        self._raise_api_error(summary.get("error"), status_code)

        results = summary.get("result")
        if not isinstance(results, list) or not results or not isinstance(results[0], dict):
            raise ParseError(f"'quoteSummary.result' is empty for {symbol}")
        modules = results[0]
        price = _module(modules, "price")
        detail = _module(modules, "summaryDetail")
        stats = _module(modules, "defaultKeyStatistics")
        financial = _module(modules, "financialData")
        profile = _module(modules, "assetProfile")

        return InstrumentInfo(
            symbol=_text(_raw(price, "symbol")) or symbol,
            long_name=_text(_raw(price, "longName")),
            short_name=_text(_raw(price, "shortName")),
            currency=_text(_raw(price, "currency")) or _text(_raw(detail, "currency")),
            exchange=_text(_raw(price, "exchangeName")),
            quote_type=_text(_raw(price, "quoteType")),
            sector=_text(_raw(profile, "sector")),
            industry=_text(_raw(profile, "industry")),
            country=_text(_raw(profile, "country")),
            website=_text(_raw(profile, "website")),
            employees=_integer(_raw(profile, "fullTimeEmployees")),
            summary=_text(_raw(profile, "longBusinessSummary")),
            market_cap=_number(_raw(price, "marketCap")) or _number(_raw(detail, "marketCap")),
            enterprise_value=_number(_raw(stats, "enterpriseValue")),
            regular_market_price=_number(_raw(price, "regularMarketPrice")),
            trailing_pe=_number(_raw(detail, "trailingPE")),
            forward_pe=_number(_raw(detail, "forwardPE")),
            price_to_book=_number(_raw(stats, "priceToBook")),
            trailing_eps=_number(_raw(stats, "trailingEps")),
            dividend_yield=_number(_raw(detail, "dividendYield")),
            beta=_number(_raw(detail, "beta")),
            fifty_two_week_high=_number(_raw(detail, "fiftyTwoWeekHigh")),
            fifty_two_week_low=_number(_raw(detail, "fiftyTwoWeekLow")),
            volume=_integer(_raw(detail, "volume")),
            average_volume=_integer(_raw(detail, "averageVolume")),
            shares_outstanding=_integer(_raw(stats, "sharesOutstanding")),
            total_revenue=_number(_raw(financial, "totalRevenue")),
            profit_margins=_number(_raw(financial, "profitMargins")),
            operating_margins=_number(_raw(financial, "operatingMargins")),
            gross_margins=_number(_raw(financial, "grossMargins")),
            return_on_equity=_number(_raw(financial, "returnOnEquity")),
        )

    @staticmethod
    def _load(body: str) -> dict[str, Any]:
        try:
            payload = json.loads(body)
        except (TypeError, ValueError) as exc:
            raise ParseError(f"response body is not valid JSON: {exc}") from exc
        if not isinstance(payload, dict):
            raise ParseError("response body must be a JSON object")
        return payload

    @staticmethod
    def _raise_api_error(error: Any, status_code: int) -> None:
        if not error:
            return
        if isinstance(error, dict):
            code = error.get("code")
            description = error.get("description") or code or "unknown error"
            message = str(description)
            if code and code != description:
                message = f"{code}: {message}"
        else:
            message = str(error)
        raise ApiError(message, status_code)

    @staticmethod
    def _bars(result: dict[str, Any]) -> tuple[Bar, ...]:
        timestamps = result.get("timestamp") or []
        indicators = result.get("indicators")
        if not timestamps:
            return ()
        if not isinstance(timestamps, list) or not isinstance(indicators, dict):
            raise ParseError("chart result missing 'timestamp' or 'indicators'")
        quotes = indicators.get("quote")
        if not isinstance(quotes, list) or not quotes or not isinstance(quotes[0], dict):
            raise ParseError("chart result missing 'indicators.quote[0]'")
        quote = quotes[0]
        adjclose: list[Any] | None = None
        adjclose_blocks = indicators.get("adjclose")
        if isinstance(adjclose_blocks, list) and adjclose_blocks:
            first_block = adjclose_blocks[0]
            if isinstance(first_block, dict):
                adjclose = first_block.get("adjclose")

        columns = {
            name: quote.get(name) or [] for name in ("open", "high", "low", "close", "volume")
        }
        for name in ("open", "high", "low", "close"):
            if len(columns[name]) != len(timestamps):
                raise ParseError(
                    f"'{name}' has {len(columns[name])} values for {len(timestamps)} timestamps"
                )

        bars: list[Bar] = []
        for position, raw_timestamp in enumerate(timestamps):
            timestamp = _integer(raw_timestamp)
            if timestamp is None:
                raise ParseError(f"invalid timestamp at position {position}: {raw_timestamp!r}")
            open_ = _number(columns["open"][position])
            high = _number(columns["high"][position])
            low = _number(columns["low"][position])
            close = _number(columns["close"][position])
            if open_ is None or high is None or low is None or close is None:
                continue
            volume = _integer(_at(columns["volume"], position)) or 0
            adj_close = _number(_at(adjclose, position))
            bar = Bar(
                timestamp=timestamp,
                open=open_,
                high=high,
                low=low,
                close=close,
                adj_close=close if adj_close is None else adj_close,
                volume=max(0, volume),
            )
            if bars and timestamp < bars[-1].timestamp:
                raise ParseError(
                    f"timestamps out of order at position {position}: "
                    f"{timestamp} after {bars[-1].timestamp}"
                )
            if bars and timestamp == bars[-1].timestamp:
                # Live sessions repeat the last bar; keep the newer row.
                bars[-1] = bar
                continue
            bars.append(bar)
        return tuple(bars)


def _module(modules: dict[str, Any], name: str) -> dict[str, Any]:
    value = modules.get(name)
    return value if isinstance(value, dict) else {}


def _raw(module: dict[str, Any], key: str) -> Any:
    value = module.get(key)
    if isinstance(value, dict):
        return value.get("raw")
    return value


def _at(values: list[Any] | None, position: int) -> Any:
    if not values or position >= len(values):
        return None
    return values[position]


def _number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _integer(value: Any) -> int | None:
    number = _number(value)
    return None if number is None else int(number)


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
