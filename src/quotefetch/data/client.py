"""Fetch client composing the retry controller and the response parser."""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from typing import Self

from quotefetch.config import RequestConfig
from quotefetch.data.batch import BatchResult, run_batch
from quotefetch.data.parsers import ResponseParser, YahooResponseParser
from quotefetch.data.retry import FetchRequest, RetryController
from quotefetch.data.transport import RequestsTransport, Transport
from quotefetch.data.urls import chart_url, summary_url
from quotefetch.domain.instruments import Instrument, InstrumentKind, parse_instrument
from quotefetch.domain.models import Bar, InstrumentInfo, InstrumentSeries
from quotefetch.domain.periods import Interval, Period, validate_interval_period
from quotefetch.errors import ValidationError
from quotefetch.indicators import IndicatorSpec, calculate_indicator
from quotefetch.logging import FetchLogger

SymbolLike = str | Instrument

_CRYPTO_TYPES = {"CRYPTOCURRENCY"}
_FOREX_TYPES = {"CURRENCY"}


class QuoteClient:
    """Fetch bars, instrument info and prices from the quote service.

    Each call is an independent transaction: the client keeps no cache and
    the config is never mutated, so one client may serve many threads.
    """

    def __init__(
        self,
        config: RequestConfig | None = None,
        transport: Transport | None = None,
        parser: ResponseParser | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = (config or RequestConfig()).validate()
        self._owns_transport = transport is None
        self.transport = transport or RequestsTransport()
        self.parser = parser or YahooResponseParser()
        self.retry = RetryController(self.transport, sleep=sleep)
        self.log = FetchLogger("quotefetch.data.client")

    def close(self) -> None:
        """Release the HTTP session when the client created it."""
        if self._owns_transport:
            self.transport.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def fetch_data(
        self,
        symbol: SymbolLike,
        period: Period | str = Period.ONE_MONTH,
        interval: Interval | str = Interval.ONE_DAY,
    ) -> InstrumentSeries:
        """Fetch the bar series for one symbol."""
        resolved_interval = Interval.parse(interval)
        resolved_period = Period.parse(period)
        validate_interval_period(resolved_interval, resolved_period)
        remote_symbol = self._remote_symbol(symbol)

        request = FetchRequest(
            url=chart_url(remote_symbol, resolved_interval, resolved_period),
            headers=self._headers(),
        )
        response = self.retry.execute(request, self.config, self.config.max_retries)
        payload = self.parser.parse_series(response.body, response.status_code)
        if not payload.bars:
            raise ValidationError(f"no data available for symbol: {remote_symbol}")

        self.log.fetched(
            remote_symbol, resolved_interval.value, resolved_period.value, len(payload.bars)
        )
        return InstrumentSeries(
            symbol=remote_symbol,
            interval=resolved_interval,
            period=resolved_period,
            bars=payload.bars,
            currency=payload.currency or "USD",
            is_crypto=self._is_kind(symbol, payload.instrument_type, InstrumentKind.CRYPTO),
            is_forex=self._is_kind(symbol, payload.instrument_type, InstrumentKind.FOREX),
            exchange=payload.exchange,
        )

    def fetch_info(self, symbol: SymbolLike) -> InstrumentInfo:
        """Fetch metadata and fundamentals for one symbol."""
        remote_symbol = self._remote_symbol(symbol)
        request = FetchRequest(url=summary_url(remote_symbol), headers=self._headers())
        response = self.retry.execute(request, self.config, self.config.max_retries)
        info = self.parser.parse_info(response.body, remote_symbol, response.status_code)
        self.log.fetched_info(remote_symbol, info.long_name or info.short_name)
        return info

    def get_current_price(self, symbol: SymbolLike) -> float:
        """Close of the most recent one-minute bar of the current day."""
        remote_symbol = self._remote_symbol(symbol)
        series = self.fetch_data(remote_symbol, Period.ONE_DAY, Interval.ONE_MINUTE)
        latest = series.latest()
        if latest is None:
            raise ValidationError(f"no data available for symbol: {remote_symbol}")
        return latest.close

    def fetch_batch(
        self,
        symbols: Sequence[SymbolLike],
        period: Period | str = Period.ONE_MONTH,
        interval: Interval | str = Interval.ONE_DAY,
    ) -> BatchResult[InstrumentSeries]:
        """Fetch series for many symbols under ``config.batch_policy``."""
        resolved_interval = Interval.parse(interval)
        resolved_period = Period.parse(period)
        validate_interval_period(resolved_interval, resolved_period)
        return run_batch(
            self._remote_symbols(symbols),
            lambda item: self.fetch_data(item, resolved_period, resolved_interval),
            self.config,
            operation="fetch_batch",
        )

    def fetch_info_batch(self, symbols: Sequence[SymbolLike]) -> BatchResult[InstrumentInfo]:
        return run_batch(
            self._remote_symbols(symbols),
            self.fetch_info,
            self.config,
            operation="fetch_info_batch",
        )

    def get_current_price_batch(self, symbols: Sequence[SymbolLike]) -> BatchResult[float]:
        return run_batch(
            self._remote_symbols(symbols),
            self.get_current_price,
            self.config,
            operation="get_current_price_batch",
        )

    @staticmethod
    def calculate_indicator(
        series: InstrumentSeries | Sequence[Bar],
        spec: IndicatorSpec | str,
    ) -> list[float]:
        return calculate_indicator(series, spec)

    def _headers(self) -> dict[str, str]:
        return {"User-Agent": self.config.user_agent}

    def _remote_symbols(self, symbols: Sequence[SymbolLike]) -> list[str]:
        return [self._remote_symbol(symbol) for symbol in symbols]

    @staticmethod
    def _remote_symbol(symbol: SymbolLike) -> str:
        if isinstance(symbol, Instrument):
            return symbol.to_symbol()
        text = str(symbol).strip().upper()
        if not text:
            raise ValidationError("symbol must not be empty")
        if ":" in text:
            return parse_instrument(text).to_symbol()
        return text

    @staticmethod
    def _is_kind(symbol: SymbolLike, instrument_type: str | None, kind: InstrumentKind) -> bool:
        if instrument_type:
            expected = _CRYPTO_TYPES if kind is InstrumentKind.CRYPTO else _FOREX_TYPES
            return instrument_type.upper() in expected
        if isinstance(symbol, Instrument):
            return symbol.kind is kind
        try:
            return parse_instrument(str(symbol)).kind is kind
        except ValidationError:
            return False
