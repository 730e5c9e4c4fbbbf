"""Typed market data records."""

from __future__ import annotations

from dataclasses import dataclass

import pandas as pd

from quotefetch.domain.periods import Interval, Period

FRAME_COLUMNS = ["open", "high", "low", "close", "adj_close", "volume"]


@dataclass(frozen=True)
class Bar:
    """One OHLCV sample; ``timestamp`` is seconds since the epoch."""

    timestamp: int
    open: float
    high: float
    low: float
    close: float
    adj_close: float
    volume: int


@dataclass(frozen=True)
class InstrumentInfo:
    """Instrument metadata and fundamentals; every field is optional."""

    symbol: str
    long_name: str | None = None
    short_name: str | None = None
    currency: str | None = None
    exchange: str | None = None
    quote_type: str | None = None
    sector: str | None = None
    industry: str | None = None
    country: str | None = None
    website: str | None = None
    employees: int | None = None
    summary: str | None = None
    market_cap: float | None = None
    enterprise_value: float | None = None
    regular_market_price: float | None = None
    trailing_pe: float | None = None
    forward_pe: float | None = None
    price_to_book: float | None = None
    trailing_eps: float | None = None
    dividend_yield: float | None = None
    beta: float | None = None
    fifty_two_week_high: float | None = None
    fifty_two_week_low: float | None = None
    volume: int | None = None
    average_volume: int | None = None
    shares_outstanding: int | None = None
    total_revenue: float | None = None
    profit_margins: float | None = None
    operating_margins: float | None = None
    gross_margins: float | None = None
    return_on_equity: float | None = None


@dataclass(frozen=True)
class InstrumentSeries:
    """Bars for a single symbol in chronological order, as delivered."""

    symbol: str
    interval: Interval
    period: Period
    bars: tuple[Bar, ...]
    currency: str
    info: InstrumentInfo | None = None
    is_crypto: bool = False
    is_forex: bool = False
    exchange: str | None = None

    def __len__(self) -> int:
        return len(self.bars)

    def closes(self) -> list[float]:
        return [bar.close for bar in self.bars]

    def latest(self) -> Bar | None:
        if not self.bars:
            return None
        return self.bars[-1]

    def to_frame(self) -> pd.DataFrame:
        """Return bars as a DataFrame with a UTC datetime index."""
        if not self.bars:
            return pd.DataFrame(
                columns=FRAME_COLUMNS,
                index=pd.DatetimeIndex([], tz="UTC", name="timestamp"),
            )
        frame = pd.DataFrame(
            [
                {
                    "timestamp": bar.timestamp,
                    "open": bar.open,
                    "high": bar.high,
                    "low": bar.low,
                    "close": bar.close,
                    "adj_close": bar.adj_close,
                    "volume": bar.volume,
                }
                for bar in self.bars
            ]
        )
        frame.index = pd.to_datetime(frame.pop("timestamp"), unit="s", utc=True)
        frame.index.name = "timestamp"
        return frame[FRAME_COLUMNS]
