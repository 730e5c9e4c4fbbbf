from __future__ import annotations

import pytest

from quotefetch.domain.instruments import Instrument, InstrumentKind, parse_instrument
from quotefetch.domain.models import Bar, InstrumentSeries
from quotefetch.domain.periods import (
    Interval,
    Period,
    is_valid_interval_period,
    validate_interval_period,
)
from quotefetch.errors import ValidationError

SUB_HOUR = [
    Interval.ONE_MINUTE,
    Interval.TWO_MINUTES,
    Interval.FIVE_MINUTES,
    Interval.FIFTEEN_MINUTES,
    Interval.THIRTY_MINUTES,
]
DAY_OR_LONGER = [
    Interval.ONE_DAY,
    Interval.FIVE_DAYS,
    Interval.ONE_WEEK,
    Interval.ONE_MONTH,
    Interval.THREE_MONTHS,
]


def test_instrument_symbols() -> None:
    assert Instrument.crypto("BTC", "USD").to_symbol() == "BTC-USD"
    assert Instrument.forex("USD", "EUR").to_symbol() == "USDEUR=X"
    assert Instrument.stock("AAPL").to_symbol() == "AAPL"
    assert Instrument.stock("aapl").to_symbol() == "AAPL"
    assert Instrument.index("GSPC").to_symbol() == "^GSPC"
    assert Instrument.index("^DJI").to_symbol() == "^DJI"
    assert Instrument.etf("spy").to_symbol() == "SPY"
    assert Instrument.fund("VFIAX").to_symbol() == "VFIAX"
    assert Instrument.bond("^TNX").to_symbol() == "^TNX"


def test_instrument_symbols_are_distinct_for_sample_set() -> None:
    instruments = [
        Instrument.crypto("BTC", "USD"),
        Instrument.crypto("ETH", "USD"),
        Instrument.forex("USD", "EUR"),
        Instrument.forex("EUR", "USD"),
        Instrument.stock("AAPL"),
        Instrument.index("GSPC"),
        Instrument.stock("GSPC"),
    ]

    symbols = [instrument.to_symbol() for instrument in instruments]

    assert len(set(symbols)) == len(symbols)
    assert symbols == [instrument.to_symbol() for instrument in instruments]


def test_instrument_rejects_bad_parts() -> None:
    with pytest.raises(ValidationError):
        Instrument.stock("  ")
    with pytest.raises(ValidationError):
        Instrument.crypto("BTC", "")
    with pytest.raises(ValidationError):
        Instrument(InstrumentKind.STOCK, "AAPL", "USD")


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("AAPL", Instrument.stock("AAPL")),
        ("BRK-B", Instrument.stock("BRK-B")),
        ("BTC-USD", Instrument.crypto("BTC", "USD")),
        ("CRYPTO:ETHUSDT", Instrument.crypto("ETH", "USD")),
        ("crypto:btc/usd", Instrument.crypto("BTC", "USD")),
        ("EURUSD=X", Instrument.forex("EUR", "USD")),
        ("FOREX:GBPJPY", Instrument.forex("GBP", "JPY")),
        ("^GSPC", Instrument.index("GSPC")),
        ("INDEX:^IXIC", Instrument.index("IXIC")),
        ("ETF:spy", Instrument.etf("SPY")),
    ],
)
def test_parse_instrument(text: str, expected: Instrument) -> None:
    assert parse_instrument(text) == expected


def test_parse_instrument_errors() -> None:
    with pytest.raises(ValidationError):
        parse_instrument("OPTION:AAPL")
    with pytest.raises(ValidationError):
        parse_instrument("FOREX:EURO")
    with pytest.raises(ValidationError):
        parse_instrument("")


@pytest.mark.parametrize("interval", SUB_HOUR)
def test_sub_hour_intervals_need_short_periods(interval: Interval) -> None:
    validate_interval_period(interval, Period.ONE_DAY)
    validate_interval_period(interval, Period.FIVE_DAYS)
    for period in Period:
        if period in {Period.ONE_DAY, Period.FIVE_DAYS}:
            continue
        with pytest.raises(ValidationError):
            validate_interval_period(interval, period)


@pytest.mark.parametrize("interval", DAY_OR_LONGER)
def test_day_or_longer_intervals_accept_every_period(interval: Interval) -> None:
    assert all(is_valid_interval_period(interval, period) for period in Period)


def test_hourly_intervals_reject_long_periods() -> None:
    assert is_valid_interval_period(Interval.ONE_HOUR, Period.TWO_YEARS)
    assert is_valid_interval_period(Interval.SIXTY_MINUTES, Period.YEAR_TO_DATE)
    assert not is_valid_interval_period(Interval.ONE_HOUR, Period.MAX)
    assert not is_valid_interval_period(Interval.NINETY_MINUTES, Period.TEN_YEARS)


def test_interval_and_period_parsing() -> None:
    assert Interval.parse("1Day") is Interval.ONE_DAY
    assert Interval.parse("15min") is Interval.FIFTEEN_MINUTES
    assert Interval.parse("1hour") is Interval.ONE_HOUR
    assert Interval.parse(Interval.ONE_WEEK) is Interval.ONE_WEEK
    assert Period.parse("YTD") is Period.YEAR_TO_DATE
    assert Period.parse("6month") is Period.SIX_MONTHS
    with pytest.raises(ValidationError):
        Interval.parse("7m")
    with pytest.raises(ValidationError):
        Period.parse("3y")


def test_series_frame_and_latest() -> None:
    bars = (
        Bar(1_704_067_200, 1.0, 2.0, 0.5, 1.5, 1.4, 100),
        Bar(1_704_153_600, 1.5, 2.5, 1.0, 2.0, 1.9, 200),
    )
    series = InstrumentSeries(
        symbol="AAPL",
        interval=Interval.ONE_DAY,
        period=Period.FIVE_DAYS,
        bars=bars,
        currency="USD",
    )

    frame = series.to_frame()

    assert list(frame.columns) == ["open", "high", "low", "close", "adj_close", "volume"]
    assert str(frame.index.tz) == "UTC"
    assert str(frame.index[0].date()) == "2024-01-01"
    assert float(frame["close"].iloc[-1]) == 2.0
    assert series.latest() == bars[-1]
    assert series.closes() == [1.5, 2.0]


def test_empty_series_frame() -> None:
    series = InstrumentSeries(
        symbol="AAPL",
        interval=Interval.ONE_DAY,
        period=Period.ONE_DAY,
        bars=(),
        currency="USD",
    )

    assert series.latest() is None
    assert series.to_frame().empty
