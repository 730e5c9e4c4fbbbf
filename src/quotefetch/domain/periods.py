"""Sampling intervals, lookback periods and their compatibility rules."""

from __future__ import annotations

from enum import StrEnum
from typing import Self

from quotefetch.errors import ValidationError


class Interval(StrEnum):
    """Bar granularity; values are the remote service's vocabulary."""

    ONE_MINUTE = "1m"
    TWO_MINUTES = "2m"
    FIVE_MINUTES = "5m"
    FIFTEEN_MINUTES = "15m"
    THIRTY_MINUTES = "30m"
    SIXTY_MINUTES = "60m"
    NINETY_MINUTES = "90m"
    ONE_HOUR = "1h"
    ONE_DAY = "1d"
    FIVE_DAYS = "5d"
    ONE_WEEK = "1wk"
    ONE_MONTH = "1mo"
    THREE_MONTHS = "3mo"

    @classmethod
    def parse(cls, value: str | Self) -> Self:
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        aliases = {
            "1min": "1m",
            "2min": "2m",
            "5min": "5m",
            "15min": "15m",
            "30min": "30m",
            "60min": "60m",
            "90min": "90m",
            "1hour": "1h",
            "hour": "1h",
            "day": "1d",
            "1day": "1d",
            "daily": "1d",
            "5day": "5d",
            "week": "1wk",
            "1week": "1wk",
            "weekly": "1wk",
            "month": "1mo",
            "1month": "1mo",
            "monthly": "1mo",
            "3month": "3mo",
        }
        normalized = aliases.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            supported = ", ".join(item.value for item in cls)
            raise ValidationError(
                f"unsupported interval '{value}'. Supported: {supported}"
            ) from None

    @property
    def is_intraday_minutes(self) -> bool:
        return self in _SUB_HOUR_INTERVALS

    @property
    def is_hourly(self) -> bool:
        return self in _HOURLY_INTERVALS


class Period(StrEnum):
    """Lookback window; values are the remote service's vocabulary."""

    ONE_DAY = "1d"
    FIVE_DAYS = "5d"
    ONE_MONTH = "1mo"
    THREE_MONTHS = "3mo"
    SIX_MONTHS = "6mo"
    ONE_YEAR = "1y"
    TWO_YEARS = "2y"
    FIVE_YEARS = "5y"
    TEN_YEARS = "10y"
    YEAR_TO_DATE = "ytd"
    MAX = "max"

    @classmethod
    def parse(cls, value: str | Self) -> Self:
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        aliases = {
            "1day": "1d",
            "5day": "5d",
            "1month": "1mo",
            "3month": "3mo",
            "6month": "6mo",
            "1year": "1y",
            "2year": "2y",
            "5year": "5y",
            "10year": "10y",
        }
        normalized = aliases.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            supported = ", ".join(item.value for item in cls)
            raise ValidationError(
                f"unsupported period '{value}'. Supported: {supported}"
            ) from None


_SUB_HOUR_INTERVALS = frozenset(
    {
        Interval.ONE_MINUTE,
        Interval.TWO_MINUTES,
        Interval.FIVE_MINUTES,
        Interval.FIFTEEN_MINUTES,
        Interval.THIRTY_MINUTES,
    }
)
_HOURLY_INTERVALS = frozenset(
    {Interval.SIXTY_MINUTES, Interval.NINETY_MINUTES, Interval.ONE_HOUR}
)
_SHORT_PERIODS = frozenset({Period.ONE_DAY, Period.FIVE_DAYS})
# Hourly history only reaches back about two years.
_HOURLY_REJECTED_PERIODS = frozenset({Period.FIVE_YEARS, Period.TEN_YEARS, Period.MAX})


def validate_interval_period(interval: Interval, period: Period) -> None:
    """Raise ValidationError when the remote service cannot serve the pair."""
    if interval in _SUB_HOUR_INTERVALS and period not in _SHORT_PERIODS:
        raise ValidationError(
            f"interval {interval.value} is only available with periods 1d or 5d, "
            f"got {period.value}"
        )
    if interval in _HOURLY_INTERVALS and period in _HOURLY_REJECTED_PERIODS:
        raise ValidationError(
            f"interval {interval.value} is not available with period {period.value}"
        )


def is_valid_interval_period(interval: Interval, period: Period) -> bool:
    try:
        validate_interval_period(interval, period)
    except ValidationError:
        return False
    return True
