"""SMA, EMA and RSI over chronological bar sequences.

All functions are pure and read only ``Bar.close``. Too few bars yield an
empty list rather than an error; a non-positive period is a ValidationError.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Self

import numpy as np
import pandas as pd

from quotefetch.domain.models import Bar, InstrumentSeries
from quotefetch.errors import ValidationError

BarsLike = InstrumentSeries | Sequence[Bar]


class IndicatorKind(StrEnum):
    """Supported indicator families."""

    SMA = "sma"
    EMA = "ema"
    RSI = "rsi"


@dataclass(frozen=True)
class IndicatorSpec:
    """Indicator family plus its lookback period."""

    kind: IndicatorKind
    period: int

    def __post_init__(self) -> None:
        _check_period(self.period)

    @property
    def column(self) -> str:
        return f"{self.kind.value}_{self.period}"

    @classmethod
    def parse(cls, value: str) -> Self:
        """Parse ``"rsi:14"`` style text."""
        kind_text, separator, period_text = value.strip().lower().partition(":")
        if not separator or not period_text.strip().isdigit():
            raise ValidationError(f"indicator must look like 'sma:20' (got '{value}')")
        try:
            kind = IndicatorKind(kind_text.strip())
        except ValueError:
            supported = ", ".join(item.value for item in IndicatorKind)
            raise ValidationError(
                f"unknown indicator '{kind_text}'. Supported: {supported}"
            ) from None
        return cls(kind=kind, period=int(period_text))

    def warmup(self) -> int:
        """Number of leading bars without an indicator value."""
        if self.kind is IndicatorKind.RSI:
            return self.period
        return self.period - 1


def sma(bars: BarsLike, period: int) -> list[float]:
    """Simple moving average; ``n - period + 1`` values."""
    _check_period(period)
    close = _closes(bars)
    if len(close) < period:
        return []
    averages = close.rolling(window=period).mean()
    return [float(value) for value in averages.iloc[period - 1 :]]


def ema(bars: BarsLike, period: int) -> list[float]:
    """Exponential moving average seeded with the SMA of the first window."""
    _check_period(period)
    close = _closes(bars)
    if len(close) < period:
        return []
    seed = float(close.iloc[:period].mean())
    seeded = pd.Series([seed, *close.iloc[period:].tolist()], dtype="float64")
    smoothed = seeded.ewm(alpha=2.0 / (period + 1), adjust=False).mean()
    return [float(value) for value in smoothed]


def rsi(bars: BarsLike, period: int) -> list[float]:
    """Relative strength index with Wilder smoothing; ``n - period`` values.

    The first value averages the first ``period`` gains and losses; each
    later value folds in one more delta. A zero average loss gives 100.
    """
    _check_period(period)
    close = _closes(bars).to_numpy(dtype="float64")
    if len(close) < period + 1:
        return []
    deltas = np.diff(close)
    gains = np.clip(deltas, 0.0, None)
    losses = np.clip(-deltas, 0.0, None)

    avg_gain = _wilder(gains, period)
    avg_loss = _wilder(losses, period)
    with np.errstate(divide="ignore", invalid="ignore"):
        relative = 100.0 - 100.0 / (1.0 + avg_gain / avg_loss)
    values = np.where(avg_loss == 0.0, 100.0, relative)
    return [float(value) for value in np.clip(values, 0.0, 100.0)]


def calculate_indicator(series: BarsLike, spec: IndicatorSpec | str) -> list[float]:
    """Dispatch to the indicator named by ``spec``."""
    resolved = IndicatorSpec.parse(spec) if isinstance(spec, str) else spec
    functions = {
        IndicatorKind.SMA: sma,
        IndicatorKind.EMA: ema,
        IndicatorKind.RSI: rsi,
    }
    return functions[resolved.kind](series, resolved.period)


def indicator_frame(series: InstrumentSeries, specs: Sequence[IndicatorSpec]) -> pd.DataFrame:
    """Closes plus one column per indicator, NaN during each warm-up."""
    frame = series.to_frame()[["close"]].copy()
    for spec in specs:
        values = calculate_indicator(series, spec)
        padding = [np.nan] * (len(frame) - len(values))
        frame[spec.column] = padding + values
    return frame


def _wilder(values: np.ndarray, period: int) -> np.ndarray:
    seed = float(values[:period].mean())
    seeded = pd.Series([seed, *values[period:].tolist()], dtype="float64")
    return seeded.ewm(alpha=1.0 / period, adjust=False).mean().to_numpy()


def _closes(bars: BarsLike) -> pd.Series:
    items = bars.bars if isinstance(bars, InstrumentSeries) else bars
    return pd.Series([bar.close for bar in items], dtype="float64")


def _check_period(period: int) -> None:
    if isinstance(period, bool) or not isinstance(period, int) or period <= 0:
        raise ValidationError(f"indicator period must be a positive integer (got {period!r})")
