"""Technical indicators computed from bar closes."""

from .engine import (
    IndicatorKind,
    IndicatorSpec,
    calculate_indicator,
    ema,
    indicator_frame,
    rsi,
    sma,
)

__all__ = [
    "IndicatorKind",
    "IndicatorSpec",
    "calculate_indicator",
    "ema",
    "indicator_frame",
    "rsi",
    "sma",
]
