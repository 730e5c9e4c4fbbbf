"""Market data client: retrying quote fetches and technical indicators."""

from .config import BatchPolicy, ProxyConfig, RequestConfig
from .data import BatchResult, QuoteClient
from .domain import (
    Bar,
    Instrument,
    InstrumentInfo,
    InstrumentKind,
    InstrumentSeries,
    Interval,
    Period,
    parse_instrument,
)
from .errors import (
    ApiError,
    ConfigError,
    FetchError,
    FetchTimeoutError,
    NetworkError,
    ParseError,
    ProxyError,
    RateLimitError,
    ValidationError,
)
from .indicators import IndicatorKind, IndicatorSpec, calculate_indicator, ema, rsi, sma

__all__ = [
    "ApiError",
    "Bar",
    "BatchPolicy",
    "BatchResult",
    "ConfigError",
    "FetchError",
    "FetchTimeoutError",
    "IndicatorKind",
    "IndicatorSpec",
    "Instrument",
    "InstrumentInfo",
    "InstrumentKind",
    "InstrumentSeries",
    "Interval",
    "NetworkError",
    "ParseError",
    "Period",
    "ProxyConfig",
    "ProxyError",
    "QuoteClient",
    "RateLimitError",
    "RequestConfig",
    "ValidationError",
    "calculate_indicator",
    "ema",
    "parse_instrument",
    "rsi",
    "sma",
]
