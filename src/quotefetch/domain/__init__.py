"""Domain types for instruments, periods and market data records."""

from .instruments import Instrument, InstrumentKind, parse_instrument
from .models import Bar, InstrumentInfo, InstrumentSeries
from .periods import Interval, Period, is_valid_interval_period, validate_interval_period

__all__ = [
    "Bar",
    "Instrument",
    "InstrumentInfo",
    "InstrumentKind",
    "InstrumentSeries",
    "Interval",
    "Period",
    "is_valid_interval_period",
    "parse_instrument",
    "validate_interval_period",
]
