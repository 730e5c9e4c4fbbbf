"""Tradable instruments and their remote symbol strings."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Self

from quotefetch.errors import ValidationError


class InstrumentKind(StrEnum):
    """Supported instrument categories."""

    STOCK = "stock"
    CRYPTO = "crypto"
    FOREX = "forex"
    FUND = "fund"
    INDEX = "index"
    ETF = "etf"
    BOND = "bond"


_PAIR_KINDS = frozenset({InstrumentKind.CRYPTO, InstrumentKind.FOREX})
_CRYPTO_QUOTES = ("USDT", "USDC", "USD", "EUR", "GBP", "BTC", "ETH")


@dataclass(frozen=True)
class Instrument:
    """Instrument identity.

    Pair kinds (crypto, forex) use ``symbol`` as the base and ``quote`` as the
    quote currency. All other kinds leave ``quote`` unset.
    """

    kind: InstrumentKind
    symbol: str
    quote: str | None = None

    def __post_init__(self) -> None:
        if not self.symbol.strip():
            raise ValidationError(f"{self.kind.value} symbol must not be empty")
        if self.kind in _PAIR_KINDS:
            if self.quote is None or not self.quote.strip():
                raise ValidationError(f"{self.kind.value} pair requires a quote currency")
        elif self.quote is not None:
            raise ValidationError(f"{self.kind.value} instruments do not take a quote currency")

    @classmethod
    def stock(cls, symbol: str) -> Self:
        return cls(InstrumentKind.STOCK, symbol)

    @classmethod
    def crypto(cls, base: str, quote: str) -> Self:
        return cls(InstrumentKind.CRYPTO, base, quote)

    @classmethod
    def forex(cls, base: str, quote: str) -> Self:
        return cls(InstrumentKind.FOREX, base, quote)

    @classmethod
    def fund(cls, symbol: str) -> Self:
        return cls(InstrumentKind.FUND, symbol)

    @classmethod
    def index(cls, symbol: str) -> Self:
        return cls(InstrumentKind.INDEX, symbol)

    @classmethod
    def etf(cls, symbol: str) -> Self:
        return cls(InstrumentKind.ETF, symbol)

    @classmethod
    def bond(cls, symbol: str) -> Self:
        return cls(InstrumentKind.BOND, symbol)

    def to_symbol(self) -> str:
        """Return the remote symbol, e.g. ``BTC-USD`` or ``USDEUR=X``."""
        base = self.symbol.strip().upper()
        if self.kind is InstrumentKind.CRYPTO:
            return f"{base}-{str(self.quote).strip().upper()}"
        if self.kind is InstrumentKind.FOREX:
            return f"{base}{str(self.quote).strip().upper()}=X"
        if self.kind is InstrumentKind.INDEX:
            return base if base.startswith("^") else f"^{base}"
        return base

    def __str__(self) -> str:
        return self.to_symbol()


def parse_instrument(text: str) -> Instrument:
    """Resolve user input such as ``CRYPTO:ETHUSDT`` or ``EURUSD=X``."""
    market, bare_symbol = _split_market_symbol(text)
    value = bare_symbol.strip().upper()
    if not value:
        raise ValidationError("symbol must not be empty")

    if market is not None:
        try:
            kind = InstrumentKind(market.lower())
        except ValueError:
            raise ValidationError(f"unknown market prefix '{market}'") from None
        if kind is InstrumentKind.CRYPTO:
            return _crypto_from_text(value)
        if kind is InstrumentKind.FOREX:
            return _forex_from_text(value)
        return Instrument(kind, value.lstrip("^") if kind is InstrumentKind.INDEX else value)

    if value.endswith("=X"):
        return _forex_from_text(value)
    if value.startswith("^"):
        return Instrument.index(value[1:])
    if "-" in value:
        base, _, quote = value.partition("-")
        # Share classes such as BRK-B use the same separator.
        if base and quote in _CRYPTO_QUOTES:
            return Instrument.crypto(base, _normalize_quote(quote))
    return Instrument.stock(value)


def _crypto_from_text(value: str) -> Instrument:
    if "-" in value or "/" in value:
        base, _, quote = value.replace("/", "-").partition("-")
        return Instrument.crypto(base, _normalize_quote(quote))
    for quote in _CRYPTO_QUOTES:
        if value.endswith(quote) and len(value) > len(quote):
            return Instrument.crypto(value[: -len(quote)], _normalize_quote(quote))
    raise ValidationError(f"cannot split crypto pair '{value}'")


def _forex_from_text(value: str) -> Instrument:
    compact = value.removesuffix("=X").replace("/", "")
    if len(compact) != 6:
        raise ValidationError(f"forex pair must be two 3-letter codes, got '{value}'")
    return Instrument.forex(compact[:3], compact[3:])


def _normalize_quote(quote: str) -> str:
    return "USD" if quote == "USDT" else quote


def _split_market_symbol(symbol: str) -> tuple[str | None, str]:
    value = symbol.strip()
    if ":" not in value:
        return None, value
    market, bare_symbol = value.split(":", 1)
    market = market.strip().upper()
    bare_symbol = bare_symbol.strip()
    if not market or not bare_symbol:
        return None, value
    return market, bare_symbol
