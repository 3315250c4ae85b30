"""Shared domain models used across every exchange backend."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import StrEnum
from typing import TypedDict


class Exchange(StrEnum):
    """Well-known exchange identifiers.

    Identifiers are plain strings everywhere else in the package; the enum only
    names the venues shipped with a connector. The values double as ``ccxt``
    exchange ids.
    """

    BINANCE = "binance"
    BITFINEX = "bitfinex"
    BITMEX = "bitmex"
    KUCOIN = "kucoin"
    KRAKEN = "kraken"
    COINBASE = "coinbase"


@dataclass(frozen=True, slots=True)
class TradingPair:
    """A tradable pair of currency codes."""

    base: str
    counter: str

    def __post_init__(self) -> None:
        if not self.base or not self.counter:
            raise ValueError("TradingPair base and counter must be non-empty strings.")

    @property
    def symbol(self) -> str:
        """Return the unified symbol (e.g., ``BTC/USD``)."""

        return f"{self.base}/{self.counter}"

    @classmethod
    def from_symbol(cls, symbol: str) -> TradingPair:
        """Parse ``BASE/COUNTER`` or ``BASE/COUNTER:SETTLE`` symbols."""

        market, _, _settle = symbol.partition(":")
        base, sep, counter = market.partition("/")
        if not sep:
            raise ValueError(f"Unrecognised symbol {symbol!r}")
        return cls(base, counter)

    def involves(self, currency: str) -> bool:
        return currency in (self.base, self.counter)

    def __str__(self) -> str:
        return self.symbol


class Ticker(TypedDict):
    """Ticker snapshot for a single pair."""

    timestamp: int
    bid: Decimal | None
    ask: Decimal | None
    last: Decimal | None
    high: Decimal | None
    low: Decimal | None
    volume: Decimal | None


@dataclass(frozen=True, slots=True)
class ExchangeMeta:
    """Describes a supported exchange to callers."""

    code: str
    name: str
    ref_link: str | None
    authenticated: bool
