"""Per-exchange workarounds for non-conforming metadata and parameters.

Each quirk is registered against an exchange identifier. Exchanges without a
registration get the default behaviour; shared gateway code never branches on
exchange names.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Collection, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import MutableMapping

from ..models.account import PairMetadata
from ..models.orders import CancelOrderById, CancelOrderByPairAndId, CancelOrderParams, CancelRequest
from ..models.shared import Exchange, TradingPair

logger = logging.getLogger(__name__)

CancelParamsBuilder = Callable[[CancelRequest], CancelOrderParams]


def default_cancel_params(request: CancelRequest) -> CancelOrderParams:
    """Pair, identifier and side; the most broadly accepted shape."""

    return CancelOrderByPairAndId(pair=request.pair, order_id=request.order_id, side=request.side)


def cancel_by_id(request: CancelRequest) -> CancelOrderParams:
    return CancelOrderById(order_id=request.order_id)


@dataclass(frozen=True, slots=True)
class ExchangeQuirks:
    """Overrides for one exchange; ``None`` fields keep the default behaviour."""

    pairs: tuple[TradingPair, ...] | None = None
    counter_aliases: Mapping[str, str] = field(default_factory=dict)
    cancel_params: CancelParamsBuilder | None = None
    # Used when the backend has no metadata for a pair the exchange trades.
    metadata: Mapping[TradingPair, PairMetadata] | None = None


NO_QUIRKS = ExchangeQuirks()

# XBT futures counters (quarterly expiry codes) settle in BTC.
BITMEX_PAIRS: tuple[TradingPair, ...] = (
    TradingPair("XBT", "USD"),
    TradingPair("XBT", "H19"),
    TradingPair("ADA", "H19"),
    TradingPair("BCH", "H19"),
    TradingPair("EOS", "H19"),
    TradingPair("ETH", "USD"),
    TradingPair("ETH", "H19"),
    TradingPair("LTC", "H19"),
    TradingPair("TRX", "H19"),
    TradingPair("XRP", "H19"),
)

# Contract minimum of one lot; keyed by the pair after counter aliasing.
BITMEX_METADATA: Mapping[TradingPair, PairMetadata] = {
    TradingPair("XBT", "USD"): PairMetadata(Decimal("1"), Decimal("10000000"), 1),
    TradingPair("XBT", "BTC"): PairMetadata(Decimal("1"), Decimal("10000000"), 1),
    TradingPair("ADA", "BTC"): PairMetadata(Decimal("1"), Decimal("100000000"), 8),
    TradingPair("BCH", "BTC"): PairMetadata(Decimal("1"), Decimal("100000000"), 4),
    TradingPair("EOS", "BTC"): PairMetadata(Decimal("1"), Decimal("100000000"), 7),
    TradingPair("ETH", "USD"): PairMetadata(Decimal("1"), Decimal("10000000"), 2),
    TradingPair("ETH", "BTC"): PairMetadata(Decimal("1"), Decimal("100000000"), 5),
    TradingPair("LTC", "BTC"): PairMetadata(Decimal("1"), Decimal("100000000"), 6),
    TradingPair("TRX", "BTC"): PairMetadata(Decimal("1"), Decimal("100000000"), 8),
    TradingPair("XRP", "BTC"): PairMetadata(Decimal("1"), Decimal("100000000"), 8),
}

BITMEX_QUIRKS = ExchangeQuirks(
    pairs=BITMEX_PAIRS,
    counter_aliases={"H19": "BTC", "Z19": "BTC"},
    cancel_params=cancel_by_id,
    metadata=BITMEX_METADATA,
)


class CompatibilityShim:
    """Registry of exchange identifier to :class:`ExchangeQuirks`."""

    def __init__(self, quirks: Mapping[str, ExchangeQuirks] | None = None) -> None:
        self._quirks: MutableMapping[str, ExchangeQuirks] = dict(quirks or {})

    def register(self, exchange: str, quirks: ExchangeQuirks, *, replace: bool = False) -> None:
        if not replace and exchange in self._quirks:
            raise ValueError(f"Quirks for {exchange} already registered")
        self._quirks[exchange] = quirks

    def quirks(self, exchange: str) -> ExchangeQuirks:
        return self._quirks.get(exchange, NO_QUIRKS)

    def pairs(self, exchange: str, reported: Collection[TradingPair]) -> frozenset[TradingPair]:
        """Return the tradable pairs, replacing unreliable reported lists."""

        override = self.quirks(exchange).pairs
        if override is None:
            return frozenset(reported)
        logger.warning(
            "%s reported pairs: %s, converted to %s",
            exchange,
            sorted(str(pair) for pair in reported),
            [str(pair) for pair in override],
        )
        return frozenset(override)

    def normalize_pair(self, exchange: str, base: str, counter: str) -> TradingPair:
        """Build a pair, rewriting aliased counter codes to their settlement currency."""

        aliases = self.quirks(exchange).counter_aliases
        return TradingPair(base, aliases.get(counter, counter))

    def metadata(
        self,
        exchange: str,
        pair: TradingPair,
        reported: Mapping[TradingPair, PairMetadata],
    ) -> PairMetadata | None:
        """Return the reported metadata for ``pair``, else the static fallback."""

        found = reported.get(pair)
        if found is not None:
            return found
        fallback = self.quirks(exchange).metadata
        if fallback is None or pair not in fallback:
            return None
        logger.warning("%s reported no metadata for %s, using static fallback", exchange, pair)
        return fallback[pair]

    def cancel_params(self, exchange: str, request: CancelRequest) -> CancelOrderParams:
        builder = self.quirks(exchange).cancel_params or default_cancel_params
        return builder(request)


def default_shim() -> CompatibilityShim:
    """Shim preloaded with the known exchange quirks."""

    return CompatibilityShim({Exchange.BITMEX: BITMEX_QUIRKS})
