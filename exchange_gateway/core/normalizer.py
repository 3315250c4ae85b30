"""Translate abstract order requests into concrete orders per exchange."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone

from ..models.orders import LimitOrder, OrderRequest, OrderStatus, StopOrder
from ..models.shared import Exchange, TradingPair
from .errors import UnsupportedOrderTypeError, ValidationError

Clock = Callable[[], datetime]


@dataclass(frozen=True, slots=True)
class OrderCapabilities:
    """Order type combinations an exchange accepts."""

    stop_limit: bool = True
    stop_market: bool = True


DEFAULT_CAPABILITIES = OrderCapabilities()

BUILTIN_CAPABILITIES: Mapping[str, OrderCapabilities] = {
    Exchange.BITFINEX: OrderCapabilities(stop_limit=False),
    Exchange.BINANCE: OrderCapabilities(stop_market=False),
}


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class OrderNormalizer:
    """Pure translation of :class:`OrderRequest` into limit or stop orders."""

    def __init__(
        self,
        capabilities: Mapping[str, OrderCapabilities] | None = None,
        *,
        clock: Clock = _utcnow,
    ) -> None:
        self._capabilities = dict(BUILTIN_CAPABILITIES if capabilities is None else capabilities)
        self._clock = clock

    def capabilities(self, exchange: str) -> OrderCapabilities:
        return self._capabilities.get(exchange, DEFAULT_CAPABILITIES)

    def validate(self, request: OrderRequest, exchange: str) -> None:
        """Raise if ``request`` cannot be placed on ``exchange``."""

        if not request.is_stop and not request.is_limit:
            raise UnsupportedOrderTypeError("Market orders not supported at the moment.")

        capabilities = self.capabilities(exchange)
        if request.is_stop and request.is_limit and not capabilities.stop_limit:
            raise UnsupportedOrderTypeError(
                f"Stop limit orders not supported for {exchange} at the moment."
            )
        if request.is_stop and not request.is_limit and not capabilities.stop_market:
            raise UnsupportedOrderTypeError(
                f"Stop market orders not supported for {exchange} at the moment. Specify a limit price."
            )

        if request.amount <= 0:
            raise ValidationError("Order amount must be positive")
        for label, price in (("stop", request.stop_price), ("limit", request.limit_price)):
            if price is not None and price <= 0:
                raise ValidationError(f"Order {label} price must be positive")

    def normalize(self, request: OrderRequest, exchange: str) -> LimitOrder | StopOrder:
        self.validate(request, exchange)
        try:
            pair = TradingPair(request.base, request.counter)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc

        if request.is_stop:
            return StopOrder(
                side=request.side,
                amount=request.amount,
                pair=pair,
                id=None,
                timestamp=self._clock(),
                stop_price=request.stop_price,
                limit_price=request.limit_price,
                status=OrderStatus.PENDING_NEW,
            )
        return LimitOrder(
            side=request.side,
            amount=request.amount,
            pair=pair,
            id=None,
            timestamp=self._clock(),
            limit_price=request.limit_price,
            status=OrderStatus.PENDING_NEW,
        )
