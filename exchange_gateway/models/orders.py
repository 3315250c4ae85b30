"""Order related value objects."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from typing import TypeAlias

from .shared import TradingPair


class OrderSide(StrEnum):
    BUY = "buy"
    SELL = "sell"


class OrderStatus(StrEnum):
    """Lifecycle states as reported by a backend.

    ``PENDING_NEW`` orders have not been acknowledged yet. The gateway moves a
    submitted order to ``NEW``; every later state is whatever the backend
    reports on subsequent queries.
    """

    PENDING_NEW = "PENDING_NEW"
    NEW = "NEW"
    PARTIALLY_FILLED = "PARTIALLY_FILLED"
    FILLED = "FILLED"
    PENDING_CANCEL = "PENDING_CANCEL"
    CANCELED = "CANCELED"
    REJECTED = "REJECTED"
    EXPIRED = "EXPIRED"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True, slots=True)
class OrderRequest:
    """Transport-agnostic order submission.

    No stop and no limit price means a market order; a stop price alone means a
    stop-market order; both means stop-limit.
    """

    side: OrderSide
    amount: Decimal
    base: str
    counter: str
    stop_price: Decimal | None = None
    limit_price: Decimal | None = None

    @property
    def is_stop(self) -> bool:
        return self.stop_price is not None

    @property
    def is_limit(self) -> bool:
        return self.limit_price is not None


@dataclass(frozen=True, slots=True)
class LimitOrder:
    side: OrderSide
    amount: Decimal
    pair: TradingPair
    id: str | None
    timestamp: datetime | None
    limit_price: Decimal
    status: OrderStatus = OrderStatus.NEW
    cumulative_amount: Decimal = Decimal("0")


@dataclass(frozen=True, slots=True)
class StopOrder:
    side: OrderSide
    amount: Decimal
    pair: TradingPair
    id: str | None
    timestamp: datetime | None
    stop_price: Decimal
    limit_price: Decimal | None = None
    average_price: Decimal = Decimal("0")
    cumulative_amount: Decimal = Decimal("0")
    status: OrderStatus = OrderStatus.PENDING_NEW


Order: TypeAlias = LimitOrder | StopOrder


@dataclass(frozen=True, slots=True)
class OpenOrders:
    """Open orders as reported by a backend, visible and hidden."""

    open_orders: tuple[Order, ...] = ()
    hidden_orders: tuple[Order, ...] = ()

    def filter(self, pair: TradingPair) -> OpenOrders:
        """Return only the orders on ``pair``."""

        return OpenOrders(
            open_orders=tuple(order for order in self.open_orders if order.pair == pair),
            hidden_orders=tuple(order for order in self.hidden_orders if order.pair == pair),
        )

    def __len__(self) -> int:
        return len(self.open_orders) + len(self.hidden_orders)


@dataclass(frozen=True, slots=True)
class CancelRequest:
    pair: TradingPair
    order_id: str
    side: OrderSide | None = None


# Cancellation parameter shapes ------------------------------------------------
@dataclass(frozen=True, slots=True)
class CancelOrderById:
    """Identifier-only cancellation."""

    order_id: str


@dataclass(frozen=True, slots=True)
class CancelOrderByPairAndId:
    """Pair, identifier and side hint; accepted by nearly every backend."""

    pair: TradingPair
    order_id: str
    side: OrderSide | None = None


CancelOrderParams: TypeAlias = CancelOrderById | CancelOrderByPairAndId
