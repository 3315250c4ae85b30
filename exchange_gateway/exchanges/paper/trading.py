"""Paper trading backend.

Used in place of a live connector whenever an exchange has no usable
credentials. It never contacts a venue and applies a fixed policy:

* every accepted order gets a random identifier and status ``NEW``;
* orders are never filled, they stay open until cancelled;
* cancelling an open order marks it ``CANCELED`` and returns ``True``;
  unknown or already closed orders return ``False``;
* balances come from a static wallet which orders do not touch.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Mapping
from dataclasses import replace
from decimal import Decimal
from typing import Sequence

from ...contracts.trading.interface import AccountService, TradeService
from ...core.cache import KeyedLazyCache
from ...core.errors import ValidationError
from ...models.account import Balance
from ...models.orders import (
    CancelOrderByPairAndId,
    CancelOrderParams,
    LimitOrder,
    OpenOrders,
    Order,
    OrderStatus,
    StopOrder,
)
from ...models.shared import TradingPair

logger = logging.getLogger(__name__)


class PaperTradeService(TradeService):
    """In-memory implementation of :class:`TradeService`."""

    def __init__(self, exchange: str) -> None:
        self.exchange = exchange
        self._orders: dict[str, Order] = {}
        self._lock = threading.Lock()

    def place_limit_order(self, order: LimitOrder) -> str:
        return self._accept(order)

    def place_stop_order(self, order: StopOrder) -> str:
        return self._accept(order)

    def cancel_order(self, params: CancelOrderParams) -> bool:
        with self._lock:
            order = self._orders.get(params.order_id)
            if order is None or order.status is not OrderStatus.NEW:
                return False
            if isinstance(params, CancelOrderByPairAndId) and params.pair != order.pair:
                return False
            self._orders[params.order_id] = replace(order, status=OrderStatus.CANCELED)
        logger.info("Paper %s: cancelled order %s", self.exchange, params.order_id)
        return True

    def get_open_orders(self, pair: TradingPair | None = None) -> OpenOrders:
        with self._lock:
            orders = tuple(
                order
                for order in self._orders.values()
                if order.status is OrderStatus.NEW and (pair is None or order.pair == pair)
            )
        return OpenOrders(open_orders=orders)

    def get_order(self, order_id: str, pair: TradingPair | None = None) -> Sequence[Order]:
        with self._lock:
            order = self._orders.get(order_id)
        if order is None or (pair is not None and order.pair != pair):
            return []
        return [order]

    def _accept(self, order: Order) -> str:
        if order.amount <= 0:
            raise ValidationError("Order amount must be positive")
        order_id = uuid.uuid4().hex
        with self._lock:
            self._orders[order_id] = replace(order, id=order_id, status=OrderStatus.NEW)
        logger.info(
            "Paper %s: accepted %s %s %s as %s",
            self.exchange,
            order.side,
            order.amount,
            order.pair,
            order_id,
        )
        return order_id


class PaperAccountService(AccountService):
    """Static wallet; every amount is available and nothing is ever held."""

    def __init__(self, wallet: Mapping[str, Decimal] | None = None) -> None:
        self._balances = {
            currency: Balance(currency=currency, available=Decimal(amount))
            for currency, amount in (wallet or {}).items()
        }

    def get_balances(self) -> Mapping[str, Balance]:
        return dict(self._balances)


class PaperExchangeFactory:
    """Hands out one paper trade/account service pair per exchange."""

    def __init__(self, wallet: Mapping[str, Decimal] | None = None) -> None:
        self._wallet = dict(wallet or {})
        self._trade_services: KeyedLazyCache[str, PaperTradeService] = KeyedLazyCache(PaperTradeService)
        self._account_services: KeyedLazyCache[str, PaperAccountService] = KeyedLazyCache(
            lambda _exchange: PaperAccountService(self._wallet)
        )

    def trade_service(self, exchange: str) -> PaperTradeService:
        return self._trade_services.get(exchange)

    def account_service(self, exchange: str) -> PaperAccountService:
        return self._account_services.get(exchange)
