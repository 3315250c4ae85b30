"""Domain models for the exchange gateway."""

from .account import Balance, PairMetadata
from .orders import (
    CancelOrderById,
    CancelOrderByPairAndId,
    CancelOrderParams,
    CancelRequest,
    LimitOrder,
    OpenOrders,
    Order,
    OrderRequest,
    OrderSide,
    OrderStatus,
    StopOrder,
)
from .shared import Exchange, ExchangeMeta, Ticker, TradingPair

__all__ = [
    "Balance",
    "PairMetadata",
    "CancelOrderById",
    "CancelOrderByPairAndId",
    "CancelOrderParams",
    "CancelRequest",
    "LimitOrder",
    "OpenOrders",
    "Order",
    "OrderRequest",
    "OrderSide",
    "OrderStatus",
    "StopOrder",
    "Exchange",
    "ExchangeMeta",
    "Ticker",
    "TradingPair",
]
