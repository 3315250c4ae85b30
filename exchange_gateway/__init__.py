"""Uniform trading gateway over live and paper exchange backends.

This module exposes the public API: the gateway facade, its collaborators,
domain models and the error taxonomy.
"""

from .contracts.trading.interface import AccountService, ExchangeConnector, MarketDataService, TradeService
from .core.errors import (
    BackendUnsupportedError,
    ConfigurationError,
    ExchangeError,
    ExchangeGatewayError,
    ExchangeTransientError,
    NotAvailableFromExchangeError,
    OperationFailedError,
    PairNotSupportedError,
    SubmissionFailedError,
    UnknownExchangeError,
    UnsupportedOrderTypeError,
    ValidationError,
)
from .core.gateway import OPERATION_ROLES, ExchangeGateway, Role, create_gateway
from .core.normalizer import OrderCapabilities, OrderNormalizer
from .core.notifier import OrderNotifier
from .core.registry import ExchangeRegistry, register_exchange
from .core.resolver import TradingServiceHandle, TradingServiceResolver
from .core.settings import ExchangeConfiguration, GatewaySettings
from .core.shims import CompatibilityShim, ExchangeQuirks
from .models.account import Balance, PairMetadata
from .models.orders import CancelRequest, LimitOrder, OpenOrders, OrderRequest, OrderSide, OrderStatus, StopOrder
from .models.shared import Exchange, ExchangeMeta, Ticker, TradingPair

__all__ = [
    "AccountService",
    "ExchangeConnector",
    "MarketDataService",
    "TradeService",
    "ExchangeGateway",
    "create_gateway",
    "OPERATION_ROLES",
    "Role",
    "OrderCapabilities",
    "OrderNormalizer",
    "OrderNotifier",
    "ExchangeRegistry",
    "register_exchange",
    "TradingServiceHandle",
    "TradingServiceResolver",
    "ExchangeConfiguration",
    "GatewaySettings",
    "CompatibilityShim",
    "ExchangeQuirks",
    "Balance",
    "PairMetadata",
    "CancelRequest",
    "LimitOrder",
    "OpenOrders",
    "OrderRequest",
    "OrderSide",
    "OrderStatus",
    "StopOrder",
    "Exchange",
    "ExchangeMeta",
    "Ticker",
    "TradingPair",
    "ExchangeGatewayError",
    "ConfigurationError",
    "UnknownExchangeError",
    "ValidationError",
    "UnsupportedOrderTypeError",
    "PairNotSupportedError",
    "BackendUnsupportedError",
    "OperationFailedError",
    "SubmissionFailedError",
    "ExchangeError",
    "ExchangeTransientError",
    "NotAvailableFromExchangeError",
]
