"""Gateway facade routing trading calls to live or paper backends."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import replace
from datetime import datetime, timezone
from enum import StrEnum
from importlib import import_module
from typing import TypeVar

from ..contracts.trading.interface import AccountService, ExchangeConnector, TradeService
from ..exchanges.paper.trading import PaperExchangeFactory
from ..models.account import Balance, PairMetadata
from ..models.orders import CancelRequest, LimitOrder, OpenOrders, Order, OrderRequest, OrderStatus, StopOrder
from ..models.shared import ExchangeMeta, Ticker, TradingPair
from .errors import (
    BackendUnsupportedError,
    ConfigurationError,
    NotAvailableFromExchangeError,
    OperationFailedError,
    PairNotSupportedError,
    SubmissionFailedError,
    ValidationError,
)
from .normalizer import OrderNormalizer
from .notifier import OrderNotifier
from .registry import ExchangeRegistry
from .resolver import TradingServiceResolver
from .settings import GatewaySettings
from .shims import CompatibilityShim, default_shim

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_SEARCH_DELAY = 0.2
DEFAULT_CONNECTOR_MODULES = ("exchange_gateway.exchanges.ccxt.connector",)


class Role(StrEnum):
    PUBLIC = "PUBLIC"
    TRADER = "TRADER"


# Minimum role a caller needs for each operation; enforced by the transport layer.
OPERATION_ROLES: Mapping[str, Role] = {
    "list_exchanges": Role.TRADER,
    "list_pairs": Role.TRADER,
    "pair_metadata": Role.TRADER,
    "open_orders": Role.TRADER,
    "open_orders_for_pair": Role.TRADER,
    "open_orders_for_currency": Role.TRADER,
    "place_order": Role.TRADER,
    "cancel_order": Role.TRADER,
    "get_order": Role.TRADER,
    "balances": Role.TRADER,
    "ticker": Role.PUBLIC,
}


class ExchangeGateway:
    """Entry point consumed by the transport layer.

    Every operation takes an exchange identifier. Trading and account calls go
    to whichever backend the resolver picks for that exchange; pair listings,
    metadata and tickers always come from the live connector since they need
    no credentials.

    Errors raised by backends are translated into
    :class:`~exchange_gateway.core.errors.BackendUnsupportedError` or
    :class:`~exchange_gateway.core.errors.OperationFailedError`. Order
    placement and cancellation are never retried.
    """

    def __init__(
        self,
        registry: ExchangeRegistry,
        resolver: TradingServiceResolver,
        *,
        normalizer: OrderNormalizer | None = None,
        shim: CompatibilityShim | None = None,
        notifier: OrderNotifier | None = None,
        search_delay: float = DEFAULT_SEARCH_DELAY,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._registry = registry
        self._resolver = resolver
        self._normalizer = normalizer or OrderNormalizer()
        self._shim = shim or default_shim()
        self._notifier = notifier or OrderNotifier()
        self._search_delay = search_delay
        self._sleep = sleep

    # Exchanges and pairs -----------------------------------------------
    def list_exchanges(self) -> list[ExchangeMeta]:
        """Describe every registered exchange, sorted by display name."""

        metas = [self._registry.describe(code) for code in self._registry.exchange_identifiers()]
        return sorted(metas, key=lambda meta: meta.name)

    def list_pairs(self, exchange: str) -> frozenset[TradingPair]:
        """Return the distinct tradable pairs on ``exchange``."""

        self._registry.require(exchange)
        reported = self._call(lambda: self._pair_metadata(exchange).keys())
        return self._shim.pairs(exchange, reported)

    def pair_metadata(self, exchange: str, base: str, counter: str) -> PairMetadata:
        self._registry.require(exchange)
        pair = self._pair(exchange, base, counter)
        reported = self._call(lambda: self._pair_metadata(exchange))
        metadata = self._shim.metadata(exchange, pair, reported)
        if metadata is None:
            raise PairNotSupportedError(f"{exchange} does not list {pair}")
        return metadata

    # Orders ------------------------------------------------------------
    def open_orders(self, exchange: str) -> OpenOrders:
        """Fetch open orders on every pair. Often not supported by exchanges."""

        trade_service = self._trade_service(exchange)
        return self._call(trade_service.get_open_orders)

    def open_orders_for_pair(self, exchange: str, pair: TradingPair) -> OpenOrders:
        trade_service = self._trade_service(exchange)
        unfiltered = self._call(lambda: trade_service.get_open_orders(pair))
        # Exchanges do not reliably honour the pair filter.
        return unfiltered.filter(pair)

    def open_orders_for_currency(self, exchange: str, currency: str) -> list[Order]:
        """Fetch open orders on every pair involving ``currency``.

        Queries each pair in turn with a fixed delay before every call, so this
        takes one round trip per pair. Any failure aborts the whole search.
        """

        trade_service = self._trade_service(exchange)
        pairs = sorted(
            (pair for pair in self.list_pairs(exchange) if pair.involves(currency)),
            key=str,
        )
        logger.info("Thorough orders search for %s on %s across %d pairs", currency, exchange, len(pairs))
        orders: list[Order] = []
        for pair in pairs:
            self._sleep(self._search_delay)
            result = self._call(lambda: trade_service.get_open_orders(pair))
            orders.extend(result.open_orders)
        return orders

    def place_order(self, exchange: str, request: OrderRequest) -> LimitOrder | StopOrder:
        """Validate, submit once, and publish the acknowledged order."""

        self._registry.require(exchange)
        order = self._normalizer.normalize(request, exchange)
        trade_service = self._trade_service(exchange)
        try:
            if isinstance(order, StopOrder):
                order_id = trade_service.place_stop_order(order)
            else:
                order_id = trade_service.place_limit_order(order)
        except NotAvailableFromExchangeError as exc:
            raise BackendUnsupportedError("Order type not currently supported by exchange.") from exc
        except Exception as exc:
            logger.exception("Failed to submit order to %s", exchange)
            raise SubmissionFailedError(f"Failed to submit order. {exc}") from exc

        placed = replace(order, id=order_id, status=OrderStatus.NEW)
        self._notifier.publish(exchange, placed.pair, placed)
        return placed

    def cancel_order(self, exchange: str, request: CancelRequest) -> datetime:
        """Cancel an order, returning when the cancellation was requested."""

        trade_service = self._trade_service(exchange)
        params = self._shim.cancel_params(exchange, request)
        requested_at = datetime.now(tz=timezone.utc)
        if not self._call(lambda: trade_service.cancel_order(params)):
            raise OperationFailedError("Order could not be cancelled")
        return requested_at

    def get_order(self, exchange: str, order_id: str, pair: TradingPair | None = None) -> list[Order]:
        """Look up one order. Several exchanges only find orders by pair and id."""

        trade_service = self._trade_service(exchange)
        return list(self._call(lambda: trade_service.get_order(order_id, pair)))

    # Account and market data ------------------------------------------
    def balances(self, exchange: str, currencies: Iterable[str]) -> dict[str, Balance]:
        """Return balances for the requested currencies, keyed by currency code."""

        wanted = set(currencies)
        account_service: AccountService = self._call(lambda: self._resolver.account_service(exchange))
        wallet = self._call(account_service.get_balances)
        return {
            balance.currency: balance
            for balance in wallet.values()
            if balance.currency in wanted
        }

    def ticker(self, exchange: str, pair: TradingPair) -> Ticker:
        connector = self._connector(exchange)
        return self._call(lambda: connector.market_data_service.get_ticker(pair))

    # Lifecycle ---------------------------------------------------------
    def close(self) -> None:
        self._notifier.close()
        self._registry.close()

    # Internal ----------------------------------------------------------
    def _trade_service(self, exchange: str) -> TradeService:
        return self._call(lambda: self._resolver.trade_service(exchange))

    def _connector(self, exchange: str) -> ExchangeConnector:
        self._registry.require(exchange)
        return self._call(lambda: self._registry.connector(exchange))

    def _pair_metadata(self, exchange: str) -> Mapping[TradingPair, PairMetadata]:
        return self._connector(exchange).get_pair_metadata()

    def _pair(self, exchange: str, base: str, counter: str) -> TradingPair:
        try:
            return self._shim.normalize_pair(exchange, base, counter)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc

    def _call(self, fn: Callable[[], T]) -> T:
        try:
            return fn()
        except (ConfigurationError, ValidationError, BackendUnsupportedError, OperationFailedError):
            raise
        except NotAvailableFromExchangeError as exc:
            raise BackendUnsupportedError(str(exc) or "Not supported by exchange") from exc
        except Exception as exc:
            logger.error("Exchange call failed: %s", exc)
            raise OperationFailedError(str(exc) or type(exc).__name__) from exc


def create_gateway(
    settings: GatewaySettings | None = None,
    *,
    connector_modules: Sequence[str] = DEFAULT_CONNECTOR_MODULES,
) -> ExchangeGateway:
    """Wire the default gateway: registered connectors, paper trading, known quirks."""

    settings = settings or GatewaySettings()
    for module_name in connector_modules:
        import_module(module_name)
    registry = ExchangeRegistry(settings.exchanges)
    resolver = TradingServiceResolver(registry, PaperExchangeFactory(settings.paper_balances))
    return ExchangeGateway(
        registry,
        resolver,
        notifier=OrderNotifier(max_workers=settings.notifier_workers),
        search_delay=settings.orders_search_delay,
    )
