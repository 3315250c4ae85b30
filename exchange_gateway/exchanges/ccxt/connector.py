"""Live exchange connectors backed by ``ccxt``."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Sequence, TypeVar

import ccxt
import requests

from ...contracts.trading.interface import (
    AccountService,
    ExchangeConnector,
    MarketDataService,
    TradeService,
)
from ...core.errors import ExchangeError, ExchangeTransientError, NotAvailableFromExchangeError
from ...core.registry import register_exchange
from ...core.settings import ExchangeConfiguration
from ...models.account import Balance, PairMetadata
from ...models.orders import (
    CancelOrderById,
    CancelOrderParams,
    LimitOrder,
    OpenOrders,
    Order,
    OrderSide,
    OrderStatus,
    StopOrder,
)
from ...models.shared import Exchange, Ticker, TradingPair

T = TypeVar("T")

DEFAULT_TIMEOUT_MS = 10_000

EXCHANGE_NAMES: Mapping[str, tuple[str, str]] = {
    Exchange.BINANCE: ("Binance", "https://www.binance.com"),
    Exchange.BITFINEX: ("Bitfinex", "https://www.bitfinex.com"),
    Exchange.BITMEX: ("BitMEX", "https://www.bitmex.com"),
    Exchange.KUCOIN: ("KuCoin", "https://www.kucoin.com"),
    Exchange.KRAKEN: ("Kraken", "https://www.kraken.com"),
    Exchange.COINBASE: ("Coinbase", "https://www.coinbase.com"),
}

_STATUS_MAP = {
    "closed": OrderStatus.FILLED,
    "canceled": OrderStatus.CANCELED,
    "cancelled": OrderStatus.CANCELED,
    "expired": OrderStatus.EXPIRED,
    "rejected": OrderStatus.REJECTED,
}


class CcxtExchangeConnector(ExchangeConnector):
    """``ccxt``-backed implementation of :class:`ExchangeConnector`.

    A single connector serves trading, account and market data calls for one
    exchange. Public calls work without credentials.
    """

    def __init__(
        self,
        exchange: str,
        configuration: ExchangeConfiguration | None = None,
        *,
        client: ccxt.Exchange | None = None,
        session: requests.Session | None = None,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
    ) -> None:
        self.exchange = exchange
        self._session = session or requests.Session()
        self._owns_session = session is None
        self._client = client or self._build_client(exchange, configuration, timeout_ms)
        self._trade_service = CcxtTradeService(self)
        self._account_service = CcxtAccountService(self)
        self._market_data_service = CcxtMarketDataService(self)

    @property
    def client(self) -> ccxt.Exchange:
        return self._client

    @property
    def trade_service(self) -> TradeService:
        return self._trade_service

    @property
    def account_service(self) -> AccountService:
        return self._account_service

    @property
    def market_data_service(self) -> MarketDataService:
        return self._market_data_service

    def get_pair_metadata(self) -> Mapping[TradingPair, PairMetadata]:
        markets = self.call(self._client.load_markets)
        tick_size_mode = getattr(self._client, "precisionMode", None) == ccxt.TICK_SIZE
        metadata: dict[TradingPair, PairMetadata] = {}
        for market in markets.values():
            if not isinstance(market, dict) or market.get("active") is False:
                continue
            base, quote = market.get("base"), market.get("quote")
            if not base or not quote:
                continue
            metadata[TradingPair(str(base), str(quote))] = self._parse_metadata(market, tick_size_mode)
        return metadata

    # ------------------------------------------------------------------
    # Internal helpers
    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def call(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Invoke a ``ccxt`` method, translating its errors."""

        try:
            return fn(*args, **kwargs)
        except ccxt.NotSupported as exc:
            raise NotAvailableFromExchangeError(f"{self.exchange}: {exc}") from exc
        except ccxt.NetworkError as exc:
            raise ExchangeTransientError(f"Failed to call {self.exchange}: {exc}") from exc
        except ccxt.BaseError as exc:
            raise ExchangeError(f"{self.exchange} rejected the request: {exc}") from exc

    def _build_client(
        self,
        exchange: str,
        configuration: ExchangeConfiguration | None,
        timeout_ms: int,
    ) -> ccxt.Exchange:
        try:
            client_class = getattr(ccxt, str(exchange))
        except AttributeError as exc:
            raise ExchangeError(f"ccxt has no exchange named {exchange!r}") from exc
        options: dict[str, Any] = {
            "enableRateLimit": True,
            "timeout": timeout_ms,
            "session": self._session,
        }
        if configuration is not None:
            if configuration.api_key:
                options["apiKey"] = configuration.api_key
            if configuration.secret:
                options["secret"] = configuration.secret
            if configuration.passphrase:
                options["password"] = configuration.passphrase
        client = client_class(options)
        if configuration is not None and configuration.sandbox:
            client.set_sandbox_mode(True)
        return client

    def _parse_metadata(self, market: dict[str, Any], tick_size_mode: bool) -> PairMetadata:
        limits = market.get("limits") or {}
        amount_limits = limits.get("amount") or {}
        precision = market.get("precision") or {}
        return PairMetadata(
            minimum_amount=_decimal(amount_limits.get("min")),
            maximum_amount=_decimal(amount_limits.get("max")),
            price_scale=_price_scale(precision.get("price"), tick_size_mode),
        )


class CcxtTradeService(TradeService):
    def __init__(self, connector: CcxtExchangeConnector) -> None:
        self._connector = connector

    def place_limit_order(self, order: LimitOrder) -> str:
        client = self._connector.client
        response = self._connector.call(
            client.create_order,
            order.pair.symbol,
            "limit",
            order.side.value,
            str(order.amount),
            str(order.limit_price),
        )
        return _order_id(response)

    def place_stop_order(self, order: StopOrder) -> str:
        client = self._connector.client
        if client.has.get("createStopOrder") is False:
            raise NotAvailableFromExchangeError(f"{self._connector.exchange} does not support stop orders")
        order_type = "market" if order.limit_price is None else "limit"
        price = None if order.limit_price is None else str(order.limit_price)
        response = self._connector.call(
            client.create_order,
            order.pair.symbol,
            order_type,
            order.side.value,
            str(order.amount),
            price,
            {"stopPrice": str(order.stop_price)},
        )
        return _order_id(response)

    def cancel_order(self, params: CancelOrderParams) -> bool:
        client = self._connector.client
        if isinstance(params, CancelOrderById):
            args: tuple[Any, ...] = (params.order_id,)
        else:
            extra = {} if params.side is None else {"side": params.side.value}
            args = (params.order_id, params.pair.symbol, extra)
        try:
            self._connector.call(client.cancel_order, *args)
        except ExchangeError as exc:
            if isinstance(exc.__cause__, ccxt.OrderNotFound):
                return False
            raise
        return True

    def get_open_orders(self, pair: TradingPair | None = None) -> OpenOrders:
        client = self._connector.client
        symbol = None if pair is None else pair.symbol
        raw_orders = self._connector.call(client.fetch_open_orders, symbol)
        return OpenOrders(open_orders=tuple(parse_order(raw) for raw in raw_orders))

    def get_order(self, order_id: str, pair: TradingPair | None = None) -> Sequence[Order]:
        client = self._connector.client
        symbol = None if pair is None else pair.symbol
        raw = self._connector.call(client.fetch_order, order_id, symbol)
        return [parse_order(raw)]


class CcxtAccountService(AccountService):
    def __init__(self, connector: CcxtExchangeConnector) -> None:
        self._connector = connector

    def get_balances(self) -> Mapping[str, Balance]:
        payload = self._connector.call(self._connector.client.fetch_balance)
        free = payload.get("free") or {}
        used = payload.get("used") or {}
        balances: dict[str, Balance] = {}
        for currency in set(free) | set(used):
            balances[currency] = Balance(
                currency=currency,
                available=_decimal(free.get(currency)) or Decimal("0"),
                held=_decimal(used.get(currency)) or Decimal("0"),
            )
        return balances


class CcxtMarketDataService(MarketDataService):
    def __init__(self, connector: CcxtExchangeConnector) -> None:
        self._connector = connector

    def get_ticker(self, pair: TradingPair) -> Ticker:
        raw = self._connector.call(self._connector.client.fetch_ticker, pair.symbol)
        return {
            "timestamp": int(raw.get("timestamp") or 0),
            "bid": _decimal(raw.get("bid")),
            "ask": _decimal(raw.get("ask")),
            "last": _decimal(raw.get("last")),
            "high": _decimal(raw.get("high")),
            "low": _decimal(raw.get("low")),
            "volume": _decimal(raw.get("baseVolume")),
        }


def parse_order(raw: Mapping[str, Any]) -> Order:
    """Convert a unified ``ccxt`` order structure."""

    pair = TradingPair.from_symbol(str(raw["symbol"]))
    side = OrderSide(str(raw["side"]).lower())
    amount = _decimal(raw.get("amount")) or Decimal("0")
    filled = _decimal(raw.get("filled")) or Decimal("0")
    timestamp = raw.get("timestamp")
    created = datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc) if timestamp else None
    status = _parse_status(raw.get("status"), filled)
    stop_price = _decimal(raw.get("triggerPrice") or raw.get("stopPrice"))
    order_id = None if raw.get("id") is None else str(raw["id"])
    if stop_price is not None:
        return StopOrder(
            side=side,
            amount=amount,
            pair=pair,
            id=order_id,
            timestamp=created,
            stop_price=stop_price,
            limit_price=_decimal(raw.get("price")),
            average_price=_decimal(raw.get("average")) or Decimal("0"),
            cumulative_amount=filled,
            status=status,
        )
    return LimitOrder(
        side=side,
        amount=amount,
        pair=pair,
        id=order_id,
        timestamp=created,
        limit_price=_decimal(raw.get("price")) or Decimal("0"),
        status=status,
        cumulative_amount=filled,
    )


def _parse_status(raw: Any, filled: Decimal) -> OrderStatus:
    if raw == "open":
        return OrderStatus.PARTIALLY_FILLED if filled > 0 else OrderStatus.NEW
    if raw is None:
        return OrderStatus.UNKNOWN
    return _STATUS_MAP.get(str(raw), OrderStatus.UNKNOWN)


def _order_id(response: Mapping[str, Any]) -> str:
    order_id = response.get("id")
    if order_id is None:
        raise ExchangeError("Exchange did not return an order id")
    return str(order_id)


def _decimal(value: Any) -> Decimal | None:
    if value is None:
        return None
    return Decimal(str(value))


def _price_scale(precision: Any, tick_size_mode: bool) -> int | None:
    if precision is None:
        return None
    if not tick_size_mode:
        return int(precision)
    # Tick sizes such as 0.01 correspond to two decimal places.
    exponent = Decimal(str(precision)).normalize().as_tuple().exponent
    return max(0, -int(exponent))


def register(*, replace: bool = False) -> None:
    """Register the ``ccxt`` connectors for the well-known exchanges."""

    for exchange, (name, ref_link) in EXCHANGE_NAMES.items():
        register_exchange(
            exchange,
            lambda configuration, exchange=exchange: CcxtExchangeConnector(exchange, configuration),
            name=name,
            ref_link=ref_link,
            replace=replace,
        )


register()
