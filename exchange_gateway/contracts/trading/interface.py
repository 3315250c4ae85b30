"""Protocols describing the capabilities of an exchange backend."""

from __future__ import annotations

from typing import Mapping, Protocol, Sequence, runtime_checkable

from ...models.account import Balance, PairMetadata
from ...models.orders import CancelOrderParams, LimitOrder, OpenOrders, Order, StopOrder
from ...models.shared import Ticker, TradingPair


@runtime_checkable
class TradeService(Protocol):
    """Order placement and querying, live or simulated."""

    def place_limit_order(self, order: LimitOrder) -> str:
        """Submit a limit order and return the exchange-assigned identifier."""

    def place_stop_order(self, order: StopOrder) -> str:
        """Submit a stop order and return the exchange-assigned identifier."""

    def cancel_order(self, params: CancelOrderParams) -> bool:
        """Cancel an order, returning ``False`` when the exchange refused."""

    def get_open_orders(self, pair: TradingPair | None = None) -> OpenOrders:
        """Return open orders, optionally restricted to ``pair``."""

    def get_order(self, order_id: str, pair: TradingPair | None = None) -> Sequence[Order]:
        """Return the orders matching ``order_id``; some exchanges require ``pair``."""


@runtime_checkable
class AccountService(Protocol):
    """Wallet access."""

    def get_balances(self) -> Mapping[str, Balance]:
        """Return the full wallet keyed by currency code."""


@runtime_checkable
class MarketDataService(Protocol):
    """Public market data."""

    def get_ticker(self, pair: TradingPair) -> Ticker:
        """Return the latest ticker for ``pair``."""


@runtime_checkable
class ExchangeConnector(Protocol):
    """Live connection to a single exchange."""

    exchange: str

    @property
    def trade_service(self) -> TradeService:
        """Authenticated trading capability."""

    @property
    def account_service(self) -> AccountService:
        """Authenticated account capability."""

    @property
    def market_data_service(self) -> MarketDataService:
        """Public market data capability."""

    def get_pair_metadata(self) -> Mapping[TradingPair, PairMetadata]:
        """Return metadata for every pair the exchange reports."""

    def close(self) -> None:
        """Release network resources."""
