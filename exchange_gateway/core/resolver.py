"""Choose, once per exchange, between the live connector and paper trading."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from ..contracts.trading.interface import AccountService, TradeService
from .cache import KeyedLazyCache
from .registry import ExchangeRegistry
from .settings import has_credentials

logger = logging.getLogger(__name__)


class PaperServices(Protocol):
    def trade_service(self, exchange: str) -> TradeService: ...

    def account_service(self, exchange: str) -> AccountService: ...


@dataclass(frozen=True, slots=True)
class TradingServiceHandle:
    """The trading and account capabilities resolved for one exchange."""

    exchange: str
    trade_service: TradeService
    account_service: AccountService
    live: bool


class TradingServiceResolver:
    """Resolve and memoize a :class:`TradingServiceHandle` per exchange.

    An exchange trades live only when the registry's configuration carries a
    non-blank API key for it; otherwise it trades on paper. The decision is
    made on first use and kept for the life of the resolver, so one exchange
    never flips between live and paper. Unknown exchanges raise
    :class:`~exchange_gateway.core.errors.UnknownExchangeError`.
    """

    def __init__(self, registry: ExchangeRegistry, paper: PaperServices) -> None:
        self._registry = registry
        self._paper = paper
        self._handles: KeyedLazyCache[str, TradingServiceHandle] = KeyedLazyCache(self._build)

    def resolve(self, exchange: str) -> TradingServiceHandle:
        self._registry.require(exchange)
        return self._handles.get(exchange)

    def trade_service(self, exchange: str) -> TradeService:
        return self.resolve(exchange).trade_service

    def account_service(self, exchange: str) -> AccountService:
        return self.resolve(exchange).account_service

    def _build(self, exchange: str) -> TradingServiceHandle:
        if has_credentials(self._registry.configuration, exchange):
            connector = self._registry.connector(exchange)
            logger.info("Trading on %s with live credentials", exchange)
            return TradingServiceHandle(
                exchange=exchange,
                trade_service=connector.trade_service,
                account_service=connector.account_service,
                live=True,
            )
        logger.info("No credentials for %s, using paper trading", exchange)
        return TradingServiceHandle(
            exchange=exchange,
            trade_service=self._paper.trade_service(exchange),
            account_service=self._paper.account_service(exchange),
            live=False,
        )
