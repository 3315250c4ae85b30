"""Registry utilities for mapping exchange identifiers to live connectors."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import MutableMapping

from ..contracts.trading.interface import ExchangeConnector
from ..models.shared import ExchangeMeta
from .cache import KeyedLazyCache
from .errors import UnknownExchangeError
from .settings import ExchangeConfiguration, has_credentials

logger = logging.getLogger(__name__)

ConnectorFactory = Callable[[ExchangeConfiguration | None], ExchangeConnector]


@dataclass(frozen=True, slots=True)
class ExchangeRegistration:
    factory: ConnectorFactory
    name: str
    ref_link: str | None = None


class ExchangeFactoryTable:
    """In-memory table of connector factories."""

    def __init__(self) -> None:
        self._registrations: MutableMapping[str, ExchangeRegistration] = {}

    def register(
        self,
        exchange: str,
        factory: ConnectorFactory,
        *,
        name: str | None = None,
        ref_link: str | None = None,
        replace: bool = False,
    ) -> None:
        """Register a factory for the given exchange."""

        if not replace and exchange in self._registrations:
            raise ValueError(f"Connector for {exchange} already registered")
        self._registrations[exchange] = ExchangeRegistration(factory, name or str(exchange), ref_link)

    def snapshot(self) -> Mapping[str, ExchangeRegistration]:
        """Return a copy of registered factories."""

        return dict(self._registrations)


_table = ExchangeFactoryTable()


def register_exchange(
    exchange: str,
    factory: ConnectorFactory,
    *,
    name: str | None = None,
    ref_link: str | None = None,
    replace: bool = False,
) -> None:
    """Register a connector factory globally."""

    _table.register(exchange, factory, name=name, ref_link=ref_link, replace=replace)


def registered_exchanges() -> Mapping[str, ExchangeRegistration]:
    """Expose the global factory mapping."""

    return _table.snapshot()


class ExchangeRegistry:
    """Backend registry bound to one process configuration.

    Connectors are built on first use with the exchange's credential record
    and reused for the life of the registry.
    """

    def __init__(
        self,
        configuration: Mapping[str, ExchangeConfiguration] | None = None,
        registrations: Mapping[str, ExchangeRegistration] | None = None,
    ) -> None:
        self._configuration = configuration
        self._registrations = dict(registered_exchanges() if registrations is None else registrations)
        self._connectors: KeyedLazyCache[str, ExchangeConnector] = KeyedLazyCache(self._build)

    @property
    def configuration(self) -> Mapping[str, ExchangeConfiguration] | None:
        return self._configuration

    def exchange_identifiers(self) -> frozenset[str]:
        return frozenset(self._registrations)

    def require(self, exchange: str) -> ExchangeRegistration:
        """Return the registration for ``exchange`` or raise :class:`UnknownExchangeError`."""

        try:
            return self._registrations[exchange]
        except KeyError as exc:
            raise UnknownExchangeError(f"Unknown exchange {exchange!r}") from exc

    def describe(self, exchange: str) -> ExchangeMeta:
        registration = self.require(exchange)
        return ExchangeMeta(
            code=str(exchange),
            name=registration.name,
            ref_link=registration.ref_link,
            authenticated=has_credentials(self._configuration, exchange),
        )

    def connector(self, exchange: str) -> ExchangeConnector:
        self.require(exchange)
        return self._connectors.get(exchange)

    def close(self) -> None:
        for exchange, connector in self._connectors.snapshot().items():
            try:
                connector.close()
            except Exception:  # pragma: no cover - best effort shutdown
                logger.exception("Failed to close connector for %s", exchange)

    def _build(self, exchange: str) -> ExchangeConnector:
        registration = self._registrations[exchange]
        configuration = self._configuration.get(exchange) if self._configuration else None
        logger.debug("Building connector for %s", exchange)
        return registration.factory(configuration)
