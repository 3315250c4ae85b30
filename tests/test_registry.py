from __future__ import annotations

import pytest

from exchange_gateway.core.cache import KeyedLazyCache
from exchange_gateway.core.errors import UnknownExchangeError
from exchange_gateway.core.registry import ExchangeFactoryTable, ExchangeRegistration, ExchangeRegistry
from exchange_gateway.core.settings import ExchangeConfiguration
from tests.stubs import StubConnector


def test_factory_table_rejects_duplicates():
    table = ExchangeFactoryTable()
    table.register("venue", lambda configuration: StubConnector("venue"), name="Venue")

    with pytest.raises(ValueError):
        table.register("venue", lambda configuration: StubConnector("venue"))

    table.register("venue", lambda configuration: StubConnector("venue"), replace=True)
    assert table.snapshot()["venue"].name == "venue"


def test_connector_built_once_with_credentials():
    received = []

    def factory(configuration):
        received.append(configuration)
        return StubConnector("venue")

    configuration = {"venue": ExchangeConfiguration(api_key="key")}
    registry = ExchangeRegistry(configuration, {"venue": ExchangeRegistration(factory, "Venue", "https://venue")})

    first = registry.connector("venue")
    second = registry.connector("venue")

    assert first is second
    assert received == [configuration["venue"]]
    assert registry.describe("venue").ref_link == "https://venue"
    assert registry.describe("venue").authenticated is True


def test_unknown_exchange_raises():
    registry = ExchangeRegistry(None, {})

    with pytest.raises(UnknownExchangeError):
        registry.connector("venue")
    with pytest.raises(UnknownExchangeError):
        registry.describe("venue")


def test_close_closes_built_connectors_only():
    built = StubConnector("venue")
    registry = ExchangeRegistry(
        None,
        {
            "venue": ExchangeRegistration(lambda configuration: built, "Venue"),
            "other": ExchangeRegistration(lambda configuration: pytest.fail("should not build"), "Other"),
        },
    )
    registry.connector("venue")

    registry.close()

    assert built.closed is True
    assert registry.exchange_identifiers() == frozenset({"venue", "other"})


def test_cache_does_not_keep_failures():
    attempts = []

    def factory(key):
        attempts.append(key)
        if len(attempts) == 1:
            raise RuntimeError("boom")
        return key.upper()

    cache = KeyedLazyCache(factory)

    with pytest.raises(RuntimeError):
        cache.get("a")
    assert "a" not in cache
    assert cache.get("a") == "A"
    assert cache.get("a") == "A"
    assert attempts == ["a", "a"]
