from __future__ import annotations

from decimal import Decimal

import pytest

from exchange_gateway import (
    CancelRequest,
    Exchange,
    ExchangeConfiguration,
    GatewaySettings,
    OrderRequest,
    OrderSide,
    OrderStatus,
    TradingPair,
    UnknownExchangeError,
    create_gateway,
)


@pytest.fixture()
def gateway():
    settings = GatewaySettings(
        exchanges={Exchange.KRAKEN: ExchangeConfiguration(api_key="key", secret="secret")},
        paper_balances={"USD": Decimal("250")},
    )
    gateway = create_gateway(settings)
    yield gateway
    gateway.close()


def test_lists_well_known_exchanges(gateway):
    metas = {meta.code: meta for meta in gateway.list_exchanges()}

    assert {str(exchange) for exchange in Exchange} <= set(metas)
    assert metas["kraken"].authenticated is True
    assert metas["binance"].authenticated is False


def test_exchange_without_credentials_trades_on_paper(gateway):
    request = OrderRequest(
        side=OrderSide.BUY,
        amount=Decimal("1.0"),
        base="ETH",
        counter="USD",
        limit_price=Decimal("100"),
    )

    placed = gateway.place_order("coinbase", request)

    assert placed.id
    assert placed.status is OrderStatus.NEW
    gateway.cancel_order("coinbase", CancelRequest(TradingPair("ETH", "USD"), placed.id, OrderSide.BUY))
    assert gateway.balances("coinbase", ["USD", "BTC"])["USD"].available == Decimal("250")


def test_unknown_exchange(gateway):
    with pytest.raises(UnknownExchangeError):
        gateway.open_orders("mtgox")
