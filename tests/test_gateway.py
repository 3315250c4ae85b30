from __future__ import annotations

import threading
from decimal import Decimal

import pytest

from exchange_gateway.core.errors import (
    BackendUnsupportedError,
    ExchangeTransientError,
    NotAvailableFromExchangeError,
    OperationFailedError,
    PairNotSupportedError,
    SubmissionFailedError,
    UnknownExchangeError,
    UnsupportedOrderTypeError,
)
from exchange_gateway.core.gateway import OPERATION_ROLES, Role
from exchange_gateway.core.notifier import OrderNotifier
from exchange_gateway.core.settings import ExchangeConfiguration
from exchange_gateway.models.account import Balance, PairMetadata
from exchange_gateway.models.orders import (
    CancelOrderById,
    CancelRequest,
    OpenOrders,
    OrderRequest,
    OrderSide,
    OrderStatus,
    StopOrder,
)
from exchange_gateway.models.shared import TradingPair
from tests.stubs import StubConnector, limit_order, make_gateway

BTC_USD = TradingPair("BTC", "USD")
ETH_BTC = TradingPair("ETH", "BTC")
ETH_USD = TradingPair("ETH", "USD")
LTC_BTC = TradingPair("LTC", "BTC")

METADATA = {
    BTC_USD: PairMetadata(Decimal("0.001"), Decimal("100"), 2),
    ETH_BTC: PairMetadata(Decimal("0.01"), None, 6),
    ETH_USD: PairMetadata(Decimal("0.01"), Decimal("1000"), 2),
    LTC_BTC: PairMetadata(Decimal("0.1"), None, 6),
}

LIVE = {"y": ExchangeConfiguration(api_key="key")}


def _limit_request(**overrides) -> OrderRequest:
    fields = dict(side=OrderSide.BUY, amount=Decimal("1.0"), base="ETH", counter="USD", limit_price=Decimal("100"))
    fields.update(overrides)
    return OrderRequest(**fields)


@pytest.fixture()
def connector() -> StubConnector:
    return StubConnector("y", METADATA)


@pytest.fixture()
def gateway(connector):
    gateway = make_gateway({"x": StubConnector("x", METADATA), "y": connector}, LIVE)
    yield gateway
    gateway.close()


# Scenarios -------------------------------------------------------------
def test_unconfigured_exchange_places_on_paper(gateway):
    placed = gateway.place_order("x", _limit_request())

    assert placed.id
    assert placed.status is OrderStatus.NEW
    assert placed.pair == ETH_USD
    assert placed.amount == Decimal("1.0")
    open_orders = gateway.open_orders_for_pair("x", ETH_USD)
    assert [order.id for order in open_orders.open_orders] == [placed.id]


def test_stop_without_limit_never_reaches_backend():
    connector = StubConnector("binance", METADATA)
    gateway = make_gateway({"binance": connector}, {"binance": ExchangeConfiguration(api_key="key")})

    with pytest.raises(UnsupportedOrderTypeError):
        gateway.place_order("binance", _limit_request(limit_price=None, stop_price=Decimal("90")))

    assert connector.trade_service.calls == []
    gateway.close()


def test_currency_search_fails_as_a_whole(gateway, connector):
    connector.trade_service.open_orders[BTC_USD] = OpenOrders((limit_order(BTC_USD, "1"),))
    connector.trade_service.open_order_errors[ETH_BTC] = ExchangeTransientError("connection reset")

    with pytest.raises(OperationFailedError, match="connection reset"):
        gateway.open_orders_for_currency("y", "BTC")

    queried = [pair for name, pair in connector.trade_service.calls if name == "get_open_orders"]
    assert queried == [BTC_USD, ETH_BTC]


# Pairs -----------------------------------------------------------------
def test_list_pairs_is_idempotent(gateway):
    first = gateway.list_pairs("y")
    second = gateway.list_pairs("y")

    assert first == second == frozenset(METADATA)


def test_list_pairs_applies_pair_override():
    gateway = make_gateway({"bitmex": StubConnector("bitmex", METADATA)})

    pairs = gateway.list_pairs("bitmex")

    assert TradingPair("XBT", "H19") in pairs
    assert BTC_USD not in pairs
    gateway.close()


def test_pair_metadata_rewrites_futures_counter():
    metadata = PairMetadata(Decimal("1"), Decimal("10000000"), 1)
    gateway = make_gateway({"bitmex": StubConnector("bitmex", {TradingPair("XBT", "BTC"): metadata})})

    assert gateway.pair_metadata("bitmex", "XBT", "H19") == metadata
    gateway.close()


def test_every_listed_bitmex_pair_has_metadata():
    reported = {BTC_USD: PairMetadata(Decimal("1"), None, 1)}
    gateway = make_gateway({"bitmex": StubConnector("bitmex", reported)})

    missing = []
    for pair in gateway.list_pairs("bitmex"):
        try:
            gateway.pair_metadata("bitmex", pair.base, pair.counter)
        except PairNotSupportedError:
            missing.append(str(pair))

    assert missing == []
    gateway.close()


def test_pair_metadata_for_unlisted_pair(gateway):
    with pytest.raises(PairNotSupportedError):
        gateway.pair_metadata("y", "DOGE", "USD")


def test_unknown_exchange_everywhere(gateway):
    with pytest.raises(UnknownExchangeError):
        gateway.list_pairs("nope")
    with pytest.raises(UnknownExchangeError):
        gateway.place_order("nope", _limit_request())
    with pytest.raises(UnknownExchangeError):
        gateway.balances("nope", ["BTC"])
    with pytest.raises(UnknownExchangeError):
        gateway.ticker("nope", BTC_USD)


def test_list_exchanges_reports_authentication(gateway):
    metas = gateway.list_exchanges()

    assert [(meta.code, meta.authenticated) for meta in metas] == [("x", False), ("y", True)]


# Orders ----------------------------------------------------------------
def test_live_order_is_submitted_once_and_published(connector):
    received = []
    delivered = threading.Event()
    notifier = OrderNotifier(max_workers=1)

    def listener(exchange, pair, order):
        received.append((exchange, pair, order))
        delivered.set()

    notifier.subscribe(listener)
    gateway = make_gateway({"y": connector}, LIVE, notifier=notifier)

    placed = gateway.place_order("y", _limit_request())

    assert placed.id == "live-1"
    assert placed.status is OrderStatus.NEW
    assert [name for name, _ in connector.trade_service.calls] == ["place_limit_order"]
    submitted = connector.trade_service.calls[0][1]
    assert submitted.status is OrderStatus.PENDING_NEW
    assert delivered.wait(timeout=5)
    assert received == [("y", ETH_USD, placed)]
    gateway.close()


def test_stop_order_goes_through_stop_path(gateway, connector):
    placed = gateway.place_order("y", _limit_request(stop_price=Decimal("90")))

    assert isinstance(placed, StopOrder)
    assert connector.trade_service.calls[0][0] == "place_stop_order"


def test_backend_without_capability_reports_unsupported(gateway, connector):
    connector.trade_service.place_error = NotAvailableFromExchangeError("no stops")

    with pytest.raises(BackendUnsupportedError, match="Order type not currently supported"):
        gateway.place_order("y", _limit_request())


def test_backend_failure_is_not_retried(gateway, connector):
    connector.trade_service.place_error = ExchangeTransientError("timeout")

    with pytest.raises(SubmissionFailedError, match="Failed to submit order. timeout"):
        gateway.place_order("y", _limit_request())

    assert len(connector.trade_service.calls) == 1


def test_slow_subscriber_does_not_delay_placement(connector):
    release = threading.Event()
    started = threading.Event()

    def blocked_listener(exchange, pair, order):
        started.set()
        release.wait(timeout=5)

    notifier = OrderNotifier(max_workers=1)
    notifier.subscribe(blocked_listener)
    gateway = make_gateway({"y": connector}, LIVE, notifier=notifier)

    try:
        placed = gateway.place_order("y", _limit_request())

        assert placed.id == "live-1"
        assert started.wait(timeout=5)
        assert not release.is_set()
    finally:
        release.set()
        gateway.close()


def test_failing_subscriber_does_not_fail_placement(connector):
    def broken_listener(exchange, pair, order):
        raise RuntimeError("listener down")

    notifier = OrderNotifier(max_workers=1)
    notifier.subscribe(broken_listener)
    gateway = make_gateway({"y": connector}, LIVE, notifier=notifier)

    placed = gateway.place_order("y", _limit_request())

    assert placed.id == "live-1"
    gateway.close()


def test_cancel_false_is_a_failure(gateway, connector):
    connector.trade_service.cancel_result = False

    with pytest.raises(OperationFailedError, match="could not be cancelled"):
        gateway.cancel_order("y", CancelRequest(BTC_USD, "1", OrderSide.BUY))


def test_cancel_uses_identifier_only_params_for_bitmex():
    connector = StubConnector("bitmex", METADATA)
    gateway = make_gateway({"bitmex": connector}, {"bitmex": ExchangeConfiguration(api_key="key")})

    gateway.cancel_order("bitmex", CancelRequest(TradingPair("XBT", "USD"), "abc", OrderSide.SELL))

    assert connector.trade_service.calls == [("cancel_order", CancelOrderById("abc"))]
    gateway.close()


def test_paper_cancel_round_trip(gateway):
    placed = gateway.place_order("x", _limit_request())

    gateway.cancel_order("x", CancelRequest(ETH_USD, placed.id, OrderSide.BUY))

    assert gateway.open_orders("x") == OpenOrders()
    assert gateway.get_order("x", placed.id)[0].status is OrderStatus.CANCELED
    with pytest.raises(OperationFailedError):
        gateway.cancel_order("x", CancelRequest(ETH_USD, placed.id, OrderSide.BUY))


def test_get_order_forwards_pair(gateway, connector):
    assert gateway.get_order("y", "1", BTC_USD) == []
    assert connector.trade_service.calls == [("get_order", "1", BTC_USD)]


def test_open_orders_for_pair_filters_backend_result(gateway, connector):
    connector.trade_service.open_orders[BTC_USD] = OpenOrders(
        (limit_order(BTC_USD, "1"), limit_order(ETH_USD, "2")),
        (limit_order(ETH_USD, "3"),),
    )

    result = gateway.open_orders_for_pair("y", BTC_USD)

    assert [order.id for order in result.open_orders] == ["1"]
    assert result.hidden_orders == ()


def test_open_orders_unsupported(gateway, connector):
    connector.trade_service.open_order_errors[None] = NotAvailableFromExchangeError("all orders")

    with pytest.raises(BackendUnsupportedError):
        gateway.open_orders("y")


def test_currency_search_collects_orders_with_delay(connector):
    delays = []
    gateway = make_gateway({"y": connector}, LIVE, sleep=delays.append, search_delay=0.2)
    connector.trade_service.open_orders[BTC_USD] = OpenOrders((limit_order(BTC_USD, "1"),))
    connector.trade_service.open_orders[LTC_BTC] = OpenOrders((limit_order(LTC_BTC, "2"),))

    orders = gateway.open_orders_for_currency("y", "BTC")

    assert sorted(order.id for order in orders) == ["1", "2"]
    assert delays == [0.2, 0.2, 0.2]
    gateway.close()


# Account and market data -----------------------------------------------
def test_balances_filtered_to_requested_currencies(gateway, connector):
    connector.account_service.balances = {
        "BTC": Balance("BTC", Decimal("1"), Decimal("0.5")),
        "ETH": Balance("ETH", Decimal("3")),
        "USD": Balance("USD", Decimal("10")),
    }

    balances = gateway.balances("y", ["BTC", "USD", "XRP"])

    assert set(balances) == {"BTC", "USD"}
    assert balances["BTC"].total == Decimal("1.5")


def test_paper_balances_come_from_static_wallet(gateway):
    assert gateway.balances("x", ["USD"]) == {"USD": Balance("USD", Decimal("1000"))}


def test_ticker_uses_live_market_data_without_credentials(gateway):
    ticker = gateway.ticker("x", BTC_USD)

    assert ticker["last"] == Decimal("100")


def test_ticker_has_lowest_role():
    assert OPERATION_ROLES["ticker"] is Role.PUBLIC
    assert {role for name, role in OPERATION_ROLES.items() if name != "ticker"} == {Role.TRADER}
