"""Print the gateway ticker next to the raw CCXT ticker for each exchange."""
from __future__ import annotations

from typing import Iterable

import sys

import ccxt  # type: ignore

from gateway_utils import PAIR, build_gateway, iter_exchanges
from exchange_gateway.core.errors import ExchangeGatewayError


def main(targets: Iterable[str] | None = None) -> None:
    gateway = build_gateway()
    try:
        for exchange_id in iter_exchanges(targets):
            print(f"\n=== {exchange_id} {PAIR} ticker ===")
            try:
                print("gateway", gateway.ticker(exchange_id, PAIR))
            except ExchangeGatewayError as exc:
                print(f"gateway error: {exc}")

            exchange = getattr(ccxt, exchange_id)({"enableRateLimit": True})
            try:
                raw = exchange.fetch_ticker(PAIR.symbol)
                print("ccxt", {key: raw.get(key) for key in ("timestamp", "bid", "ask", "last")})
            except ccxt.BaseError as exc:
                print(f"ccxt error: {exc}")
    finally:
        gateway.close()


if __name__ == "__main__":  # pragma: no cover
    main(sys.argv[1:] or None)
