"""Compare gateway pair listings against raw CCXT market definitions."""
from __future__ import annotations

from typing import Iterable

import sys

import ccxt  # type: ignore

from gateway_utils import build_gateway, iter_exchanges
from exchange_gateway.core.errors import ExchangeGatewayError


def main(targets: Iterable[str] | None = None) -> None:
    gateway = build_gateway()
    try:
        for exchange_id in iter_exchanges(targets):
            print(f"\n=== {exchange_id} pairs ===")
            try:
                ours = gateway.list_pairs(exchange_id)
                print(f"gateway {len(ours)} pairs")
            except ExchangeGatewayError as exc:
                print(f"gateway error: {exc}")
                continue

            exchange = getattr(ccxt, exchange_id)({"enableRateLimit": True})
            try:
                markets = exchange.load_markets()
                theirs = {(m["base"], m["quote"]) for m in markets.values() if m.get("active") is not False}
                mine = {(pair.base, pair.counter) for pair in ours}
                print(f"ccxt {len(theirs)} pairs")
                print(f"only gateway: {sorted(mine - theirs)[:10]}")
                print(f"only ccxt: {sorted(theirs - mine)[:10]}")
            except ccxt.BaseError as exc:
                print(f"ccxt error: {exc}")
    finally:
        gateway.close()


if __name__ == "__main__":  # pragma: no cover
    main(sys.argv[1:] or None)
