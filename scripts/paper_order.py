"""Place and cancel a limit order through the gateway.

Without ``GATEWAY_EXCHANGES__<ID>__API_KEY`` set this runs on paper trading.
"""
from __future__ import annotations

import argparse
from decimal import Decimal

from gateway_utils import build_gateway
from exchange_gateway.models.orders import CancelRequest, OrderRequest, OrderSide
from exchange_gateway.models.shared import TradingPair


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("exchange")
    parser.add_argument("base")
    parser.add_argument("counter")
    parser.add_argument("amount", type=Decimal)
    parser.add_argument("limit_price", type=Decimal)
    parser.add_argument("--side", choices=[side.value for side in OrderSide], default=OrderSide.BUY.value)
    args = parser.parse_args()

    gateway = build_gateway()
    try:
        request = OrderRequest(
            side=OrderSide(args.side),
            amount=args.amount,
            base=args.base,
            counter=args.counter,
            limit_price=args.limit_price,
        )
        placed = gateway.place_order(args.exchange, request)
        print(f"placed {placed}")
        pair = TradingPair(args.base, args.counter)
        print(f"open {gateway.open_orders_for_pair(args.exchange, pair)}")
        cancelled_at = gateway.cancel_order(args.exchange, CancelRequest(pair, placed.id, placed.side))
        print(f"cancelled at {cancelled_at.isoformat()}")
    finally:
        gateway.close()


if __name__ == "__main__":  # pragma: no cover
    main()
