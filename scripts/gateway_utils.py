"""Shared helpers for manual gateway checks against live exchanges."""
from __future__ import annotations

from pathlib import Path
import sys
from typing import Iterable

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from exchange_gateway.core.gateway import ExchangeGateway, create_gateway
from exchange_gateway.core.settings import GatewaySettings, configure_logging
from exchange_gateway.models.shared import Exchange, TradingPair

PAIR = TradingPair("BTC", "USD")


def build_gateway() -> ExchangeGateway:
    settings = GatewaySettings()
    configure_logging(settings)
    return create_gateway(settings)


def iter_exchanges(targets: Iterable[str] | None = None) -> Iterable[str]:
    if not targets:
        yield from (str(exchange) for exchange in Exchange)
        return
    yield from (target.lower() for target in targets)
