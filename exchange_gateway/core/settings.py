"""Process configuration for the gateway.

Settings are read from ``GATEWAY_``-prefixed environment variables. Nested
values use ``__`` as delimiter, e.g. ``GATEWAY_EXCHANGES__BINANCE__API_KEY``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from decimal import Decimal

from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class ExchangeConfiguration(BaseModel):
    """Credential record for one exchange."""

    api_key: str | None = None
    secret: str | None = None
    passphrase: str | None = None
    sandbox: bool = False


class GatewaySettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="GATEWAY_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # ``None`` means no credential section at all; every exchange trades on paper.
    exchanges: dict[str, ExchangeConfiguration] | None = None
    orders_search_delay: float = 0.2
    notifier_workers: int = 4
    paper_balances: dict[str, Decimal] = {}
    log_level: str = "INFO"

    @field_validator("orders_search_delay")
    @classmethod
    def _non_negative_delay(cls, value: float) -> float:
        if value < 0:
            raise ValueError("orders_search_delay must not be negative")
        return value

    @field_validator("notifier_workers")
    @classmethod
    def _positive_workers(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("notifier_workers must be a positive integer")
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()


def has_credentials(
    exchanges: Mapping[str, ExchangeConfiguration] | None, exchange: str
) -> bool:
    """Return ``True`` when usable live credentials exist for ``exchange``."""

    if exchanges is None:
        return False
    configuration = exchanges.get(exchange)
    if configuration is None or configuration.api_key is None:
        return False
    return bool(configuration.api_key.strip())


def configure_logging(settings: GatewaySettings) -> None:
    """Install a root handler; intended for scripts, not library callers."""

    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
