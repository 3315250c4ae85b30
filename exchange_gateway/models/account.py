"""Account and market metadata models."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True, slots=True)
class Balance:
    """Funds held in one currency."""

    currency: str
    available: Decimal
    held: Decimal = Decimal("0")

    @property
    def total(self) -> Decimal:
        return self.available + self.held


@dataclass(frozen=True, slots=True)
class PairMetadata:
    """Order size bounds and price precision for a pair."""

    minimum_amount: Decimal | None = None
    maximum_amount: Decimal | None = None
    price_scale: int | None = None
