"""
Effective price resolution.

The single price used for budget comparison, taken from a priority-ordered
list of candidates: listing price, then tax-assessed value, then last
sale price. The first positive value wins.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from core.models import PropertySnapshot


class PriceSource(Enum):
    LIST_PRICE = "list_price"
    TAX_ASSESSED_VALUE = "tax_assessed_value"
    LAST_SALE_PRICE = "last_sale_price"


@dataclass(frozen=True)
class EffectivePrice:
    value: float
    source: PriceSource

    @property
    def description(self) -> str:
        """How the price is described to the buyer."""
        if self.source == PriceSource.LIST_PRICE:
            return "list price"
        return "estimated value"


def _positive(value: Optional[float]) -> bool:
    return value is not None and value > 0


def resolve_effective_price(
    list_price: Optional[float],
    snapshot: Optional[PropertySnapshot],
) -> Optional[EffectivePrice]:
    """
    Pick the price to compare against the buyer's budget.

    Returns:
        EffectivePrice, or None when no candidate is positive
    """
    if _positive(list_price):
        return EffectivePrice(list_price, PriceSource.LIST_PRICE)
    if snapshot is None:
        return None
    if _positive(snapshot.tax_assessed_value):
        return EffectivePrice(snapshot.tax_assessed_value, PriceSource.TAX_ASSESSED_VALUE)
    if _positive(snapshot.last_sale_price):
        return EffectivePrice(snapshot.last_sale_price, PriceSource.LAST_SALE_PRICE)
    return None
