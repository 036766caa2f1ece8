"""Pricing catalog: read-only item name -> unit price lookup."""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Dict, Mapping, Optional

from resto.domain.models import money


DEFAULT_MENU: Dict[str, str] = {
    "Fried Chicken": "25.00",
    "Burger Steak": "30.00",
    "Spaghetti": "20.00",
    "Pancit Canton": "18.00",
    "Sisig": "28.00",
    "Lechon Kawali": "32.00",
    "Adobo": "27.00",
    "Beef Tapa": "35.00",
    "Sinigang": "33.00",
    "Halo-Halo": "15.00",
}


class PricingCatalog(ABC):
    """Abstract lookup used by the order builder."""

    @abstractmethod
    def price_for(self, item_name: str) -> Optional[Decimal]:
        """Return the unit price for an exact item name, or None if unknown."""
        ...

    @abstractmethod
    def items(self) -> Dict[str, Decimal]:
        """Return a copy of the whole menu."""
        ...


class InMemoryCatalog(PricingCatalog):
    """Catalog backed by a dict. Names match exactly (case-sensitive)."""

    def __init__(self, prices: Optional[Mapping[str, object]] = None):
        source = DEFAULT_MENU if prices is None else prices
        self._prices = {name: money(price) for name, price in source.items()}

    def price_for(self, item_name: str) -> Optional[Decimal]:
        return self._prices.get(item_name)

    def items(self) -> Dict[str, Decimal]:
        return dict(self._prices)
