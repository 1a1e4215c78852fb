"""Interval catalog: maintenance items and their recommended intervals."""

from typing import Dict, Iterator, List, Optional

from .errors import UnknownItemError


class CatalogItem:
    """A maintenance item with the distance recommended between services."""

    def __init__(self, key: str, interval_km: float, label: str, icon: str = ""):
        self.key = key
        self.interval_km = interval_km
        self.label = label
        self.icon = icon

    @property
    def display_name(self) -> str:
        """Label prefixed with the icon, if any."""
        return f"{self.icon} {self.label}" if self.icon else self.label


class Catalog:
    """Ordered, read-only table of catalog items keyed by item key.

    Iteration order is definition order; status lists follow it.
    """

    def __init__(self, items: List[CatalogItem]):
        self._items: Dict[str, CatalogItem] = {}
        for item in items:
            if item.key in self._items:
                raise ValueError(f"Duplicate catalog item key '{item.key}'")
            if item.interval_km is None or item.interval_km <= 0:
                raise ValueError(f"Catalog item '{item.key}' needs a positive interval")
            self._items[item.key] = item

    def __iter__(self) -> Iterator[CatalogItem]:
        return iter(self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: str) -> bool:
        return key in self._items

    @property
    def keys(self) -> List[str]:
        return list(self._items)

    def get(self, key: str) -> Optional[CatalogItem]:
        """Find an item by key, or None."""
        return self._items.get(key)

    def require(self, key: str) -> CatalogItem:
        """Find an item by key, raising UnknownItemError if absent."""
        item = self._items.get(key)
        if item is None:
            raise UnknownItemError(key, self.keys)
        return item


DEFAULT_ITEMS = [
    CatalogItem("engine_oil", 10000, "Engine oil (synthetic)", "🛢️"),
    CatalogItem("engine_oil_basic", 5000, "Engine oil (conventional)", "🛢️"),
    CatalogItem("air_filter", 20000, "Air filter", "💨"),
    CatalogItem("ac_filter", 12000, "Cabin A/C filter", "❄️"),
    CatalogItem("tire_rotation", 10000, "Tire rotation", "🔄"),
    CatalogItem("tire_replace", 50000, "Tire replacement", "🔧"),
    CatalogItem("brake_pad", 40000, "Brake pads", "🛑"),
    CatalogItem("spark_plug", 40000, "Spark plugs", "⚡"),
    CatalogItem("transmission_oil", 50000, "Transmission fluid", "⚙️"),
    CatalogItem("coolant", 40000, "Coolant", "🌡️"),
]

DEFAULT_CATALOG = Catalog(DEFAULT_ITEMS)
