"""MaintenanceStatus dataclass for calculated per-item due status."""

from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

from .status import Status

if TYPE_CHECKING:
    from .catalog import CatalogItem


@dataclass
class MaintenanceStatus:
    """Calculated due information for one catalog item on one vehicle."""

    item: "CatalogItem"
    status: Status
    last_done_km: float
    next_due_km: float
    km_remaining: float
    days_remaining: int
    due_date: Optional[str] = None
    urgent_km: float = 1000

    @property
    def urgent(self) -> bool:
        return self.km_remaining < self.urgent_km

    @property
    def item_key(self) -> str:
        return self.item.key

    @property
    def label(self) -> str:
        return self.item.label

    @property
    def icon(self) -> str:
        return self.item.icon

    def is_due(self, threshold_km: float) -> bool:
        """True when the item is within threshold_km of its due point."""
        return self.km_remaining <= threshold_km

    def to_dict(self) -> dict:
        return {
            "itemKey": self.item_key,
            "label": self.label,
            "icon": self.icon,
            "lastDoneKm": self.last_done_km,
            "nextDueKm": self.next_due_km,
            "kmRemaining": self.km_remaining,
            "daysRemaining": self.days_remaining,
            "dueDate": self.due_date,
            "urgent": self.urgent,
            "status": self.status.name.lower(),
        }
