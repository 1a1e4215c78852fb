"""Selection of vehicles that should receive a maintenance reminder."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Iterable, List, Optional

from models import Catalog, DEFAULT_CATALOG, MaintenanceStatus, Store, Vehicle

logger = logging.getLogger(__name__)


@dataclass
class DueVehicle:
    """A vehicle selected for outreach, with the items that triggered it."""

    vehicle: Vehicle
    due_items: List[MaintenanceStatus]
    estimated_km: int

    @property
    def item_keys(self) -> List[str]:
        return [s.item_key for s in self.due_items]


class DueSelector:
    """
    Picks vehicles with at least one item inside the alert threshold.

    Vehicles without a first visit are never candidates. A vehicle that was
    contacted within the cooldown window is skipped, whether or not that
    message was delivered.
    """

    def __init__(
        self,
        store: Store,
        catalog: Catalog = DEFAULT_CATALOG,
        clock: Callable[[], datetime] = datetime.now,
        urgent_km: float = 1000,
    ):
        self.store = store
        self.catalog = catalog
        self.clock = clock
        self.urgent_km = urgent_km

    def in_cooldown(self, vehicle: Vehicle, now: datetime, cooldown_days: float) -> bool:
        """True if the vehicle's latest outreach is newer than the cooldown."""
        last = self.store.last_outreach(vehicle.vehicle_id)
        if last is None:
            return False
        return now - last.sent_at_datetime < timedelta(days=cooldown_days)

    def select_due(
        self,
        vehicles: Optional[Iterable[Vehicle]] = None,
        threshold_km: float = 1500,
        cooldown_days: float = 30,
    ) -> List[DueVehicle]:
        """Vehicles due for a reminder, in the order they were given."""
        if vehicles is None:
            vehicles = self.store.list_vehicles()
        now = self.clock()
        today = now.date()

        selected = []
        for vehicle in vehicles:
            if not vehicle.has_visit_data:
                continue

            estimated_km = vehicle.estimate_current_km(today).km
            statuses = vehicle.get_all_maintenance_status(
                today, self.catalog, urgent_km=self.urgent_km, due_soon_km=threshold_km
            )
            due_items = [s for s in statuses if s.is_due(threshold_km)]
            if not due_items:
                continue

            if self.in_cooldown(vehicle, now, cooldown_days):
                logger.debug(
                    "Skipping %s: contacted within the last %s days",
                    vehicle.vehicle_id,
                    cooldown_days,
                )
                continue

            selected.append(DueVehicle(vehicle, due_items, estimated_km))
        return selected
