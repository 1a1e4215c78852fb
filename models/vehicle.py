"""Vehicle class - the aggregate root for visit history and due calculations."""

import re
from datetime import date
from typing import List, Optional

from .catalog import Catalog, CatalogItem, DEFAULT_CATALOG
from .history_entry import ServiceHistoryEntry
from .maintenance_status import MaintenanceStatus
from .calculations import (
    MileageEstimate,
    calc_days_remaining,
    calc_due_date,
    calc_next_due_km,
    check_status,
    default_avg_km_per_month,
    estimate_mileage,
    month_diff,
)


def vehicle_id_for_phone(phone: str) -> str:
    """Derive the storage key for a vehicle from its owner's phone number."""
    digits = re.sub(r"\D", "", phone or "")
    if not digits:
        raise ValueError(f"Phone number '{phone}' has no digits")
    return digits


class Vehicle:
    """Customer vehicle record with visit odometer readings and service history.

    The first-visit reading is established once and never changes afterwards;
    there is no setter for it.
    """

    def __init__(
        self,
        owner_name: str,
        owner_phone: str,
        vehicle_model: str,
        vehicle_type: str = "sedan",
        registration_year: Optional[int] = None,
        registration_odometer: float = 0,
        first_visit_odometer: Optional[float] = None,
        first_visit_date: Optional[str] = None,
        last_visit_odometer: Optional[float] = None,
        last_visit_date: Optional[str] = None,
        measured_avg_km_per_month: Optional[float] = None,
        visit_count: int = 0,
        history: Optional[List[ServiceHistoryEntry]] = None,
        notes: Optional[str] = None,
    ):
        self.owner_name = owner_name
        self.owner_phone = owner_phone
        self.vehicle_model = vehicle_model
        self.vehicle_type = vehicle_type or "sedan"
        self.registration_year = registration_year
        self.registration_odometer = registration_odometer or 0
        self._first_visit_odometer = first_visit_odometer
        self._first_visit_date = first_visit_date
        self.last_visit_odometer = last_visit_odometer
        self.last_visit_date = last_visit_date
        self.measured_avg_km_per_month = measured_avg_km_per_month
        self.visit_count = visit_count or 0
        self.history = history or []
        self.notes = notes

    @property
    def vehicle_id(self) -> str:
        return vehicle_id_for_phone(self.owner_phone)

    @property
    def first_visit_odometer(self) -> Optional[float]:
        return self._first_visit_odometer

    @property
    def first_visit_date(self) -> Optional[str]:
        return self._first_visit_date

    @property
    def has_visit_data(self) -> bool:
        """True once a first visit has been recorded."""
        return self._first_visit_odometer is not None

    @property
    def average_km_per_month(self) -> float:
        """Measured pace if known, otherwise the vehicle-type default."""
        if self.measured_avg_km_per_month is not None:
            return self.measured_avg_km_per_month
        return default_avg_km_per_month(self.vehicle_type)

    # -------------------------------------------------------------------
    # Visits
    # -------------------------------------------------------------------

    def establish_first_visit(self, odometer: float, on: date) -> bool:
        """
        Set the first-visit reading if it is not set yet.

        Returns True if the reading was established, False if it already was.
        """
        if self._first_visit_odometer is not None:
            return False
        if odometer < self.registration_odometer:
            raise ValueError(
                f"Odometer {odometer:,.0f} is below the registration reading "
                f"{self.registration_odometer:,.0f}"
            )
        self._first_visit_odometer = odometer
        self._first_visit_date = on.isoformat()
        self.last_visit_odometer = odometer
        self.last_visit_date = on.isoformat()
        return True

    def record_visit(self, odometer: float, on: date) -> None:
        """
        Record an odometer reading taken at a shop visit.

        The first reading establishes the first visit. Later readings update
        the last visit and recompute the measured monthly average whenever
        at least some time has passed since the first visit.
        """
        if odometer < 0:
            raise ValueError("Odometer reading must not be negative")

        if not self.establish_first_visit(odometer, on):
            floor = self.last_visit_odometer
            if floor is None:
                floor = self._first_visit_odometer
            if odometer < floor:
                raise ValueError(
                    f"Odometer {odometer:,.0f} is below the last recorded reading {floor:,.0f}"
                )
            months = month_diff(date.fromisoformat(self._first_visit_date), on)
            if months > 0:
                self.measured_avg_km_per_month = (
                    odometer - self._first_visit_odometer
                ) / months
            self.last_visit_odometer = odometer
            self.last_visit_date = on.isoformat()

        self.visit_count += 1

    # -------------------------------------------------------------------
    # Service history
    # -------------------------------------------------------------------

    def record_service(
        self,
        item: CatalogItem,
        odometer: float,
        on: date,
        notes: Optional[str] = None,
    ) -> ServiceHistoryEntry:
        """Append a completed service; its next due point is fixed now."""
        if odometer < 0:
            raise ValueError("Odometer reading must not be negative")
        entry = ServiceHistoryEntry(
            item_key=item.key,
            odometer_at_service=odometer,
            date=on.isoformat(),
            next_due_odometer=odometer + item.interval_km,
            notes=notes,
        )
        self.history.append(entry)
        return entry

    def get_history_for_item(self, key: str) -> List[ServiceHistoryEntry]:
        """Get all history entries for a catalog item."""
        return [h for h in self.history if h.item_key == key]

    def get_last_service(self, key: str) -> Optional[ServiceHistoryEntry]:
        """Get the service for an item done at the highest odometer reading."""
        entries = self.get_history_for_item(key)
        if not entries:
            return None
        return max(entries, key=lambda h: (h.odometer_at_service, h.date))

    def get_history_sorted(self, reverse: bool = True) -> List[ServiceHistoryEntry]:
        """History ordered by date then odometer, newest first by default."""
        return sorted(
            self.history,
            key=lambda h: (h.date, h.odometer_at_service),
            reverse=reverse,
        )

    # -------------------------------------------------------------------
    # Estimates
    # -------------------------------------------------------------------

    def estimate_current_km(self, today: date) -> MileageEstimate:
        """Estimated odometer reading today, with its confidence tier."""
        return estimate_mileage(self, today)

    def calculate_item_status(
        self,
        item: CatalogItem,
        today: date,
        urgent_km: float = 1000,
        due_soon_km: float = 1500,
        estimated_km: Optional[float] = None,
    ) -> MaintenanceStatus:
        """
        Calculate how far a vehicle is from its next service of an item.

        Logic:
        - No history: due at the catalog interval from zero
        - With history: due at the stored next-due odometer of the service
          done at the highest reading
        - km remaining is clamped at 0; days remaining uses the vehicle's pace
        """
        if estimated_km is None:
            estimated_km = self.estimate_current_km(today).km

        last = self.get_last_service(item.key)
        if last is not None:
            last_done_km = last.odometer_at_service
            next_due_km = last.next_due_odometer
        else:
            last_done_km = 0
            next_due_km = calc_next_due_km(None, item.interval_km)

        km_remaining = max(0, next_due_km - estimated_km)
        days_remaining = calc_days_remaining(km_remaining, self.average_km_per_month)
        due_date = calc_due_date(today, days_remaining)

        return MaintenanceStatus(
            item=item,
            status=check_status(km_remaining, urgent_km, due_soon_km),
            last_done_km=last_done_km,
            next_due_km=next_due_km,
            km_remaining=km_remaining,
            days_remaining=days_remaining,
            due_date=due_date.isoformat() if due_date else None,
            urgent_km=urgent_km,
        )

    def get_all_maintenance_status(
        self,
        today: date,
        catalog: Catalog = DEFAULT_CATALOG,
        urgent_km: float = 1000,
        due_soon_km: float = 1500,
    ) -> List[MaintenanceStatus]:
        """Status for every catalog item, in catalog order."""
        estimated_km = self.estimate_current_km(today).km
        return [
            self.calculate_item_status(item, today, urgent_km, due_soon_km, estimated_km)
            for item in catalog
        ]
