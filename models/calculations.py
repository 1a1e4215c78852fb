"""Helper functions for mileage estimation and due calculations."""

import math
from datetime import date
from dateutil.relativedelta import relativedelta
from typing import NamedTuple, Optional, TYPE_CHECKING

from .status import Status

if TYPE_CHECKING:
    from .vehicle import Vehicle

# Assumed km driven per month, by vehicle type, when nothing better is known.
DEFAULT_AVG_KM_BY_TYPE = {
    "compact": 700,
    "sedan": 1200,
    "suv": 1300,
    "truck": 2500,
    "van": 2000,
    "default": 1250,
}

UNKNOWN_DAYS = 999

TIER_LABELS = {
    0: "No visit data",
    1: "Lifetime estimate",
    2: "Measured average",
}


class MileageEstimate(NamedTuple):
    """Estimated odometer reading and the confidence tier it came from."""

    km: int
    tier: int


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def month_diff(from_date: date, to_date: date) -> float:
    """
    Approximate months between two dates, never negative.

    Whole calendar months plus the day-of-month difference scaled by 1/30.
    This is deliberately not calendar-exact; estimates depend on this value.
    """
    months = (
        (to_date.year - from_date.year) * 12
        + (to_date.month - from_date.month)
        + (to_date.day - from_date.day) / 30
    )
    return max(0, months)


def default_avg_km_per_month(vehicle_type: Optional[str]) -> float:
    """Default monthly distance for a vehicle type (case-insensitive)."""
    key = (vehicle_type or "").strip().lower()
    return DEFAULT_AVG_KM_BY_TYPE.get(key, DEFAULT_AVG_KM_BY_TYPE["default"])


def estimate_mileage(vehicle: "Vehicle", today: date) -> MileageEstimate:
    """
    Estimate a vehicle's current odometer reading.

    Tiers, first match wins:
    - 2: measured average + last visit → extrapolate from the last visit
    - 1: first visit → extrapolate with the lifetime average since
         registration, or the vehicle-type default
    - 0: no visit data → 0

    A field counts as present when it is not None. A measured average of 0
    therefore still gives tier 2, and a first-visit reading of 0 gives
    tier 1. The shop's earlier system tested truthiness and fell through
    to the next tier in both cases.
    """
    if (
        vehicle.measured_avg_km_per_month is not None
        and vehicle.last_visit_odometer is not None
        and vehicle.last_visit_date is not None
    ):
        months = month_diff(date.fromisoformat(vehicle.last_visit_date), today)
        km = vehicle.last_visit_odometer + vehicle.measured_avg_km_per_month * months
        return MileageEstimate(round_half_up(km), 2)

    if vehicle.first_visit_odometer is not None and vehicle.first_visit_date is not None:
        first_date = date.fromisoformat(vehicle.first_visit_date)
        avg_km = default_avg_km_per_month(vehicle.vehicle_type)
        if vehicle.registration_year:
            life_months = month_diff(date(vehicle.registration_year, 1, 1), first_date)
            if life_months > 0:
                driven = vehicle.first_visit_odometer - (vehicle.registration_odometer or 0)
                avg_km = driven / life_months
        months = month_diff(first_date, today)
        km = vehicle.first_visit_odometer + avg_km * months
        return MileageEstimate(round_half_up(km), 1)

    return MileageEstimate(0, 0)


def calc_next_due_km(last_done_km: Optional[float], interval_km: float) -> float:
    """
    Calculate next due odometer.

    - With history: last_done_km + interval
    - Without history: interval (due from zero)
    """
    if last_done_km is not None:
        return last_done_km + interval_km
    return interval_km


def calc_days_remaining(km_remaining: float, avg_km_per_month: Optional[float]) -> int:
    """Days until km_remaining is driven at the given pace, or UNKNOWN_DAYS."""
    if not avg_km_per_month or avg_km_per_month <= 0:
        return UNKNOWN_DAYS
    return round_half_up(km_remaining / avg_km_per_month * 30)


def calc_due_date(today: date, days_remaining: int) -> Optional[date]:
    """Projected service date, or None when the pace is unknown."""
    if days_remaining >= UNKNOWN_DAYS:
        return None
    return today + relativedelta(days=days_remaining)


def check_status(km_remaining: float, urgent_km: float, due_soon_km: float) -> Status:
    """Determine status from the distance left before an item is due."""
    if km_remaining < urgent_km:
        return Status.URGENT
    if km_remaining <= due_soon_km:
        return Status.UPCOMING
    return Status.OK
