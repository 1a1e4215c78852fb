"""Rendering of maintenance reminders into message text."""

from typing import List, Optional

from models import MaintenanceStatus, Vehicle

MAX_UPCOMING_ITEMS = 2


def format_km(km: float) -> str:
    """Format a distance with thousands separators."""
    return f"{km:,.0f}"


def format_item_line(status: MaintenanceStatus) -> str:
    """One indented line describing a due item."""
    prefix = f"  {status.icon} " if status.icon else "  "
    if status.urgent:
        return (
            f"{prefix}{status.label}: recommended interval reached "
            f"(around {format_km(status.next_due_km)} km)"
        )
    return (
        f"{prefix}{status.label}: in about {format_km(status.km_remaining)} km "
        f"(~{status.days_remaining} days)"
    )


def compose_message(
    vehicle: Vehicle,
    due_items: List[MaintenanceStatus],
    estimated_km: float,
    booking_url: Optional[str] = None,
) -> str:
    """
    Build the reminder text for one vehicle.

    Every urgent item is listed; upcoming items are cut to the first two.
    The closing line is an invitation, not a deadline.
    """
    urgent = [s for s in due_items if s.urgent]
    upcoming = [s for s in due_items if not s.urgent]

    item_lines = [format_item_line(s) for s in urgent]
    item_lines += [format_item_line(s) for s in upcoming[:MAX_UPCOMING_ITEMS]]

    lines = [
        f"Hi {vehicle.owner_name} 🔧",
        "",
        f"We took a look at how your {vehicle.vehicle_model} has been driven.",
        f"Estimated current mileage: about {format_km(estimated_km)} km",
        "",
        "- Upcoming maintenance -",
        *item_lines,
        "",
        "Whenever it suits you, feel free to stop by 😊",
    ]
    if booking_url:
        lines.append(f"Book a visit: {booking_url}")
    return "\n".join(lines)
