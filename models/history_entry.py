"""ServiceHistoryEntry class for completed maintenance records."""
from typing import Optional


class ServiceHistoryEntry:
    """A record of a maintenance item performed on a vehicle.

    next_due_odometer is frozen when the entry is created, so later catalog
    changes never move it.
    """

    def __init__(
            self,
            item_key: str,
            odometer_at_service: float,
            date: str,
            next_due_odometer: float,
            notes: Optional[str] = None,
    ):
        self.item_key = item_key
        self.odometer_at_service = odometer_at_service
        self.date = date
        self.next_due_odometer = next_due_odometer
        self.notes = notes
