"""OutreachLogEntry class for notification attempts."""

from datetime import datetime
from enum import Enum
from typing import List, Optional


class DeliveryStatus(Enum):
    SENT = "sent"
    FAILED = "failed"


class OutreachLogEntry:
    """One attempted notification to a vehicle owner. Append-only."""

    def __init__(
        self,
        vehicle_id: str,
        phone: str,
        message: str,
        items_alerted: List[str],
        status: DeliveryStatus,
        sent_at: str,
        external_id: Optional[str] = None,
    ):
        self.vehicle_id = vehicle_id
        self.phone = phone
        self.message = message
        self.items_alerted = list(items_alerted)
        self.status = status
        self.sent_at = sent_at
        self.external_id = external_id

    @property
    def sent_at_datetime(self) -> datetime:
        return datetime.fromisoformat(self.sent_at)
