"""Campaign runner: select due vehicles, send reminders, log every attempt."""

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from config import Settings
from models import DeliveryStatus, OutreachLogEntry, Store, TransportError

from .composer import compose_message
from .selector import DueSelector, DueVehicle
from .transport import SendResult, Transport

logger = logging.getLogger(__name__)


@dataclass
class CampaignResult:
    sent: int
    total: int

    def to_dict(self) -> dict:
        return {"sent": self.sent, "total": self.total}


class CampaignRunner:
    """
    Runs one outreach campaign.

    Sends are sequential with a fixed pause between them. A failed send is
    logged as a failed outreach entry and the loop carries on; errors from
    the store propagate to the caller.
    """

    def __init__(
        self,
        store: Store,
        selector: DueSelector,
        transport: Transport,
        settings: Optional[Settings] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store
        self.selector = selector
        self.transport = transport
        self.settings = settings or Settings()
        self.sleep = sleep
        self.clock = clock or selector.clock

    def send_single(self, phone: str, body: str) -> SendResult:
        """Send one ad-hoc message; not recorded in the outreach log."""
        try:
            return self.transport.send(phone, body)
        except TransportError as e:
            logger.error("Ad-hoc send to %s failed: %s", phone, e)
            return SendResult(success=False, error=str(e))

    def dispatch(self, target: DueVehicle) -> OutreachLogEntry:
        """Compose, send and log the reminder for one selected vehicle."""
        vehicle = target.vehicle
        message = compose_message(
            vehicle, target.due_items, target.estimated_km, self.settings.booking_url
        )
        result = self.send_single(vehicle.owner_phone, message)

        entry = OutreachLogEntry(
            vehicle_id=vehicle.vehicle_id,
            phone=vehicle.owner_phone,
            message=message,
            items_alerted=target.item_keys,
            status=DeliveryStatus.SENT if result.success else DeliveryStatus.FAILED,
            sent_at=self.clock().isoformat(timespec="seconds"),
            external_id=result.external_id,
        )
        self.store.append_outreach(entry)
        return entry

    def run(self) -> CampaignResult:
        """Run the campaign over every vehicle in the store."""
        logger.info("Mileage-based campaign started")
        targets = self.selector.select_due(
            threshold_km=self.settings.threshold_km,
            cooldown_days=self.settings.cooldown_days,
        )
        logger.info("%d vehicle(s) due for notification", len(targets))

        sent = 0
        delay = self.settings.send_delay_ms / 1000
        for index, target in enumerate(targets):
            if index > 0 and delay > 0:
                self.sleep(delay)
            entry = self.dispatch(target)
            if entry.status is DeliveryStatus.SENT:
                sent += 1
            else:
                logger.warning("Reminder to %s failed", entry.phone)

        logger.info("Campaign complete: %d/%d sent", sent, len(targets))
        return CampaignResult(sent=sent, total=len(targets))
