"""
Mileage-based maintenance outreach.

- DueSelector: picks vehicles with items inside the alert threshold
- compose_message: renders a reminder
- Transport: Twilio SMS or a logging dry run
- CampaignRunner: sends reminders and logs each attempt
- CampaignScheduler: fires the campaign daily
- OutreachService: operator façade used by the CLI and the web app
"""

from .selector import DueSelector, DueVehicle
from .composer import compose_message, format_item_line
from .transport import (
    DryRunTransport,
    SendResult,
    Transport,
    TwilioTransport,
    make_transport,
)
from .campaign import CampaignResult, CampaignRunner
from .scheduler import CampaignScheduler
from .service import OutreachService, VehicleNotFound

__all__ = [
    "DueSelector",
    "DueVehicle",
    "compose_message",
    "format_item_line",
    "DryRunTransport",
    "SendResult",
    "Transport",
    "TwilioTransport",
    "make_transport",
    "CampaignResult",
    "CampaignRunner",
    "CampaignScheduler",
    "OutreachService",
    "VehicleNotFound",
]
