"""Outbound message transports: Twilio SMS and a logging dry run."""

import logging
from dataclasses import dataclass
from typing import Optional

from requests import RequestException
from twilio.base.exceptions import TwilioException
from twilio.rest import Client

from models import TransportError

logger = logging.getLogger(__name__)


@dataclass
class SendResult:
    """Outcome of one send; external_id is the provider's message id."""

    success: bool
    external_id: Optional[str] = None
    error: Optional[str] = None


class Transport:
    """Delivers a message body to a phone number."""

    name = "transport"

    def send(self, phone: str, body: str) -> SendResult:
        raise NotImplementedError


class DryRunTransport(Transport):
    """Logs messages instead of sending them. Always succeeds."""

    name = "dry-run"

    def __init__(self):
        self.sent = []

    def send(self, phone: str, body: str) -> SendResult:
        logger.info("[dry run] -> %s\n%s", phone, body)
        self.sent.append((phone, body))
        return SendResult(success=True)


class TwilioTransport(Transport):
    """Sends SMS through the Twilio REST API."""

    name = "twilio"

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_number: str,
        client: Optional[Client] = None,
    ):
        if not from_number:
            raise TransportError("A Twilio sender number is required")
        self.from_number = from_number
        self.client = client or Client(account_sid, auth_token)

    def send(self, phone: str, body: str) -> SendResult:
        try:
            message = self.client.messages.create(
                body=body, from_=self.from_number, to=phone
            )
        except (TwilioException, RequestException) as e:
            logger.error("Failed to send to %s: %s", phone, e)
            return SendResult(success=False, error=str(e))
        logger.info("Sent to %s (sid %s)", phone, message.sid)
        return SendResult(success=True, external_id=message.sid)


def make_transport(settings) -> Transport:
    """Twilio when configured and not in dry-run mode, else the dry run."""
    if settings.dry_run or not settings.twilio_configured:
        if not settings.dry_run:
            logger.warning("Twilio credentials missing; messages will only be logged")
        return DryRunTransport()
    return TwilioTransport(
        settings.twilio_account_sid,
        settings.twilio_auth_token,
        settings.twilio_phone_number,
    )
