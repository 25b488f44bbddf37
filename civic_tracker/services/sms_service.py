"""
SMS gateway: delivers OTP messages through Twilio's REST API.

Local echo mode:
  - Enabled with SMS_LOCAL_ECHO=true, or automatically whenever the Twilio
    credentials are missing.
  - Nothing is transmitted. The message is logged and kept in a small
    in-memory outbox so a developer can read the code, and send() reports
    success.

Real delivery never raises: transport problems come back as a
DeliveryResult with delivered=False so the caller decides what to surface.
"""
import logging
import re
from collections import deque
from dataclasses import dataclass
from typing import Optional

import requests

from civic_tracker.config import Settings

logger = logging.getLogger(__name__)

TWILIO_MESSAGES_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"
OUTBOX_SIZE = 50


@dataclass
class DeliveryResult:
    delivered: bool
    via_local_echo: bool
    error: Optional[str] = None


def to_e164(phone: str, country_code: str = "91") -> str:
    """
    Normalize a raw phone string into an E.164 delivery address.

      10 digits                    → +<cc><digits>  (domestic number)
      12 digits starting with <cc> → +<digits>
      11 digits starting with 0    → +<cc><digits without trunk 0>
      input already starting "+"   → unchanged
      anything else                → +<digits>

    Used for delivery only; OTP and user rows are keyed by the raw input.
    """
    raw = str(phone)
    digits = re.sub(r"\D", "", raw)
    if len(digits) == 10:
        return f"+{country_code}{digits}"
    if len(digits) == 10 + len(country_code) and digits.startswith(country_code):
        return f"+{digits}"
    if len(digits) == 11 and digits.startswith("0"):
        return f"+{country_code}{digits[1:]}"
    if raw.startswith("+"):
        return raw
    return f"+{digits}"


class SmsGateway:
    def __init__(self, settings: Settings):
        self.settings = settings
        self.outbox = deque(maxlen=OUTBOX_SIZE)

    @property
    def local_echo(self) -> bool:
        return self.settings.sms_local_echo or not self.settings.sms_transport_configured

    def send(self, to: str, body: str) -> DeliveryResult:
        if self.local_echo:
            return self._echo(to, body)
        return self._send_twilio(to, body)

    def _echo(self, to: str, body: str) -> DeliveryResult:
        self.outbox.append({"to": to, "body": body})
        logger.info(f"[LOCAL ECHO] to={to} :: {body}")
        return DeliveryResult(delivered=True, via_local_echo=True)

    def _send_twilio(self, to: str, body: str) -> DeliveryResult:
        settings = self.settings
        try:
            response = requests.post(
                TWILIO_MESSAGES_URL.format(sid=settings.twilio_account_sid),
                data={"To": to, "From": settings.twilio_from, "Body": body},
                auth=(settings.twilio_account_sid, settings.twilio_auth_token),
                timeout=settings.sms_timeout_seconds,
            )
        except requests.RequestException as e:
            logger.error(f"SMS request to {to} failed: {e}")
            return DeliveryResult(delivered=False, via_local_echo=False, error="sms_transport_unreachable")

        if 200 <= response.status_code < 300:
            logger.info(f"SMS sent to {to}")
            return DeliveryResult(delivered=True, via_local_echo=False)

        try:
            message = response.json().get("message") or "sms_send_failed"
        except ValueError:
            message = "sms_send_failed"
        logger.warning(f"SMS to {to} rejected. Status: {response.status_code}, Response: {response.text}")
        return DeliveryResult(delivered=False, via_local_echo=False, error=message)
