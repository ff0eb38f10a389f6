"""
Tracking-number SMS via the Twilio Messages API.

Fire-and-forget from the caller's point of view: one POST, no retry. Every
failure surfaces as ProviderError so the order edit it rides along with is
never blocked.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from ..errors import ProviderError
from ..validation import ValidationError

logger = logging.getLogger(__name__)

SHOP_NAME = "SportsTech"


def build_message(customer_name: Optional[str], tracking_number: str, item_summary: Optional[str] = None) -> str:
    items = f"Items: {item_summary}" if item_summary else ""
    return (
        f"Hi {customer_name or 'there'}! Your {SHOP_NAME} order is on the way.\n"
        f"Tracking Number: {tracking_number}\n"
        f"{items}\n"
        f"\n"
        f"Thank you for your purchase!\n"
        f"- {SHOP_NAME} Team"
    )


class SmsNotifier:
    def __init__(
        self,
        account_sid: Optional[str],
        auth_token: Optional[str],
        from_number: Optional[str],
        *,
        api_base: str = "https://api.twilio.com/2010-04-01",
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_config(cls, config, transport: Optional[httpx.BaseTransport] = None) -> "SmsNotifier":
        return cls(
            config.get("TWILIO_ACCOUNT_SID"),
            config.get("TWILIO_AUTH_TOKEN"),
            config.get("TWILIO_PHONE_NUMBER"),
            api_base=config.get("TWILIO_API_BASE", "https://api.twilio.com/2010-04-01"),
            timeout=config.get("HTTP_TIMEOUT_SECONDS", 10.0),
            transport=transport,
        )

    @property
    def configured(self) -> bool:
        return bool(self.account_sid and self.auth_token and self.from_number)

    def send_tracking_notification(
        self,
        phone_number: str,
        customer_name: Optional[str],
        tracking_number: str,
        item_summary: Optional[str] = None,
    ) -> str:
        """Send the shipped-order SMS and return the provider message id."""
        if not phone_number or not tracking_number:
            raise ValidationError("Missing phone number or tracking number")
        if not self.configured:
            raise ProviderError("SMS provider credentials not configured")

        url = f"{self.api_base}/Accounts/{self.account_sid}/Messages.json"
        form = {
            "To": phone_number,
            "From": self.from_number,
            "Body": build_message(customer_name, tracking_number, item_summary),
        }

        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                resp = client.post(url, data=form, auth=(self.account_sid, self.auth_token))
        except httpx.HTTPError as exc:
            logger.warning("SMS request to %s failed: %s", phone_number, exc)
            raise ProviderError(f"SMS provider unreachable: {exc}")

        try:
            data = resp.json()
        except ValueError:
            data = {}

        if resp.is_error:
            message = data.get("message") if isinstance(data, dict) else None
            logger.warning("SMS provider rejected message (%s): %s", resp.status_code, message)
            raise ProviderError(
                f"SMS provider: {message or resp.reason_phrase}",
                details={"status_code": resp.status_code, "response": data},
            )

        sid = data.get("sid") if isinstance(data, dict) else None
        logger.info("Tracking SMS sent to %s (sid=%s)", phone_number, sid)
        return sid
