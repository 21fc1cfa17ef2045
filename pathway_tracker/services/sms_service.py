"""
SMS delivery through the Twilio REST API.
"""

from __future__ import annotations

import httpx
import structlog

from pathway_tracker.core.config import settings

logger = structlog.get_logger()


class SMSService:
    def __init__(self) -> None:
        self.account_sid = settings.TWILIO_ACCOUNT_SID
        self.auth_token = settings.TWILIO_AUTH_TOKEN
        self.from_number = settings.TWILIO_PHONE_NUMBER
        self.api_base_url = settings.TWILIO_API_BASE_URL.rstrip("/")
        self.logger = logger.bind(component="sms_service")

    def is_configured(self) -> bool:
        return bool(self.account_sid and self.auth_token and self.from_number)

    async def send_sms(self, *, to: str, body: str) -> None:
        """
        Send one SMS

        Without Twilio credentials the message is only logged (simulation mode).

        Raises:
            RuntimeError: If Twilio rejects the message or cannot be reached
        """
        if not self.is_configured():
            self.logger.info("SMS simulation mode, message not delivered", to=to, length=len(body))
            return

        url = f"{self.api_base_url}/Accounts/{self.account_sid}/Messages.json"
        try:
            async with httpx.AsyncClient(timeout=httpx.Timeout(15.0)) as client:
                response = await client.post(
                    url,
                    data={"To": to, "From": self.from_number, "Body": body},
                    auth=(self.account_sid, self.auth_token),
                )
                response.raise_for_status()
        except httpx.HTTPError as exc:
            self.logger.error("SMS send failed", to=to, error=str(exc))
            raise RuntimeError(f"Failed to send SMS: {exc}") from exc

        self.logger.info("SMS sent", to=to, sid=response.json().get("sid"))


sms_service = SMSService()
