"""
SMS gateway client.

Sends text messages through Africa's Talking or Twilio, chosen by the
SMS_PROVIDER setting. Sending never raises: transport and provider
failures come back as an unsuccessful SmsResult.
"""

import logging

import httpx

from axiobank.core.config import settings
from axiobank.schemas.gateway import SmsResult

logger = logging.getLogger(__name__)

AFRICAS_TALKING = "africas_talking"
TWILIO = "twilio"

MAX_SMS_LENGTH = 160

_PRIORITY_PREFIXES = {
    "URGENT": "[URGENT] ",
    "HIGH": "[IMPORTANT] ",
}


def format_notification(title: str, message: str, priority: str = "MEDIUM") -> str:
    """
    Build the body of a notification SMS.

    Example:
        >>> format_notification("Card blocked", "Call us", "URGENT")
        '[URGENT] Card blocked: Call us - AxioBank'
    """
    prefix = _PRIORITY_PREFIXES.get(getattr(priority, "value", priority), "")
    body = f"{prefix}{title}: {message} - {settings.bank_name}"
    if len(body) > MAX_SMS_LENGTH:
        body = body[: MAX_SMS_LENGTH - 3] + "..."
    return body


class SmsService:
    """
    Async SMS client.

    Args:
        client: httpx client to send with (default: a new AsyncClient)
        provider: "africas_talking" or "twilio" (default: settings.sms_provider)
    """

    def __init__(self, client: httpx.AsyncClient | None = None, provider: str | None = None):
        self.provider = provider or settings.sms_provider
        self.client = client or httpx.AsyncClient(timeout=settings.sms_timeout_seconds)

    async def aclose(self) -> None:
        await self.client.aclose()

    async def send_sms(self, phone: str, message: str) -> SmsResult:
        """
        Send one SMS.

        Args:
            phone: Recipient number
            message: Text to send

        Returns:
            SmsResult; success is False on any failure
        """
        try:
            if self.provider == TWILIO:
                return await self._send_via_twilio(phone, message)
            return await self._send_via_africas_talking(phone, message)
        except (httpx.HTTPError, ValueError, KeyError) as exc:
            logger.error(f"SMS to {phone} via {self.provider} failed: {exc}")
            return SmsResult(
                success=False,
                provider=self.provider,
                recipient=phone,
                error=str(exc),
            )

    async def _send_via_africas_talking(self, phone: str, message: str) -> SmsResult:
        recipient = phone if phone.startswith("+") else f"+{phone}"
        form = {
            "username": settings.africas_talking_username,
            "to": recipient,
            "message": message,
        }
        if settings.africas_talking_sender_id:
            form["from"] = settings.africas_talking_sender_id

        response = await self.client.post(
            settings.africas_talking_url,
            data=form,
            headers={
                "apiKey": settings.africas_talking_api_key,
                "Accept": "application/json",
            },
        )
        response.raise_for_status()

        recipients = response.json().get("SMSMessageData", {}).get("Recipients", [])
        delivered = next((r for r in recipients if r.get("status") == "Success"), None)
        if delivered is None:
            status = recipients[0].get("status") if recipients else "No recipients"
            logger.warning(f"Africa's Talking rejected SMS to {recipient}: {status}")
            return SmsResult(
                success=False,
                provider=AFRICAS_TALKING,
                recipient=recipient,
                error=status,
            )

        logger.info(f"SMS sent to {recipient} via Africa's Talking")
        return SmsResult(
            success=True,
            provider=AFRICAS_TALKING,
            recipient=recipient,
            message_id=delivered.get("messageId"),
        )

    async def _send_via_twilio(self, phone: str, message: str) -> SmsResult:
        url = (
            f"{settings.twilio_base_url}/Accounts/"
            f"{settings.twilio_account_sid}/Messages.json"
        )
        response = await self.client.post(
            url,
            data={"From": settings.twilio_from_number, "To": phone, "Body": message},
            auth=(settings.twilio_account_sid, settings.twilio_auth_token),
        )
        if not response.is_success:
            logger.warning(f"Twilio returned {response.status_code} for SMS to {phone}")
            return SmsResult(
                success=False,
                provider=TWILIO,
                recipient=phone,
                error=f"HTTP {response.status_code}: {response.text}",
            )

        logger.info(f"SMS sent to {phone} via Twilio")
        return SmsResult(
            success=True,
            provider=TWILIO,
            recipient=phone,
            message_id=response.json().get("sid"),
        )

    async def send_bulk_sms(self, phone_numbers: list[str], message: str) -> tuple[int, int]:
        """
        Send the same message to many numbers, one request each.

        Returns:
            (success_count, failure_count)
        """
        successes = 0
        for phone in phone_numbers:
            result = await self.send_sms(phone, message)
            if result.success:
                successes += 1
        return successes, len(phone_numbers) - successes

    async def send_notification_sms(
        self,
        phone: str,
        title: str,
        message: str,
        priority: str = "MEDIUM",
    ) -> SmsResult:
        return await self.send_sms(phone, format_notification(title, message, priority))
