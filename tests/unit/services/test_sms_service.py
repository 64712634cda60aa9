"""
Unit tests for SmsService.

HTTP traffic goes through httpx.MockTransport handlers.
"""

from urllib.parse import parse_qs

import httpx
import pytest

from axiobank.services.sms_service import (
    AFRICAS_TALKING,
    MAX_SMS_LENGTH,
    TWILIO,
    SmsService,
    format_notification,
)


def _service(handler, provider=AFRICAS_TALKING) -> SmsService:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return SmsService(client=client, provider=provider)


def _form(request: httpx.Request) -> dict[str, str]:
    return {key: values[0] for key, values in parse_qs(request.content.decode()).items()}


class TestFormatNotification:
    def test_priority_prefixes(self):
        assert format_notification("Card blocked", "Call us", "URGENT") == (
            "[URGENT] Card blocked: Call us - AxioBank"
        )
        assert format_notification("Reminder", "Loan due", "HIGH").startswith("[IMPORTANT] ")
        assert format_notification("Info", "Hello", "LOW") == "Info: Hello - AxioBank"

    def test_long_messages_are_truncated(self):
        body = format_notification("Notice", "x" * 300)

        assert len(body) == MAX_SMS_LENGTH
        assert body.endswith("...")


@pytest.mark.asyncio
class TestSmsService:
    async def test_africas_talking_success(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["request"] = request
            return httpx.Response(
                201,
                json={
                    "SMSMessageData": {
                        "Recipients": [{"status": "Success", "messageId": "ATXid_1"}]
                    }
                },
            )

        service = _service(handler)
        result = await service.send_sms("254712345678", "Hello")
        await service.aclose()

        assert result.success is True
        assert result.message_id == "ATXid_1"
        assert result.recipient == "+254712345678"
        form = _form(captured["request"])
        assert form["to"] == "+254712345678"
        assert form["message"] == "Hello"
        assert form["username"] == "sandbox"

    async def test_africas_talking_rejected_recipient(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                201,
                json={"SMSMessageData": {"Recipients": [{"status": "InvalidPhoneNumber"}]}},
            )

        result = await _service(handler).send_sms("+2540", "Hello")

        assert result.success is False
        assert result.error == "InvalidPhoneNumber"

    async def test_africas_talking_http_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, text="bad key")

        result = await _service(handler).send_sms("+254712345678", "Hello")

        assert result.success is False
        assert result.provider == AFRICAS_TALKING

    async def test_transport_error_is_reported(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        result = await _service(handler).send_sms("+254712345678", "Hello")

        assert result.success is False
        assert "unreachable" in result.error

    async def test_twilio_success(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["request"] = request
            return httpx.Response(201, json={"sid": "SM123"})

        result = await _service(handler, provider=TWILIO).send_sms("+15550001111", "Hi")

        assert result.success is True
        assert result.message_id == "SM123"
        request = captured["request"]
        assert request.url.path.endswith("/Messages.json")
        assert request.headers["Authorization"].startswith("Basic ")
        assert _form(request)["Body"] == "Hi"

    async def test_twilio_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, text="invalid number")

        result = await _service(handler, provider=TWILIO).send_sms("+1", "Hi")

        assert result.success is False
        assert result.error == "HTTP 400: invalid number"

    async def test_send_bulk_sms_counts(self):
        def handler(request: httpx.Request) -> httpx.Response:
            status = "Success" if "%2B111" in request.content.decode() else "Failed"
            return httpx.Response(
                201, json={"SMSMessageData": {"Recipients": [{"status": status}]}}
            )

        counts = await _service(handler).send_bulk_sms(["+111", "+222", "+1119"], "Hi")

        assert counts == (2, 1)

    async def test_send_notification_sms(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["form"] = _form(request)
            return httpx.Response(
                201, json={"SMSMessageData": {"Recipients": [{"status": "Success"}]}}
            )

        result = await _service(handler).send_notification_sms(
            "+254712345678", "Alert", "Login detected", "HIGH"
        )

        assert result.success is True
        assert captured["form"]["message"] == "[IMPORTANT] Alert: Login detected - AxioBank"
