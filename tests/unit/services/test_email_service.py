"""
Unit tests for EmailService.

aiosmtplib.send is replaced with an AsyncMock; no SMTP server is contacted.
"""

from unittest.mock import AsyncMock

import aiosmtplib
import pytest

from axiobank.exceptions import ExternalServiceError
from axiobank.services import email_service as email_module
from axiobank.services.email_service import EmailService


@pytest.fixture
def smtp_send(monkeypatch):
    send = AsyncMock(return_value=({}, "OK"))
    monkeypatch.setattr(email_module.aiosmtplib, "send", send)
    return send


def _attachments(message):
    return {
        part.get_filename(): part.get_payload(decode=True)
        for part in message.walk()
        if part.get_filename()
    }


@pytest.mark.asyncio
class TestEmailService:
    async def test_send_email(self, smtp_send):
        service = EmailService(hostname="mail.test", port=2525, username="", password="")

        message_id = await service.send_email(
            "jordan.blake@example.com", "Hello", "<p>Hi</p>", text="Hi"
        )

        smtp_send.assert_awaited_once()
        message = smtp_send.call_args.args[0]
        assert message["To"] == "jordan.blake@example.com"
        assert message["Subject"] == "Hello"
        assert message["Message-ID"] == message_id
        assert smtp_send.call_args.kwargs["hostname"] == "mail.test"
        assert smtp_send.call_args.kwargs["port"] == 2525
        assert smtp_send.call_args.kwargs["username"] is None

    async def test_send_statement_email_attaches_pdf(self, smtp_send):
        service = EmailService()

        await service.send_statement_email(
            "jordan.blake@example.com",
            customer_name="Jordan Blake",
            account_number="7654321",
            period="Jan 01, 2024 - Jan 31, 2024",
            pdf_bytes=b"%PDF-1.4 test",
        )

        message = smtp_send.call_args.args[0]
        assert "Jan 01, 2024 - Jan 31, 2024" in message["Subject"]
        assert _attachments(message) == {"statement_4321.pdf": b"%PDF-1.4 test"}

        text_part = next(
            part for part in message.walk() if part.get_content_type() == "text/plain"
        )
        body = text_part.get_payload(decode=True).decode("utf-8")
        assert "Dear Jordan Blake" in body
        assert "account ending 4321" in body

    async def test_smtp_failure_raises_external_service_error(self, smtp_send):
        smtp_send.side_effect = aiosmtplib.SMTPException("connection refused")

        with pytest.raises(ExternalServiceError) as exc_info:
            await EmailService().send_email("x@example.com", "Hi", "<p>Hi</p>")

        assert exc_info.value.error_code == "EMAIL_SEND_FAILED"
