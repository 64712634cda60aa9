"""
Email service for statement delivery.

Sends MIME messages over SMTP with aiosmtplib. Message bodies are
rendered from jinja2 templates shipped in axiobank/templates.
"""

import logging
from email.mime.application import MIMEApplication
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, make_msgid
from typing import Any

import aiosmtplib
from jinja2 import Environment, PackageLoader, select_autoescape

from axiobank.core.config import settings
from axiobank.exceptions import EmailDeliveryError

logger = logging.getLogger(__name__)

_templates = Environment(
    loader=PackageLoader("axiobank", "templates"),
    autoescape=select_autoescape(["html"]),
)


class EmailService:
    """Service for sending emails via SMTP."""

    def __init__(
        self,
        hostname: str | None = None,
        port: int | None = None,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool | None = None,
    ) -> None:
        self.hostname = hostname or settings.smtp_host
        self.port = port or settings.smtp_port
        self.username = username if username is not None else settings.smtp_username
        self.password = password if password is not None else settings.smtp_password
        self.use_tls = settings.smtp_use_tls if use_tls is None else use_tls
        self.from_address = formataddr((settings.smtp_from_name, settings.smtp_from_email))

    def _build_message(
        self,
        to: str,
        subject: str,
        html: str,
        text: str | None,
        attachments: list[dict[str, Any]] | None,
    ) -> MIMEMultipart:
        message = MIMEMultipart("mixed")
        message["From"] = self.from_address
        message["To"] = to
        message["Subject"] = subject
        message["Message-ID"] = make_msgid(domain=settings.smtp_from_email.split("@")[-1])

        body = MIMEMultipart("alternative")
        if text:
            body.attach(MIMEText(text, "plain", "utf-8"))
        body.attach(MIMEText(html, "html", "utf-8"))
        message.attach(body)

        for attachment in attachments or []:
            part = MIMEApplication(
                attachment["content"],
                _subtype=attachment.get("subtype", "octet-stream"),
            )
            part.add_header(
                "Content-Disposition", "attachment", filename=attachment["filename"]
            )
            message.attach(part)
        return message

    async def send_email(
        self,
        to: str,
        subject: str,
        html: str,
        text: str | None = None,
        attachments: list[dict[str, Any]] | None = None,
    ) -> str:
        """
        Send an email via SMTP.

        Args:
            to: Recipient address
            subject: Subject line
            html: HTML body
            text: Optional plain-text alternative
            attachments: Optional list of {"filename", "content", "subtype"} dicts

        Returns:
            Message-ID of the sent message

        Raises:
            EmailDeliveryError: If the SMTP exchange fails
        """
        message = self._build_message(to, subject, html, text, attachments)
        try:
            await aiosmtplib.send(
                message,
                hostname=self.hostname,
                port=self.port,
                username=self.username or None,
                password=self.password or None,
                start_tls=self.use_tls,
            )
        except (aiosmtplib.SMTPException, OSError) as exc:
            logger.error(f"Failed to send email to {to}: {exc}")
            raise EmailDeliveryError(f"Failed to send email: {exc}") from exc

        logger.info(f"Email sent to {to}: {subject}")
        return message["Message-ID"]

    async def send_statement_email(
        self,
        to: str,
        customer_name: str,
        account_number: str,
        period: str,
        pdf_bytes: bytes,
    ) -> str:
        """Send an encrypted statement PDF as statement_<last4>.pdf."""
        last4 = account_number[-4:]
        context = {
            "bank_name": settings.bank_name,
            "customer_name": customer_name,
            "account_last4": last4,
            "period": period,
            "support_email": settings.support_email,
            "support_phone": settings.support_phone,
        }
        html = _templates.get_template("statement_email.html").render(**context)
        text = _templates.get_template("statement_email.txt").render(**context)
        return await self.send_email(
            to,
            subject=f"{settings.bank_name} account statement ({period})",
            html=html,
            text=text,
            attachments=[
                {
                    "filename": f"statement_{last4}.pdf",
                    "content": pdf_bytes,
                    "subtype": "pdf",
                }
            ],
        )
