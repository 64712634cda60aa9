"""
Statement service for encrypted PDF account statements.

This module provides:
- Rendering of an account statement with reportlab
- AES-128 encryption of the PDF with pypdf (the user password is the
  last 4 digits of the account number; printing stays allowed)
- Delivery by email through EmailService, or return as base64
"""

import base64
import io
import logging
import re
import secrets
import uuid
from datetime import date, timedelta
from xml.sax.saxutils import escape

from pypdf import PdfReader, PdfWriter
from pypdf.constants import UserAccessPermissions
from reportlab.lib import colors
from reportlab.lib.pagesizes import LETTER
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from sqlalchemy.ext.asyncio import AsyncSession

from axiobank.core.config import settings
from axiobank.core.formatting import ensure_utc, start_of_day, to_money, utc_now
from axiobank.core.handlers import envelope
from axiobank.exceptions import (
    EmailDeliveryError,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
)
from axiobank.models import Account, AuditAction, AuditStatus, Customer, Transaction
from axiobank.models.enums import CREDIT_TRANSACTION_TYPES
from axiobank.repositories.account_repository import AccountRepository
from axiobank.repositories.customer_repository import CustomerRepository
from axiobank.repositories.transaction_repository import TransactionRepository
from axiobank.schemas.common import ApiResponse
from axiobank.schemas.statement import StatementLine, StatementRequest, StatementSummary
from axiobank.services.audit_service import AuditService
from axiobank.services.email_service import EmailService

logger = logging.getLogger(__name__)

_PHONE_NUMBER = re.compile(r"(\+?\d{6})(\d{3})(\d{3,4})")

_CREDIT_COLOR = colors.Color(76 / 255, 175 / 255, 80 / 255)
_DEBIT_COLOR = colors.Color(244 / 255, 67 / 255, 54 / 255)
_HEADER_COLOR = colors.Color(11 / 255, 61 / 255, 145 / 255)

SENT_MESSAGE = (
    "Statement has been sent successfully. "
    "The PDF is encrypted with the last 4 digits of your account number."
)
GENERATED_MESSAGE = (
    "Statement generated successfully. "
    "The PDF is encrypted with the last 4 digits of your account number."
)


def mask_phone_numbers(text: str) -> str:
    """
    Hide the middle digits of phone numbers embedded in free text.

    Example:
        >>> mask_phone_numbers("Transfer to +254712345678")
        'Transfer to +254712***678'
    """
    return _PHONE_NUMBER.sub(r"\1***\3", text or "")


def format_period(start_date: date, end_date: date) -> str:
    return f"{start_date:%b %d, %Y} - {end_date:%b %d, %Y}"


def build_statement_lines(
    transactions: list[Transaction],
) -> tuple[list[StatementLine], StatementSummary]:
    """Turn ledger rows into statement lines and their totals."""
    lines: list[StatementLine] = []
    summary = StatementSummary()
    for transaction in transactions:
        is_credit = transaction.transaction_type in CREDIT_TRANSACTION_TYPES
        amount = to_money(transaction.amount)
        if is_credit:
            summary.total_credits += amount
        else:
            summary.total_debits += amount
        lines.append(
            StatementLine(
                transaction_date=ensure_utc(transaction.transaction_date),
                description=mask_phone_numbers(transaction.description or ""),
                reference=transaction.reference or transaction.transaction_id,
                amount=amount,
                is_credit=is_credit,
                balance_after=transaction.balance_after,
            )
        )
    summary.transaction_count = len(lines)
    return lines, summary


def render_statement_pdf(
    customer: Customer,
    account: Account,
    start_date: date,
    end_date: date,
    lines: list[StatementLine],
    summary: StatementSummary,
) -> bytes:
    """Render an unencrypted statement PDF."""
    buffer = io.BytesIO()
    styles = getSampleStyleSheet()
    document = SimpleDocTemplate(
        buffer,
        pagesize=LETTER,
        title=f"{settings.bank_name} Account Statement",
        leftMargin=0.6 * inch,
        rightMargin=0.6 * inch,
    )

    story = [
        Paragraph(settings.bank_name.upper(), styles["Title"]),
        Paragraph("Account Statement", styles["Heading2"]),
        Paragraph(
            f"Statement Period: {start_date:%b %d, %Y} to {end_date:%b %d, %Y}",
            styles["Normal"],
        ),
        Spacer(1, 12),
    ]

    info = Table(
        [
            ["Account Holder:", customer.full_name],
            ["Email:", customer.email or ""],
            ["Account Number:", account.account_number],
            ["Account Type:", account.account_type.value],
            ["Current Balance:", f"${to_money(account.balance):,}"],
            ["Statement Date:", f"{utc_now():%b %d, %Y}"],
        ],
        colWidths=[1.6 * inch, 4.5 * inch],
    )
    info.setStyle(TableStyle([("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold")]))
    story += [info, Spacer(1, 12), Paragraph("Transaction History", styles["Heading2"])]

    rows = [["Date & Time", "Description", "Reference", "Amount", "Balance"]]
    table_style = [
        ("BACKGROUND", (0, 0), (-1, 0), _HEADER_COLOR),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 8),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
    ]
    for index, line in enumerate(lines, start=1):
        sign = "+" if line.is_credit else "-"
        balance = "" if line.balance_after is None else f"${to_money(line.balance_after):,}"
        rows.append(
            [
                f"{line.transaction_date:%b %d, %Y %H:%M}",
                Paragraph(escape(line.description), styles["BodyText"]),
                line.reference,
                f"{sign}${line.amount:,}",
                balance,
            ]
        )
        table_style.append(
            ("TEXTCOLOR", (3, index), (3, index), _CREDIT_COLOR if line.is_credit else _DEBIT_COLOR)
        )
    if not lines:
        rows.append(["", "No transactions in this period", "", "", ""])

    transactions_table = Table(
        rows,
        colWidths=[1.3 * inch, 2.5 * inch, 1.2 * inch, 1.0 * inch, 1.0 * inch],
        repeatRows=1,
    )
    transactions_table.setStyle(TableStyle(table_style))
    story += [transactions_table, Spacer(1, 12), Paragraph("Statement Summary", styles["Heading2"])]

    net_change = summary.net_change
    net_sign = "+" if net_change >= 0 else "-"
    summary_table = Table(
        [
            ["Total Credits:", f"+${summary.total_credits:,}"],
            ["Total Debits:", f"-${summary.total_debits:,}"],
            ["Net Change:", f"{net_sign}${abs(net_change):,}"],
            ["Transactions:", str(summary.transaction_count)],
        ],
        colWidths=[1.6 * inch, 2.0 * inch],
    )
    summary_table.setStyle(
        TableStyle(
            [
                ("FONTNAME", (0, 0), (-1, -1), "Helvetica-Bold"),
                ("TEXTCOLOR", (1, 0), (1, 0), _CREDIT_COLOR),
                ("TEXTCOLOR", (1, 1), (1, 1), _DEBIT_COLOR),
            ]
        )
    )
    story += [
        summary_table,
        Spacer(1, 24),
        Paragraph(
            "This is a computer-generated statement and does not require a signature. "
            f"For inquiries, contact us at {settings.support_email} or call "
            f"{settings.support_phone}.",
            styles["Italic"],
        ),
    ]

    document.build(story)
    return buffer.getvalue()


def encrypt_pdf(pdf_bytes: bytes, password: str) -> bytes:
    """
    Encrypt a PDF with AES-128, allowing printing only.

    The owner password is random, so permissions cannot be lifted with
    the user password.
    """
    writer = PdfWriter(clone_from=PdfReader(io.BytesIO(pdf_bytes)))
    writer.encrypt(
        user_password=password,
        owner_password=secrets.token_urlsafe(16),
        permissions_flag=UserAccessPermissions.PRINT,
        algorithm="AES-128",
    )
    output = io.BytesIO()
    writer.write(output)
    return output.getvalue()


class StatementService:
    """
    Service generating account statements.

    Error codes reported in the envelope:
        CUSTOMER_NOT_FOUND, ACCOUNT_NOT_FOUND, EMAIL_NOT_FOUND,
        EMAIL_SEND_FAILED, STATEMENT_GENERATION_ERROR
    """

    def __init__(self, session: AsyncSession, email_service: EmailService | None = None):
        self.session = session
        self.customer_repo = CustomerRepository(session)
        self.account_repo = AccountRepository(session)
        self.transaction_repo = TransactionRepository(session)
        self.audit_service = AuditService(session)
        self.email_service = email_service or EmailService()

    async def _resolve_customer(self, customer_id: str) -> Customer:
        try:
            customer_uuid = uuid.UUID(customer_id)
        except ValueError:
            raise NotFoundError("Customer", error_code="CUSTOMER_NOT_FOUND") from None
        customer = await self.customer_repo.get_by_id(customer_uuid)
        if customer is None:
            raise NotFoundError("Customer", error_code="CUSTOMER_NOT_FOUND")
        return customer

    async def _resolve_account(self, customer: Customer, account_id: str) -> Account:
        try:
            account_uuid = uuid.UUID(account_id)
        except ValueError:
            # Not an id: fall back to the customer's first account
            accounts = await self.account_repo.get_by_customer(customer.id)
            if not accounts:
                raise NotFoundError("Account", error_code="ACCOUNT_NOT_FOUND") from None
            return accounts[0]

        account = await self.account_repo.get_by_id(account_uuid)
        if account is None or account.customer_id != customer.id:
            raise NotFoundError("Account", error_code="ACCOUNT_NOT_FOUND")
        return account

    @envelope("Failed to generate statement", error_code="STATEMENT_GENERATION_ERROR")
    async def generate_and_send_statement(
        self,
        request: StatementRequest,
        requested_by: uuid.UUID | None = None,
    ) -> ApiResponse[str]:
        """
        Generate an encrypted statement and email it or return it.

        Args:
            request: Customer, account, period and delivery options
            requested_by: Staff user requesting the statement

        Returns:
            ApiResponse whose data is the base64 PDF when not emailing

        Example:
            response = await service.generate_and_send_statement(
                StatementRequest(
                    customer_id=str(customer.id),
                    account_id=str(account.id),
                    start_date=date(2024, 1, 1),
                    end_date=date(2024, 1, 31),
                    send_email=False,
                )
            )
            pdf = base64.b64decode(response.data)
        """
        # 1. Resolve customer and account
        customer = await self._resolve_customer(request.customer_id)
        account = await self._resolve_account(customer, request.account_id)

        recipient = request.email or customer.email
        if request.send_email and not recipient:
            raise ValidationError(
                "No email address found for customer", error_code="EMAIL_NOT_FOUND"
            )

        # 2. Load the period's transactions
        transactions = await self.transaction_repo.get_for_account_between(
            account.id,
            start_of_day(request.start_date),
            start_of_day(request.end_date + timedelta(days=1)),
        )
        lines, summary = build_statement_lines(transactions)

        # 3. Render and encrypt
        pdf_bytes = render_statement_pdf(
            customer, account, request.start_date, request.end_date, lines, summary
        )
        encrypted = encrypt_pdf(pdf_bytes, account.account_number[-4:])
        description = (
            f"Statement for account {account.account_number} "
            f"({format_period(request.start_date, request.end_date)})"
        )

        # 4. Deliver, then record what actually happened
        if not request.send_email:
            await self._audit_export(
                requested_by, account, description, summary, emailed=False
            )
            await self.session.commit()
            return ApiResponse.ok(
                base64.b64encode(encrypted).decode("ascii"),
                message=GENERATED_MESSAGE,
            )

        try:
            await self.email_service.send_statement_email(
                recipient,
                customer_name=customer.full_name,
                account_number=account.account_number,
                period=format_period(request.start_date, request.end_date),
                pdf_bytes=encrypted,
            )
        except ExternalServiceError as exc:
            await self._audit_export(
                requested_by,
                account,
                description,
                summary,
                emailed=False,
                status=AuditStatus.FAILURE,
                error_message=exc.message,
            )
            await self.session.commit()
            raise EmailDeliveryError(
                "Statement generated but failed to send email"
            ) from exc

        await self._audit_export(requested_by, account, description, summary, emailed=True)
        await self.session.commit()
        logger.info(f"Statement for account {account.account_number} sent")
        return ApiResponse.ok("Statement sent successfully", message=SENT_MESSAGE)

    async def _audit_export(
        self,
        requested_by: uuid.UUID | None,
        account: Account,
        description: str,
        summary: StatementSummary,
        emailed: bool,
        status: AuditStatus = AuditStatus.SUCCESS,
        error_message: str | None = None,
    ) -> None:
        await self.audit_service.log_event(
            user_id=requested_by,
            action=AuditAction.EXPORT,
            entity_type="account",
            entity_id=account.id,
            description=description,
            branch_id=account.branch_id,
            status=status,
            error_message=error_message,
            extra_metadata={
                "transaction_count": summary.transaction_count,
                "emailed": emailed,
            },
        )
