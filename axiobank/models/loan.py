"""
Loan models: LoanApplication (pre-approval) and Loan (booked loan).
"""

import uuid
from datetime import UTC, date, datetime
from decimal import Decimal

from sqlalchemy import Date, DateTime, ForeignKey, Integer, Numeric, String, Text, Uuid
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from axiobank.models.base import Base
from axiobank.models.enums import LoanStatus, LoanType
from axiobank.models.mixins import TimestampMixin


class LoanApplication(Base, TimestampMixin):
    """
    Loan application awaiting a credit decision.

    APPLIED and UNDER_REVIEW applications appear in the workflow queue.
    """

    __tablename__ = "loan_applications"

    application_number: Mapped[str] = mapped_column(
        String(30), nullable=False, unique=True
    )
    customer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("customers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    branch_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("branches.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    loan_type: Mapped[LoanType] = mapped_column(
        SQLEnum(LoanType, name="loan_type"),
        nullable=False,
    )
    requested_amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    term_months: Mapped[int] = mapped_column(Integer, nullable=False, default=12)
    purpose: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[LoanStatus] = mapped_column(
        SQLEnum(LoanStatus, name="loan_status"),
        nullable=False,
        default=LoanStatus.APPLIED,
        index=True,
    )
    application_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )
    reviewed_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    reviewed_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)


class Loan(Base, TimestampMixin):
    """Booked loan with its outstanding balance."""

    __tablename__ = "loans"

    loan_number: Mapped[str] = mapped_column(String(30), nullable=False, unique=True)
    customer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("customers.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    branch_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("branches.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    application_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("loan_applications.id", ondelete="SET NULL"),
        nullable=True,
    )
    loan_type: Mapped[LoanType] = mapped_column(
        SQLEnum(LoanType, name="loan_type"),
        nullable=False,
    )
    principal_amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    outstanding_balance: Mapped[Decimal] = mapped_column(
        Numeric(15, 2), nullable=False
    )
    interest_rate: Mapped[Decimal] = mapped_column(
        Numeric(7, 4), nullable=False, default=Decimal("0.0000")
    )
    term_months: Mapped[int] = mapped_column(Integer, nullable=False, default=12)
    status: Mapped[LoanStatus] = mapped_column(
        SQLEnum(LoanStatus, name="loan_status"),
        nullable=False,
        default=LoanStatus.ACTIVE,
        index=True,
    )
    disbursement_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    maturity_date: Mapped[date | None] = mapped_column(Date, nullable=True)
