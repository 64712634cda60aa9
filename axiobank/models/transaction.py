"""
Transaction model for the account ledger.
"""

import uuid
from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Index, Numeric, String, Text, Uuid
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from axiobank.models.base import Base
from axiobank.models.enums import TransactionStatus, TransactionType
from axiobank.models.mixins import TimestampMixin


class Transaction(Base, TimestampMixin):
    """
    Single ledger entry on an account.

    Attributes:
        id: UUID primary key
        transaction_id: Human-facing id (e.g., "QKD42A9XZ1")
        account_id: Account the entry was posted to
        branch_id: Branch where it was processed
        transaction_type: TransactionType enum
        status: TransactionStatus enum
        amount: Positive amount of the entry
        balance_after: Account balance after posting
        description: Free-text description
        reference: External reference (cheque number, card reference, ...)
        processed_by: Staff user who processed the entry
        transaction_date: Business timestamp of the entry
    """

    __tablename__ = "transactions"

    transaction_id: Mapped[str] = mapped_column(
        String(20), nullable=False, unique=True, index=True
    )
    account_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("accounts.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    branch_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("branches.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    transaction_type: Mapped[TransactionType] = mapped_column(
        SQLEnum(TransactionType, name="transaction_type"),
        nullable=False,
        index=True,
    )
    status: Mapped[TransactionStatus] = mapped_column(
        SQLEnum(TransactionStatus, name="transaction_status"),
        nullable=False,
        default=TransactionStatus.COMPLETED,
        index=True,
    )

    amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    balance_after: Mapped[Decimal | None] = mapped_column(
        Numeric(15, 2), nullable=True
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    reference: Mapped[str | None] = mapped_column(String(100), nullable=True)

    processed_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    transaction_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        index=True,
    )

    __table_args__ = (
        Index("ix_transactions_account_date", "account_id", "transaction_date"),
    )

    def __repr__(self) -> str:
        return (
            f"Transaction(id={self.id}, transaction_id={self.transaction_id}, "
            f"type={self.transaction_type}, amount={self.amount})"
        )
