"""
Account model for deposit, credit and loan accounts.

Each account belongs to exactly one customer and is serviced by a branch.
"""

import uuid
from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Numeric, String, Uuid
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from axiobank.models.base import Base
from axiobank.models.enums import AccountStatus, AccountType
from axiobank.models.mixins import SoftDeleteMixin, TimestampMixin


class Account(Base, TimestampMixin, SoftDeleteMixin):
    """
    Customer bank account.

    Attributes:
        id: UUID primary key
        account_number: Unique 7-digit account number
        customer_id: Owning customer (RESTRICT on delete)
        branch_id: Servicing branch
        account_type: AccountType enum
        status: AccountStatus enum
        nickname: Optional display name chosen by the customer
        balance: Ledger balance
        available_balance: Balance available for withdrawal
        minimum_balance: Minimum balance before fees apply
        interest_rate: Annual rate as a fraction (0.0125 = 1.25%)
        credit_limit: Credit line (CREDIT accounts)
        currency: ISO 4217 code
        opened_date: When the account was opened
        closed_date: When the account was closed (CLOSED accounts only)
        last_transaction_date: Last balance change
    """

    __tablename__ = "accounts"

    account_number: Mapped[str] = mapped_column(
        String(20), nullable=False, unique=True, index=True
    )
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

    account_type: Mapped[AccountType] = mapped_column(
        SQLEnum(AccountType, name="account_type"),
        nullable=False,
    )
    status: Mapped[AccountStatus] = mapped_column(
        SQLEnum(AccountStatus, name="account_status"),
        nullable=False,
        default=AccountStatus.ACTIVE,
        index=True,
    )
    nickname: Mapped[str | None] = mapped_column(String(100), nullable=True)

    balance: Mapped[Decimal] = mapped_column(
        Numeric(15, 2), nullable=False, default=Decimal("0.00")
    )
    available_balance: Mapped[Decimal] = mapped_column(
        Numeric(15, 2), nullable=False, default=Decimal("0.00")
    )
    minimum_balance: Mapped[Decimal] = mapped_column(
        Numeric(15, 2), nullable=False, default=Decimal("0.00")
    )
    interest_rate: Mapped[Decimal] = mapped_column(
        Numeric(7, 4), nullable=False, default=Decimal("0.0000")
    )
    credit_limit: Mapped[Decimal | None] = mapped_column(
        Numeric(15, 2), nullable=True
    )
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")

    opened_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )
    closed_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    last_transaction_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        return (
            f"Account(id={self.id}, account_number={self.account_number}, "
            f"type={self.account_type}, status={self.status})"
        )
