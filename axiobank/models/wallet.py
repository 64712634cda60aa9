"""
Master wallet models.

Master wallets hold the bank's own funds (main vault, branch allocations,
reserves, fee income). Every balance movement is recorded as a
MasterWalletTransaction with its balance before and after, so a
reconciliation can compare the ledger with the wallet.
"""

import uuid
from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
)
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from axiobank.models.base import Base
from axiobank.models.enums import (
    AlertSeverity,
    AllocationStatus,
    MasterWalletTransactionType,
    MasterWalletType,
    ReconciliationStatus,
    RiskLevel,
    SecurityAlertType,
    TransactionStatus,
    WalletSecurityLevel,
    WalletStatus,
)
from axiobank.models.mixins import TimestampMixin


class MasterWallet(Base, TimestampMixin):
    """
    Bank-owned wallet.

    Attributes:
        wallet_name: Display name
        wallet_code: Unique code (e.g., "MV-001")
        wallet_type: MasterWalletType enum
        status: WalletStatus enum
        security_level: WalletSecurityLevel enum
        balance: Ledger balance
        available_balance: Balance not held in reserve
        reserve_balance: Balance held in reserve
        currency: ISO 4217 code
        daily_limit: Optional daily movement limit
        branch_id: Branch for BRANCH_ALLOCATION wallets
        last_reconciliation: When the wallet was last reconciled
    """

    __tablename__ = "master_wallets"

    wallet_name: Mapped[str] = mapped_column(String(100), nullable=False)
    wallet_code: Mapped[str] = mapped_column(String(30), nullable=False, unique=True)
    wallet_type: Mapped[MasterWalletType] = mapped_column(
        SQLEnum(MasterWalletType, name="master_wallet_type"),
        nullable=False,
        index=True,
    )
    status: Mapped[WalletStatus] = mapped_column(
        SQLEnum(WalletStatus, name="wallet_status"),
        nullable=False,
        default=WalletStatus.ACTIVE,
    )
    security_level: Mapped[WalletSecurityLevel] = mapped_column(
        SQLEnum(WalletSecurityLevel, name="wallet_security_level"),
        nullable=False,
        default=WalletSecurityLevel.HIGH,
    )

    balance: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), nullable=False, default=Decimal("0.00")
    )
    available_balance: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), nullable=False, default=Decimal("0.00")
    )
    reserve_balance: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), nullable=False, default=Decimal("0.00")
    )
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    daily_limit: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)

    branch_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("branches.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_reconciliation: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class MasterWalletTransaction(Base):
    """
    Immutable balance movement on a master wallet.

    amount is always positive; the direction follows from transaction_type.
    """

    __tablename__ = "master_wallet_transactions"

    transaction_reference: Mapped[str] = mapped_column(
        String(30), nullable=False, unique=True
    )
    wallet_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("master_wallets.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    transaction_type: Mapped[MasterWalletTransactionType] = mapped_column(
        SQLEnum(MasterWalletTransactionType, name="master_wallet_transaction_type"),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    balance_before: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    balance_after: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    risk_score: Mapped[int] = mapped_column(Integer, nullable=False, default=20)
    risk_level: Mapped[RiskLevel] = mapped_column(
        SQLEnum(RiskLevel, name="risk_level"),
        nullable=False,
        default=RiskLevel.LOW,
    )
    status: Mapped[TransactionStatus] = mapped_column(
        SQLEnum(TransactionStatus, name="transaction_status"),
        nullable=False,
        default=TransactionStatus.COMPLETED,
    )
    performed_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        index=True,
    )


class FloatAllocation(Base, TimestampMixin):
    """Float handed from a master wallet to a branch."""

    __tablename__ = "float_allocations"

    wallet_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("master_wallets.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    branch_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("branches.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    allocated_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    utilized_amount: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), nullable=False, default=Decimal("0.00")
    )
    status: Mapped[AllocationStatus] = mapped_column(
        SQLEnum(AllocationStatus, name="allocation_status"),
        nullable=False,
        default=AllocationStatus.ACTIVE,
        index=True,
    )
    purpose: Mapped[str | None] = mapped_column(Text, nullable=True)
    allocated_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    expiry_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class WalletSecurityAlert(Base, TimestampMixin):
    """Security alert raised on master wallet activity."""

    __tablename__ = "wallet_security_alerts"

    wallet_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("master_wallets.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    transaction_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("master_wallet_transactions.id", ondelete="SET NULL"),
        nullable=True,
    )
    alert_type: Mapped[SecurityAlertType] = mapped_column(
        SQLEnum(SecurityAlertType, name="security_alert_type"),
        nullable=False,
    )
    severity: Mapped[AlertSeverity] = mapped_column(
        SQLEnum(AlertSeverity, name="alert_severity"),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_resolved: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, index=True
    )
    resolved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    resolved_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    resolution: Mapped[str | None] = mapped_column(Text, nullable=True)


class ReconciliationRecord(Base, TimestampMixin):
    """Outcome of reconciling a wallet's ledger against its balance."""

    __tablename__ = "reconciliation_records"

    wallet_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("master_wallets.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    reconciliation_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )
    expected_balance: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    actual_balance: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    difference: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    total_credits: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), nullable=False, default=Decimal("0.00")
    )
    total_debits: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), nullable=False, default=Decimal("0.00")
    )
    transaction_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[ReconciliationStatus] = mapped_column(
        SQLEnum(ReconciliationStatus, name="reconciliation_status"),
        nullable=False,
        default=ReconciliationStatus.PENDING,
        index=True,
    )
    performed_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
