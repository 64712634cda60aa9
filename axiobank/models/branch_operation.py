"""
Branch operations models.

- BranchOperation: a task tracked by the branch (cash counts, audits, ...)
- DailyOperationsSummary: one row per branch per day
- PerformanceMetric: named KPI values per branch per day
- StaffProductivity: per-employee daily output
"""

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from axiobank.models.base import Base
from axiobank.models.enums import OperationStatus, OperationType, Priority
from axiobank.models.mixins import TimestampMixin


class BranchOperation(Base, TimestampMixin):
    """Operational task of a branch."""

    __tablename__ = "branch_operations"

    branch_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("branches.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    operation_type: Mapped[OperationType] = mapped_column(
        SQLEnum(OperationType, name="operation_type"),
        nullable=False,
        default=OperationType.GENERAL,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[OperationStatus] = mapped_column(
        SQLEnum(OperationStatus, name="operation_status"),
        nullable=False,
        default=OperationStatus.PENDING,
        index=True,
    )
    priority: Mapped[Priority] = mapped_column(
        SQLEnum(Priority, name="operation_priority"),
        nullable=False,
        default=Priority.MEDIUM,
    )
    created_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    assigned_to: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    due_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class DailyOperationsSummary(Base, TimestampMixin):
    """Daily roll-up of a branch's activity."""

    __tablename__ = "daily_operations_summaries"

    branch_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("branches.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    summary_date: Mapped[date] = mapped_column(Date, nullable=False)
    accounts_opened: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    loans_processed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    transactions_processed: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )
    total_deposits: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), nullable=False, default=Decimal("0.00")
    )
    total_withdrawals: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), nullable=False, default=Decimal("0.00")
    )
    cash_in_hand: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), nullable=False, default=Decimal("0.00")
    )

    __table_args__ = (UniqueConstraint("branch_id", "summary_date"),)


class PerformanceMetric(Base, TimestampMixin):
    """Named KPI value (e.g., "Customer Satisfaction" 4.5 of 5.0)."""

    __tablename__ = "performance_metrics"

    branch_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("branches.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    metric_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    metric_name: Mapped[str] = mapped_column(String(100), nullable=False)
    metric_value: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    target_value: Mapped[Decimal | None] = mapped_column(
        Numeric(12, 2), nullable=True
    )
    unit: Mapped[str | None] = mapped_column(String(20), nullable=True)
    trend: Mapped[str] = mapped_column(String(10), nullable=False, default="STABLE")


class StaffProductivity(Base, TimestampMixin):
    """One employee's output for one day."""

    __tablename__ = "staff_productivity"

    branch_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("branches.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    employee_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    productivity_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    transactions_processed: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )
    customers_served: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    accounts_opened: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    loans_processed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    productivity_score: Mapped[Decimal] = mapped_column(
        Numeric(5, 2), nullable=False, default=Decimal("0.00")
    )
