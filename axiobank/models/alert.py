"""
Monitoring and compliance models: SystemAlert and ComplianceCheck.
"""

import uuid
from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, ForeignKey, Numeric, String, Text, Uuid
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from axiobank.models.base import Base
from axiobank.models.enums import (
    AlertSeverity,
    ComplianceCheckStatus,
    ComplianceCheckType,
    RiskLevel,
)
from axiobank.models.mixins import TimestampMixin


class SystemAlert(Base, TimestampMixin):
    """
    Operational alert raised by monitoring (database, security, jobs).

    Attributes:
        alert_type: Category string (e.g., "DATABASE", "SECURITY")
        severity: AlertSeverity enum
        title: Short headline
        message: Full alert text
        source: Component that raised the alert
        branch_id: Branch the alert concerns (None for bank-wide alerts)
        is_resolved: Whether staff resolved the alert
        resolved_at, resolved_by, resolution: Resolution details
    """

    __tablename__ = "system_alerts"

    alert_type: Mapped[str] = mapped_column(String(50), nullable=False)
    severity: Mapped[AlertSeverity] = mapped_column(
        SQLEnum(AlertSeverity, name="alert_severity"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    source: Mapped[str | None] = mapped_column(String(100), nullable=True)
    branch_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("branches.id", ondelete="SET NULL"),
        nullable=True,
    )

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


class ComplianceCheck(Base, TimestampMixin):
    """
    AML/KYC/sanctions screening result for a customer.

    Flagged or pending checks, or checks rated HIGH/CRITICAL, surface in
    the compliance alert queue.
    """

    __tablename__ = "compliance_checks"

    customer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("customers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    check_type: Mapped[ComplianceCheckType] = mapped_column(
        SQLEnum(ComplianceCheckType, name="compliance_check_type"),
        nullable=False,
    )
    status: Mapped[ComplianceCheckStatus] = mapped_column(
        SQLEnum(ComplianceCheckStatus, name="compliance_check_status"),
        nullable=False,
        default=ComplianceCheckStatus.PENDING_REVIEW,
        index=True,
    )
    risk_level: Mapped[RiskLevel] = mapped_column(
        SQLEnum(RiskLevel, name="risk_level"),
        nullable=False,
        default=RiskLevel.LOW,
    )
    # Screening score, 0-10. NULL means "use the risk level's default score"
    risk_score: Mapped[Decimal | None] = mapped_column(Numeric(4, 1), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    check_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )
    reviewed_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    reviewed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
