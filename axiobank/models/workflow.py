"""
Workflow models: customer service requests and account freeze requests.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from axiobank.models.base import Base
from axiobank.models.enums import (
    FreezeReason,
    FreezeRequestStatus,
    ServiceRequestPriority,
    ServiceRequestStatus,
    ServiceRequestType,
)
from axiobank.models.mixins import TimestampMixin


class ServiceRequest(Base, TimestampMixin):
    """Customer service request (account opening, card request, ...)."""

    __tablename__ = "service_requests"

    request_number: Mapped[str] = mapped_column(
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
    request_type: Mapped[ServiceRequestType] = mapped_column(
        SQLEnum(ServiceRequestType, name="service_request_type"),
        nullable=False,
        index=True,
    )
    status: Mapped[ServiceRequestStatus] = mapped_column(
        SQLEnum(ServiceRequestStatus, name="service_request_status"),
        nullable=False,
        default=ServiceRequestStatus.PENDING,
        index=True,
    )
    priority: Mapped[ServiceRequestPriority] = mapped_column(
        SQLEnum(ServiceRequestPriority, name="service_request_priority"),
        nullable=False,
        default=ServiceRequestPriority.MEDIUM,
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    assigned_to: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)


class AccountFreezeRequest(Base, TimestampMixin):
    """Request to freeze an account, pending manager approval."""

    __tablename__ = "account_freeze_requests"

    account_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    requested_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    reason: Mapped[FreezeReason] = mapped_column(
        SQLEnum(FreezeReason, name="freeze_reason"),
        nullable=False,
    )
    details: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[FreezeRequestStatus] = mapped_column(
        SQLEnum(FreezeRequestStatus, name="freeze_request_status"),
        nullable=False,
        default=FreezeRequestStatus.PENDING,
        index=True,
    )
    reviewed_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    reviewed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
