"""
Append-only audit trail.

Services insert one row per state change or sensitive read and never touch
it again. The admin audit views, the export and the dashboard's
failed-login counter all read from here.
"""

import enum
import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, Enum, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from axiobank.core.formatting import utc_now
from axiobank.models.base import Base


class AuditAction(str, enum.Enum):
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"
    LOGIN_FAILED = "LOGIN_FAILED"
    CREATE = "CREATE"
    READ = "READ"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    REVIEW = "REVIEW"
    RESOLVE = "RESOLVE"
    EXPORT = "EXPORT"
    SYSTEM_CONFIG_CHANGE = "SYSTEM_CONFIG_CHANGE"
    BACKUP_CREATED = "BACKUP_CREATED"


# Shown in the admin system-log feed
SYSTEM_EVENT_ACTIONS = (
    AuditAction.LOGIN,
    AuditAction.LOGOUT,
    AuditAction.SYSTEM_CONFIG_CHANGE,
    AuditAction.BACKUP_CREATED,
)


class AuditStatus(str, enum.Enum):
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
    PARTIAL = "PARTIAL"


class AuditLog(Base):
    """
    One audited action.

    `entity_id` is a string rather than a UUID so derived identifiers such
    as "RISK_<uuid>" alert ids can be recorded. `user_id` is NULL for
    actions taken by the system itself. `request_id` holds the correlation
    id active when the row was written.
    """

    __tablename__ = "audit_logs"

    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    branch_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("branches.id", ondelete="SET NULL"), nullable=True, index=True
    )
    action: Mapped[AuditAction] = mapped_column(
        Enum(AuditAction, name="audit_action_enum"), nullable=False, index=True
    )
    status: Mapped[AuditStatus] = mapped_column(
        Enum(AuditStatus, name="audit_status_enum"),
        nullable=False,
        default=AuditStatus.SUCCESS,
        index=True,
    )

    entity_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    entity_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Before/after snapshots of the changed fields
    old_values: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)
    new_values: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)
    extra_metadata: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    ip_address: Mapped[Optional[str]] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    request_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True, index=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, index=True
    )

    __table_args__ = (
        Index("ix_audit_logs_user_date", "user_id", "created_at"),
        Index("ix_audit_logs_entity", "entity_type", "entity_id", "created_at"),
        Index("ix_audit_logs_action_date", "action", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"AuditLog(id={self.id}, action={self.action.value}, "
            f"entity={self.entity_type}:{self.entity_id})"
        )
