"""
Writes the audit trail.

`snapshot` turns selected model attributes into JSON-safe values for the
old/new columns.
"""

import logging
import uuid
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from axiobank.core.config import settings
from axiobank.core.logging import correlation_id_var
from axiobank.models.audit_log import AuditAction, AuditLog, AuditStatus
from axiobank.repositories.audit_repository import AuditLogRepository

logger = logging.getLogger(__name__)


def _json_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (uuid.UUID, Decimal)):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def snapshot(instance: Any, fields: list[str] | tuple[str, ...]) -> dict[str, Any]:
    """
    JSON-safe snapshot of selected attributes of a model instance.

    Example:
        >>> snapshot(account, ["status", "balance"])
        {'status': 'ACTIVE', 'balance': '100.00'}
    """
    return {name: _json_value(getattr(instance, name)) for name in fields}


class AuditService:
    """
    Appends audit rows inside the caller's transaction.

    Rows are flushed, never committed here, so an entry commits or rolls
    back together with the change it records.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.audit_repo = AuditLogRepository(session)

    async def log_event(
        self,
        user_id: uuid.UUID | None,
        action: AuditAction,
        entity_type: str,
        entity_id: uuid.UUID | str | None = None,
        old_values: dict[str, Any] | None = None,
        new_values: dict[str, Any] | None = None,
        description: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
        request_id: str | None = None,
        branch_id: uuid.UUID | None = None,
        status: AuditStatus = AuditStatus.SUCCESS,
        error_message: str | None = None,
        extra_metadata: dict[str, Any] | None = None,
    ) -> AuditLog | None:
        """
        Record one action.

        `user_id` is None for system actions. `request_id` falls back to the
        correlation id of the current scope. Returns None without writing
        when AUDIT_LOG_ENABLED is off.

        Example:
            await audit_service.log_event(
                user_id=manager.id,
                action=AuditAction.APPROVE,
                entity_type="loan_application",
                entity_id=application.id,
                old_values={"status": "APPLIED"},
                new_values={"status": "APPROVED"},
            )
        """
        if not settings.audit_log_enabled:
            return None

        entry = await self.audit_repo.add(
            AuditLog(
                user_id=user_id,
                action=action,
                entity_type=entity_type,
                entity_id=str(entity_id) if entity_id is not None else None,
                old_values=old_values,
                new_values=new_values,
                description=description,
                ip_address=ip_address,
                user_agent=user_agent,
                request_id=request_id if request_id is not None else correlation_id_var.get(),
                branch_id=branch_id,
                status=status,
                error_message=error_message,
                extra_metadata=extra_metadata,
            )
        )
        logger.debug(
            f"Audit {action.value} {entity_type}:{entity_id} by {user_id or 'system'} "
            f"({status.value})"
        )
        return entry
