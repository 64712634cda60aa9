"""
Read and append access to the audit trail.

There is no update or delete here, and the class deliberately stands apart
from BaseRepository so those operations are never inherited.
"""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from axiobank.models.audit_log import AuditAction, AuditLog
from axiobank.models.user import User


class AuditLogRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, entry: AuditLog) -> AuditLog:
        self.session.add(entry)
        await self.session.flush()
        await self.session.refresh(entry)
        return entry

    async def get_logs_with_user(
        self,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        user_id: uuid.UUID | None = None,
        actions: tuple[AuditAction, ...] | None = None,
        limit: int = 100,
    ) -> list[Any]:
        """
        Newest-first rows of (AuditLog, first_name, last_name, role).

        The user columns are NULL for system actions. Every filter is
        optional and the date bounds are inclusive.
        """
        query = select(AuditLog, User.first_name, User.last_name, User.role).outerjoin(
            User, AuditLog.user_id == User.id
        )
        if start_date:
            query = query.where(AuditLog.created_at >= start_date)
        if end_date:
            query = query.where(AuditLog.created_at <= end_date)
        if user_id:
            query = query.where(AuditLog.user_id == user_id)
        if actions:
            query = query.where(AuditLog.action.in_(actions))

        result = await self.session.execute(
            query.order_by(AuditLog.created_at.desc()).limit(limit)
        )
        return list(result.all())

    async def count_by_action(self, action: AuditAction, since: datetime | None = None) -> int:
        query = select(func.count()).select_from(AuditLog).where(AuditLog.action == action)
        if since is not None:
            query = query.where(AuditLog.created_at >= since)
        return (await self.session.execute(query)).scalar_one()

    async def get_entity_logs(
        self, entity_type: str, entity_id: str, limit: int = 100
    ) -> list[AuditLog]:
        """History of one entity, newest first."""
        result = await self.session.execute(
            select(AuditLog)
            .where(AuditLog.entity_type == entity_type, AuditLog.entity_id == entity_id)
            .order_by(AuditLog.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
