"""
Admin audit service.

Serves the audit trail to administrators: filtered audit logs, CSV/JSON
exports, and a system log feed built from system events in the audit
trail plus live monitor checks.
"""

import csv
import io
import json
import logging
import uuid
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from axiobank.core.formatting import ensure_utc, utc_now
from axiobank.core.handlers import envelope
from axiobank.exceptions import InvalidInputError
from axiobank.models.audit_log import SYSTEM_EVENT_ACTIONS, AuditAction
from axiobank.repositories.audit_repository import AuditLogRepository
from axiobank.repositories.transaction_repository import TransactionRepository
from axiobank.repositories.user_repository import UserSessionRepository
from axiobank.schemas.admin import AuditExport, AuditLogEntry, SystemLogEntry
from axiobank.schemas.common import ApiResponse, ListResponse
from axiobank.services.audit_service import AuditService

logger = logging.getLogger(__name__)

EXPORT_LIMIT = 10_000
CSV_HEADER = ["timestamp", "user", "action", "entity_type", "entity_id", "description"]

SESSION_WARNING_THRESHOLD = 10
TRANSACTION_VOLUME_THRESHOLD = 20


def to_audit_entry(row: Any) -> AuditLogEntry:
    """Build an entry from a (AuditLog, first_name, last_name, role) row."""
    log, first_name, last_name, role = row
    return AuditLogEntry(
        id=log.id,
        user_id=log.user_id,
        user_name=f"{first_name} {last_name}" if first_name else "System",
        user_role=role.value if role else "SYSTEM",
        action=log.action.value,
        entity_type=log.entity_type,
        entity_id=log.entity_id,
        description=log.description,
        ip_address=log.ip_address,
        timestamp=ensure_utc(log.created_at),
    )


def render_csv(entries: list[AuditLogEntry]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for entry in entries:
        writer.writerow(
            [
                entry.timestamp.isoformat(),
                entry.user_name,
                entry.action,
                entry.entity_type,
                entry.entity_id or "",
                entry.description or "",
            ]
        )
    return buffer.getvalue()


def render_json(entries: list[AuditLogEntry]) -> str:
    return json.dumps([entry.model_dump(mode="json") for entry in entries], indent=2)


class AdminAuditService:
    """Service behind the admin audit screens."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.audit_repo = AuditLogRepository(session)
        self.session_repo = UserSessionRepository(session)
        self.transaction_repo = TransactionRepository(session)
        self.audit_service = AuditService(session)

    @envelope("Error retrieving audit logs", response_cls=ListResponse)
    async def get_audit_logs(
        self,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        user_id: uuid.UUID | None = None,
        limit: int = 100,
    ) -> ListResponse[AuditLogEntry]:
        rows = await self.audit_repo.get_logs_with_user(
            start_date=start_date, end_date=end_date, user_id=user_id, limit=limit
        )
        entries = [to_audit_entry(row) for row in rows]
        message = (
            "Audit logs retrieved successfully" if entries else "No audit logs found in database"
        )
        return ListResponse.ok(entries, message=message)

    @envelope("Error exporting audit logs")
    async def export_audit_logs(
        self,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        format: str = "csv",
        exported_by: uuid.UUID | None = None,
    ) -> ApiResponse[AuditExport]:
        """
        Export audit logs as CSV or a JSON array.

        Args:
            start_date: Optional lower bound
            end_date: Optional upper bound
            format: "csv" or "json" (case-insensitive)
            exported_by: Staff user running the export

        Returns:
            ApiResponse with the rendered export

        Raises:
            InvalidInputError: For any other format ("Unsupported format: <fmt>")
        """
        fmt = format.lower()
        renderers = {"csv": render_csv, "json": render_json}
        if fmt not in renderers:
            raise InvalidInputError("format", f"Unsupported format: {format}")

        rows = await self.audit_repo.get_logs_with_user(
            start_date=start_date, end_date=end_date, limit=EXPORT_LIMIT
        )
        entries = [to_audit_entry(row) for row in rows]
        export = AuditExport(
            format=fmt,
            filename=f"audit_logs_{utc_now():%Y%m%d_%H%M%S}.{fmt}",
            content=renderers[fmt](entries),
            record_count=len(entries),
        )

        await self.audit_service.log_event(
            user_id=exported_by,
            action=AuditAction.EXPORT,
            entity_type="audit_log",
            description=f"Exported {len(entries)} audit log entries as {fmt.upper()}",
        )
        await self.session.commit()

        return ApiResponse.ok(
            export,
            message=f"Exported {len(entries)} audit log entries",
        )

    async def _monitor_entries(self) -> list[SystemLogEntry]:
        now = utc_now()
        entries = []

        active_sessions = await self.session_repo.count_active()
        if active_sessions > SESSION_WARNING_THRESHOLD:
            entries.append(
                SystemLogEntry(
                    id="MON_SESSIONS",
                    level="WARN",
                    message=f"High number of active sessions: {active_sessions}",
                    source="session-monitor",
                    timestamp=now,
                )
            )

        recent_transactions = await self.transaction_repo.count_since(now - timedelta(hours=1))
        if recent_transactions > TRANSACTION_VOLUME_THRESHOLD:
            entries.append(
                SystemLogEntry(
                    id="MON_TRANSACTIONS",
                    level="INFO",
                    message=(
                        f"High transaction volume: {recent_transactions} "
                        "transactions in the last hour"
                    ),
                    source="transaction-monitor",
                    timestamp=now,
                )
            )

        entries.append(
            SystemLogEntry(
                id="MON_DATABASE",
                level="INFO",
                message="Database health check completed successfully",
                source="database",
                timestamp=now,
            )
        )
        return entries

    @envelope("Error retrieving system logs", response_cls=ListResponse)
    async def get_system_logs(
        self,
        level: str | None = None,
        limit: int = 100,
    ) -> ListResponse[SystemLogEntry]:
        """
        System log feed.

        Combines system events from the audit trail (at most half of
        `limit`) with monitor entries, filtered by level (case-insensitive,
        "ALL" or None for everything) and sorted newest first.
        """
        rows = await self.audit_repo.get_logs_with_user(
            actions=SYSTEM_EVENT_ACTIONS, limit=max(limit // 2, 1)
        )
        entries = [
            SystemLogEntry(
                id=f"AUDIT_{log.id}",
                level="WARN" if log.action == AuditAction.SYSTEM_CONFIG_CHANGE else "INFO",
                message=log.description or f"{log.action.value} - {log.entity_type}",
                source=log.entity_type,
                timestamp=ensure_utc(log.created_at),
            )
            for log, _, _, _ in rows
        ]
        entries += await self._monitor_entries()

        if level and level.upper() != "ALL":
            entries = [entry for entry in entries if entry.level.upper() == level.upper()]
        entries.sort(key=lambda entry: entry.timestamp, reverse=True)

        return ListResponse.ok(entries[:limit], message="System logs retrieved successfully")
