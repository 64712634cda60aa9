"""
Unit tests for AdminAuditService.

Tests:
- Audit log listing with acting user names
- CSV and JSON exports
- System log feed with level filtering
"""

import csv
import io
import json

import pytest

from axiobank.models.audit_log import AuditAction
from axiobank.services.admin_audit_service import AdminAuditService
from axiobank.services.audit_service import AuditService


@pytest.fixture
def audit_trail(db_session, admin_user):
    async def _record():
        audit = AuditService(db_session)
        await audit.log_event(
            user_id=admin_user.id,
            action=AuditAction.UPDATE,
            entity_type="account",
            entity_id="ACC-1",
            description="Account limits changed",
        )
        await audit.log_event(
            user_id=None,
            action=AuditAction.BACKUP_CREATED,
            entity_type="system",
            description="Nightly backup created",
        )
        await audit.log_event(
            user_id=admin_user.id,
            action=AuditAction.SYSTEM_CONFIG_CHANGE,
            entity_type="settings",
            description="SMTP host changed",
        )
        await db_session.commit()

    return _record


@pytest.mark.asyncio
class TestAdminAuditService:
    """Test suite for AdminAuditService."""

    async def test_get_audit_logs_empty(self, db_session):
        response = await AdminAuditService(db_session).get_audit_logs()

        assert response.success is True
        assert response.data == []
        assert response.message == "No audit logs found in database"

    async def test_get_audit_logs_names_users(self, db_session, admin_user, audit_trail):
        await audit_trail()

        response = await AdminAuditService(db_session).get_audit_logs()

        assert response.message == "Audit logs retrieved successfully"
        by_action = {entry.action: entry for entry in response.data}
        assert by_action["UPDATE"].user_name == "Avery Admin"
        assert by_action["UPDATE"].user_role == "SYSTEM_ADMIN"
        assert by_action["BACKUP_CREATED"].user_name == "System"
        assert by_action["BACKUP_CREATED"].user_role == "SYSTEM"

    async def test_get_audit_logs_by_user(self, db_session, admin_user, audit_trail):
        await audit_trail()

        response = await AdminAuditService(db_session).get_audit_logs(user_id=admin_user.id)

        assert {entry.action for entry in response.data} == {"UPDATE", "SYSTEM_CONFIG_CHANGE"}

    async def test_export_csv(self, db_session, admin_user, audit_trail):
        await audit_trail()

        response = await AdminAuditService(db_session).export_audit_logs(
            format="CSV", exported_by=admin_user.id
        )

        assert response.success is True
        assert response.message == "Exported 3 audit log entries"
        export = response.data
        assert export.format == "csv"
        assert export.filename.startswith("audit_logs_")
        assert export.filename.endswith(".csv")
        rows = list(csv.reader(io.StringIO(export.content)))
        assert rows[0] == [
            "timestamp",
            "user",
            "action",
            "entity_type",
            "entity_id",
            "description",
        ]
        assert len(rows) == 4
        assert ["Avery Admin", "UPDATE", "account", "ACC-1", "Account limits changed"] in [
            row[1:] for row in rows[1:]
        ]

    async def test_export_json_is_audited(self, db_session, audit_trail):
        await audit_trail()
        service = AdminAuditService(db_session)

        response = await service.export_audit_logs(format="json")

        entries = json.loads(response.data.content)
        assert len(entries) == 3
        assert response.data.record_count == 3
        follow_up = await service.get_audit_logs()
        assert "EXPORT" in {entry.action for entry in follow_up.data}

    async def test_export_unsupported_format(self, db_session):
        response = await AdminAuditService(db_session).export_audit_logs(format="xml")

        assert response.success is False
        assert response.message == "Unsupported format: xml"
        assert response.error == "INVALID_INPUT"

    async def test_system_logs_combine_events_and_monitors(self, db_session, audit_trail):
        await audit_trail()

        response = await AdminAuditService(db_session).get_system_logs()

        assert response.success is True
        messages = {entry.message: entry.level for entry in response.data}
        assert messages["Nightly backup created"] == "INFO"
        assert messages["SMTP host changed"] == "WARN"
        assert messages["Database health check completed successfully"] == "INFO"
        assert "Account limits changed" not in messages

    async def test_system_logs_level_filter(self, db_session, audit_trail):
        await audit_trail()

        response = await AdminAuditService(db_session).get_system_logs(level="warn")

        assert [entry.message for entry in response.data] == ["SMTP host changed"]
