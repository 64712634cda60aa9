"""
Unit tests for AdminAlertsService.

Tests:
- System alert feed (sample seeding, resolution)
- Compliance queue built from checks, high-risk customers and large deposits
- Compliance review decisions
"""

import uuid
from datetime import timedelta
from decimal import Decimal

import pytest

from axiobank.core.formatting import utc_now
from axiobank.models import ComplianceCheck, SystemAlert
from axiobank.models.enums import (
    AlertSeverity,
    ComplianceCheckStatus,
    ComplianceCheckType,
    RiskLevel,
    TransactionType,
)
from axiobank.repositories.audit_repository import AuditLogRepository
from axiobank.services.admin_alerts_service import AdminAlertsService


@pytest.fixture
def flagged_check(db_session, test_customer):
    async def _make(
        risk_level=RiskLevel.CRITICAL,
        status=ComplianceCheckStatus.FLAGGED,
        check_type=ComplianceCheckType.AML,
        risk_score=None,
        check_date=None,
    ) -> ComplianceCheck:
        check = ComplianceCheck(
            customer_id=test_customer.id,
            check_type=check_type,
            status=status,
            risk_level=risk_level,
            risk_score=Decimal(risk_score) if risk_score is not None else None,
            check_date=check_date or utc_now(),
            description="Structured deposits below reporting limit",
        )
        db_session.add(check)
        await db_session.commit()
        return check

    return _make


@pytest.mark.asyncio
class TestSystemAlerts:
    async def test_empty_feed_is_seeded_with_samples(self, db_session):
        service = AdminAlertsService(db_session)

        response = await service.get_system_alerts()

        assert response.success is True
        assert response.message == "System alerts retrieved (created sample data)"
        assert [alert.alert_type for alert in response.data] == [
            "FAILED_LOGIN_ATTEMPTS",
            "DATABASE_CONNECTION_WARNING",
        ]
        assert response.data[0].action_required is True
        assert response.data[1].action_required is False

        again = await service.get_system_alerts()
        assert again.message == "System alerts retrieved successfully"
        assert len(again.data) == 2

    async def test_resolve_system_alert(self, db_session, admin_user):
        alert = SystemAlert(
            alert_type="DISK_SPACE",
            severity=AlertSeverity.CRITICAL,
            title="Disk almost full",
            message="95% used",
        )
        db_session.add(alert)
        await db_session.commit()
        service = AdminAlertsService(db_session)

        response = await service.resolve_system_alert(
            alert.id, "Rotated logs", resolved_by=admin_user.id
        )

        assert response.success is True
        assert response.message == "System alert resolved successfully"
        assert response.data.is_resolved is True
        assert response.data.resolution == "Rotated logs"
        assert response.data.action_required is False

    async def test_resolve_unknown_alert(self, db_session):
        response = await AdminAlertsService(db_session).resolve_system_alert(
            uuid.uuid4(), "n/a"
        )

        assert response.message == "System alert not found"


@pytest.mark.asyncio
class TestComplianceAlerts:
    async def test_queue_merges_sources_by_priority(
        self, db_session, test_customer, test_account, make_transaction, flagged_check
    ):
        check = await flagged_check(risk_level=RiskLevel.CRITICAL)
        test_customer.risk_level = RiskLevel.HIGH
        await db_session.commit()
        deposit = await make_transaction(test_account, TransactionType.DEPOSIT, "15000.00")
        await make_transaction(test_account, TransactionType.DEPOSIT, "500.00")

        response = await AdminAlertsService(db_session).get_compliance_alerts()

        assert response.success is True
        assert [alert.id for alert in response.data] == [
            str(check.id),
            f"RISK_{test_customer.id}",
            f"CTR_{deposit.id}",
        ]
        check_alert, risk_alert, ctr_alert = response.data
        assert check_alert.alert_type == "AML_VIOLATION"
        assert check_alert.risk_score == 9.0
        assert check_alert.customer_name == "Jordan Blake"
        assert risk_alert.alert_type == "HIGH_RISK_CUSTOMER"
        assert risk_alert.risk_score == 7.5
        assert ctr_alert.alert_type == "LARGE_CASH_TRANSACTION"
        assert ctr_alert.priority == "MEDIUM"
        assert ctr_alert.customer_id == str(test_customer.id)

    async def test_same_priority_checks_ordered_by_stored_score(self, db_session, flagged_check):
        now = utc_now()
        higher = await flagged_check(
            risk_level=RiskLevel.HIGH, risk_score="8.9", check_date=now - timedelta(days=2)
        )
        lower = await flagged_check(risk_level=RiskLevel.HIGH, risk_score="7.1", check_date=now)
        unscored = await flagged_check(
            risk_level=RiskLevel.HIGH, check_date=now - timedelta(days=1)
        )

        response = await AdminAlertsService(db_session).get_compliance_alerts()

        assert [alert.id for alert in response.data] == [
            str(higher.id),
            str(unscored.id),
            str(lower.id),
        ]
        assert [alert.risk_score for alert in response.data] == [8.9, 7.5, 7.1]

    async def test_empty_queue(self, db_session):
        response = await AdminAlertsService(db_session).get_compliance_alerts()

        assert response.success is True
        assert response.data == []

    async def test_review_compliance_check(self, db_session, admin_user, flagged_check):
        check = await flagged_check()
        service = AdminAlertsService(db_session)

        response = await service.review_compliance_alert(
            str(check.id), "cleared", comments="Source of funds verified", reviewed_by=admin_user.id
        )

        assert response.success is True
        assert response.message == "Compliance alert reviewed successfully"
        assert check.status == ComplianceCheckStatus.CLEAR
        assert check.reviewed_by == admin_user.id
        assert check.notes == "Source of funds verified"

    async def test_review_derived_alert_is_audited(self, db_session, test_customer):
        service = AdminAlertsService(db_session)
        alert_id = f"RISK_{test_customer.id}"

        response = await service.review_compliance_alert(alert_id, "ESCALATED")

        assert response.success is True
        logs = await AuditLogRepository(db_session).get_entity_logs(
            "compliance_alert", alert_id
        )
        assert len(logs) == 1

    async def test_review_rejects_unknown_status(self, db_session, flagged_check):
        check = await flagged_check()

        response = await AdminAlertsService(db_session).review_compliance_alert(
            str(check.id), "IGNORED"
        )

        assert response.success is False
        assert response.error == "INVALID_INPUT"
        assert response.message == "Unsupported review status: IGNORED"

    async def test_review_unknown_check(self, db_session):
        service = AdminAlertsService(db_session)

        malformed = await service.review_compliance_alert("abc", "CLEARED")
        missing = await service.review_compliance_alert(str(uuid.uuid4()), "CLEARED")

        assert malformed.message == "Invalid compliance alert id"
        assert missing.message == "Compliance alert not found"
