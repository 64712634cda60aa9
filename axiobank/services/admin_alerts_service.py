"""
Admin alert service.

This module provides AdminAlertsService, which serves the system alert
feed and the compliance review queue. The compliance queue merges three
sources:
- compliance checks needing attention
- high-risk customers (ids "RISK_<customer id>")
- large cash deposits that need a currency transaction report
  (ids "CTR_<transaction id>")
"""

import logging
import uuid
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from axiobank.core.config import settings
from axiobank.core.formatting import ensure_utc, utc_now
from axiobank.core.handlers import envelope
from axiobank.exceptions import InvalidInputError, NotFoundError
from axiobank.models import AuditAction, ComplianceCheck, SystemAlert
from axiobank.models.enums import AlertSeverity, ComplianceCheckStatus, RiskLevel
from axiobank.repositories.account_repository import AccountRepository
from axiobank.repositories.alert_repository import (
    ComplianceCheckRepository,
    SystemAlertRepository,
)
from axiobank.repositories.customer_repository import CustomerRepository
from axiobank.repositories.transaction_repository import TransactionRepository
from axiobank.schemas.admin import ComplianceAlertResponse, SystemAlertResponse
from axiobank.schemas.common import ApiResponse, ListResponse
from axiobank.services.audit_service import AuditService

logger = logging.getLogger(__name__)

RISK_PREFIX = "RISK_"
CTR_PREFIX = "CTR_"

CHECK_ALERT_TYPES = {
    "AML": "AML_VIOLATION",
    "SANCTIONS": "SANCTIONS_SCREENING",
    "PEP": "PEP_SCREENING",
    "FATCA": "FATCA_REPORTING",
}

CHECK_REVIEW_STATUSES = {
    ComplianceCheckStatus.FLAGGED: "PENDING",
    ComplianceCheckStatus.PENDING_REVIEW: "IN_REVIEW",
    ComplianceCheckStatus.CLEAR: "CLEARED",
}

RISK_SCORES = {
    RiskLevel.CRITICAL: 9.0,
    RiskLevel.HIGH: 7.5,
    RiskLevel.MEDIUM: 5.0,
    RiskLevel.LOW: 2.5,
}

PRIORITY_RANKS = {"CRITICAL": 4, "HIGH": 3, "MEDIUM": 2}

# Review decisions accepted for compliance checks
REVIEW_STATUSES = {
    "CLEARED": ComplianceCheckStatus.CLEAR,
    "CLEAR": ComplianceCheckStatus.CLEAR,
    "IN_REVIEW": ComplianceCheckStatus.PENDING_REVIEW,
    "PENDING_REVIEW": ComplianceCheckStatus.PENDING_REVIEW,
    "PENDING": ComplianceCheckStatus.FLAGGED,
    "FLAGGED": ComplianceCheckStatus.FLAGGED,
    "ESCALATED": ComplianceCheckStatus.ESCALATED,
}

CTR_LOOKBACK = timedelta(days=30)


def _sample_alerts() -> list[SystemAlert]:
    now = utc_now()
    return [
        SystemAlert(
            alert_type="DATABASE_CONNECTION_WARNING",
            severity=AlertSeverity.MEDIUM,
            title="Database Connection Pool Warning",
            message=(
                "Database connection pool is at 80% capacity. "
                "Current connections: 80/100. Consider scaling database resources."
            ),
            source="database",
            created_at=now - timedelta(hours=2),
        ),
        SystemAlert(
            alert_type="FAILED_LOGIN_ATTEMPTS",
            severity=AlertSeverity.HIGH,
            title="Multiple Failed Login Attempts",
            message=(
                "15 failed login attempts detected from IP 192.168.1.100. "
                "Potential brute force attack detected."
            ),
            source="authentication",
            created_at=now - timedelta(minutes=30),
        ),
    ]


def _check_risk_score(check: ComplianceCheck) -> float:
    if check.risk_score is not None:
        return float(check.risk_score)
    return RISK_SCORES[check.risk_level]


def sort_compliance_alerts(
    alerts: list[ComplianceAlertResponse],
) -> list[ComplianceAlertResponse]:
    """Highest priority first, then highest risk score."""
    return sorted(
        alerts,
        key=lambda alert: (PRIORITY_RANKS.get(alert.priority, 1), alert.risk_score),
        reverse=True,
    )


class AdminAlertsService:
    """Service behind the admin alert screens."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.alert_repo = SystemAlertRepository(session)
        self.check_repo = ComplianceCheckRepository(session)
        self.customer_repo = CustomerRepository(session)
        self.account_repo = AccountRepository(session)
        self.transaction_repo = TransactionRepository(session)
        self.audit_service = AuditService(session)

    @envelope("Error retrieving system alerts", response_cls=ListResponse)
    async def get_system_alerts(self) -> ListResponse[SystemAlertResponse]:
        """
        Latest 100 system alerts, newest first.

        An empty alert table is seeded with two sample alerts so the
        dashboard has something to show on a fresh installation.
        """
        alerts = await self.alert_repo.get_recent(limit=100)
        message = "System alerts retrieved successfully"

        if not alerts:
            for alert in _sample_alerts():
                self.session.add(alert)
            await self.session.commit()
            alerts = await self.alert_repo.get_recent(limit=100)
            message = "System alerts retrieved (created sample data)"
            logger.info("Seeded sample system alerts")

        return ListResponse.ok(
            [SystemAlertResponse.model_validate(alert) for alert in alerts],
            message=message,
        )

    async def _check_alerts(self) -> list[ComplianceAlertResponse]:
        alerts = []
        for check, first_name, last_name in await self.check_repo.get_open_with_customer(limit=50):
            alerts.append(
                ComplianceAlertResponse(
                    id=str(check.id),
                    alert_type=CHECK_ALERT_TYPES.get(check.check_type.value, "SUSPICIOUS_ACTIVITY"),
                    customer_id=str(check.customer_id),
                    customer_name=f"{first_name} {last_name}" if first_name else None,
                    description=check.description or "Compliance check flagged for review",
                    risk_score=_check_risk_score(check),
                    review_status=CHECK_REVIEW_STATUSES.get(check.status, "PENDING"),
                    priority=check.risk_level.value,
                    created_at=ensure_utc(check.check_date),
                )
            )
        return alerts

    async def _high_risk_customer_alerts(self) -> list[ComplianceAlertResponse]:
        return [
            ComplianceAlertResponse(
                id=f"{RISK_PREFIX}{customer.id}",
                alert_type="HIGH_RISK_CUSTOMER",
                customer_id=str(customer.id),
                customer_name=customer.full_name,
                description="Customer flagged as high risk - requires compliance review",
                risk_score=RISK_SCORES[customer.risk_level],
                review_status="PENDING",
                priority=customer.risk_level.value,
                created_at=ensure_utc(customer.updated_at),
            )
            for customer in await self.customer_repo.get_high_risk(limit=25)
        ]

    async def _ctr_alerts(self) -> list[ComplianceAlertResponse]:
        deposits = await self.transaction_repo.get_large_deposits(
            settings.ctr_threshold, since=utc_now() - CTR_LOOKBACK, limit=20
        )
        alerts = []
        for transaction in deposits:
            account = await self.account_repo.get_by_id(transaction.account_id)
            customer = (
                await self.customer_repo.get_by_id(account.customer_id) if account else None
            )
            alerts.append(
                ComplianceAlertResponse(
                    id=f"{CTR_PREFIX}{transaction.id}",
                    alert_type="LARGE_CASH_TRANSACTION",
                    customer_id=str(customer.id) if customer else None,
                    customer_name=customer.full_name if customer else None,
                    account_id=str(transaction.account_id),
                    amount=transaction.amount,
                    description="Large cash transaction requires CTR filing",
                    risk_score=6.0,
                    review_status="PENDING",
                    priority="MEDIUM",
                    created_at=ensure_utc(transaction.transaction_date),
                )
            )
        return alerts

    @envelope("Error retrieving compliance alerts", response_cls=ListResponse)
    async def get_compliance_alerts(self) -> ListResponse[ComplianceAlertResponse]:
        alerts = (
            await self._check_alerts()
            + await self._high_risk_customer_alerts()
            + await self._ctr_alerts()
        )
        return ListResponse.ok(
            sort_compliance_alerts(alerts),
            message="Compliance alerts retrieved successfully",
        )

    @envelope("Error resolving system alert")
    async def resolve_system_alert(
        self,
        alert_id: uuid.UUID,
        resolution: str,
        resolved_by: uuid.UUID | None = None,
    ) -> ApiResponse[SystemAlertResponse]:
        alert = await self.alert_repo.get_by_id(alert_id)
        if alert is None:
            raise NotFoundError("System alert")

        alert.is_resolved = True
        alert.resolution = resolution
        alert.resolved_by = resolved_by
        alert.resolved_at = utc_now()
        alert = await self.alert_repo.update(alert)

        await self.audit_service.log_event(
            user_id=resolved_by,
            action=AuditAction.RESOLVE,
            entity_type="system_alert",
            entity_id=alert.id,
            new_values={"is_resolved": True, "resolution": resolution},
            description=f"System alert '{alert.title}' resolved",
        )
        await self.session.commit()

        return ApiResponse.ok(
            SystemAlertResponse.model_validate(alert),
            message="System alert resolved successfully",
        )

    @envelope("Error reviewing compliance alert")
    async def review_compliance_alert(
        self,
        alert_id: str,
        status: str,
        comments: str | None = None,
        reviewed_by: uuid.UUID | None = None,
    ) -> ApiResponse[None]:
        """
        Record a compliance review decision.

        Args:
            alert_id: Compliance check UUID, or a RISK_/CTR_ queue id
            status: Review outcome (CLEARED, IN_REVIEW, PENDING, ESCALATED)
            comments: Reviewer comments
            reviewed_by: Reviewing staff user

        Returns:
            ApiResponse without data

        Raises:
            InvalidInputError: For an unknown status or malformed id
            NotFoundError: If the compliance check does not exist
        """
        normalized = status.strip().upper()

        # Derived queue items have no row of their own: audit only
        if alert_id.startswith((RISK_PREFIX, CTR_PREFIX)):
            await self.audit_service.log_event(
                user_id=reviewed_by,
                action=AuditAction.REVIEW,
                entity_type="compliance_alert",
                entity_id=alert_id,
                new_values={"status": normalized, "comments": comments},
                description=f"Compliance alert {alert_id} reviewed: {normalized}",
            )
            await self.session.commit()
            return ApiResponse.ok(message="Compliance alert reviewed successfully")

        new_status = REVIEW_STATUSES.get(normalized)
        if new_status is None:
            raise InvalidInputError("status", f"Unsupported review status: {status}")
        try:
            check_id = uuid.UUID(alert_id)
        except ValueError:
            raise InvalidInputError("alert_id", "Invalid compliance alert id") from None

        check = await self.check_repo.get_by_id(check_id)
        if check is None:
            raise NotFoundError("Compliance alert")

        old_status = check.status
        check.status = new_status
        check.reviewed_by = reviewed_by
        check.reviewed_at = utc_now()
        if comments:
            check.notes = f"{check.notes}\n{comments}" if check.notes else comments
        await self.check_repo.update(check)

        await self.audit_service.log_event(
            user_id=reviewed_by,
            action=AuditAction.REVIEW,
            entity_type="compliance_check",
            entity_id=check.id,
            old_values={"status": old_status.value},
            new_values={"status": new_status.value, "comments": comments},
            description=f"Compliance check {check.id} reviewed: {normalized}",
        )
        await self.session.commit()

        return ApiResponse.ok(message="Compliance alert reviewed successfully")
