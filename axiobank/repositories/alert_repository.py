"""
System alert and compliance check repositories.
"""

from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from axiobank.models.alert import ComplianceCheck, SystemAlert
from axiobank.models.customer import Customer
from axiobank.models.enums import AlertSeverity, ComplianceCheckStatus, RiskLevel
from axiobank.repositories.base import BaseRepository


class SystemAlertRepository(BaseRepository[SystemAlert]):
    """Repository for operational alerts."""

    def __init__(self, session: AsyncSession):
        super().__init__(SystemAlert, session)

    async def get_recent(self, limit: int = 100) -> list[SystemAlert]:
        result = await self.session.execute(
            select(SystemAlert).order_by(SystemAlert.created_at.desc()).limit(limit)
        )
        return list(result.scalars().all())

    async def count_unresolved(self, severity: AlertSeverity | None = None) -> int:
        query = select(func.count()).select_from(SystemAlert).where(
            SystemAlert.is_resolved.is_(False)
        )
        if severity is not None:
            query = query.where(SystemAlert.severity == severity)
        result = await self.session.execute(query)
        return result.scalar_one()


class ComplianceCheckRepository(BaseRepository[ComplianceCheck]):
    """Repository for compliance screening results."""

    def __init__(self, session: AsyncSession):
        super().__init__(ComplianceCheck, session)

    async def get_open_with_customer(self, limit: int = 50) -> list[Any]:
        """
        Checks that need attention: FLAGGED or PENDING_REVIEW, or rated
        HIGH/CRITICAL.

        Returns:
            Rows of (ComplianceCheck, first_name, last_name), newest first
        """
        query = (
            select(ComplianceCheck, Customer.first_name, Customer.last_name)
            .outerjoin(Customer, ComplianceCheck.customer_id == Customer.id)
            .where(
                or_(
                    ComplianceCheck.status.in_(
                        [ComplianceCheckStatus.FLAGGED, ComplianceCheckStatus.PENDING_REVIEW]
                    ),
                    ComplianceCheck.risk_level.in_([RiskLevel.HIGH, RiskLevel.CRITICAL]),
                )
            )
            .order_by(ComplianceCheck.check_date.desc())
            .limit(limit)
        )
        result = await self.session.execute(query)
        return list(result.all())
