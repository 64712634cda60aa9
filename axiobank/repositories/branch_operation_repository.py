"""
Branch operations repositories.
"""

import uuid
from datetime import date
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from axiobank.models.branch_operation import (
    BranchOperation,
    DailyOperationsSummary,
    PerformanceMetric,
    StaffProductivity,
)
from axiobank.models.enums import OperationStatus
from axiobank.models.user import Employee, User
from axiobank.repositories.base import BaseRepository


class BranchOperationRepository(BaseRepository[BranchOperation]):
    """Repository for branch operational tasks."""

    def __init__(self, session: AsyncSession):
        super().__init__(BranchOperation, session)

    async def get_for_branch(
        self,
        branch_id: uuid.UUID,
        status: OperationStatus | None = None,
    ) -> list[BranchOperation]:
        query = select(BranchOperation).where(BranchOperation.branch_id == branch_id)
        if status is not None:
            query = query.where(BranchOperation.status == status)
        query = query.order_by(BranchOperation.created_at.desc())
        result = await self.session.execute(query)
        return list(result.scalars().all())


class DailyOperationsSummaryRepository(BaseRepository[DailyOperationsSummary]):
    """Repository for per-day branch summaries."""

    def __init__(self, session: AsyncSession):
        super().__init__(DailyOperationsSummary, session)

    async def get_for_day(
        self, branch_id: uuid.UUID, summary_date: date
    ) -> DailyOperationsSummary | None:
        query = select(DailyOperationsSummary).where(
            DailyOperationsSummary.branch_id == branch_id,
            DailyOperationsSummary.summary_date == summary_date,
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()


class PerformanceMetricRepository(BaseRepository[PerformanceMetric]):
    """Repository for branch KPI values."""

    def __init__(self, session: AsyncSession):
        super().__init__(PerformanceMetric, session)

    async def get_for_day(
        self, branch_id: uuid.UUID, metric_date: date
    ) -> list[PerformanceMetric]:
        query = (
            select(PerformanceMetric)
            .where(
                PerformanceMetric.branch_id == branch_id,
                PerformanceMetric.metric_date == metric_date,
            )
            .order_by(PerformanceMetric.metric_name)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())


class StaffProductivityRepository(BaseRepository[StaffProductivity]):
    """Repository for per-employee daily productivity."""

    def __init__(self, session: AsyncSession):
        super().__init__(StaffProductivity, session)

    async def get_for_day_with_names(
        self, branch_id: uuid.UUID, productivity_date: date
    ) -> list[Any]:
        """
        Productivity rows of a branch day with employee names.

        Returns:
            Rows of (StaffProductivity, first_name, last_name, position),
            best score first
        """
        query = (
            select(StaffProductivity, User.first_name, User.last_name, Employee.position)
            .join(Employee, StaffProductivity.employee_id == Employee.id)
            .join(User, Employee.user_id == User.id)
            .where(
                StaffProductivity.branch_id == branch_id,
                StaffProductivity.productivity_date == productivity_date,
            )
            .order_by(StaffProductivity.productivity_score.desc())
        )
        result = await self.session.execute(query)
        return list(result.all())
