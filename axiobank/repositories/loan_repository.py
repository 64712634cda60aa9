"""
Loan and loan application repositories.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from axiobank.models.customer import Customer
from axiobank.models.enums import LoanStatus
from axiobank.models.loan import Loan, LoanApplication
from axiobank.repositories.base import BaseRepository

PENDING_APPLICATION_STATUSES = (LoanStatus.APPLIED, LoanStatus.UNDER_REVIEW)


class LoanApplicationRepository(BaseRepository[LoanApplication]):
    """Repository for loan applications."""

    def __init__(self, session: AsyncSession):
        super().__init__(LoanApplication, session)

    async def count_pending(self) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(LoanApplication)
            .where(LoanApplication.status.in_(PENDING_APPLICATION_STATUSES))
        )
        return result.scalar_one()

    async def count_between(
        self,
        start: datetime,
        end: datetime,
        branch_id: uuid.UUID | None = None,
    ) -> int:
        query = select(func.count()).select_from(LoanApplication).where(
            LoanApplication.application_date >= start,
            LoanApplication.application_date < end,
        )
        query = self._apply_branch_filter(query, branch_id)
        result = await self.session.execute(query)
        return result.scalar_one()

    async def get_pending_with_customer(self) -> list[Any]:
        """
        APPLIED and UNDER_REVIEW applications with the applicant's name.

        Returns:
            Rows of (LoanApplication, first_name, last_name)
        """
        query = (
            select(LoanApplication, Customer.first_name, Customer.last_name)
            .outerjoin(Customer, LoanApplication.customer_id == Customer.id)
            .where(LoanApplication.status.in_(PENDING_APPLICATION_STATUSES))
            .order_by(LoanApplication.application_date.desc())
        )
        result = await self.session.execute(query)
        return list(result.all())


class LoanRepository(BaseRepository[Loan]):
    """Repository for booked loans."""

    def __init__(self, session: AsyncSession):
        super().__init__(Loan, session)

    async def sum_active_outstanding(
        self, branch_id: uuid.UUID | None = None
    ) -> Decimal | None:
        query = select(func.sum(Loan.outstanding_balance)).where(
            Loan.status == LoanStatus.ACTIVE
        )
        query = self._apply_branch_filter(query, branch_id)
        result = await self.session.execute(query)
        return result.scalar_one()

    async def get_recent_active(
        self,
        branch_id: uuid.UUID | None = None,
        limit: int = 5,
    ) -> list[Loan]:
        query = select(Loan).where(Loan.status == LoanStatus.ACTIVE)
        query = self._apply_branch_filter(query, branch_id)
        query = query.order_by(Loan.created_at.desc()).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())
