"""
Credit assessment repository.

List queries join the customer so DTOs can carry the customer's name.
"""

import uuid
from typing import Any

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from axiobank.models.credit_assessment import CreditAssessment
from axiobank.models.customer import Customer
from axiobank.repositories.base import BaseRepository


class CreditAssessmentRepository(BaseRepository[CreditAssessment]):
    """Repository for credit assessments."""

    def __init__(self, session: AsyncSession):
        super().__init__(CreditAssessment, session)

    @staticmethod
    def _with_customer_name() -> Select[Any]:
        return select(
            CreditAssessment,
            Customer.first_name,
            Customer.last_name,
        ).outerjoin(Customer, CreditAssessment.customer_id == Customer.id)

    async def list_with_customer(self, offset: int = 0, limit: int = 20) -> list[Any]:
        """
        Assessments joined with the customer name, newest assessment first.

        Returns:
            Rows of (CreditAssessment, first_name, last_name)
        """
        query = (
            self._with_customer_name()
            .order_by(CreditAssessment.assessment_date.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(query)
        return list(result.all())

    async def get_with_customer(self, assessment_id: uuid.UUID) -> Any | None:
        query = self._with_customer_name().where(CreditAssessment.id == assessment_id)
        result = await self.session.execute(query)
        return result.one_or_none()

    async def list_for_customer(self, customer_id: uuid.UUID) -> list[Any]:
        query = (
            self._with_customer_name()
            .where(CreditAssessment.customer_id == customer_id)
            .order_by(CreditAssessment.assessment_date.desc())
        )
        result = await self.session.execute(query)
        return list(result.all())

    async def get_assessed_customer_ids(self) -> list[uuid.UUID]:
        result = await self.session.execute(
            select(CreditAssessment.customer_id).distinct()
        )
        return list(result.scalars().all())

    async def get_latest_for_customer(
        self, customer_id: uuid.UUID
    ) -> CreditAssessment | None:
        query = (
            select(CreditAssessment)
            .where(CreditAssessment.customer_id == customer_id)
            .order_by(CreditAssessment.assessment_date.desc())
            .limit(1)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def count_all(self) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(CreditAssessment)
        )
        return result.scalar_one()
