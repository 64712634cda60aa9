"""
Customer repository for database operations.

This module provides the CustomerRepository class: number and email
lookups, the staff search, and the risk queries used by compliance.
"""

import uuid

from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from axiobank.models.customer import Customer
from axiobank.models.enums import CustomerStatus, RiskLevel
from axiobank.repositories.base import BaseRepository


def escape_like(term: str) -> str:
    """Escape LIKE wildcards (and the escape character) so input matches literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _phone_digits(column):
    """SQL expression stripping common separators from a phone column."""
    expression = column
    for separator in ("+", "-", " ", "(", ")", "."):
        expression = func.replace(expression, separator, "")
    return expression


class CustomerRepository(BaseRepository[Customer]):
    """
    Repository for customer database operations.

    Inherits from BaseRepository for standard CRUD operations with soft delete support.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize customer repository.

        Args:
            session: Async database session for executing queries
        """
        super().__init__(Customer, session)

    async def get_by_number(self, customer_number: str) -> Customer | None:
        query = select(Customer).where(Customer.customer_number == customer_number)
        query = self._apply_soft_delete_filter(query)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_by_email(
        self,
        email: str,
        exclude_id: uuid.UUID | None = None,
    ) -> Customer | None:
        """
        Find a live customer by email (case-insensitive).

        Args:
            email: Email to look up
            exclude_id: Customer to ignore (used when updating that customer)

        Returns:
            Matching customer or None
        """
        query = select(Customer).where(func.lower(Customer.email) == email.lower())
        query = self._apply_soft_delete_filter(query)
        if exclude_id is not None:
            query = query.where(Customer.id != exclude_id)
        result = await self.session.execute(query.limit(1))
        return result.scalar_one_or_none()

    async def number_exists(self, customer_number: str) -> bool:
        """Check a customer number against every row, deleted ones included."""
        result = await self.session.execute(
            select(func.count())
            .select_from(Customer)
            .where(Customer.customer_number == customer_number)
        )
        return result.scalar_one() > 0

    def _search_query(self, query: Select, term: str, digits: str) -> Select:
        pattern = f"%{escape_like(term)}%"
        conditions = [
            Customer.first_name.ilike(pattern, escape="\\"),
            Customer.last_name.ilike(pattern, escape="\\"),
            Customer.email.ilike(pattern, escape="\\"),
            Customer.customer_number.ilike(pattern, escape="\\"),
        ]
        if digits:
            conditions.append(_phone_digits(Customer.phone).like(f"%{digits}%"))
        query = query.where(or_(*conditions))
        return self._apply_soft_delete_filter(query)

    async def search(
        self,
        term: str,
        digits: str = "",
        offset: int = 0,
        limit: int = 20,
    ) -> list[Customer]:
        """
        Case-insensitive substring search over name, email and number.

        Args:
            term: Search text
            digits: Digits of the search text; matched against phone numbers
            offset: Number of records to skip
            limit: Maximum number of records to return

        Returns:
            Matching customers ordered by last name, first name
        """
        query = self._search_query(select(Customer), term, digits)
        query = query.order_by(Customer.last_name, Customer.first_name)
        result = await self.session.execute(query.offset(offset).limit(limit))
        return list(result.scalars().all())

    async def count_search(self, term: str, digits: str = "") -> int:
        query = self._search_query(select(func.count()).select_from(Customer), term, digits)
        result = await self.session.execute(query)
        return result.scalar_one()

    async def get_high_risk(self, limit: int = 25) -> list[Customer]:
        """Live customers rated HIGH or CRITICAL, most recently updated first."""
        query = select(Customer).where(
            Customer.risk_level.in_([RiskLevel.HIGH, RiskLevel.CRITICAL])
        )
        query = self._apply_soft_delete_filter(query)
        query = query.order_by(Customer.updated_at.desc()).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count_active(self, branch_id: uuid.UUID | None = None) -> int:
        query = select(func.count()).select_from(Customer).where(
            Customer.status == CustomerStatus.ACTIVE
        )
        query = self._apply_soft_delete_filter(query)
        query = self._apply_branch_filter(query, branch_id)
        result = await self.session.execute(query)
        return result.scalar_one()
