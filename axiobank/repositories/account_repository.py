"""
Account repository for database operations.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from axiobank.models.account import Account
from axiobank.models.enums import AccountStatus, AccountType
from axiobank.repositories.base import BaseRepository


class AccountRepository(BaseRepository[Account]):
    """
    Repository for account database operations.

    Inherits from BaseRepository for standard CRUD operations with soft delete support.
    """

    def __init__(self, session: AsyncSession):
        super().__init__(Account, session)

    async def get_by_number(self, account_number: str) -> Account | None:
        query = select(Account).where(Account.account_number == account_number)
        query = self._apply_soft_delete_filter(query)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_by_customer(self, customer_id: uuid.UUID) -> list[Account]:
        """
        Get all live accounts of a customer, oldest first.

        Args:
            customer_id: UUID of the owning customer

        Returns:
            List of accounts ordered by opened_date ascending
        """
        query = select(Account).where(Account.customer_id == customer_id)
        query = self._apply_soft_delete_filter(query)
        query = query.order_by(Account.opened_date.asc())
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_card_funding_account(self, customer_id: uuid.UUID) -> Account | None:
        """
        Account that card transactions of a customer are posted to.

        Picks an ACTIVE checking or savings account, checking first, then
        the oldest one.
        """
        query = select(Account).where(
            Account.customer_id == customer_id,
            Account.status == AccountStatus.ACTIVE,
            Account.account_type.in_([AccountType.CHECKING, AccountType.SAVINGS]),
        )
        query = self._apply_soft_delete_filter(query)
        query = query.order_by(
            case((Account.account_type == AccountType.CHECKING, 0), else_=1),
            Account.opened_date.asc(),
        ).limit(1)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def number_exists(self, account_number: str) -> bool:
        """Check an account number against every row, closed ones included."""
        result = await self.session.execute(
            select(func.count())
            .select_from(Account)
            .where(Account.account_number == account_number)
        )
        return result.scalar_one() > 0

    async def count_by_status(
        self,
        status: AccountStatus,
        branch_id: uuid.UUID | None = None,
    ) -> int:
        query = select(func.count()).select_from(Account).where(Account.status == status)
        query = self._apply_soft_delete_filter(query)
        query = self._apply_branch_filter(query, branch_id)
        result = await self.session.execute(query)
        return result.scalar_one()

    async def sum_active_balances(self, branch_id: uuid.UUID | None = None) -> Decimal:
        """Total balance of ACTIVE accounts (None when there are none)."""
        query = select(func.sum(Account.balance)).where(
            Account.status == AccountStatus.ACTIVE
        )
        query = self._apply_soft_delete_filter(query)
        query = self._apply_branch_filter(query, branch_id)
        result = await self.session.execute(query)
        return result.scalar_one()

    async def count_opened_between(
        self,
        start: datetime,
        end: datetime,
        branch_id: uuid.UUID | None = None,
    ) -> int:
        """Count accounts opened in the half-open interval [start, end)."""
        query = select(func.count()).select_from(Account).where(
            Account.opened_date >= start,
            Account.opened_date < end,
        )
        query = self._apply_branch_filter(query, branch_id)
        result = await self.session.execute(query)
        return result.scalar_one()

    async def get_recently_opened(
        self,
        branch_id: uuid.UUID | None = None,
        limit: int = 5,
    ) -> list[Account]:
        query = select(Account)
        query = self._apply_soft_delete_filter(query)
        query = self._apply_branch_filter(query, branch_id)
        query = query.order_by(Account.opened_date.desc()).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())
