"""
Transaction repository for ledger queries.

Besides CRUD this module provides the aggregate queries used by the
dashboards: counts and sums over time windows, per-type totals for a
branch day, and the large-transaction queues used by compliance and
workflow approval.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from axiobank.models.enums import TransactionStatus, TransactionType
from axiobank.models.transaction import Transaction
from axiobank.repositories.base import BaseRepository


class TransactionRepository(BaseRepository[Transaction]):
    """Repository for account ledger entries."""

    def __init__(self, session: AsyncSession):
        super().__init__(Transaction, session)

    async def transaction_id_exists(self, transaction_id: str) -> bool:
        result = await self.session.execute(
            select(func.count())
            .select_from(Transaction)
            .where(Transaction.transaction_id == transaction_id)
        )
        return result.scalar_one() > 0

    async def get_for_account_between(
        self,
        account_id: uuid.UUID,
        start: datetime,
        end: datetime,
    ) -> list[Transaction]:
        """
        Ledger entries of an account in [start, end), newest first.

        Args:
            account_id: Account to read
            start: Inclusive lower bound on transaction_date
            end: Exclusive upper bound on transaction_date

        Returns:
            List of transactions
        """
        query = (
            select(Transaction)
            .where(
                Transaction.account_id == account_id,
                Transaction.transaction_date >= start,
                Transaction.transaction_date < end,
            )
            .order_by(Transaction.transaction_date.desc())
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count_since(
        self,
        since: datetime,
        branch_id: uuid.UUID | None = None,
        status: TransactionStatus | None = None,
    ) -> int:
        query = select(func.count()).select_from(Transaction).where(
            Transaction.transaction_date >= since
        )
        query = self._apply_branch_filter(query, branch_id)
        if status is not None:
            query = query.where(Transaction.status == status)
        result = await self.session.execute(query)
        return result.scalar_one()

    async def sum_since(self, since: datetime) -> Decimal | None:
        result = await self.session.execute(
            select(func.sum(Transaction.amount)).where(
                Transaction.transaction_date >= since
            )
        )
        return result.scalar_one()

    async def totals_by_type_between(
        self,
        start: datetime,
        end: datetime,
        branch_id: uuid.UUID | None = None,
        status: TransactionStatus | None = TransactionStatus.COMPLETED,
    ) -> dict[TransactionType, tuple[int, Decimal]]:
        """
        Count and total amount per transaction type in [start, end).

        Returns:
            Mapping of type to (count, amount); types without entries are absent
        """
        query = (
            select(
                Transaction.transaction_type,
                func.count(),
                func.sum(Transaction.amount),
            )
            .where(
                Transaction.transaction_date >= start,
                Transaction.transaction_date < end,
            )
            .group_by(Transaction.transaction_type)
        )
        query = self._apply_branch_filter(query, branch_id)
        if status is not None:
            query = query.where(Transaction.status == status)
        result = await self.session.execute(query)
        return {row[0]: (row[1], row[2]) for row in result.all()}

    async def get_large_deposits(
        self,
        threshold: Decimal,
        since: datetime,
        limit: int = 20,
    ) -> list[Transaction]:
        """Completed deposits above `threshold` since `since`, largest first."""
        query = (
            select(Transaction)
            .where(
                Transaction.transaction_type == TransactionType.DEPOSIT,
                Transaction.status == TransactionStatus.COMPLETED,
                Transaction.amount > threshold,
                Transaction.transaction_date >= since,
            )
            .order_by(Transaction.amount.desc())
            .limit(limit)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_pending_above(
        self,
        threshold: Decimal,
        since: datetime,
    ) -> list[Transaction]:
        """PENDING transactions above `threshold` since `since`, newest first."""
        query = (
            select(Transaction)
            .where(
                Transaction.status == TransactionStatus.PENDING,
                Transaction.amount > threshold,
                Transaction.transaction_date >= since,
            )
            .order_by(Transaction.transaction_date.desc())
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count_by_processor(self, user_ids: list[uuid.UUID]) -> dict[Any, int]:
        """Number of transactions processed by each of the given users."""
        if not user_ids:
            return {}
        query = (
            select(Transaction.processed_by, func.count())
            .where(Transaction.processed_by.in_(user_ids))
            .group_by(Transaction.processed_by)
        )
        result = await self.session.execute(query)
        return {row[0]: row[1] for row in result.all()}
