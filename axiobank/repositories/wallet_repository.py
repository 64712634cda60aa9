"""
Master wallet repositories.

This module provides repositories for master wallets, their ledger,
float allocations, wallet security alerts and reconciliation records.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from axiobank.models.enums import AllocationStatus, MasterWalletType, ReconciliationStatus
from axiobank.models.wallet import (
    FloatAllocation,
    MasterWallet,
    MasterWalletTransaction,
    ReconciliationRecord,
    WalletSecurityAlert,
)
from axiobank.repositories.base import BaseRepository


class MasterWalletRepository(BaseRepository[MasterWallet]):
    """Repository for master wallets."""

    def __init__(self, session: AsyncSession):
        super().__init__(MasterWallet, session)

    async def get_all_with_activity(self) -> list[Any]:
        """
        Every wallet with its ledger size and latest movement.

        Returns:
            Rows of (MasterWallet, transaction_count, last_transaction_at),
            ordered by wallet name
        """
        activity = (
            select(
                MasterWalletTransaction.wallet_id.label("wallet_id"),
                func.count(MasterWalletTransaction.id).label("transaction_count"),
                func.max(MasterWalletTransaction.created_at).label("last_transaction_at"),
            )
            .group_by(MasterWalletTransaction.wallet_id)
            .subquery()
        )
        query = (
            select(
                MasterWallet,
                func.coalesce(activity.c.transaction_count, 0),
                activity.c.last_transaction_at,
            )
            .outerjoin(activity, activity.c.wallet_id == MasterWallet.id)
            .order_by(MasterWallet.wallet_name)
        )
        result = await self.session.execute(query)
        return list(result.all())

    async def get_totals(self) -> tuple[int, Decimal | None, Decimal | None, Decimal | None]:
        """Wallet count and sums of balance, available and reserve balance."""
        result = await self.session.execute(
            select(
                func.count(MasterWallet.id),
                func.sum(MasterWallet.balance),
                func.sum(MasterWallet.available_balance),
                func.sum(MasterWallet.reserve_balance),
            )
        )
        count, balance, available, reserve = result.one()
        return count, balance, available, reserve

    async def get_by_type(self, wallet_type: MasterWalletType) -> MasterWallet | None:
        query = (
            select(MasterWallet)
            .where(MasterWallet.wallet_type == wallet_type)
            .order_by(MasterWallet.created_at)
            .limit(1)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()


class MasterWalletTransactionRepository(BaseRepository[MasterWalletTransaction]):
    """Repository for the master wallet ledger."""

    def __init__(self, session: AsyncSession):
        super().__init__(MasterWalletTransaction, session)

    async def reference_exists(self, reference: str) -> bool:
        result = await self.session.execute(
            select(func.count())
            .select_from(MasterWalletTransaction)
            .where(MasterWalletTransaction.transaction_reference == reference)
        )
        return result.scalar_one() > 0

    async def get_recent(
        self,
        wallet_id: uuid.UUID | None = None,
        limit: int = 100,
    ) -> list[MasterWalletTransaction]:
        query = select(MasterWalletTransaction)
        if wallet_id is not None:
            query = query.where(MasterWalletTransaction.wallet_id == wallet_id)
        query = query.order_by(MasterWalletTransaction.created_at.desc()).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count_since(self, since: datetime) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(MasterWalletTransaction)
            .where(MasterWalletTransaction.created_at >= since)
        )
        return result.scalar_one()

    async def get_since(
        self,
        wallet_id: uuid.UUID,
        since: datetime,
    ) -> list[MasterWalletTransaction]:
        query = (
            select(MasterWalletTransaction)
            .where(
                MasterWalletTransaction.wallet_id == wallet_id,
                MasterWalletTransaction.created_at >= since,
            )
            .order_by(MasterWalletTransaction.created_at.desc())
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_latest(self, wallet_id: uuid.UUID) -> MasterWalletTransaction | None:
        query = (
            select(MasterWalletTransaction)
            .where(MasterWalletTransaction.wallet_id == wallet_id)
            .order_by(MasterWalletTransaction.created_at.desc())
            .limit(1)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()


class FloatAllocationRepository(BaseRepository[FloatAllocation]):
    """Repository for branch float allocations."""

    def __init__(self, session: AsyncSession):
        super().__init__(FloatAllocation, session)

    async def get_filtered(
        self, status: AllocationStatus | None = None
    ) -> list[FloatAllocation]:
        query = select(FloatAllocation)
        if status is not None:
            query = query.where(FloatAllocation.status == status)
        query = query.order_by(FloatAllocation.created_at.desc())
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count_by_status(self, status: AllocationStatus) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(FloatAllocation)
            .where(FloatAllocation.status == status)
        )
        return result.scalar_one()


class WalletSecurityAlertRepository(BaseRepository[WalletSecurityAlert]):
    """Repository for wallet security alerts."""

    def __init__(self, session: AsyncSession):
        super().__init__(WalletSecurityAlert, session)

    async def get_recent(self, limit: int = 100) -> list[WalletSecurityAlert]:
        query = (
            select(WalletSecurityAlert)
            .order_by(
                WalletSecurityAlert.is_resolved.asc(),
                WalletSecurityAlert.created_at.desc(),
            )
            .limit(limit)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count_unresolved(self) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(WalletSecurityAlert)
            .where(WalletSecurityAlert.is_resolved.is_(False))
        )
        return result.scalar_one()


class ReconciliationRecordRepository(BaseRepository[ReconciliationRecord]):
    """Repository for reconciliation records."""

    def __init__(self, session: AsyncSession):
        super().__init__(ReconciliationRecord, session)

    async def get_filtered(
        self, wallet_id: uuid.UUID | None = None
    ) -> list[ReconciliationRecord]:
        query = select(ReconciliationRecord)
        if wallet_id is not None:
            query = query.where(ReconciliationRecord.wallet_id == wallet_id)
        query = query.order_by(ReconciliationRecord.reconciliation_date.desc())
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count_by_status(self, status: ReconciliationStatus) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(ReconciliationRecord)
            .where(ReconciliationRecord.status == status)
        )
        return result.scalar_one()
