"""
Unit tests for TransactionRepository.

Tests:
- Transaction id existence
- Ledger reads over a date window
- Per-type totals (completed only by default)
- Large deposit and pending transaction queries
- Counts per processing user
"""

import uuid
from datetime import timedelta
from decimal import Decimal

import pytest

from axiobank.core.formatting import utc_now
from axiobank.models.enums import TransactionStatus, TransactionType
from axiobank.repositories.transaction_repository import TransactionRepository


@pytest.mark.asyncio
class TestTransactionRepository:
    """Test suite for TransactionRepository."""

    async def test_transaction_id_exists(self, db_session, test_account, make_transaction):
        transaction = await make_transaction(test_account, TransactionType.DEPOSIT, "10.00")
        repo = TransactionRepository(db_session)

        assert await repo.transaction_id_exists(transaction.transaction_id) is True
        assert await repo.transaction_id_exists("TXN-MISSING") is False

    async def test_get_for_account_between(self, db_session, test_account, make_transaction):
        now = utc_now()
        old = await make_transaction(
            test_account, TransactionType.DEPOSIT, "10.00", transaction_date=now - timedelta(days=45)
        )
        first = await make_transaction(
            test_account, TransactionType.DEPOSIT, "20.00", transaction_date=now - timedelta(days=2)
        )
        second = await make_transaction(
            test_account, TransactionType.WITHDRAWAL, "5.00", transaction_date=now - timedelta(days=1)
        )

        entries = await TransactionRepository(db_session).get_for_account_between(
            test_account.id, now - timedelta(days=30), now
        )

        assert [e.id for e in entries] == [second.id, first.id]
        assert old.id not in [e.id for e in entries]

    async def test_totals_by_type_between(self, db_session, test_account, make_transaction):
        now = utc_now()
        await make_transaction(test_account, TransactionType.DEPOSIT, "100.00")
        await make_transaction(test_account, TransactionType.DEPOSIT, "50.00")
        await make_transaction(test_account, TransactionType.WITHDRAWAL, "30.00")
        await make_transaction(
            test_account, TransactionType.WITHDRAWAL, "999.00", status=TransactionStatus.FAILED
        )
        repo = TransactionRepository(db_session)

        totals = await repo.totals_by_type_between(
            now - timedelta(hours=1), now + timedelta(hours=1)
        )
        all_statuses = await repo.totals_by_type_between(
            now - timedelta(hours=1), now + timedelta(hours=1), status=None
        )

        assert totals[TransactionType.DEPOSIT] == (2, Decimal("150.00"))
        assert totals[TransactionType.WITHDRAWAL] == (1, Decimal("30.00"))
        assert TransactionType.TRANSFER not in totals
        assert all_statuses[TransactionType.WITHDRAWAL][0] == 2

    async def test_counts_and_sums_since(self, db_session, test_account, make_transaction):
        now = utc_now()
        await make_transaction(test_account, TransactionType.DEPOSIT, "40.00")
        await make_transaction(
            test_account,
            TransactionType.DEPOSIT,
            "60.00",
            status=TransactionStatus.PENDING,
        )
        await make_transaction(
            test_account, TransactionType.DEPOSIT, "75.00", transaction_date=now - timedelta(days=3)
        )
        repo = TransactionRepository(db_session)
        since = now - timedelta(hours=1)

        assert await repo.count_since(since) == 2
        assert await repo.count_since(since, status=TransactionStatus.PENDING) == 1
        assert await repo.count_since(since, branch_id=uuid.uuid4()) == 0
        assert await repo.sum_since(since) == Decimal("100.00")

    async def test_get_large_deposits(self, db_session, test_account, make_transaction):
        since = utc_now() - timedelta(days=1)
        await make_transaction(test_account, TransactionType.DEPOSIT, "12000.00")
        await make_transaction(test_account, TransactionType.DEPOSIT, "25000.00")
        await make_transaction(test_account, TransactionType.DEPOSIT, "9000.00")
        await make_transaction(test_account, TransactionType.WIRE_TRANSFER, "50000.00")

        deposits = await TransactionRepository(db_session).get_large_deposits(
            Decimal("10000"), since
        )

        assert [d.amount for d in deposits] == [Decimal("25000.00"), Decimal("12000.00")]

    async def test_get_pending_above(self, db_session, test_account, make_transaction):
        since = utc_now() - timedelta(days=1)
        pending = await make_transaction(
            test_account,
            TransactionType.WIRE_TRANSFER,
            "150000.00",
            status=TransactionStatus.PENDING,
        )
        await make_transaction(
            test_account, TransactionType.WIRE_TRANSFER, "200000.00"
        )
        await make_transaction(
            test_account,
            TransactionType.TRANSFER,
            "500.00",
            status=TransactionStatus.PENDING,
        )

        rows = await TransactionRepository(db_session).get_pending_above(
            Decimal("100000"), since
        )

        assert [r.id for r in rows] == [pending.id]

    async def test_count_by_processor(self, db_session, test_account, teller, make_transaction):
        user, _ = teller
        await make_transaction(test_account, TransactionType.DEPOSIT, "1.00", processed_by=user.id)
        await make_transaction(test_account, TransactionType.DEPOSIT, "2.00", processed_by=user.id)
        await make_transaction(test_account, TransactionType.DEPOSIT, "3.00")
        repo = TransactionRepository(db_session)

        assert await repo.count_by_processor([user.id]) == {user.id: 2}
        assert await repo.count_by_processor([]) == {}
