"""
Unit tests for AccountService.

Tests:
- Account opening (number allocation, branch inheritance, audit)
- Lookup by id, number and customer
- Partial updates and closing
- Balance updates
- Soft delete
- Failure envelopes for unknown customers and accounts
"""

import re
import uuid
from decimal import Decimal

import pytest

from axiobank.models.enums import AccountStatus, AccountType
from axiobank.repositories.audit_repository import AuditLogRepository
from axiobank.schemas.account import AccountCreate, AccountUpdate
from axiobank.services.account_service import AccountService


@pytest.mark.asyncio
class TestAccountService:
    """Test suite for AccountService."""

    async def test_create_account_success(self, db_session, test_customer, admin_user):
        """Test successful account opening."""
        service = AccountService(db_session)

        response = await service.create_account(
            AccountCreate(
                customer_id=test_customer.id,
                account_type=AccountType.SAVINGS,
                initial_deposit=Decimal("250.00"),
                nickname="Rainy day",
            ),
            created_by=admin_user.id,
        )

        assert response.success is True
        assert response.message == "Account created successfully"
        account = response.data
        assert re.fullmatch(r"\d{7}", account.account_number)
        assert account.status == AccountStatus.ACTIVE
        assert account.balance == Decimal("250.00")
        assert account.available_balance == Decimal("250.00")
        assert account.currency == "USD"
        # Branch comes from the customer when none is given
        assert account.branch_id == test_customer.branch_id

        logs = await AuditLogRepository(db_session).get_entity_logs(
            "account", str(account.id)
        )
        assert len(logs) == 1
        assert logs[0].user_id == admin_user.id

    async def test_create_account_unknown_customer(self, db_session):
        service = AccountService(db_session)

        response = await service.create_account(
            AccountCreate(customer_id=uuid.uuid4(), account_type=AccountType.CHECKING)
        )

        assert response.success is False
        assert response.message == "Customer not found"
        assert response.error == "NOT_FOUND"

    async def test_get_account_by_id_and_number(self, db_session, test_account):
        service = AccountService(db_session)

        by_id = await service.get_account_by_id(test_account.id)
        by_number = await service.get_account_by_number("7654321")

        assert by_id.success is True
        assert by_number.success is True
        assert by_id.data.id == by_number.data.id == test_account.id

    async def test_get_missing_account(self, db_session):
        response = await AccountService(db_session).get_account_by_number("0000000")

        assert response.success is False
        assert response.message == "Account not found"

    async def test_get_all_accounts_paginates(self, db_session, test_customer):
        service = AccountService(db_session)
        for _ in range(3):
            await service.create_account(
                AccountCreate(customer_id=test_customer.id, account_type=AccountType.CHECKING)
            )

        response = await service.get_all_accounts(page=1, page_size=2)

        assert response.success is True
        assert len(response.data) == 2
        assert response.total == 3
        assert response.page_size == 2

    async def test_get_accounts_by_customer(self, db_session, test_account, test_customer):
        response = await AccountService(db_session).get_accounts_by_customer(test_customer.id)

        assert [a.id for a in response.data] == [test_account.id]

    async def test_update_account_partial(self, db_session, test_account):
        service = AccountService(db_session)

        response = await service.update_account(
            test_account.id, AccountUpdate(nickname="Bills")
        )

        assert response.success is True
        assert response.data.nickname == "Bills"
        assert response.data.status == AccountStatus.ACTIVE

    async def test_update_account_to_closed_sets_closed_date(self, db_session, test_account):
        response = await AccountService(db_session).update_account(
            test_account.id, AccountUpdate(status=AccountStatus.CLOSED)
        )

        assert response.data.status == AccountStatus.CLOSED
        assert response.data.closed_date is not None

    async def test_update_balance(self, db_session, test_account):
        response = await AccountService(db_session).update_balance(
            test_account.id, Decimal("1234.567")
        )

        assert response.success is True
        assert response.data.balance == Decimal("1234.57")
        assert response.data.available_balance == Decimal("1234.57")
        assert response.data.last_transaction_date is not None

    async def test_delete_account_soft_deletes(self, db_session, test_account):
        service = AccountService(db_session)

        response = await service.delete_account(test_account.id)

        assert response.success is True
        assert response.message == "Account deleted successfully"
        assert test_account.status == AccountStatus.CLOSED
        assert test_account.deleted_at is not None

        lookup = await service.get_account_by_id(test_account.id)
        assert lookup.success is False

    async def test_delete_missing_account(self, db_session):
        response = await AccountService(db_session).delete_account(uuid.uuid4())

        assert response.success is False
        assert response.error == "NOT_FOUND"
