"""
Pytest configuration and fixtures for the AxioBank back-office tests.

This module provides:
- An in-memory SQLite database per test (aiosqlite)
- Branch, staff, customer and account fixtures
- Factories for transactions and other ledger rows
"""

# Set environment variables BEFORE importing anything from axiobank
import os

os.environ["SECRET_KEY"] = "test-secret-key-that-is-at-least-32-characters-long"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ARGON2_TIME_COST"] = "1"
os.environ["ARGON2_MEMORY_COST"] = "8192"
os.environ["ARGON2_PARALLELISM"] = "1"
os.environ["LOG_LEVEL"] = "WARNING"

import uuid
from collections.abc import AsyncGenerator
from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from axiobank.core.database import create_session_factory
from axiobank.core.formatting import utc_now
from axiobank.core.identifiers import generate_transaction_id
from axiobank.models import (
    Account,
    Base,
    Branch,
    Customer,
    Employee,
    Transaction,
    User,
)
from axiobank.models.enums import (
    AccountStatus,
    AccountType,
    Department,
    TransactionStatus,
    TransactionType,
    UserRole,
)


# ============================================================================
# Database Fixtures
# ============================================================================
@pytest_asyncio.fixture
async def test_engine():
    """
    Create a fresh in-memory database for one test.

    StaticPool keeps the single SQLite connection alive so every session
    sees the same database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Session used by services under test."""
    factory = create_session_factory(test_engine)
    async with factory() as session:
        yield session


# ============================================================================
# Tenancy and Staff Fixtures
# ============================================================================
@pytest_asyncio.fixture
async def test_branch(db_session: AsyncSession) -> Branch:
    branch = Branch(
        name="Downtown",
        code="DT-001",
        city="Springfield",
        state="IL",
        phone="555-0100",
        email="downtown@axiobank.com",
        opened_date=date(2015, 3, 1),
    )
    db_session.add(branch)
    await db_session.commit()
    return branch


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> User:
    user = User(
        username="admin",
        email="admin@axiobank.com",
        first_name="Avery",
        last_name="Admin",
        role=UserRole.SYSTEM_ADMIN,
    )
    db_session.add(user)
    await db_session.commit()
    return user


@pytest_asyncio.fixture
async def teller(db_session: AsyncSession, test_branch: Branch) -> tuple[User, Employee]:
    """Active teller with an HR record in the test branch."""
    user = User(
        username="teller1",
        email="teller1@axiobank.com",
        first_name="Taylor",
        last_name="Reed",
        role=UserRole.TELLER,
        branch_id=test_branch.id,
    )
    db_session.add(user)
    await db_session.flush()

    employee = Employee(
        user_id=user.id,
        employee_number="EMP-0001",
        department=Department.OPERATIONS,
        position="Senior Teller",
        performance_rating=Decimal("0.92"),
        branch_id=test_branch.id,
    )
    db_session.add(employee)
    await db_session.commit()
    return user, employee


# ============================================================================
# Customer and Account Fixtures
# ============================================================================
@pytest_asyncio.fixture
async def test_customer(db_session: AsyncSession, test_branch: Branch) -> Customer:
    customer = Customer(
        customer_number="1234567",
        first_name="Jordan",
        last_name="Blake",
        email="jordan.blake@example.com",
        phone="+15550001111",
        annual_income=Decimal("85000.00"),
        branch_id=test_branch.id,
    )
    db_session.add(customer)
    await db_session.commit()
    return customer


@pytest_asyncio.fixture
async def test_account(
    db_session: AsyncSession, test_customer: Customer, test_branch: Branch
) -> Account:
    account = Account(
        account_number="7654321",
        customer_id=test_customer.id,
        branch_id=test_branch.id,
        account_type=AccountType.CHECKING,
        status=AccountStatus.ACTIVE,
        balance=Decimal("2500.00"),
        available_balance=Decimal("2500.00"),
        opened_date=utc_now(),
    )
    db_session.add(account)
    await db_session.commit()
    return account


@pytest.fixture
def make_transaction(db_session: AsyncSession):
    """
    Factory inserting a ledger transaction.

    Example:
        await make_transaction(account, TransactionType.DEPOSIT, "100.00")
    """

    async def _make(
        account: Account,
        transaction_type: TransactionType,
        amount: str | Decimal,
        status: TransactionStatus = TransactionStatus.COMPLETED,
        transaction_date=None,
        processed_by: uuid.UUID | None = None,
        description: str | None = None,
        balance_after: str | Decimal | None = None,
    ) -> Transaction:
        transaction = Transaction(
            transaction_id=generate_transaction_id(),
            account_id=account.id,
            branch_id=account.branch_id,
            transaction_type=transaction_type,
            status=status,
            amount=Decimal(amount),
            balance_after=Decimal(balance_after) if balance_after is not None else None,
            description=description,
            processed_by=processed_by,
            transaction_date=transaction_date or utc_now(),
        )
        db_session.add(transaction)
        await db_session.commit()
        return transaction

    return _make
