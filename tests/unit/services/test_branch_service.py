"""
Unit tests for BranchService and its helpers.

Tests:
- Month arithmetic, growth and score formatting
- Branch statistics (headcount, balances, today's flows, recent activity)
- Staff performance leaderboard
"""

import uuid
from datetime import date, timedelta
from decimal import Decimal

import pytest

from axiobank.core.formatting import utc_now
from axiobank.models import Employee, Loan, User
from axiobank.models.enums import (
    Department,
    LoanStatus,
    LoanType,
    TransactionType,
    UserRole,
)
from axiobank.services.branch_service import (
    BranchService,
    monthly_growth,
    performance_score,
    previous_month_start,
    summarize_types,
)


class TestBranchHelpers:
    def test_previous_month_start(self):
        assert previous_month_start(date(2024, 3, 31)) == date(2024, 2, 1)
        assert previous_month_start(date(2024, 1, 15)) == date(2023, 12, 1)

    def test_monthly_growth(self):
        assert monthly_growth(12, 10) == "+20.0%"
        assert monthly_growth(5, 10) == "-50.0%"
        assert monthly_growth(3, 0) == "+0%"

    def test_performance_score(self):
        assert performance_score(Decimal("0.92")) == "92%"
        assert performance_score(None) == "85%"

    def test_summarize_types(self):
        totals = {
            TransactionType.DEPOSIT: (2, Decimal("150.00")),
            TransactionType.CHECK_DEPOSIT: (1, Decimal("25.50")),
            TransactionType.WITHDRAWAL: (1, Decimal("40.00")),
        }

        stats = summarize_types(
            totals, (TransactionType.DEPOSIT, TransactionType.CHECK_DEPOSIT)
        )

        assert stats.count == 3
        assert stats.amount == Decimal("175.50")


@pytest.mark.asyncio
class TestBranchService:
    """Test suite for BranchService."""

    async def test_branch_statistics(
        self, db_session, test_branch, teller, test_customer, test_account, make_transaction
    ):
        now = utc_now()
        test_account.opened_date = now - timedelta(hours=2)
        db_session.add(
            Loan(
                loan_number="LN-0001",
                customer_id=test_customer.id,
                branch_id=test_branch.id,
                loan_type=LoanType.PERSONAL_LOAN,
                principal_amount=Decimal("20000.00"),
                outstanding_balance=Decimal("15000.00"),
                status=LoanStatus.ACTIVE,
                created_at=now - timedelta(minutes=30),
            )
        )
        await db_session.commit()
        await make_transaction(test_account, TransactionType.DEPOSIT, "100.00")
        await make_transaction(test_account, TransactionType.CHECK_DEPOSIT, "50.00")
        await make_transaction(test_account, TransactionType.WITHDRAWAL, "30.00")
        await make_transaction(test_account, TransactionType.TRANSFER, "20.00")

        response = await BranchService(db_session).get_branch_statistics(test_branch.id)

        assert response.success is True
        assert response.message == "Branch statistics retrieved successfully"
        stats = response.data
        assert stats.branch_name == "Downtown"
        assert stats.total_staff == 1
        assert stats.total_customers == 1
        assert stats.total_accounts == 1
        assert stats.total_deposits == Decimal("2500.00")
        assert stats.total_loans == Decimal("15000.00")

        today = stats.today_transactions
        assert (today.deposits.count, today.deposits.amount) == (2, Decimal("150.00"))
        assert (today.withdrawals.count, today.withdrawals.amount) == (1, Decimal("30.00"))
        assert (today.transfers.count, today.transfers.amount) == (1, Decimal("20.00"))
        assert today.net_change == Decimal("120.00")

        assert [(a.activity_type, a.description, a.timestamp) for a in stats.recent_activities] == [
            ("LOAN_APPROVED", "Loan approved ($20000.00)", "30 minutes ago"),
            ("ACCOUNT_OPENED", "New customer account opened (7654321)", "2 hours ago"),
        ]

    async def test_branch_statistics_unknown_branch(self, db_session):
        response = await BranchService(db_session).get_branch_statistics(uuid.uuid4())

        assert response.success is False
        assert response.message == "Branch not found"

    async def test_staff_performance(
        self, db_session, test_branch, teller, test_account, make_transaction
    ):
        teller_user, teller_employee = teller
        clerk = User(
            username="clerk1",
            email="clerk1@axiobank.com",
            first_name="Morgan",
            last_name="Hale",
            role=UserRole.TELLER,
            branch_id=test_branch.id,
        )
        db_session.add(clerk)
        await db_session.flush()
        db_session.add(
            Employee(
                user_id=clerk.id,
                employee_number="EMP-0002",
                department=Department.CUSTOMER_SERVICE,
                position="Clerk",
                branch_id=test_branch.id,
            )
        )
        await db_session.commit()
        for amount in ("10.00", "20.00"):
            await make_transaction(
                test_account, TransactionType.DEPOSIT, amount, processed_by=teller_user.id
            )

        response = await BranchService(db_session).get_staff_performance(test_branch.id)

        assert response.success is True
        assert response.message == "Staff performance retrieved successfully"
        assert [
            (s.employee_name, s.role, s.performance_score, s.transactions_processed)
            for s in response.data
        ] == [
            ("Taylor Reed", "Senior Teller", "92%", 2),
            ("Morgan Hale", "Clerk", "85%", 0),
        ]
        assert response.data[0].employee_id == teller_employee.id
