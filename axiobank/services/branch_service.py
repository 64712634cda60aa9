"""
Branch service.

Per-branch statistics (headcount, balances, growth, today's flows, recent
activity) and the staff performance leaderboard.
"""

import logging
import uuid
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from axiobank.core.formatting import ensure_utc, relative_time, start_of_day, to_money, utc_now
from axiobank.core.handlers import envelope
from axiobank.exceptions import NotFoundError
from axiobank.models.enums import AccountStatus, TransactionType
from axiobank.repositories.account_repository import AccountRepository
from axiobank.repositories.branch_repository import BranchRepository
from axiobank.repositories.customer_repository import CustomerRepository
from axiobank.repositories.loan_repository import LoanRepository
from axiobank.repositories.transaction_repository import TransactionRepository
from axiobank.repositories.user_repository import EmployeeRepository
from axiobank.schemas.branch import (
    ActivityItem,
    BranchStatistics,
    StaffPerformance,
    TransactionsSummary,
    TransactionTypeStats,
)
from axiobank.schemas.common import ApiResponse, ListResponse

logger = logging.getLogger(__name__)

DEPOSIT_TYPES = (
    TransactionType.DEPOSIT,
    TransactionType.CHECK_DEPOSIT,
    TransactionType.DIRECT_DEPOSIT,
)
WITHDRAWAL_TYPES = (TransactionType.WITHDRAWAL, TransactionType.ATM_WITHDRAWAL)
TRANSFER_TYPES = (TransactionType.TRANSFER, TransactionType.WIRE_TRANSFER)

DEFAULT_PERFORMANCE_RATING = Decimal("0.85")
RECENT_ACTIVITY_LIMIT = 5
STAFF_LEADERBOARD_SIZE = 10


def first_of_month(day: date) -> date:
    return day.replace(day=1)


def previous_month_start(day: date) -> date:
    return first_of_month(first_of_month(day) - timedelta(days=1))


def monthly_growth(this_month: int, last_month: int) -> str:
    """
    Percentage growth of accounts opened month over month.

    Example:
        >>> monthly_growth(12, 10)
        '+20.0%'
        >>> monthly_growth(3, 0)
        '+0%'
    """
    if last_month == 0:
        return "+0%"
    return "%+.1f%%" % ((this_month - last_month) / last_month * 100)


def summarize_types(
    totals: dict[TransactionType, tuple[int, Decimal]],
    types: tuple[TransactionType, ...],
) -> TransactionTypeStats:
    """Fold the per-type (count, amount) totals of `types` into one bucket."""
    count = 0
    amount = Decimal("0.00")
    for transaction_type in types:
        type_count, type_amount = totals.get(transaction_type, (0, None))
        count += type_count
        amount += to_money(type_amount)
    return TransactionTypeStats(count=count, amount=amount)


def performance_score(rating: Decimal | None) -> str:
    """
    Display a 0..1 rating as a whole percentage.

    Example:
        >>> performance_score(Decimal("0.92"))
        '92%'
        >>> performance_score(None)
        '85%'
    """
    value = DEFAULT_PERFORMANCE_RATING if rating is None else Decimal(rating)
    return f"{int(value * 100)}%"


class BranchService:
    """Service for branch statistics and staff performance."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.branch_repo = BranchRepository(session)
        self.employee_repo = EmployeeRepository(session)
        self.customer_repo = CustomerRepository(session)
        self.account_repo = AccountRepository(session)
        self.loan_repo = LoanRepository(session)
        self.transaction_repo = TransactionRepository(session)

    @envelope("Failed to retrieve branch statistics")
    async def get_branch_statistics(
        self, branch_id: uuid.UUID
    ) -> ApiResponse[BranchStatistics]:
        """
        Collect the statistics shown on a branch's landing page.

        Args:
            branch_id: Branch to report on

        Returns:
            Envelope with BranchStatistics, or "Branch not found"
        """
        branch = await self.branch_repo.get_by_id(branch_id)
        if branch is None:
            raise NotFoundError("Branch")

        statistics = BranchStatistics(
            branch_id=branch.id,
            branch_name=branch.name,
            total_staff=await self.employee_repo.count_active(branch_id),
            total_customers=await self.customer_repo.count_active(branch_id),
            total_accounts=await self.account_repo.count_by_status(
                AccountStatus.ACTIVE, branch_id
            ),
            total_deposits=to_money(await self.account_repo.sum_active_balances(branch_id)),
            total_loans=to_money(await self.loan_repo.sum_active_outstanding(branch_id)),
            monthly_growth=await self._monthly_growth(branch_id),
            today_transactions=await self._today_transactions(branch_id),
            recent_activities=await self._recent_activities(branch_id),
        )
        return ApiResponse.ok(
            statistics, message="Branch statistics retrieved successfully"
        )

    async def _monthly_growth(self, branch_id: uuid.UUID) -> str:
        today = utc_now().date()
        this_month = start_of_day(first_of_month(today))
        last_month = start_of_day(previous_month_start(today))
        tomorrow = start_of_day(today + timedelta(days=1))

        this_month_count = await self.account_repo.count_opened_between(
            this_month, tomorrow, branch_id
        )
        last_month_count = await self.account_repo.count_opened_between(
            last_month, this_month, branch_id
        )
        return monthly_growth(this_month_count, last_month_count)

    async def _today_transactions(self, branch_id: uuid.UUID) -> TransactionsSummary:
        today = start_of_day(utc_now().date())
        totals = await self.transaction_repo.totals_by_type_between(
            today, today + timedelta(days=1), branch_id
        )
        deposits = summarize_types(totals, DEPOSIT_TYPES)
        withdrawals = summarize_types(totals, WITHDRAWAL_TYPES)
        return TransactionsSummary(
            deposits=deposits,
            withdrawals=withdrawals,
            transfers=summarize_types(totals, TRANSFER_TYPES),
            net_change=deposits.amount - withdrawals.amount,
        )

    async def _recent_activities(self, branch_id: uuid.UUID) -> list[ActivityItem]:
        now = utc_now()
        events = []

        for account in await self.account_repo.get_recently_opened(branch_id, limit=2):
            events.append(
                (
                    ensure_utc(account.opened_date),
                    f"New customer account opened ({account.account_number})",
                    "ACCOUNT_OPENED",
                )
            )
        for loan in await self.loan_repo.get_recent_active(branch_id, limit=2):
            events.append(
                (
                    ensure_utc(loan.created_at),
                    f"Loan approved (${to_money(loan.principal_amount)})",
                    "LOAN_APPROVED",
                )
            )

        events.sort(key=lambda event: event[0], reverse=True)
        return [
            ActivityItem(
                description=description,
                timestamp=relative_time(moment, now),
                activity_type=activity_type,
            )
            for moment, description, activity_type in events[:RECENT_ACTIVITY_LIMIT]
        ]

    @envelope("Failed to retrieve staff performance", response_cls=ListResponse)
    async def get_staff_performance(
        self, branch_id: uuid.UUID
    ) -> ListResponse[StaffPerformance]:
        rows = await self.employee_repo.get_active_with_users(branch_id)
        processed = await self.transaction_repo.count_by_processor(
            [user.id for _, user in rows]
        )

        ranked = sorted(
            rows,
            key=lambda row: (
                DEFAULT_PERFORMANCE_RATING
                if row[0].performance_rating is None
                else Decimal(row[0].performance_rating)
            ),
            reverse=True,
        )
        performance = [
            StaffPerformance(
                employee_id=employee.id,
                employee_name=f"{user.first_name} {user.last_name}",
                role=employee.position,
                performance_score=performance_score(employee.performance_rating),
                transactions_processed=processed.get(user.id, 0),
            )
            for employee, user in ranked[:STAFF_LEADERBOARD_SIZE]
        ]
        return ListResponse.ok(
            performance, message="Staff performance retrieved successfully"
        )
