"""
Admin dashboard service.

Aggregates bank-wide counters for the admin dashboard and derives a
system health estimate from current activity.
"""

import logging
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from axiobank.core.formatting import start_of_day, to_money, utc_now
from axiobank.core.handlers import envelope
from axiobank.models.audit_log import AuditAction
from axiobank.models.enums import AccountStatus, AlertSeverity
from axiobank.repositories.account_repository import AccountRepository
from axiobank.repositories.alert_repository import SystemAlertRepository
from axiobank.repositories.audit_repository import AuditLogRepository
from axiobank.repositories.branch_repository import BranchRepository
from axiobank.repositories.customer_repository import CustomerRepository
from axiobank.repositories.loan_repository import LoanApplicationRepository, LoanRepository
from axiobank.repositories.transaction_repository import TransactionRepository
from axiobank.repositories.user_repository import UserRepository, UserSessionRepository
from axiobank.schemas.admin import BranchSummary, DashboardMetrics, SystemHealth
from axiobank.schemas.common import ApiResponse, ListResponse

logger = logging.getLogger(__name__)


def estimate_health(
    active_sessions: int,
    recent_transactions: int,
    recent_logins: int,
    total_transactions: int,
) -> tuple[str, float, float, float]:
    """
    Estimate resource usage from activity.

    Returns:
        (status, memory %, cpu %, disk %)

    Example:
        >>> estimate_health(4, 10, 2, 5000)
        ('HEALTHY', 56.0, 22.0, 60.0)
    """
    memory = min(45.0 + 2.5 * active_sessions + 0.1 * recent_transactions, 95.0)
    cpu = min(15.0 + 0.5 * recent_transactions + 1.0 * recent_logins, 90.0)
    disk = min(55.0 + 0.001 * total_transactions, 85.0)
    status = "HEALTHY" if memory < 80 and cpu < 70 else "WARNING"
    return status, round(memory, 2), round(cpu, 2), round(disk, 2)


class AdminDashboardService:
    """Service behind the admin dashboard."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.customer_repo = CustomerRepository(session)
        self.user_repo = UserRepository(session)
        self.session_repo = UserSessionRepository(session)
        self.account_repo = AccountRepository(session)
        self.transaction_repo = TransactionRepository(session)
        self.loan_repo = LoanRepository(session)
        self.application_repo = LoanApplicationRepository(session)
        self.branch_repo = BranchRepository(session)
        self.alert_repo = SystemAlertRepository(session)
        self.audit_repo = AuditLogRepository(session)

    @envelope("Error retrieving dashboard metrics")
    async def get_dashboard_metrics(self) -> ApiResponse[DashboardMetrics]:
        now = utc_now()
        today = start_of_day(now.date())
        last_day = now - timedelta(hours=24)

        metrics = DashboardMetrics(
            total_customers=await self.customer_repo.count(),
            total_employees=await self.user_repo.count_staff(),
            active_employees=await self.user_repo.count_staff(active_only=True),
            total_accounts=await self.account_repo.count(),
            total_transactions=await self.transaction_repo.count(),
            total_loans=await self.loan_repo.count(),
            total_branches=await self.branch_repo.count(),
            daily_transactions=await self.transaction_repo.count_since(today),
            daily_transaction_value=to_money(await self.transaction_repo.sum_since(today)),
            active_sessions=await self.session_repo.count_active(since=last_day),
            pending_loan_approvals=await self.application_repo.count_pending(),
            pending_account_approvals=await self.account_repo.count_by_status(
                AccountStatus.PENDING_APPROVAL
            ),
            system_alerts=await self.alert_repo.count_unresolved(),
            critical_alerts=await self.alert_repo.count_unresolved(AlertSeverity.CRITICAL),
            successful_logins=await self.user_repo.count_logged_in_since(last_day),
            failed_logins=await self.audit_repo.count_by_action(
                AuditAction.LOGIN_FAILED, since=last_day
            ),
            last_calculated=now,
        )
        return ApiResponse.ok(metrics, message="Dashboard metrics retrieved successfully")

    @envelope("Error retrieving system health")
    async def get_system_health(self) -> ApiResponse[SystemHealth]:
        """
        Deterministic health estimate.

        Memory grows with active sessions and hourly transactions, CPU with
        hourly transactions and logins, disk with the size of the ledger.
        """
        now = utc_now()
        last_hour = now - timedelta(hours=1)

        active_sessions = await self.session_repo.count_active()
        recent_transactions = await self.transaction_repo.count_since(last_hour)
        recent_logins = await self.user_repo.count_logged_in_since(last_hour)
        total_transactions = await self.transaction_repo.count()

        status, memory, cpu, disk = estimate_health(
            active_sessions, recent_transactions, recent_logins, total_transactions
        )
        health = SystemHealth(
            status=status,
            memory_usage=memory,
            cpu_usage=cpu,
            disk_space_used=disk,
            active_connections=active_sessions,
            recent_transactions=recent_transactions,
            recent_logins=recent_logins,
            last_updated=now,
        )
        return ApiResponse.ok(health, message="System health retrieved successfully")

    @envelope("Error retrieving branches", response_cls=ListResponse)
    async def get_all_branches(self) -> ListResponse[BranchSummary]:
        branches = await self.branch_repo.list_ordered()
        return ListResponse.ok(
            [BranchSummary.model_validate(branch) for branch in branches],
            message="Branches retrieved successfully",
        )
