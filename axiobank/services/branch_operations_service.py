"""
Branch operations service.

Tracks operational tasks of a branch and keeps the per-day roll-ups
(daily summary, KPI values, staff productivity).
"""

import logging
import uuid
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from axiobank.core.formatting import start_of_day, to_money, utc_now
from axiobank.core.handlers import envelope
from axiobank.exceptions import InvalidInputError, NotFoundError
from axiobank.models.audit_log import AuditAction
from axiobank.models.branch_operation import (
    BranchOperation,
    DailyOperationsSummary,
    PerformanceMetric,
)
from axiobank.models.enums import OperationStatus
from axiobank.repositories.account_repository import AccountRepository
from axiobank.repositories.branch_operation_repository import (
    BranchOperationRepository,
    DailyOperationsSummaryRepository,
    PerformanceMetricRepository,
    StaffProductivityRepository,
)
from axiobank.repositories.branch_repository import BranchRepository
from axiobank.repositories.loan_repository import LoanApplicationRepository
from axiobank.repositories.transaction_repository import TransactionRepository
from axiobank.schemas.branch import (
    BranchOperationCreate,
    BranchOperationResponse,
    DailySummaryResponse,
    PerformanceMetricResponse,
    StaffProductivityResponse,
)
from axiobank.schemas.common import ApiResponse, ListResponse
from axiobank.services.audit_service import AuditService
from axiobank.services.branch_service import (
    DEPOSIT_TYPES,
    WITHDRAWAL_TYPES,
    summarize_types,
)

logger = logging.getLogger(__name__)

# (name, value, target, unit, trend) seeded for a day without KPI rows
DEFAULT_PERFORMANCE_METRICS = (
    ("Customer Satisfaction", Decimal("4.5"), Decimal("5.0"), "/5.0", "STABLE"),
    ("Transaction Speed", Decimal("3.0"), Decimal("3.0"), "min", "STABLE"),
    ("Service Uptime", Decimal("99.5"), Decimal("99.5"), "%", "UP"),
)


def parse_operation_status(status: str | OperationStatus | None) -> OperationStatus | None:
    """
    Resolve an optional status filter.

    Raises:
        InvalidInputError: If the value is not an OperationStatus
    """
    if status is None or isinstance(status, OperationStatus):
        return status
    try:
        return OperationStatus(status.strip().upper())
    except ValueError:
        raise InvalidInputError(
            "status", f"Invalid operation status: {status}"
        ) from None


class BranchOperationsService:
    """Service for branch tasks and daily branch roll-ups."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.branch_repo = BranchRepository(session)
        self.operation_repo = BranchOperationRepository(session)
        self.summary_repo = DailyOperationsSummaryRepository(session)
        self.metric_repo = PerformanceMetricRepository(session)
        self.productivity_repo = StaffProductivityRepository(session)
        self.account_repo = AccountRepository(session)
        self.application_repo = LoanApplicationRepository(session)
        self.transaction_repo = TransactionRepository(session)
        self.audit_service = AuditService(session)

    @envelope("Failed to retrieve operations", response_cls=ListResponse)
    async def get_branch_operations(
        self,
        branch_id: uuid.UUID,
        status: str | OperationStatus | None = None,
    ) -> ListResponse[BranchOperationResponse]:
        status_filter = parse_operation_status(status)
        operations = await self.operation_repo.get_for_branch(branch_id, status_filter)
        return ListResponse.ok(
            [BranchOperationResponse.model_validate(op) for op in operations],
            message="Operations retrieved successfully",
        )

    @envelope("Failed to create operation")
    async def create_branch_operation(
        self,
        branch_id: uuid.UUID,
        created_by: uuid.UUID | None,
        request: BranchOperationCreate,
    ) -> ApiResponse[BranchOperationResponse]:
        """
        Open a new PENDING task for a branch.

        Args:
            branch_id: Owning branch
            created_by: User creating the task
            request: Task details

        Returns:
            Envelope with the created operation
        """
        if not await self.branch_repo.exists(branch_id):
            raise NotFoundError("Branch")

        operation = await self.operation_repo.add(
            BranchOperation(
                branch_id=branch_id,
                operation_type=request.operation_type,
                title=request.title,
                description=request.description,
                status=OperationStatus.PENDING,
                priority=request.priority,
                created_by=created_by,
                assigned_to=request.assigned_to,
                due_date=request.due_date,
            )
        )

        await self.audit_service.log_event(
            user_id=created_by,
            action=AuditAction.CREATE,
            entity_type="branch_operation",
            entity_id=operation.id,
            new_values={
                "title": operation.title,
                "operation_type": operation.operation_type.value,
                "priority": operation.priority.value,
            },
            description=f"Branch operation '{operation.title}' created",
        )
        await self.session.commit()

        logger.info(f"Branch operation {operation.id} created for branch {branch_id}")
        return ApiResponse.ok(
            BranchOperationResponse.model_validate(operation),
            message="Operation created successfully",
        )

    @envelope("Failed to retrieve daily summary")
    async def get_daily_summary(
        self,
        branch_id: uuid.UUID,
        day: date | None = None,
    ) -> ApiResponse[DailySummaryResponse]:
        """
        Return the stored summary of a branch day, computing it on first read.

        The computed summary counts accounts opened, loan applications and
        completed transactions of that day, totals deposits and withdrawals,
        and takes the active account balances as cash in hand.
        """
        day = day or utc_now().date()
        summary = await self.summary_repo.get_for_day(branch_id, day)

        if summary is None:
            start = start_of_day(day)
            end = start + timedelta(days=1)
            totals = await self.transaction_repo.totals_by_type_between(
                start, end, branch_id
            )

            summary = await self.summary_repo.add(
                DailyOperationsSummary(
                    branch_id=branch_id,
                    summary_date=day,
                    accounts_opened=await self.account_repo.count_opened_between(
                        start, end, branch_id
                    ),
                    loans_processed=await self.application_repo.count_between(
                        start, end, branch_id
                    ),
                    transactions_processed=sum(count for count, _ in totals.values()),
                    total_deposits=summarize_types(totals, DEPOSIT_TYPES).amount,
                    total_withdrawals=summarize_types(totals, WITHDRAWAL_TYPES).amount,
                    cash_in_hand=to_money(
                        await self.account_repo.sum_active_balances(branch_id)
                    ),
                )
            )
            await self.session.commit()
            logger.info(f"Daily summary computed for branch {branch_id} on {day}")

        return ApiResponse.ok(
            DailySummaryResponse.model_validate(summary),
            message="Daily summary retrieved successfully",
        )

    @envelope("Failed to retrieve performance metrics", response_cls=ListResponse)
    async def get_performance_metrics(
        self,
        branch_id: uuid.UUID,
        day: date | None = None,
    ) -> ListResponse[PerformanceMetricResponse]:
        day = day or utc_now().date()
        metrics = await self.metric_repo.get_for_day(branch_id, day)

        if not metrics:
            for name, value, target, unit, trend in DEFAULT_PERFORMANCE_METRICS:
                await self.metric_repo.add(
                    PerformanceMetric(
                        branch_id=branch_id,
                        metric_date=day,
                        metric_name=name,
                        metric_value=value,
                        target_value=target,
                        unit=unit,
                        trend=trend,
                    )
                )
            await self.session.commit()
            metrics = await self.metric_repo.get_for_day(branch_id, day)

        return ListResponse.ok(
            [PerformanceMetricResponse.model_validate(metric) for metric in metrics],
            message="Performance metrics retrieved successfully",
        )

    @envelope("Failed to retrieve staff productivity", response_cls=ListResponse)
    async def get_staff_productivity(
        self,
        branch_id: uuid.UUID,
        day: date | None = None,
    ) -> ListResponse[StaffProductivityResponse]:
        day = day or utc_now().date()
        rows = await self.productivity_repo.get_for_day_with_names(branch_id, day)
        productivity = [
            StaffProductivityResponse(
                employee_id=record.employee_id,
                employee_name=f"{first_name} {last_name}",
                position=position,
                productivity_date=record.productivity_date,
                transactions_processed=record.transactions_processed,
                customers_served=record.customers_served,
                accounts_opened=record.accounts_opened,
                loans_processed=record.loans_processed,
                productivity_score=record.productivity_score,
            )
            for record, first_name, last_name, position in rows
        ]
        return ListResponse.ok(
            productivity, message="Staff productivity retrieved successfully"
        )
