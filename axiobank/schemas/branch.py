"""
Pydantic schemas for branch statistics and branch operations.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from axiobank.models.enums import OperationStatus, OperationType, Priority
from axiobank.schemas.common import Money


# =============================================================================
# Branch statistics
# =============================================================================


class TransactionTypeStats(BaseModel):
    count: int = 0
    amount: Money = Decimal("0.00")


class TransactionsSummary(BaseModel):
    deposits: TransactionTypeStats
    withdrawals: TransactionTypeStats
    transfers: TransactionTypeStats
    net_change: Money


class ActivityItem(BaseModel):
    description: str
    timestamp: str
    activity_type: str


class BranchStatistics(BaseModel):
    branch_id: uuid.UUID
    branch_name: str
    total_staff: int
    total_customers: int
    total_accounts: int
    total_deposits: Money
    total_loans: Money
    monthly_growth: str
    today_transactions: TransactionsSummary
    recent_activities: list[ActivityItem]


class StaffPerformance(BaseModel):
    employee_id: uuid.UUID
    employee_name: str
    role: str
    performance_score: str
    transactions_processed: int


# =============================================================================
# Branch operations
# =============================================================================


class BranchOperationCreate(BaseModel):
    operation_type: OperationType = OperationType.GENERAL
    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    priority: Priority = Priority.MEDIUM
    assigned_to: uuid.UUID | None = None
    due_date: datetime | None = None


class BranchOperationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    branch_id: uuid.UUID
    operation_type: OperationType
    title: str
    description: str | None
    status: OperationStatus
    priority: Priority
    created_by: uuid.UUID | None
    assigned_to: uuid.UUID | None
    due_date: datetime | None
    completed_at: datetime | None
    created_at: datetime


class DailySummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    branch_id: uuid.UUID
    summary_date: date
    accounts_opened: int
    loans_processed: int
    transactions_processed: int
    total_deposits: Money
    total_withdrawals: Money
    cash_in_hand: Money


class PerformanceMetricResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    branch_id: uuid.UUID
    metric_date: date
    metric_name: str
    metric_value: Decimal
    target_value: Decimal | None
    unit: str | None
    trend: str


class StaffProductivityResponse(BaseModel):
    employee_id: uuid.UUID
    employee_name: str
    position: str
    productivity_date: date
    transactions_processed: int
    customers_served: int
    accounts_opened: int
    loans_processed: int
    productivity_score: Decimal
