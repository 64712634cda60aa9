"""
Pydantic schemas for the admin back office.

This module groups the DTOs of the admin services:
- Alerts: SystemAlertResponse, ComplianceAlertResponse
- Audit: AuditLogEntry, AuditExport, SystemLogEntry
- Dashboard: DashboardMetrics, SystemHealth, BranchSummary
- Workflow: WorkflowApproval
"""

import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, computed_field

from axiobank.models.enums import AlertSeverity
from axiobank.schemas.common import Money


# =============================================================================
# Alerts
# =============================================================================


class SystemAlertResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    alert_type: str
    severity: AlertSeverity
    title: str
    message: str
    source: str | None
    is_resolved: bool
    resolved_by: uuid.UUID | None
    resolved_at: datetime | None
    resolution: str | None
    created_at: datetime

    @computed_field
    @property
    def action_required(self) -> bool:
        return not self.is_resolved and self.severity in (
            AlertSeverity.HIGH,
            AlertSeverity.CRITICAL,
        )


class ComplianceAlertResponse(BaseModel):
    """
    Compliance queue item.

    id is a compliance check UUID, "RISK_<customer id>" for high-risk
    customers, or "CTR_<transaction id>" for currency transaction reports.
    """

    id: str
    alert_type: str
    customer_id: str | None = None
    customer_name: str | None = None
    account_id: str | None = None
    amount: Money | None = None
    description: str
    risk_score: float
    review_status: str
    priority: str
    created_at: datetime


# =============================================================================
# Audit
# =============================================================================


class AuditLogEntry(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID | None
    user_name: str
    user_role: str
    action: str
    entity_type: str
    entity_id: str | None
    description: str | None
    ip_address: str | None
    timestamp: datetime


class AuditExport(BaseModel):
    format: str
    filename: str
    content: str
    record_count: int


class SystemLogEntry(BaseModel):
    id: str
    level: str
    message: str
    source: str
    timestamp: datetime


# =============================================================================
# Dashboard
# =============================================================================


class DashboardMetrics(BaseModel):
    total_customers: int
    total_employees: int
    active_employees: int
    total_accounts: int
    total_transactions: int
    total_loans: int
    total_branches: int
    daily_transactions: int
    daily_transaction_value: Money
    active_sessions: int
    pending_loan_approvals: int
    pending_account_approvals: int
    system_alerts: int
    critical_alerts: int
    successful_logins: int
    failed_logins: int
    last_calculated: datetime


class SystemHealth(BaseModel):
    status: str
    memory_usage: float
    cpu_usage: float
    disk_space_used: float
    active_connections: int
    recent_transactions: int
    recent_logins: int
    last_updated: datetime


class BranchSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    code: str
    city: str | None
    state: str | None
    phone: str | None
    email: str | None
    manager_id: uuid.UUID | None
    is_active: bool
    opened_date: date | None


# =============================================================================
# Workflow
# =============================================================================


class WorkflowApproval(BaseModel):
    """
    Pending item in the approval queue.

    id carries a kind prefix: LOAN_, ACCT_, TXN_ or FRZA_ followed by the
    UUID of the underlying record.
    """

    id: str
    workflow_type: str
    entity_id: str
    requester_id: str | None
    requester_name: str
    description: str
    amount: Money | None = None
    status: str
    priority: str
    created_at: datetime
    deadline: datetime
