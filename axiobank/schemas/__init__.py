"""
Pydantic schemas for service requests and responses.

This package provides all Pydantic models used for:
- Request validation
- Response serialization inside the uniform envelope
"""

from axiobank.schemas.account import AccountCreate, AccountResponse, AccountUpdate
from axiobank.schemas.admin import (
    AuditExport,
    AuditLogEntry,
    BranchSummary,
    ComplianceAlertResponse,
    DashboardMetrics,
    SystemAlertResponse,
    SystemHealth,
    SystemLogEntry,
    WorkflowApproval,
)
from axiobank.schemas.branch import (
    ActivityItem,
    BranchOperationCreate,
    BranchOperationResponse,
    BranchStatistics,
    DailySummaryResponse,
    PerformanceMetricResponse,
    StaffPerformance,
    StaffProductivityResponse,
    TransactionsSummary,
    TransactionTypeStats,
)
from axiobank.schemas.card import CardCreate, CardPaymentResult, CardResponse, IssuedCard
from axiobank.schemas.common import ApiResponse, ListResponse, Money, PaginationParams
from axiobank.schemas.credit_assessment import (
    CreditAssessmentCreate,
    CreditAssessmentResponse,
    CreditScoreSyncResult,
)
from axiobank.schemas.customer import CustomerCreate, CustomerResponse, CustomerUpdate
from axiobank.schemas.gateway import (
    AuthenticationRequest,
    AuthenticationResult,
    BrowserInfo,
    EnrollmentResult,
    SmsResult,
)
from axiobank.schemas.statement import StatementLine, StatementRequest, StatementSummary
from axiobank.schemas.wallet import (
    CompanyProfit,
    FloatAllocationResponse,
    MasterWalletDashboard,
    MasterWalletResponse,
    ReconciliationResponse,
    WalletSecurityAlertResponse,
    WalletTransactionCreate,
    WalletTransactionResponse,
)

__all__ = [
    # Common
    "ApiResponse",
    "ListResponse",
    "Money",
    "PaginationParams",
    # Account
    "AccountCreate",
    "AccountUpdate",
    "AccountResponse",
    # Customer
    "CustomerCreate",
    "CustomerUpdate",
    "CustomerResponse",
    # Card
    "CardCreate",
    "IssuedCard",
    "CardResponse",
    "CardPaymentResult",
    # Credit assessment
    "CreditAssessmentCreate",
    "CreditAssessmentResponse",
    "CreditScoreSyncResult",
    # Statements
    "StatementRequest",
    "StatementLine",
    "StatementSummary",
    # Gateways
    "SmsResult",
    "EnrollmentResult",
    "BrowserInfo",
    "AuthenticationRequest",
    "AuthenticationResult",
    # Admin
    "SystemAlertResponse",
    "ComplianceAlertResponse",
    "AuditLogEntry",
    "AuditExport",
    "SystemLogEntry",
    "DashboardMetrics",
    "SystemHealth",
    "BranchSummary",
    "WorkflowApproval",
    # Branch
    "TransactionTypeStats",
    "TransactionsSummary",
    "ActivityItem",
    "BranchStatistics",
    "StaffPerformance",
    "BranchOperationCreate",
    "BranchOperationResponse",
    "DailySummaryResponse",
    "PerformanceMetricResponse",
    "StaffProductivityResponse",
    # Master wallets
    "MasterWalletResponse",
    "CompanyProfit",
    "MasterWalletDashboard",
    "WalletTransactionCreate",
    "WalletTransactionResponse",
    "FloatAllocationResponse",
    "WalletSecurityAlertResponse",
    "ReconciliationResponse",
]
