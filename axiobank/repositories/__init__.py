"""
Repository layer for data access.

Repositories encapsulate all SQL; services never build queries directly.
"""

from axiobank.repositories.account_repository import AccountRepository
from axiobank.repositories.alert_repository import (
    ComplianceCheckRepository,
    SystemAlertRepository,
)
from axiobank.repositories.audit_repository import AuditLogRepository
from axiobank.repositories.base import BaseRepository
from axiobank.repositories.branch_operation_repository import (
    BranchOperationRepository,
    DailyOperationsSummaryRepository,
    PerformanceMetricRepository,
    StaffProductivityRepository,
)
from axiobank.repositories.branch_repository import BranchRepository
from axiobank.repositories.card_repository import CardRepository
from axiobank.repositories.credit_assessment_repository import (
    CreditAssessmentRepository,
)
from axiobank.repositories.customer_repository import CustomerRepository
from axiobank.repositories.loan_repository import (
    LoanApplicationRepository,
    LoanRepository,
)
from axiobank.repositories.transaction_repository import TransactionRepository
from axiobank.repositories.user_repository import (
    EmployeeRepository,
    UserRepository,
    UserSessionRepository,
)
from axiobank.repositories.wallet_repository import (
    FloatAllocationRepository,
    MasterWalletRepository,
    MasterWalletTransactionRepository,
    ReconciliationRecordRepository,
    WalletSecurityAlertRepository,
)
from axiobank.repositories.workflow_repository import (
    AccountFreezeRequestRepository,
    ServiceRequestRepository,
)

__all__ = [
    "BaseRepository",
    "AccountRepository",
    "AuditLogRepository",
    "BranchOperationRepository",
    "BranchRepository",
    "CardRepository",
    "ComplianceCheckRepository",
    "CreditAssessmentRepository",
    "CustomerRepository",
    "DailyOperationsSummaryRepository",
    "EmployeeRepository",
    "FloatAllocationRepository",
    "LoanApplicationRepository",
    "LoanRepository",
    "MasterWalletRepository",
    "MasterWalletTransactionRepository",
    "PerformanceMetricRepository",
    "ReconciliationRecordRepository",
    "ServiceRequestRepository",
    "AccountFreezeRequestRepository",
    "StaffProductivityRepository",
    "SystemAlertRepository",
    "TransactionRepository",
    "UserRepository",
    "UserSessionRepository",
    "WalletSecurityAlertRepository",
]
