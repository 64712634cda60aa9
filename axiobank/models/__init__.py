"""
Database models for the AxioBank back office.

This module exports all SQLAlchemy models and the declarative base.
Import models from this module to ensure every table is registered on
Base.metadata.
"""

from axiobank.models.account import Account
from axiobank.models.alert import ComplianceCheck, SystemAlert
from axiobank.models.audit_log import AuditAction, AuditLog, AuditStatus
from axiobank.models.base import Base
from axiobank.models.branch import Branch
from axiobank.models.branch_operation import (
    BranchOperation,
    DailyOperationsSummary,
    PerformanceMetric,
    StaffProductivity,
)
from axiobank.models.card import Card
from axiobank.models.credit_assessment import CreditAssessment
from axiobank.models.customer import Customer
from axiobank.models.loan import Loan, LoanApplication
from axiobank.models.mixins import SoftDeleteMixin, TimestampMixin
from axiobank.models.transaction import Transaction
from axiobank.models.user import Employee, User, UserSession
from axiobank.models.wallet import (
    FloatAllocation,
    MasterWallet,
    MasterWalletTransaction,
    ReconciliationRecord,
    WalletSecurityAlert,
)
from axiobank.models.workflow import AccountFreezeRequest, ServiceRequest

__all__ = [
    # Base
    "Base",
    # Mixins
    "TimestampMixin",
    "SoftDeleteMixin",
    # Tenancy and staff
    "Branch",
    "User",
    "Employee",
    "UserSession",
    # Customers and accounts
    "Customer",
    "Account",
    "Transaction",
    "Card",
    # Credit
    "CreditAssessment",
    "LoanApplication",
    "Loan",
    # Monitoring and compliance
    "SystemAlert",
    "ComplianceCheck",
    # Workflow
    "ServiceRequest",
    "AccountFreezeRequest",
    # Audit models
    "AuditLog",
    "AuditAction",
    "AuditStatus",
    # Master wallets
    "MasterWallet",
    "MasterWalletTransaction",
    "FloatAllocation",
    "WalletSecurityAlert",
    "ReconciliationRecord",
    # Branch operations
    "BranchOperation",
    "DailyOperationsSummary",
    "PerformanceMetric",
    "StaffProductivity",
]
