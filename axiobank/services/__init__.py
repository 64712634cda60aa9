"""
Service layer for business logic.

This package provides service classes that implement business logic,
coordinate between repositories, and handle transaction management.
Every public operation returns an ApiResponse or ListResponse envelope.
"""

from axiobank.services.account_service import AccountService
from axiobank.services.admin_alerts_service import AdminAlertsService
from axiobank.services.admin_audit_service import AdminAuditService
from axiobank.services.admin_dashboard_service import AdminDashboardService
from axiobank.services.admin_workflow_service import AdminWorkflowService
from axiobank.services.audit_service import AuditService
from axiobank.services.branch_operations_service import BranchOperationsService
from axiobank.services.branch_service import BranchService
from axiobank.services.card_service import CardService
from axiobank.services.card_transaction_service import CardTransactionService
from axiobank.services.credit_assessment_service import CreditAssessmentService
from axiobank.services.customer_service import CustomerService
from axiobank.services.email_service import EmailService
from axiobank.services.encryption_service import EncryptionService
from axiobank.services.master_wallet_service import MasterWalletService
from axiobank.services.mastercard_auth_service import MastercardAuthService
from axiobank.services.sms_service import SmsService
from axiobank.services.statement_service import StatementService

__all__ = [
    "AccountService",
    "AdminAlertsService",
    "AdminAuditService",
    "AdminDashboardService",
    "AdminWorkflowService",
    "AuditService",
    "BranchOperationsService",
    "BranchService",
    "CardService",
    "CardTransactionService",
    "CreditAssessmentService",
    "CustomerService",
    "EmailService",
    "EncryptionService",
    "MasterWalletService",
    "MastercardAuthService",
    "SmsService",
    "StatementService",
]
