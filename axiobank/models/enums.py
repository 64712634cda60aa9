"""
Enums shared by the back-office models.

Every enum is a `str` enum whose values equal their names, so DTOs can
expose them directly and string filters coming from callers can be
matched with `Enum(value)`.
"""

import enum


# =============================================================================
# Staff
# =============================================================================


class UserRole(str, enum.Enum):
    """Role of a back-office user (customers have their own table)."""

    CUSTOMER = "CUSTOMER"
    TELLER = "TELLER"
    CASHIER = "CASHIER"
    CUSTOMER_SERVICE_OFFICER = "CUSTOMER_SERVICE_OFFICER"
    ACCOUNT_MANAGER = "ACCOUNT_MANAGER"
    LOAN_OFFICER = "LOAN_OFFICER"
    CREDIT_ANALYST = "CREDIT_ANALYST"
    BRANCH_MANAGER = "BRANCH_MANAGER"
    SYSTEM_ADMIN = "SYSTEM_ADMIN"


class UserStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"
    PENDING_APPROVAL = "PENDING_APPROVAL"


class Department(str, enum.Enum):
    EXECUTIVE = "EXECUTIVE"
    OPERATIONS = "OPERATIONS"
    CUSTOMER_SERVICE = "CUSTOMER_SERVICE"
    LOANS = "LOANS"
    ACCOUNTS = "ACCOUNTS"
    IT = "IT"
    HR = "HR"
    COMPLIANCE = "COMPLIANCE"
    MARKETING = "MARKETING"
    FINANCE = "FINANCE"


class EmploymentStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    ON_LEAVE = "ON_LEAVE"
    SUSPENDED = "SUSPENDED"
    TERMINATED = "TERMINATED"
    RETIRED = "RETIRED"


# =============================================================================
# Customers and Accounts
# =============================================================================


class CustomerType(str, enum.Enum):
    INDIVIDUAL = "INDIVIDUAL"
    BUSINESS = "BUSINESS"
    CORPORATE = "CORPORATE"
    NON_PROFIT = "NON_PROFIT"


class CustomerStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"
    CLOSED = "CLOSED"
    PROSPECT = "PROSPECT"


class RiskLevel(str, enum.Enum):
    """Risk rating used for customers, compliance checks and assessments."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class AccountType(str, enum.Enum):
    CHECKING = "CHECKING"
    SAVINGS = "SAVINGS"
    CREDIT = "CREDIT"
    LOAN = "LOAN"
    INVESTMENT = "INVESTMENT"
    BUSINESS_CHECKING = "BUSINESS_CHECKING"
    BUSINESS_SAVINGS = "BUSINESS_SAVINGS"


class AccountStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    FROZEN = "FROZEN"
    CLOSED = "CLOSED"
    PENDING_APPROVAL = "PENDING_APPROVAL"


# =============================================================================
# Transactions
# =============================================================================


class TransactionType(str, enum.Enum):
    """
    Ledger transaction types.

    Statement rendering treats DEPOSIT, TRANSFER, INTEREST_CREDIT and
    REVERSAL as credits; all other types are debits.
    """

    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    TRANSFER = "TRANSFER"
    PAYMENT = "PAYMENT"
    INTEREST_CREDIT = "INTEREST_CREDIT"
    FEE_DEBIT = "FEE_DEBIT"
    CHECK_DEPOSIT = "CHECK_DEPOSIT"
    ATM_WITHDRAWAL = "ATM_WITHDRAWAL"
    WIRE_TRANSFER = "WIRE_TRANSFER"
    DIRECT_DEPOSIT = "DIRECT_DEPOSIT"
    LOAN_PAYMENT = "LOAN_PAYMENT"
    LOAN_DISBURSEMENT = "LOAN_DISBURSEMENT"
    REVERSAL = "REVERSAL"


CREDIT_TRANSACTION_TYPES = frozenset(
    {
        TransactionType.DEPOSIT,
        TransactionType.TRANSFER,
        TransactionType.INTEREST_CREDIT,
        TransactionType.REVERSAL,
    }
)


class TransactionStatus(str, enum.Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"
    REVERSED = "REVERSED"


# =============================================================================
# Cards
# =============================================================================


class CardType(str, enum.Enum):
    CREDIT = "CREDIT"
    DEBIT = "DEBIT"


class CardBrand(str, enum.Enum):
    VISA = "VISA"
    MASTERCARD = "MASTERCARD"
    AMERICAN_EXPRESS = "AMERICAN_EXPRESS"
    DISCOVER = "DISCOVER"
    UNKNOWN = "UNKNOWN"


class CardStatus(str, enum.Enum):
    """
    Card lifecycle.

    PENDING_VERIFICATION -> ACTIVE (verify/activate) -> BLOCKED (suspend).
    """

    PENDING_VERIFICATION = "PENDING_VERIFICATION"
    ACTIVE = "ACTIVE"
    BLOCKED = "BLOCKED"
    EXPIRED = "EXPIRED"
    INVALID = "INVALID"


# =============================================================================
# Loans
# =============================================================================


class LoanType(str, enum.Enum):
    PERSONAL_LOAN = "PERSONAL_LOAN"
    HOME_LOAN = "HOME_LOAN"
    AUTO_LOAN = "AUTO_LOAN"
    BUSINESS_LOAN = "BUSINESS_LOAN"
    STUDENT_LOAN = "STUDENT_LOAN"
    CREDIT_CARD = "CREDIT_CARD"
    LINE_OF_CREDIT = "LINE_OF_CREDIT"
    EQUIPMENT_LOAN = "EQUIPMENT_LOAN"
    CONSTRUCTION_LOAN = "CONSTRUCTION_LOAN"


class LoanStatus(str, enum.Enum):
    APPLIED = "APPLIED"
    UNDER_REVIEW = "UNDER_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    ACTIVE = "ACTIVE"
    PAID_OFF = "PAID_OFF"
    DEFAULTED = "DEFAULTED"
    CHARGED_OFF = "CHARGED_OFF"


# =============================================================================
# Compliance and Workflow
# =============================================================================


class ComplianceCheckType(str, enum.Enum):
    AML = "AML"
    KYC = "KYC"
    SANCTIONS = "SANCTIONS"
    PEP = "PEP"
    FATCA = "FATCA"


class ComplianceCheckStatus(str, enum.Enum):
    CLEAR = "CLEAR"
    PENDING_REVIEW = "PENDING_REVIEW"
    FLAGGED = "FLAGGED"
    ESCALATED = "ESCALATED"


class ServiceRequestType(str, enum.Enum):
    ACCOUNT_OPENING = "ACCOUNT_OPENING"
    ATM_CARD_REQUEST = "ATM_CARD_REQUEST"
    PIN_RESET = "PIN_RESET"
    STATEMENT_REQUEST = "STATEMENT_REQUEST"
    ADDRESS_CHANGE = "ADDRESS_CHANGE"
    OTHER = "OTHER"


class ServiceRequestStatus(str, enum.Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class ServiceRequestPriority(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class FreezeReason(str, enum.Enum):
    FRAUD = "FRAUD"
    SUSPICIOUS_ACTIVITY = "SUSPICIOUS_ACTIVITY"
    LEGAL = "LEGAL"
    CUSTOMER_REQUEST = "CUSTOMER_REQUEST"
    OTHER = "OTHER"


class FreezeRequestStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


# =============================================================================
# Branch Operations
# =============================================================================


class OperationType(str, enum.Enum):
    GENERAL = "GENERAL"
    CASH_MANAGEMENT = "CASH_MANAGEMENT"
    COMPLIANCE = "COMPLIANCE"
    MAINTENANCE = "MAINTENANCE"
    CUSTOMER_SERVICE = "CUSTOMER_SERVICE"
    SECURITY = "SECURITY"
    AUDIT = "AUDIT"
    TRAINING = "TRAINING"


class OperationStatus(str, enum.Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    ON_HOLD = "ON_HOLD"


class Priority(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


# =============================================================================
# Master Wallets
# =============================================================================


class MasterWalletType(str, enum.Enum):
    MAIN_VAULT = "MAIN_VAULT"
    BRANCH_ALLOCATION = "BRANCH_ALLOCATION"
    CUSTOMER_FLOAT = "CUSTOMER_FLOAT"
    LOAN_DISBURSEMENT = "LOAN_DISBURSEMENT"
    RESERVE_FUND = "RESERVE_FUND"
    OPERATIONAL_FUND = "OPERATIONAL_FUND"
    REGULATORY_RESERVE = "REGULATORY_RESERVE"
    EMERGENCY_FUND = "EMERGENCY_FUND"
    TRANSACTION_FEES_PROFIT = "TRANSACTION_FEES_PROFIT"


class WalletSecurityLevel(str, enum.Enum):
    BASIC = "BASIC"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    MAXIMUM = "MAXIMUM"


class WalletStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"
    FROZEN = "FROZEN"
    CLOSED = "CLOSED"


class MasterWalletTransactionType(str, enum.Enum):
    """FUND_ALLOCATION and FUND_TRANSFER credit a wallet; every other type debits it."""

    CREATE_WALLET = "CREATE_WALLET"
    FUND_ALLOCATION = "FUND_ALLOCATION"
    FUND_TRANSFER = "FUND_TRANSFER"
    BRANCH_DISBURSEMENT = "BRANCH_DISBURSEMENT"
    CUSTOMER_PAYOUT = "CUSTOMER_PAYOUT"
    LOAN_FUNDING = "LOAN_FUNDING"
    RESERVE_ADJUSTMENT = "RESERVE_ADJUSTMENT"
    RECONCILIATION_ADJUSTMENT = "RECONCILIATION_ADJUSTMENT"
    REVERSAL = "REVERSAL"
    EMERGENCY_WITHDRAWAL = "EMERGENCY_WITHDRAWAL"
    REGULATORY_PAYMENT = "REGULATORY_PAYMENT"
    CASH_WITHDRAWAL = "CASH_WITHDRAWAL"


WALLET_CREDIT_TYPES = frozenset(
    {
        MasterWalletTransactionType.FUND_ALLOCATION,
        MasterWalletTransactionType.FUND_TRANSFER,
    }
)


class AllocationStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"
    RECALLED = "RECALLED"
    SUSPENDED = "SUSPENDED"


class SecurityAlertType(str, enum.Enum):
    UNAUTHORIZED_ACCESS = "UNAUTHORIZED_ACCESS"
    SUSPICIOUS_TRANSACTION = "SUSPICIOUS_TRANSACTION"
    LIMIT_EXCEEDED = "LIMIT_EXCEEDED"
    MULTIPLE_FAILED_ATTEMPTS = "MULTIPLE_FAILED_ATTEMPTS"
    UNUSUAL_PATTERN = "UNUSUAL_PATTERN"
    SYSTEM_BREACH = "SYSTEM_BREACH"
    DATA_INTEGRITY_ISSUE = "DATA_INTEGRITY_ISSUE"
    COMPLIANCE_VIOLATION = "COMPLIANCE_VIOLATION"
    FRAUD_DETECTION = "FRAUD_DETECTION"


class AlertSeverity(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class ReconciliationStatus(str, enum.Enum):
    PENDING = "PENDING"
    SUCCESSFUL = "SUCCESSFUL"
    DISCREPANCY = "DISCREPANCY"
