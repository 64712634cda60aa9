"""
Pydantic schemas for the master wallet dashboard and reconciliation.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from axiobank.models.enums import (
    AlertSeverity,
    AllocationStatus,
    MasterWalletTransactionType,
    MasterWalletType,
    ReconciliationStatus,
    RiskLevel,
    SecurityAlertType,
    TransactionStatus,
    WalletSecurityLevel,
    WalletStatus,
)
from axiobank.schemas.common import Money


class MasterWalletResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    wallet_name: str
    wallet_code: str
    wallet_type: MasterWalletType
    status: WalletStatus
    security_level: WalletSecurityLevel
    balance: Money
    available_balance: Money
    reserve_balance: Money
    currency: str
    branch_id: uuid.UUID | None
    last_reconciliation: datetime | None
    transaction_count: int = 0
    last_transaction_at: datetime | None = None


class CompanyProfit(BaseModel):
    profit_wallet_id: uuid.UUID
    total_fees_collected: Money
    currency: str
    wallet_status: WalletStatus


class MasterWalletDashboard(BaseModel):
    total_balance: Money
    total_available_balance: Money
    total_reserve_balance: Money
    wallets_count: int
    recent_transactions_count: int
    pending_reconciliations: int
    security_alerts_count: int
    active_allocations: int
    wallets: list[MasterWalletResponse]
    company_profit: CompanyProfit | None = None


class WalletTransactionCreate(BaseModel):
    """
    Request to move funds on a master wallet.

    FUND_ALLOCATION and FUND_TRANSFER credit the wallet; every other type
    debits it. The sign of amount is ignored.
    """

    wallet_id: uuid.UUID
    transaction_type: MasterWalletTransactionType
    amount: Decimal = Field(description="Amount; the absolute value is applied")
    description: str | None = None
    performed_by: uuid.UUID | None = None


class WalletTransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    transaction_reference: str
    wallet_id: uuid.UUID
    transaction_type: MasterWalletTransactionType
    amount: Money
    balance_before: Money
    balance_after: Money
    description: str | None
    risk_score: int
    risk_level: RiskLevel
    status: TransactionStatus
    performed_by: uuid.UUID | None
    created_at: datetime


class FloatAllocationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    wallet_id: uuid.UUID
    branch_id: uuid.UUID
    allocated_amount: Money
    utilized_amount: Money
    status: AllocationStatus
    purpose: str | None
    allocated_by: uuid.UUID | None
    expiry_date: datetime | None
    created_at: datetime


class WalletSecurityAlertResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    wallet_id: uuid.UUID | None
    transaction_id: uuid.UUID | None
    alert_type: SecurityAlertType
    severity: AlertSeverity
    title: str
    description: str | None
    is_resolved: bool
    resolved_at: datetime | None
    resolved_by: uuid.UUID | None
    resolution: str | None
    created_at: datetime


class ReconciliationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    wallet_id: uuid.UUID
    reconciliation_date: datetime
    expected_balance: Money
    actual_balance: Money
    difference: Money
    total_credits: Money
    total_debits: Money
    transaction_count: int
    status: ReconciliationStatus
    performed_by: uuid.UUID | None
    notes: str | None
