"""
Master wallet service.

This module provides MasterWalletService, which backs the admin wallet
dashboard:
- Wallet totals, the wallet list and the ledger
- Float allocations to branches
- Security alerts raised on risky movements
- Reconciliation of a wallet's ledger against its balance
"""

import logging
import uuid
from datetime import timedelta
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from axiobank.core.formatting import to_money, utc_now
from axiobank.core.handlers import envelope
from axiobank.core.identifiers import generate_transaction_id
from axiobank.exceptions import InsufficientFundsError, InvalidInputError, NotFoundError
from axiobank.models.audit_log import AuditAction
from axiobank.models.enums import (
    WALLET_CREDIT_TYPES,
    AlertSeverity,
    AllocationStatus,
    MasterWalletType,
    ReconciliationStatus,
    RiskLevel,
    SecurityAlertType,
    TransactionStatus,
)
from axiobank.models.wallet import (
    MasterWalletTransaction,
    ReconciliationRecord,
    WalletSecurityAlert,
)
from axiobank.repositories.wallet_repository import (
    FloatAllocationRepository,
    MasterWalletRepository,
    MasterWalletTransactionRepository,
    ReconciliationRecordRepository,
    WalletSecurityAlertRepository,
)
from axiobank.schemas.common import ApiResponse, ListResponse
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
from axiobank.services.audit_service import AuditService

logger = logging.getLogger(__name__)

RECONCILIATION_WINDOW = timedelta(hours=24)

# (threshold, score), first match wins
RISK_SCORE_BANDS = (
    (Decimal("1000000"), 80),
    (Decimal("500000"), 60),
    (Decimal("100000"), 40),
)

RISK_LEVEL_BANDS = (
    (Decimal("5000000"), RiskLevel.CRITICAL),
    (Decimal("1000000"), RiskLevel.HIGH),
    (Decimal("100000"), RiskLevel.MEDIUM),
)

ALERTING_RISK_LEVELS = {
    RiskLevel.HIGH: AlertSeverity.HIGH,
    RiskLevel.CRITICAL: AlertSeverity.CRITICAL,
}


def risk_score(amount: Decimal) -> int:
    """
    Score a wallet movement by size.

    Example:
        >>> risk_score(Decimal("750000"))
        60
        >>> risk_score(Decimal("100000"))
        20
    """
    amount = abs(amount)
    for threshold, score in RISK_SCORE_BANDS:
        if amount > threshold:
            return score
    return 20


def risk_level(amount: Decimal) -> RiskLevel:
    amount = abs(amount)
    for threshold, level in RISK_LEVEL_BANDS:
        if amount > threshold:
            return level
    return RiskLevel.LOW


def _with_activity(wallet, transaction_count: int, last_transaction_at) -> MasterWalletResponse:
    response = MasterWalletResponse.model_validate(wallet)
    response.transaction_count = transaction_count
    response.last_transaction_at = last_transaction_at
    return response


class MasterWalletService:
    """Service for the bank's own wallets."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.wallet_repo = MasterWalletRepository(session)
        self.transaction_repo = MasterWalletTransactionRepository(session)
        self.allocation_repo = FloatAllocationRepository(session)
        self.alert_repo = WalletSecurityAlertRepository(session)
        self.reconciliation_repo = ReconciliationRecordRepository(session)
        self.audit_service = AuditService(session)

    @envelope("Error retrieving master wallet dashboard")
    async def get_master_wallet_dashboard(self) -> ApiResponse[MasterWalletDashboard]:
        count, balance, available, reserve = await self.wallet_repo.get_totals()
        wallets = [
            _with_activity(wallet, tx_count, last_at)
            for wallet, tx_count, last_at in await self.wallet_repo.get_all_with_activity()
        ]

        company_profit = None
        profit_wallet = await self.wallet_repo.get_by_type(
            MasterWalletType.TRANSACTION_FEES_PROFIT
        )
        if profit_wallet is not None:
            company_profit = CompanyProfit(
                profit_wallet_id=profit_wallet.id,
                total_fees_collected=to_money(profit_wallet.balance),
                currency=profit_wallet.currency,
                wallet_status=profit_wallet.status,
            )

        dashboard = MasterWalletDashboard(
            total_balance=to_money(balance),
            total_available_balance=to_money(available),
            total_reserve_balance=to_money(reserve),
            wallets_count=count,
            recent_transactions_count=await self.transaction_repo.count_since(
                utc_now() - timedelta(hours=24)
            ),
            pending_reconciliations=await self.reconciliation_repo.count_by_status(
                ReconciliationStatus.PENDING
            ),
            security_alerts_count=await self.alert_repo.count_unresolved(),
            active_allocations=await self.allocation_repo.count_by_status(
                AllocationStatus.ACTIVE
            ),
            wallets=wallets,
            company_profit=company_profit,
        )
        return ApiResponse.ok(dashboard, message="Master wallet dashboard retrieved")

    @envelope("Error retrieving master wallets", response_cls=ListResponse)
    async def get_all_master_wallets(self) -> ListResponse[MasterWalletResponse]:
        rows = await self.wallet_repo.get_all_with_activity()
        return ListResponse.ok(
            [_with_activity(wallet, count, last_at) for wallet, count, last_at in rows],
            message="Master wallets retrieved successfully",
        )

    @envelope("Error retrieving transactions", response_cls=ListResponse)
    async def get_master_wallet_transactions(
        self,
        wallet_id: uuid.UUID | None = None,
        limit: int = 100,
    ) -> ListResponse[WalletTransactionResponse]:
        transactions = await self.transaction_repo.get_recent(wallet_id, limit)
        return ListResponse.ok(
            [WalletTransactionResponse.model_validate(tx) for tx in transactions],
            message="Master wallet transactions retrieved",
        )

    @envelope("Error retrieving float allocations", response_cls=ListResponse)
    async def get_float_allocations(
        self,
        status: str | AllocationStatus | None = None,
    ) -> ListResponse[FloatAllocationResponse]:
        if status is not None and not isinstance(status, AllocationStatus):
            try:
                status = AllocationStatus(status.strip().upper())
            except ValueError:
                raise InvalidInputError(
                    "status", f"Invalid allocation status: {status}"
                ) from None

        allocations = await self.allocation_repo.get_filtered(status)
        return ListResponse.ok(
            [FloatAllocationResponse.model_validate(a) for a in allocations],
            message="Float allocations retrieved",
        )

    @envelope("Error retrieving security alerts", response_cls=ListResponse)
    async def get_wallet_security_alerts(self) -> ListResponse[WalletSecurityAlertResponse]:
        alerts = await self.alert_repo.get_recent()
        return ListResponse.ok(
            [WalletSecurityAlertResponse.model_validate(alert) for alert in alerts],
            message="Wallet security alerts retrieved",
        )

    @envelope("Failed to resolve security alert")
    async def resolve_security_alert(
        self,
        alert_id: uuid.UUID,
        resolution: str,
        resolved_by: uuid.UUID | None = None,
    ) -> ApiResponse[WalletSecurityAlertResponse]:
        alert = await self.alert_repo.get_by_id(alert_id)
        if alert is None:
            raise NotFoundError("Security alert")

        alert.is_resolved = True
        alert.resolved_at = utc_now()
        alert.resolved_by = resolved_by
        alert.resolution = resolution
        alert = await self.alert_repo.update(alert)

        await self.audit_service.log_event(
            user_id=resolved_by,
            action=AuditAction.RESOLVE,
            entity_type="wallet_security_alert",
            entity_id=alert.id,
            new_values={"is_resolved": True, "resolution": resolution},
            description=f"Wallet security alert '{alert.title}' resolved",
        )
        await self.session.commit()

        return ApiResponse.ok(
            WalletSecurityAlertResponse.model_validate(alert),
            message="Security alert resolved successfully",
        )

    @envelope("Error retrieving reconciliation records", response_cls=ListResponse)
    async def get_reconciliation_records(
        self,
        wallet_id: uuid.UUID | None = None,
    ) -> ListResponse[ReconciliationResponse]:
        records = await self.reconciliation_repo.get_filtered(wallet_id)
        return ListResponse.ok(
            [ReconciliationResponse.model_validate(record) for record in records],
            message="Reconciliation records retrieved",
        )

    @envelope("Failed to create transaction")
    async def create_wallet_transaction(
        self, request: WalletTransactionCreate
    ) -> ApiResponse[WalletTransactionResponse]:
        """
        Move funds on a master wallet.

        FUND_ALLOCATION and FUND_TRANSFER credit |amount|; every other type
        debits it. Movements of HIGH or CRITICAL risk raise a wallet
        security alert.

        Args:
            request: Wallet, type, amount and description

        Returns:
            Envelope with the recorded ledger entry

        Raises (as failure envelopes):
            NotFoundError: Wallet does not exist
            InvalidInputError: Amount is zero
            InsufficientFundsError: Debit exceeds the available balance
        """
        wallet = await self.wallet_repo.get_by_id(request.wallet_id)
        if wallet is None:
            raise NotFoundError("Wallet")

        amount = to_money(abs(request.amount))
        if amount == 0:
            raise InvalidInputError("amount", "Amount must be greater than zero")

        # 1. Apply the movement
        balance_before = to_money(wallet.balance)
        if request.transaction_type in WALLET_CREDIT_TYPES:
            wallet.balance = balance_before + amount
            wallet.available_balance = to_money(wallet.available_balance) + amount
        else:
            if to_money(wallet.available_balance) < amount:
                raise InsufficientFundsError(wallet.available_balance, amount)
            wallet.balance = balance_before - amount
            wallet.available_balance = to_money(wallet.available_balance) - amount

        # 2. Record the ledger entry
        reference = f"MWT-{generate_transaction_id()}"
        while await self.transaction_repo.reference_exists(reference):
            reference = f"MWT-{generate_transaction_id()}"

        level = risk_level(amount)
        transaction = await self.transaction_repo.add(
            MasterWalletTransaction(
                transaction_reference=reference,
                wallet_id=wallet.id,
                transaction_type=request.transaction_type,
                amount=amount,
                balance_before=balance_before,
                balance_after=wallet.balance,
                description=request.description,
                risk_score=risk_score(amount),
                risk_level=level,
                status=TransactionStatus.COMPLETED,
                performed_by=request.performed_by,
            )
        )
        await self.wallet_repo.update(wallet)

        # 3. Flag large movements
        if level in ALERTING_RISK_LEVELS:
            await self.alert_repo.add(
                WalletSecurityAlert(
                    wallet_id=wallet.id,
                    transaction_id=transaction.id,
                    alert_type=SecurityAlertType.SUSPICIOUS_TRANSACTION,
                    severity=ALERTING_RISK_LEVELS[level],
                    title=f"{level.value} risk transaction on {wallet.wallet_name}",
                    description=(
                        f"{request.transaction_type.value} of {amount} {wallet.currency} "
                        f"({reference})"
                    ),
                )
            )
            logger.warning(
                f"{level.value} risk wallet transaction {reference} on {wallet.wallet_code}"
            )

        await self.audit_service.log_event(
            user_id=request.performed_by,
            action=AuditAction.CREATE,
            entity_type="master_wallet_transaction",
            entity_id=transaction.id,
            old_values={"balance": str(balance_before)},
            new_values={"balance": str(to_money(wallet.balance))},
            description=f"Transaction processed: {request.description or reference}",
        )
        await self.session.commit()

        return ApiResponse.ok(
            WalletTransactionResponse.model_validate(transaction),
            message="Transaction created successfully",
        )

    @envelope("Failed to create reconciliation")
    async def perform_reconciliation(
        self,
        wallet_id: uuid.UUID,
        performed_by: uuid.UUID | None = None,
    ) -> ApiResponse[ReconciliationResponse]:
        """
        Reconcile a wallet's ledger against its balance.

        The expected balance is the balance_after of the newest ledger
        entry (the current balance when the ledger is empty); credits,
        debits and the entry count cover the last 24 hours.
        """
        wallet = await self.wallet_repo.get_by_id(wallet_id)
        if wallet is None:
            raise NotFoundError("Wallet")

        now = utc_now()
        recent = await self.transaction_repo.get_since(wallet_id, now - RECONCILIATION_WINDOW)
        total_credits = sum(
            (to_money(tx.amount) for tx in recent if tx.transaction_type in WALLET_CREDIT_TYPES),
            Decimal("0.00"),
        )
        total_debits = sum(
            (
                to_money(tx.amount)
                for tx in recent
                if tx.transaction_type not in WALLET_CREDIT_TYPES
            ),
            Decimal("0.00"),
        )

        latest = await self.transaction_repo.get_latest(wallet_id)
        actual = to_money(wallet.balance)
        expected = to_money(latest.balance_after) if latest is not None else actual
        difference = actual - expected
        status = (
            ReconciliationStatus.SUCCESSFUL
            if difference == 0
            else ReconciliationStatus.DISCREPANCY
        )

        record = await self.reconciliation_repo.add(
            ReconciliationRecord(
                wallet_id=wallet_id,
                reconciliation_date=now,
                expected_balance=expected,
                actual_balance=actual,
                difference=difference,
                total_credits=total_credits,
                total_debits=total_debits,
                transaction_count=len(recent),
                status=status,
                performed_by=performed_by,
            )
        )
        wallet.last_reconciliation = now
        await self.wallet_repo.update(wallet)

        await self.audit_service.log_event(
            user_id=performed_by,
            action=AuditAction.CREATE,
            entity_type="reconciliation_record",
            entity_id=record.id,
            new_values={"status": status.value, "difference": str(difference)},
            description=f"Wallet {wallet.wallet_code} reconciled: {status.value}",
        )
        await self.session.commit()

        if status is ReconciliationStatus.DISCREPANCY:
            logger.warning(f"Reconciliation discrepancy of {difference} on {wallet.wallet_code}")
        return ApiResponse.ok(
            ReconciliationResponse.model_validate(record),
            message="Reconciliation created successfully",
        )
