"""
Card transactions posted to the cardholder's account.

Online purchases, point-of-sale payments, bill payments and ATM
withdrawals all follow the same path: validate the card, find the
customer's funding account (active checking first, then savings), check
the available balance and post one COMPLETED ledger entry. Fees and
customer notifications are not applied here.
"""

import logging
import uuid
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from axiobank.core.formatting import to_money, utc_now
from axiobank.core.handlers import envelope
from axiobank.core.identifiers import generate_transaction_id
from axiobank.exceptions import InsufficientFundsError, InvalidInputError, NotFoundError
from axiobank.models import Account, AuditAction, Card, Transaction
from axiobank.models.enums import TransactionStatus, TransactionType
from axiobank.repositories.account_repository import AccountRepository
from axiobank.repositories.card_repository import CardRepository
from axiobank.repositories.transaction_repository import TransactionRepository
from axiobank.schemas.card import (
    ATMWithdrawalRequest,
    BillPaymentRequest,
    CardTransactionResult,
    OnlinePaymentRequest,
    POSTransactionRequest,
)
from axiobank.schemas.common import ApiResponse
from axiobank.services.audit_service import AuditService
from axiobank.services.card_service import ensure_card_usable

logger = logging.getLogger(__name__)


class CardTransactionService:
    """Debits card transactions from the account linked to the card's owner."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.card_repo = CardRepository(session)
        self.account_repo = AccountRepository(session)
        self.transaction_repo = TransactionRepository(session)
        self.audit_service = AuditService(session)

    async def _charge_card(
        self,
        card_id: uuid.UUID,
        amount: Decimal,
        secret: str | None,
    ) -> tuple[Card, Account, Decimal]:
        """
        Validate a card transaction before anything is written.

        Returns:
            The card, its funding account and the normalized amount

        Raises:
            InvalidInputError: Amount is not positive
            NotFoundError: Unknown card, or no funding account
            CardRejectedError: Card cannot be charged
            InsufficientFundsError: Available balance below the amount
        """
        amount = to_money(amount)
        if amount <= 0:
            raise InvalidInputError("amount", "Transaction amount must be positive")

        card = await self.card_repo.get_by_id(card_id)
        if card is None:
            raise NotFoundError("Card")
        ensure_card_usable(card, secret or None)

        account = await self.account_repo.get_card_funding_account(card.customer_id)
        if account is None:
            raise NotFoundError(
                "Account",
                message="No active account found for card",
                error_code="ACCOUNT_NOT_FOUND",
            )
        if to_money(account.available_balance) < amount:
            raise InsufficientFundsError(account.available_balance, amount)

        return card, account, amount

    async def _post(
        self,
        card: Card,
        account: Account,
        amount: Decimal,
        transaction_type: TransactionType,
        prefix: str,
        description: str,
    ) -> CardTransactionResult:
        """Debit the account and record the ledger entry."""
        processed_at = utc_now()

        transaction_id = generate_transaction_id()
        while await self.transaction_repo.transaction_id_exists(transaction_id):
            transaction_id = generate_transaction_id()
        reference = f"{prefix}-{transaction_id}"

        account.balance = to_money(account.balance) - amount
        account.available_balance = to_money(account.available_balance) - amount
        account.last_transaction_date = processed_at
        await self.account_repo.update(account)

        await self.transaction_repo.add(
            Transaction(
                transaction_id=transaction_id,
                account_id=account.id,
                branch_id=account.branch_id,
                transaction_type=transaction_type,
                status=TransactionStatus.COMPLETED,
                amount=amount,
                balance_after=account.balance,
                description=description,
                reference=reference,
                transaction_date=processed_at,
            )
        )

        card.last_used_date = processed_at
        await self.card_repo.update(card)

        await self.audit_service.log_event(
            user_id=None,
            action=AuditAction.CREATE,
            entity_type="transaction",
            entity_id=transaction_id,
            new_values={
                "card_id": str(card.id),
                "account_id": str(account.id),
                "type": transaction_type.value,
                "amount": str(amount),
            },
            description=description,
            branch_id=account.branch_id,
        )
        await self.session.commit()

        logger.info(
            f"Card transaction {reference} posted to account {account.account_number}: {amount}"
        )
        return CardTransactionResult(
            transaction_id=transaction_id,
            reference=reference,
            account_id=account.id,
            amount=amount,
            new_balance=account.balance,
            processed_at=processed_at,
        )

    @envelope("Payment failed")
    async def process_online_payment(
        self, request: OnlinePaymentRequest
    ) -> ApiResponse[CardTransactionResult]:
        card, account, amount = await self._charge_card(
            request.card_id, request.amount, request.cvv
        )
        result = await self._post(
            card,
            account,
            amount,
            TransactionType.PAYMENT,
            "ONL",
            f"Online payment to {request.merchant_name}",
        )
        return ApiResponse.ok(result, message="Payment processed successfully")

    @envelope("POS transaction failed")
    async def process_pos_transaction(
        self, request: POSTransactionRequest
    ) -> ApiResponse[CardTransactionResult]:
        card, account, amount = await self._charge_card(
            request.card_id, request.amount, request.pin
        )
        result = await self._post(
            card,
            account,
            amount,
            TransactionType.PAYMENT,
            "POS",
            f"POS payment at {request.merchant_name}",
        )
        return ApiResponse.ok(result, message="POS transaction completed successfully")

    @envelope("Bill payment failed")
    async def process_bill_payment(
        self, request: BillPaymentRequest
    ) -> ApiResponse[CardTransactionResult]:
        card, account, amount = await self._charge_card(
            request.card_id, request.amount, request.cvv
        )
        result = await self._post(
            card,
            account,
            amount,
            TransactionType.PAYMENT,
            "BILL",
            f"{request.bill_type} bill payment to {request.biller_name} "
            f"(account {request.bill_account_number})",
        )
        return ApiResponse.ok(result, message="Bill payment completed successfully")

    @envelope("ATM withdrawal failed")
    async def process_atm_withdrawal(
        self, request: ATMWithdrawalRequest
    ) -> ApiResponse[CardTransactionResult]:
        """
        Withdraw cash at an ATM.

        Unlike the other card transactions the PIN is mandatory; it is
        checked against the card's stored secret.
        """
        card, account, amount = await self._charge_card(
            request.card_id, request.amount, request.pin
        )
        result = await self._post(
            card,
            account,
            amount,
            TransactionType.ATM_WITHDRAWAL,
            "ATM",
            f"ATM withdrawal at {request.atm_location}",
        )
        return ApiResponse.ok(result, message="Withdrawal completed successfully")
