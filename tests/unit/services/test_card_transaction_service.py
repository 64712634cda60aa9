"""
Unit tests for CardTransactionService.

Tests:
- Online, POS, bill and ATM transactions debit the funding account
- Ledger entries carry the balance after posting and a typed reference
- Insufficient funds, rejected cards and missing accounts leave balances alone
- Checking accounts are preferred over savings
"""

import uuid
from datetime import date, timedelta
from decimal import Decimal

import pytest
from sqlalchemy import select

from axiobank.core.formatting import utc_now
from axiobank.core.security import hash_card_secret
from axiobank.models import Account, AuditLog, Card, Transaction
from axiobank.models.enums import AccountStatus, AccountType, CardStatus, TransactionType
from axiobank.schemas.card import (
    ATMWithdrawalRequest,
    BillPaymentRequest,
    CardCreate,
    OnlinePaymentRequest,
    POSTransactionRequest,
)
from axiobank.services.card_service import CardService
from axiobank.services.card_transaction_service import CardTransactionService

NEXT_YEAR = date.today().year + 1


async def _add_card(session, customer_id) -> Card:
    response = await CardService(session).add_card(
        customer_id,
        CardCreate(
            card_number="4111 1111 1111 1111",
            card_holder_name="Jordan Blake",
            expiry_month=12,
            expiry_year=NEXT_YEAR,
            cvv="123",
            card_type="debit",
        ),
    )
    assert response.success is True
    return await session.get(Card, response.data.id)


async def _ledger(session, account_id) -> list[Transaction]:
    result = await session.execute(
        select(Transaction).where(Transaction.account_id == account_id)
    )
    return list(result.scalars().all())


@pytest.mark.asyncio
class TestCardTransactionService:
    async def test_online_payment_debits_account(self, db_session, test_customer, test_account):
        card = await _add_card(db_session, test_customer.id)

        response = await CardTransactionService(db_session).process_online_payment(
            OnlinePaymentRequest(
                card_id=card.id, amount=Decimal("120.50"), merchant_name="Bookshop", cvv="123"
            )
        )

        assert response.success is True
        assert response.message == "Payment processed successfully"
        result = response.data
        assert result.reference == f"ONL-{result.transaction_id}"
        assert result.account_id == test_account.id
        assert result.new_balance == Decimal("2379.50")
        assert test_account.balance == Decimal("2379.50")
        assert test_account.available_balance == Decimal("2379.50")
        assert test_account.last_transaction_date is not None
        assert card.last_used_date is not None

        [entry] = await _ledger(db_session, test_account.id)
        assert entry.transaction_type == TransactionType.PAYMENT
        assert entry.amount == Decimal("120.50")
        assert entry.balance_after == Decimal("2379.50")
        assert entry.reference == result.reference
        assert entry.description == "Online payment to Bookshop"

    async def test_online_payment_is_audited(self, db_session, test_customer, test_account):
        card = await _add_card(db_session, test_customer.id)

        response = await CardTransactionService(db_session).process_online_payment(
            OnlinePaymentRequest(card_id=card.id, amount=Decimal("10.00"), merchant_name="Cafe")
        )

        logs = (
            await db_session.execute(
                select(AuditLog).where(AuditLog.entity_type == "transaction")
            )
        ).scalars().all()
        assert [log.entity_id for log in logs] == [response.data.transaction_id]

    async def test_insufficient_funds(self, db_session, test_customer, test_account):
        card = await _add_card(db_session, test_customer.id)
        account_id = test_account.id

        response = await CardTransactionService(db_session).process_online_payment(
            OnlinePaymentRequest(
                card_id=card.id, amount=Decimal("2500.01"), merchant_name="Electronics"
            )
        )

        assert response.success is False
        assert response.message == "Insufficient available balance"
        assert response.error == "INSUFFICIENT_FUNDS"
        account = await db_session.get(Account, account_id)
        await db_session.refresh(account)
        assert account.balance == Decimal("2500.00")
        assert await _ledger(db_session, account_id) == []

    async def test_full_available_balance_can_be_spent(
        self, db_session, test_customer, test_account
    ):
        card = await _add_card(db_session, test_customer.id)

        response = await CardTransactionService(db_session).process_pos_transaction(
            POSTransactionRequest(
                card_id=card.id, amount=Decimal("2500.00"), merchant_name="Furniture"
            )
        )

        assert response.success is True
        assert response.data.new_balance == Decimal("0.00")

    async def test_pos_transaction(self, db_session, test_customer, test_account):
        card = await _add_card(db_session, test_customer.id)

        response = await CardTransactionService(db_session).process_pos_transaction(
            POSTransactionRequest(
                card_id=card.id, amount=Decimal("45.99"), merchant_name="Grocer", pin="123"
            )
        )

        assert response.success is True
        assert response.message == "POS transaction completed successfully"
        assert response.data.reference.startswith("POS-")
        assert test_account.balance == Decimal("2454.01")

    async def test_bill_payment(self, db_session, test_customer, test_account):
        card = await _add_card(db_session, test_customer.id)

        response = await CardTransactionService(db_session).process_bill_payment(
            BillPaymentRequest(
                card_id=card.id,
                amount=Decimal("80.00"),
                biller_name="City Power",
                bill_type="ELECTRICITY",
                bill_account_number="EL-99812",
            )
        )

        assert response.success is True
        assert response.message == "Bill payment completed successfully"
        assert response.data.reference.startswith("BILL-")
        [entry] = await _ledger(db_session, test_account.id)
        assert entry.description == "ELECTRICITY bill payment to City Power (account EL-99812)"

    async def test_atm_withdrawal_wrong_pin(self, db_session, test_customer, test_account):
        card = await _add_card(db_session, test_customer.id)

        response = await CardTransactionService(db_session).process_atm_withdrawal(
            ATMWithdrawalRequest(
                card_id=card.id, amount=Decimal("200.00"), pin="1234", atm_location="Main St"
            )
        )

        assert response.success is False
        assert response.error == "INVALID_CVV"

    async def test_atm_withdrawal(self, db_session, test_customer, test_account):
        card = await _add_card(db_session, test_customer.id)
        card_id, account_id = card.id, test_account.id
        # The terminal PIN is checked against the card's stored secret
        card.cvv_hash = hash_card_secret("4321")
        await db_session.commit()

        response = await CardTransactionService(db_session).process_atm_withdrawal(
            ATMWithdrawalRequest(
                card_id=card_id, amount=Decimal("200.00"), pin="4321", atm_location="Main St"
            )
        )

        assert response.success is True
        assert response.message == "Withdrawal completed successfully"
        [entry] = await _ledger(db_session, account_id)
        assert entry.transaction_type == TransactionType.ATM_WITHDRAWAL
        assert entry.reference.startswith("ATM-")

    async def test_wrong_cvv_rejected(self, db_session, test_customer, test_account):
        card = await _add_card(db_session, test_customer.id)

        response = await CardTransactionService(db_session).process_online_payment(
            OnlinePaymentRequest(
                card_id=card.id, amount=Decimal("10.00"), merchant_name="Cafe", cvv="999"
            )
        )

        assert response.success is False
        assert response.message == "Invalid CVV"

    async def test_suspended_card_rejected(self, db_session, test_customer, test_account):
        card = await _add_card(db_session, test_customer.id)
        card.status = CardStatus.SUSPENDED
        await db_session.commit()

        response = await CardTransactionService(db_session).process_online_payment(
            OnlinePaymentRequest(card_id=card.id, amount=Decimal("10.00"), merchant_name="Cafe")
        )

        assert response.success is False
        assert response.error == "CARD_NOT_ACTIVE"

    async def test_unknown_card(self, db_session):
        response = await CardTransactionService(db_session).process_online_payment(
            OnlinePaymentRequest(
                card_id=uuid.uuid4(), amount=Decimal("10.00"), merchant_name="Cafe"
            )
        )

        assert response.success is False
        assert response.message == "Card not found"

    async def test_no_funding_account(self, db_session, test_customer):
        card = await _add_card(db_session, test_customer.id)

        response = await CardTransactionService(db_session).process_online_payment(
            OnlinePaymentRequest(card_id=card.id, amount=Decimal("10.00"), merchant_name="Cafe")
        )

        assert response.success is False
        assert response.message == "No active account found for card"
        assert response.error == "ACCOUNT_NOT_FOUND"

    async def test_checking_preferred_over_older_savings(
        self, db_session, test_customer, test_account
    ):
        savings = Account(
            account_number="7000001",
            customer_id=test_customer.id,
            branch_id=test_account.branch_id,
            account_type=AccountType.SAVINGS,
            status=AccountStatus.ACTIVE,
            balance=Decimal("9000.00"),
            available_balance=Decimal("9000.00"),
            opened_date=utc_now() - timedelta(days=365),
        )
        db_session.add(savings)
        await db_session.commit()
        card = await _add_card(db_session, test_customer.id)

        response = await CardTransactionService(db_session).process_online_payment(
            OnlinePaymentRequest(card_id=card.id, amount=Decimal("5.00"), merchant_name="Cafe")
        )

        assert response.data.account_id == test_account.id
        assert savings.balance == Decimal("9000.00")
