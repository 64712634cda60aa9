"""
Unit tests for CardService and the card validation helpers.

Tests:
- Brand detection, Luhn check, expiry and CVV rules
- Adding cards (validation order, duplicates, first card default)
- Verification, default switching and removal with default promotion
- Card payments (inactive, CVV mismatch, expired)
- Issued-card upsert, activation and suspension
"""

import uuid
from datetime import date
from decimal import Decimal

import pytest

from axiobank.core.security import verify_card_secret
from axiobank.models import Card
from axiobank.models.enums import CardBrand, CardStatus, CardType
from axiobank.schemas.card import CardCreate, IssuedCard
from axiobank.services.card_service import (
    CardService,
    detect_card_brand,
    validate_card_number,
    validate_cvv,
    validate_expiry,
)

NEXT_YEAR = date.today().year + 1
VISA = "4111 1111 1111 1111"
MASTERCARD = "5555555555554444"
AMEX = "378282246310005"


def _card(number: str = VISA, cvv: str = "123", **overrides) -> CardCreate:
    values = {
        "card_number": number,
        "card_holder_name": "Jordan Blake",
        "expiry_month": 12,
        "expiry_year": NEXT_YEAR,
        "cvv": cvv,
        "card_type": "debit",
    }
    values.update(overrides)
    return CardCreate(**values)


class TestCardValidation:
    @pytest.mark.parametrize(
        "number, brand",
        [
            ("4111111111111111", CardBrand.VISA),
            ("5555555555554444", CardBrand.MASTERCARD),
            ("378282246310005", CardBrand.AMERICAN_EXPRESS),
            ("6011111111111117", CardBrand.DISCOVER),
            ("3530111333300000", CardBrand.UNKNOWN),
        ],
    )
    def test_detect_card_brand(self, number, brand):
        assert detect_card_brand(number) == brand

    def test_luhn_check(self):
        assert validate_card_number("4111 1111 1111 1111") is True
        assert validate_card_number("4111111111111112") is False
        assert validate_card_number("411111") is False

    def test_expiry_rules(self):
        today = date(2024, 6, 15)

        assert validate_expiry(6, 2024, today) is True
        assert validate_expiry(5, 2024, today) is False
        assert validate_expiry(13, 2025, today) is False
        assert validate_expiry(1, 2044, today) is True
        assert validate_expiry(1, 2045, today) is False

    def test_cvv_length_depends_on_brand(self):
        assert validate_cvv("123", CardBrand.VISA) is True
        assert validate_cvv("1234", CardBrand.VISA) is False
        assert validate_cvv("1234", CardBrand.AMERICAN_EXPRESS) is True
        assert validate_cvv("12a", CardBrand.MASTERCARD) is False


@pytest.mark.asyncio
class TestCardService:
    """Test suite for CardService."""

    async def test_add_first_card_becomes_default(self, db_session, test_customer):
        service = CardService(db_session)

        response = await service.add_card(test_customer.id, _card())

        assert response.success is True
        assert response.message == "Card added successfully"
        card = response.data
        assert card.last_four_digits == "1111"
        assert card.card_brand == CardBrand.VISA
        assert card.card_type == CardType.DEBIT
        assert card.status == CardStatus.ACTIVE
        assert card.is_default is True
        assert card.masked_number == "**** **** **** 1111"

        stored = await service.card_repo.get_by_id(card.id)
        assert verify_card_secret("4111111111111111", stored.card_number_hash)
        assert verify_card_secret("123", stored.cvv_hash)

    async def test_second_card_is_not_default(self, db_session, test_customer):
        service = CardService(db_session)
        await service.add_card(test_customer.id, _card())

        response = await service.add_card(test_customer.id, _card(MASTERCARD))

        assert response.data.is_default is False

    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"card_number": "4111111111111112"}, "Invalid card number"),
            ({"expiry_month": 13}, "Invalid or expired card"),
            ({"cvv": "12"}, "Invalid CVV"),
            ({"card_type": "PREPAID"}, "Invalid card type"),
        ],
    )
    async def test_add_card_validation(self, db_session, test_customer, overrides, message):
        response = await CardService(db_session).add_card(test_customer.id, _card(**overrides))

        assert response.success is False
        assert response.message == message
        assert response.error == "INVALID_INPUT"

    async def test_add_card_number_checked_before_cvv(self, db_session, test_customer):
        response = await CardService(db_session).add_card(
            test_customer.id, _card("1234", cvv="x")
        )

        assert response.message == "Invalid card number"

    async def test_add_amex_requires_four_digit_cvv(self, db_session, test_customer):
        service = CardService(db_session)
        customer_id = test_customer.id

        rejected = await service.add_card(customer_id, _card(AMEX, cvv="123"))
        accepted = await service.add_card(customer_id, _card(AMEX, cvv="1234"))

        assert rejected.success is False
        assert accepted.success is True

    async def test_add_duplicate_card(self, db_session, test_customer):
        service = CardService(db_session)
        await service.add_card(test_customer.id, _card())

        response = await service.add_card(test_customer.id, _card())

        assert response.success is False
        assert response.message == "A card with these details is already added"
        assert response.error == "CONFLICT"

    async def test_add_card_unknown_customer(self, db_session):
        response = await CardService(db_session).add_card(uuid.uuid4(), _card())

        assert response.message == "Customer not found"

    async def test_verify_card(self, db_session, test_customer):
        service = CardService(db_session)
        card = (await service.add_card(test_customer.id, _card())).data

        bad = await service.verify_card(card.id, "12345")
        good = await service.verify_card(card.id, "123456")

        assert bad.message == "Verification code must be 6 digits"
        assert good.success is True
        assert good.data.verified_date is not None

    async def test_set_default_card_clears_previous(self, db_session, test_customer):
        service = CardService(db_session)
        first = (await service.add_card(test_customer.id, _card())).data
        second = (await service.add_card(test_customer.id, _card(MASTERCARD))).data

        response = await service.set_default_card(test_customer.id, second.id)

        assert response.data.is_default is True
        cards = {c.id: c for c in (await service.get_customer_cards(test_customer.id)).data}
        assert cards[first.id].is_default is False
        assert cards[second.id].is_default is True

    async def test_delete_default_card_promotes_remaining(self, db_session, test_customer):
        service = CardService(db_session)
        first = (await service.add_card(test_customer.id, _card())).data
        second = (await service.add_card(test_customer.id, _card(MASTERCARD))).data

        response = await service.delete_card(test_customer.id, first.id)

        assert response.success is True
        remaining = (await service.get_customer_cards(test_customer.id)).data
        assert [c.id for c in remaining] == [second.id]
        assert remaining[0].is_default is True

    async def test_delete_card_of_other_customer(self, db_session, test_customer):
        service = CardService(db_session)
        card = (await service.add_card(test_customer.id, _card())).data

        response = await service.delete_card(uuid.uuid4(), card.id)

        assert response.message == "Card not found"

    async def test_process_card_payment(self, db_session, test_customer):
        service = CardService(db_session)
        card = (await service.add_card(test_customer.id, _card())).data

        response = await service.process_card_payment(
            card.id, Decimal("49.99"), "123", "Groceries"
        )

        assert response.success is True
        assert response.message == "Payment processed successfully"
        assert response.data.reference.startswith("TXN-")
        assert response.data.amount == Decimal("49.99")

    async def test_process_card_payment_wrong_cvv(self, db_session, test_customer):
        service = CardService(db_session)
        card = (await service.add_card(test_customer.id, _card())).data

        response = await service.process_card_payment(card.id, Decimal("10"), "999")

        assert response.success is False
        assert response.error == "INVALID_CVV"

    async def test_process_card_payment_inactive_card(self, db_session, test_customer):
        service = CardService(db_session)
        card = (await service.add_card(test_customer.id, _card())).data
        await service.suspend_card(card.id)

        response = await service.process_card_payment(card.id, Decimal("10"), "123")

        assert response.error == "CARD_NOT_ACTIVE"

    async def test_process_card_payment_expired_card(self, db_session, test_customer):
        service = CardService(db_session)
        card = (await service.add_card(test_customer.id, _card())).data
        stored = await service.card_repo.get_by_id(card.id)
        stored.expiry_year = date.today().year - 1
        await db_session.commit()

        response = await service.process_card_payment(card.id, Decimal("10"), "123")

        assert response.error == "CARD_EXPIRED"

    async def test_process_card_payment_rejects_non_positive_amount(
        self, db_session, test_customer
    ):
        service = CardService(db_session)
        card = (await service.add_card(test_customer.id, _card())).data

        response = await service.process_card_payment(card.id, Decimal("0"), "123")

        assert response.error == "INVALID_INPUT"

    async def test_save_issued_card_upserts_by_last_four(self, db_session, test_customer):
        service = CardService(db_session)
        issued = IssuedCard(
            card_number=MASTERCARD,
            card_holder_name="JORDAN BLAKE",
            expiry_month=1,
            expiry_year=NEXT_YEAR + 2,
        )

        first = await service.save_issued_card(test_customer.id, issued)
        second = await service.save_issued_card(test_customer.id, issued)

        assert first.success is True
        assert first.data.status == CardStatus.PENDING_VERIFICATION
        assert first.data.is_default is False
        assert second.data.id == first.data.id

    async def test_activate_card_becomes_default_when_none(self, db_session, test_customer):
        service = CardService(db_session)
        issued = await service.save_issued_card(
            test_customer.id,
            IssuedCard(
                card_number=MASTERCARD,
                card_holder_name="JORDAN BLAKE",
                expiry_month=1,
                expiry_year=NEXT_YEAR,
            ),
        )

        response = await service.activate_card(issued.data.id)

        assert response.data.status == CardStatus.ACTIVE
        assert response.data.is_default is True

    async def test_issued_card_without_cvv_can_be_charged(self, db_session, test_customer):
        service = CardService(db_session)
        issued = await service.save_issued_card(
            test_customer.id,
            IssuedCard(
                card_number=MASTERCARD,
                card_holder_name="JORDAN BLAKE",
                expiry_month=1,
                expiry_year=NEXT_YEAR,
            ),
        )
        await service.activate_card(issued.data.id)

        response = await service.process_card_payment(issued.data.id, Decimal("25.00"), "123")

        assert response.success is True
        assert response.data.card_id == issued.data.id

    async def test_get_card_by_id(self, db_session, test_customer):
        service = CardService(db_session)
        card = (await service.add_card(test_customer.id, _card())).data

        found = await service.get_card_by_id(card.id)
        missing = await service.get_card_by_id(uuid.uuid4())

        assert found.success is True
        assert found.message == "Card retrieved successfully"
        assert found.data.id == card.id
        assert found.data.masked_number.endswith("1111")
        assert missing.success is False
        assert missing.message == "Card not found"
        assert missing.error == "NOT_FOUND"

    async def test_suspend_default_card_promotes_replacement(self, db_session, test_customer):
        service = CardService(db_session)
        first = (await service.add_card(test_customer.id, _card())).data
        second = (await service.add_card(test_customer.id, _card(MASTERCARD))).data

        response = await service.suspend_card(first.id)

        assert response.data.status == CardStatus.BLOCKED
        assert response.data.is_active is False
        replacement = await db_session.get(Card, second.id)
        assert replacement.is_default is True
