"""
Card service for business logic and validation.

This module provides:
- Pure card validation helpers (brand detection, Luhn check, expiry, CVV)
- CardService for adding, verifying, defaulting, removing and paying
  with customer cards

Card numbers and CVVs are hashed with Argon2id before storage; only the
last four digits are kept in clear.
"""

import logging
import re
import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from axiobank.core.formatting import to_money, utc_now
from axiobank.core.handlers import envelope
from axiobank.core.identifiers import generate_transaction_id
from axiobank.core.security import digits_only, hash_card_secret, verify_card_secret
from axiobank.exceptions import (
    CardRejectedError,
    ConflictError,
    InvalidInputError,
    NotFoundError,
)
from axiobank.models import AuditAction, Card
from axiobank.models.enums import CardBrand, CardStatus, CardType
from axiobank.repositories.card_repository import CardRepository
from axiobank.repositories.customer_repository import CustomerRepository
from axiobank.schemas.card import CardCreate, CardPaymentResult, CardResponse, IssuedCard
from axiobank.schemas.common import ApiResponse, ListResponse
from axiobank.services.audit_service import AuditService

logger = logging.getLogger(__name__)

_VERIFICATION_CODE = re.compile(r"^\d{6}$")
_MAX_EXPIRY_YEARS = 20


# =============================================================================
# Validation helpers
# =============================================================================


def detect_card_brand(card_number: str) -> CardBrand:
    """
    Detect the card brand from the number prefix.

    Example:
        >>> detect_card_brand("4111111111111111")
        <CardBrand.VISA: 'VISA'>
        >>> detect_card_brand("6011000990139424")
        <CardBrand.DISCOVER: 'DISCOVER'>
    """
    digits = digits_only(card_number)
    if digits.startswith("4"):
        return CardBrand.VISA
    if digits[:2] in {"51", "52", "53", "54", "55"}:
        return CardBrand.MASTERCARD
    if digits[:2] in {"34", "37"}:
        return CardBrand.AMERICAN_EXPRESS
    if digits.startswith("6011") or digits.startswith("65"):
        return CardBrand.DISCOVER
    return CardBrand.UNKNOWN


def validate_card_number(card_number: str) -> bool:
    """
    Check length (13-19 digits) and the Luhn checksum.

    Separators are ignored, so "4111 1111 1111 1111" is valid.
    """
    digits = digits_only(card_number)
    if not 13 <= len(digits) <= 19:
        return False

    total = 0
    for position, char in enumerate(reversed(digits)):
        digit = int(char)
        if position % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


def validate_expiry(month: int, year: int, today: date | None = None) -> bool:
    """
    Check that an expiry date is well formed and not in the past.

    Args:
        month: Expiry month (1-12)
        year: Four-digit expiry year
        today: Reference date (default: today)

    Returns:
        True when the card is valid through at least the current month and
        expires no more than 20 years from now
    """
    today = today or date.today()
    if not 1 <= month <= 12:
        return False
    if year < today.year or year > today.year + _MAX_EXPIRY_YEARS:
        return False
    if year == today.year and month < today.month:
        return False
    return True


def validate_cvv(cvv: str, brand: CardBrand) -> bool:
    """Amex uses 4-digit CVVs, every other brand 3."""
    if not cvv or not cvv.isdigit():
        return False
    expected = 4 if brand == CardBrand.AMERICAN_EXPRESS else 3
    return len(cvv) == expected


def _is_expired(card: Card, today: date | None = None) -> bool:
    today = today or date.today()
    return (card.expiry_year, card.expiry_month) < (today.year, today.month)


def ensure_card_usable(card: Card, secret: str | None, today: date | None = None) -> None:
    """
    Reject a card that cannot be charged.

    The presented secret (CVV, or PIN at a terminal) is compared only when
    one is given and the card has a stored hash. Cards issued without a
    CVV can therefore still be charged.

    Raises:
        CardRejectedError: CARD_NOT_ACTIVE, INVALID_CVV or CARD_EXPIRED
    """
    if not card.is_active or card.status != CardStatus.ACTIVE:
        raise CardRejectedError("Card is not active", "CARD_NOT_ACTIVE")
    if (
        secret is not None
        and card.cvv_hash is not None
        and not verify_card_secret(secret, card.cvv_hash)
    ):
        raise CardRejectedError("Invalid CVV", "INVALID_CVV")
    if _is_expired(card, today):
        raise CardRejectedError("Card has expired", "CARD_EXPIRED")


# =============================================================================
# Card service
# =============================================================================


class CardService:
    """
    Service for card business logic.

    Invariant: a customer has at most one live default card. Every path
    that sets is_default first clears the flag on the customer's other
    cards.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize card service.

        Args:
            session: Async database session for operations
        """
        self.session = session
        self.card_repo = CardRepository(session)
        self.customer_repo = CustomerRepository(session)
        self.audit_service = AuditService(session)

    async def _get_card_or_raise(self, card_id: uuid.UUID) -> Card:
        card = await self.card_repo.get_by_id(card_id)
        if card is None:
            raise NotFoundError("Card")
        return card

    @envelope("Failed to add card")
    async def add_card(
        self,
        customer_id: uuid.UUID,
        request: CardCreate,
    ) -> ApiResponse[CardResponse]:
        """
        Add a card for a customer.

        Args:
            customer_id: Owning customer
            request: Card details (PAN and CVV in clear)

        Returns:
            ApiResponse with the stored card (masked)

        Raises:
            InvalidInputError: For a bad number, expiry, CVV or card type
            ConflictError: If the customer already has this card
            NotFoundError: If the customer does not exist

        Example:
            response = await service.add_card(
                customer.id,
                CardCreate(
                    card_number="4111 1111 1111 1111",
                    card_holder_name="Jane Doe",
                    expiry_month=12,
                    expiry_year=2030,
                    cvv="123",
                    card_type="DEBIT",
                ),
            )
        """
        # 1. Validate card details
        card_number = digits_only(request.card_number)
        if not validate_card_number(card_number):
            raise InvalidInputError("card_number", "Invalid card number")
        if not validate_expiry(request.expiry_month, request.expiry_year):
            raise InvalidInputError("expiry", "Invalid or expired card")
        brand = detect_card_brand(card_number)
        if not validate_cvv(request.cvv, brand):
            raise InvalidInputError("cvv", "Invalid CVV")
        try:
            card_type = CardType(request.card_type.upper())
        except ValueError:
            raise InvalidInputError("card_type", "Invalid card type") from None

        # 2. Customer must exist
        if not await self.customer_repo.exists(customer_id):
            raise NotFoundError("Customer")

        # 3. Reject duplicates
        last_four = card_number[-4:]
        if await self.card_repo.get_by_last_four(customer_id, last_four):
            raise ConflictError("A card with these details is already added")

        # 4. First card becomes the default
        is_first = await self.card_repo.count_live(customer_id) == 0

        card = Card(
            customer_id=customer_id,
            card_number_hash=hash_card_secret(card_number),
            cvv_hash=hash_card_secret(request.cvv),
            last_four_digits=last_four,
            card_holder_name=request.card_holder_name.strip(),
            expiry_month=request.expiry_month,
            expiry_year=request.expiry_year,
            card_type=card_type,
            card_brand=brand,
            status=CardStatus.ACTIVE,
            is_default=is_first,
            is_active=True,
            nickname=request.nickname,
        )
        card = await self.card_repo.add(card)

        # 5. Audit log
        await self.audit_service.log_event(
            user_id=None,
            action=AuditAction.CREATE,
            entity_type="card",
            entity_id=card.id,
            new_values={
                "customer_id": str(customer_id),
                "last_four_digits": last_four,
                "card_brand": brand.value,
            },
            description=f"Card ending {last_four} added",
        )
        await self.session.commit()

        logger.info(f"Card ending {last_four} added for customer {customer_id}")
        return ApiResponse.ok(
            CardResponse.model_validate(card),
            message="Card added successfully",
        )

    @envelope("Failed to retrieve cards", response_cls=ListResponse)
    async def get_customer_cards(self, customer_id: uuid.UUID) -> ListResponse[CardResponse]:
        cards = await self.card_repo.get_live_by_customer(customer_id)
        return ListResponse.ok(
            [CardResponse.model_validate(card) for card in cards],
            message="Cards retrieved successfully",
        )

    @envelope("Failed to retrieve card")
    async def get_card_by_id(self, card_id: uuid.UUID) -> ApiResponse[CardResponse]:
        card = await self._get_card_or_raise(card_id)
        return ApiResponse.ok(
            CardResponse.model_validate(card),
            message="Card retrieved successfully",
        )

    @envelope("Failed to verify card")
    async def verify_card(
        self,
        card_id: uuid.UUID,
        verification_code: str,
    ) -> ApiResponse[CardResponse]:
        """Verify a card with the 6-digit code sent to the cardholder."""
        if not _VERIFICATION_CODE.match(verification_code or ""):
            raise InvalidInputError(
                "verification_code", "Verification code must be 6 digits"
            )

        card = await self._get_card_or_raise(card_id)
        card.status = CardStatus.ACTIVE
        card.verified_date = utc_now()
        card = await self.card_repo.update(card)

        await self.audit_service.log_event(
            user_id=None,
            action=AuditAction.UPDATE,
            entity_type="card",
            entity_id=card.id,
            new_values={"status": CardStatus.ACTIVE.value},
            description=f"Card ending {card.last_four_digits} verified",
        )
        await self.session.commit()

        return ApiResponse.ok(
            CardResponse.model_validate(card),
            message="Card verified successfully",
        )

    @envelope("Failed to set default card")
    async def set_default_card(
        self,
        customer_id: uuid.UUID,
        card_id: uuid.UUID,
    ) -> ApiResponse[CardResponse]:
        card = await self.card_repo.get_live_for_customer(customer_id, card_id)
        if card is None:
            raise NotFoundError("Card")

        await self.card_repo.clear_defaults(customer_id)
        card.is_default = True
        card = await self.card_repo.update(card)

        await self.audit_service.log_event(
            user_id=None,
            action=AuditAction.UPDATE,
            entity_type="card",
            entity_id=card.id,
            new_values={"is_default": True},
            description=f"Card ending {card.last_four_digits} set as default",
        )
        await self.session.commit()

        return ApiResponse.ok(
            CardResponse.model_validate(card),
            message="Default card updated successfully",
        )

    @envelope("Failed to delete card")
    async def delete_card(
        self,
        customer_id: uuid.UUID,
        card_id: uuid.UUID,
    ) -> ApiResponse[None]:
        """
        Remove a card (soft delete via is_active=False).

        When the removed card was the default, the most recently added
        remaining live card is promoted.
        """
        card = await self.card_repo.get_live_for_customer(customer_id, card_id)
        if card is None:
            raise NotFoundError("Card")

        was_default = card.is_default
        card.is_active = False
        card.is_default = False
        await self.card_repo.update(card)

        if was_default:
            replacement = await self.card_repo.get_newest_live(customer_id, exclude_id=card.id)
            if replacement is not None:
                replacement.is_default = True
                await self.card_repo.update(replacement)

        await self.audit_service.log_event(
            user_id=None,
            action=AuditAction.DELETE,
            entity_type="card",
            entity_id=card.id,
            old_values={"is_active": True, "is_default": was_default},
            new_values={"is_active": False, "is_default": False},
            description=f"Card ending {card.last_four_digits} removed",
        )
        await self.session.commit()

        return ApiResponse.ok(message="Card deleted successfully")

    @envelope("Failed to process card payment")
    async def process_card_payment(
        self,
        card_id: uuid.UUID,
        amount: Decimal,
        cvv: str,
        description: str | None = None,
    ) -> ApiResponse[CardPaymentResult]:
        """
        Charge a stored card.

        Args:
            card_id: Card to charge
            amount: Positive amount
            cvv: CVV presented by the cardholder
            description: Optional payment description

        Returns:
            ApiResponse with the payment reference ("TXN-<transaction id>")

        Raises:
            CardRejectedError: CARD_NOT_ACTIVE, INVALID_CVV or CARD_EXPIRED
        """
        amount = to_money(amount)
        if amount <= 0:
            raise InvalidInputError("amount", "Payment amount must be positive")

        card = await self._get_card_or_raise(card_id)
        ensure_card_usable(card, cvv)

        processed_at = utc_now()
        card.last_used_date = processed_at
        await self.card_repo.update(card)

        reference = f"TXN-{generate_transaction_id()}"
        await self.audit_service.log_event(
            user_id=None,
            action=AuditAction.CREATE,
            entity_type="card_payment",
            entity_id=reference,
            new_values={"card_id": str(card.id), "amount": str(amount)},
            description=description or f"Payment with card ending {card.last_four_digits}",
        )
        await self.session.commit()

        logger.info(f"Card payment {reference} processed for {amount}")
        return ApiResponse.ok(
            CardPaymentResult(
                reference=reference,
                card_id=card.id,
                amount=amount,
                description=description,
                processed_at=processed_at,
            ),
            message="Payment processed successfully",
        )

    @envelope("Failed to save issued card")
    async def save_issued_card(
        self,
        customer_id: uuid.UUID,
        issued: IssuedCard,
    ) -> ApiResponse[CardResponse]:
        """
        Store a card issued by the network, pending verification.

        An existing card of the customer with the same last four digits
        (removed ones included) is updated in place instead of duplicated.
        """
        card_number = digits_only(issued.card_number)
        if len(card_number) < 4:
            raise InvalidInputError("card_number", "Invalid card number")
        last_four = card_number[-4:]

        card = await self.card_repo.get_by_last_four(customer_id, last_four, live_only=False)
        action = AuditAction.UPDATE
        if card is None:
            action = AuditAction.CREATE
            card = Card(customer_id=customer_id, last_four_digits=last_four)
            self.session.add(card)

        card.card_number_hash = hash_card_secret(card_number)
        card.cvv_hash = hash_card_secret(issued.cvv) if issued.cvv else None
        card.card_holder_name = issued.card_holder_name
        card.expiry_month = issued.expiry_month
        card.expiry_year = issued.expiry_year
        card.card_type = issued.card_type
        card.card_brand = detect_card_brand(card_number)
        card.status = CardStatus.PENDING_VERIFICATION
        card.is_default = False
        card.is_active = True
        card = await self.card_repo.update(card)

        await self.audit_service.log_event(
            user_id=None,
            action=action,
            entity_type="card",
            entity_id=card.id,
            new_values={"status": CardStatus.PENDING_VERIFICATION.value},
            description=f"Issued card ending {last_four} saved",
        )
        await self.session.commit()

        return ApiResponse.ok(
            CardResponse.model_validate(card),
            message="Issued card saved successfully",
        )

    @envelope("Failed to activate card")
    async def activate_card(self, card_id: uuid.UUID) -> ApiResponse[CardResponse]:
        card = await self._get_card_or_raise(card_id)

        card.is_active = True
        card.status = CardStatus.ACTIVE
        card.verified_date = utc_now()
        if await self.card_repo.get_live_default(card.customer_id) is None:
            card.is_default = True
        card = await self.card_repo.update(card)

        await self.audit_service.log_event(
            user_id=None,
            action=AuditAction.UPDATE,
            entity_type="card",
            entity_id=card.id,
            new_values={"status": CardStatus.ACTIVE.value},
            description=f"Card ending {card.last_four_digits} activated",
        )
        await self.session.commit()

        return ApiResponse.ok(
            CardResponse.model_validate(card),
            message="Card activated successfully",
        )

    @envelope("Failed to suspend card")
    async def suspend_card(self, card_id: uuid.UUID) -> ApiResponse[CardResponse]:
        card = await self._get_card_or_raise(card_id)

        was_default = card.is_default
        card.is_active = False
        card.is_default = False
        card.status = CardStatus.BLOCKED
        card = await self.card_repo.update(card)

        if was_default:
            replacement = await self.card_repo.get_newest_live(card.customer_id, exclude_id=card.id)
            if replacement is not None:
                replacement.is_default = True
                await self.card_repo.update(replacement)

        await self.audit_service.log_event(
            user_id=None,
            action=AuditAction.UPDATE,
            entity_type="card",
            entity_id=card.id,
            new_values={"status": CardStatus.BLOCKED.value},
            description=f"Card ending {card.last_four_digits} suspended",
        )
        await self.session.commit()

        return ApiResponse.ok(
            CardResponse.model_validate(card),
            message="Card suspended successfully",
        )
