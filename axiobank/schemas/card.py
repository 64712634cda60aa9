"""
Pydantic schemas for card management.

This module defines request and response schemas for card operations:
- CardCreate: Card details presented by the customer (PAN and CVV in clear)
- IssuedCard: Card issued by the network, saved pending verification
- CardResponse: Card DTO (masked number only)
- CardPaymentResult: Outcome of a card payment
- Online, POS, bill payment and ATM requests debiting the linked account,
  and CardTransactionResult describing the posted ledger entry
"""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, computed_field

from axiobank.core.security import mask_card_number
from axiobank.models.enums import CardBrand, CardStatus, CardType
from axiobank.schemas.common import Money


class CardCreate(BaseModel):
    """
    Schema for adding a card.

    Field values are only loosely typed here: the service validates the
    number, expiry, CVV and card type itself so it can report the exact
    reason ("Invalid card number", "Invalid or expired card", ...).
    """

    card_number: str = Field(
        min_length=1,
        max_length=32,
        description="Full card number; spaces and dashes are allowed",
        examples=["4111 1111 1111 1111"],
    )
    card_holder_name: str = Field(min_length=1, max_length=100)
    expiry_month: int = Field(examples=[12])
    expiry_year: int = Field(examples=[2030])
    cvv: str = Field(min_length=1, max_length=8)
    card_type: str = Field(description="CREDIT or DEBIT", examples=["DEBIT"])
    nickname: str | None = Field(default=None, max_length=50)


class IssuedCard(BaseModel):
    """Card issued by the card network for a customer."""

    card_number: str
    card_holder_name: str
    expiry_month: int
    expiry_year: int
    card_type: CardType = CardType.DEBIT
    cvv: str | None = None


class CardResponse(BaseModel):
    """
    Card DTO.

    Exposes the last four digits and a masked number; hashes never leave
    the service.
    """

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    customer_id: uuid.UUID
    last_four_digits: str
    card_holder_name: str
    expiry_month: int
    expiry_year: int
    card_type: CardType
    card_brand: CardBrand
    status: CardStatus
    is_default: bool
    is_active: bool
    nickname: str | None
    verified_date: datetime | None
    last_used_date: datetime | None
    created_at: datetime

    @computed_field
    @property
    def masked_number(self) -> str:
        return mask_card_number(self.last_four_digits)


class CardPaymentResult(BaseModel):
    """Outcome of a successful card payment."""

    reference: str
    card_id: uuid.UUID
    amount: Money
    description: str | None
    processed_at: datetime


# =============================================================================
# Card transactions against the linked account
# =============================================================================


class OnlinePaymentRequest(BaseModel):
    card_id: uuid.UUID
    amount: Decimal = Field(gt=0, decimal_places=2)
    merchant_name: str = Field(min_length=1, max_length=100)
    cvv: str | None = Field(default=None, max_length=4)


class POSTransactionRequest(BaseModel):
    card_id: uuid.UUID
    amount: Decimal = Field(gt=0, decimal_places=2)
    merchant_name: str = Field(min_length=1, max_length=100)
    pin: str | None = Field(default=None, max_length=8)


class BillPaymentRequest(BaseModel):
    card_id: uuid.UUID
    amount: Decimal = Field(gt=0, decimal_places=2)
    biller_name: str = Field(min_length=1, max_length=100)
    bill_type: str = Field(min_length=1, max_length=50, examples=["ELECTRICITY"])
    bill_account_number: str = Field(
        min_length=1, max_length=50, description="Customer's account with the biller"
    )
    cvv: str | None = Field(default=None, max_length=4)


class ATMWithdrawalRequest(BaseModel):
    card_id: uuid.UUID
    amount: Decimal = Field(gt=0, decimal_places=2)
    pin: str = Field(min_length=4, max_length=8)
    atm_location: str = Field(min_length=1, max_length=100)


class CardTransactionResult(BaseModel):
    """Ledger entry posted for a card transaction."""

    transaction_id: str
    reference: str
    account_id: uuid.UUID
    amount: Money
    new_balance: Money
    processed_at: datetime
