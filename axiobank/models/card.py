"""
Card model for customer credit and debit cards.

Cards are owned directly by a customer. The full card number and the CVV
are never stored: only Argon2id hashes plus the last four digits.
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Uuid,
)
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from axiobank.models.base import Base
from axiobank.models.enums import CardBrand, CardStatus, CardType
from axiobank.models.mixins import TimestampMixin


class Card(Base, TimestampMixin):
    """
    Customer payment card.

    A card is "live" while is_active is True. Removing a card flips
    is_active to False instead of deleting the row.

    Attributes:
        id: UUID primary key
        customer_id: Owning customer
        card_number_hash: Argon2id hash of the PAN
        cvv_hash: Argon2id hash of the CVV
        last_four_digits: Last 4 digits of the PAN (for display and dedupe)
        card_holder_name: Name embossed on the card
        expiry_month: Expiration month (1-12)
        expiry_year: Expiration year (four digits)
        card_type: CardType enum (CREDIT or DEBIT)
        card_brand: CardBrand detected from the PAN prefix
        status: CardStatus enum
        is_default: Default card of the customer (at most one live default)
        is_active: Live flag
        nickname: Optional display name
        verified_date: When the card was verified/activated
        last_used_date: Last successful payment

    Constraints:
        - expiry_month between 1 and 12
        - last_four_digits exactly 4 characters
    """

    __tablename__ = "cards"

    customer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("customers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    card_number_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    cvv_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    last_four_digits: Mapped[str] = mapped_column(String(4), nullable=False)
    card_holder_name: Mapped[str] = mapped_column(String(100), nullable=False)
    expiry_month: Mapped[int] = mapped_column(Integer, nullable=False)
    expiry_year: Mapped[int] = mapped_column(Integer, nullable=False)

    card_type: Mapped[CardType] = mapped_column(
        SQLEnum(CardType, name="card_type"),
        nullable=False,
    )
    card_brand: Mapped[CardBrand] = mapped_column(
        SQLEnum(CardBrand, name="card_brand"),
        nullable=False,
        default=CardBrand.UNKNOWN,
    )
    status: Mapped[CardStatus] = mapped_column(
        SQLEnum(CardStatus, name="card_status"),
        nullable=False,
        default=CardStatus.PENDING_VERIFICATION,
        index=True,
    )

    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    nickname: Mapped[str | None] = mapped_column(String(50), nullable=True)

    verified_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    last_used_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        CheckConstraint(
            "expiry_month >= 1 AND expiry_month <= 12",
            name="expiry_month_range",
        ),
        CheckConstraint(
            "length(last_four_digits) = 4",
            name="last_four_digits_length",
        ),
        Index("ix_cards_customer_last4", "customer_id", "last_four_digits"),
    )

    def __repr__(self) -> str:
        return (
            f"Card(id={self.id}, brand={self.card_brand}, "
            f"last_four={self.last_four_digits}, status={self.status})"
        )
