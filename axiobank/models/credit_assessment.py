"""
CreditAssessment model.
"""

import uuid
from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String, Text, Uuid
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from axiobank.models.base import Base
from axiobank.models.enums import RiskLevel
from axiobank.models.mixins import TimestampMixin


class CreditAssessment(Base, TimestampMixin):
    """
    Point-in-time credit assessment of a customer.

    debt_to_income_ratio is existing_debt / annual_income, kept to four
    decimal places.
    """

    __tablename__ = "credit_assessments"

    customer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("customers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    credit_score: Mapped[int] = mapped_column(Integer, nullable=False)
    annual_income: Mapped[Decimal] = mapped_column(
        Numeric(15, 2), nullable=False, default=Decimal("0.00")
    )
    existing_debt: Mapped[Decimal] = mapped_column(
        Numeric(15, 2), nullable=False, default=Decimal("0.00")
    )
    debt_to_income_ratio: Mapped[Decimal] = mapped_column(
        Numeric(10, 4), nullable=False, default=Decimal("0.0000")
    )
    risk_level: Mapped[RiskLevel] = mapped_column(
        SQLEnum(RiskLevel, name="risk_level"),
        nullable=False,
        default=RiskLevel.MEDIUM,
    )
    payment_history: Mapped[str | None] = mapped_column(String(20), nullable=True)
    recommended_credit_limit: Mapped[Decimal | None] = mapped_column(
        Numeric(15, 2), nullable=True
    )
    assessed_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    assessment_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        index=True,
    )
    comments: Mapped[str | None] = mapped_column(Text, nullable=True)
