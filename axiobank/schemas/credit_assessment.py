"""
Pydantic schemas for credit assessments.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from axiobank.models.enums import RiskLevel
from axiobank.schemas.common import Money


class CreditAssessmentCreate(BaseModel):
    """Schema for recording a credit assessment."""

    customer_id: uuid.UUID
    credit_score: int = Field(ge=300, le=850)
    annual_income: Decimal = Field(ge=0)
    existing_debt: Decimal = Field(default=Decimal("0.00"), ge=0)
    payment_history: str | None = Field(
        default=None,
        max_length=20,
        examples=["EXCELLENT", "GOOD", "FAIR", "POOR"],
    )
    risk_level: RiskLevel
    recommended_credit_limit: Decimal | None = Field(default=None, ge=0)
    assessed_by: uuid.UUID | None = None
    comments: str | None = None


class CreditAssessmentResponse(BaseModel):
    """Credit assessment DTO carrying the customer's display name."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    customer_id: uuid.UUID
    customer_name: str | None = None
    assessment_date: datetime
    credit_score: int
    annual_income: Money
    existing_debt: Money
    debt_to_income_ratio: Decimal
    payment_history: str | None
    risk_level: RiskLevel
    recommended_credit_limit: Money | None
    assessed_by: uuid.UUID | None
    comments: str | None
    created_at: datetime

    @classmethod
    def from_row(cls, row: Any) -> "CreditAssessmentResponse":
        """Build from a (CreditAssessment, first_name, last_name) row."""
        assessment, first_name, last_name = row
        response = cls.model_validate(assessment)
        if first_name is not None and last_name is not None:
            response.customer_name = f"{first_name} {last_name}"
        return response


class CreditScoreSyncResult(BaseModel):
    """Outcome of copying latest assessment scores onto customers."""

    updated_count: int
    updates: list[str]
