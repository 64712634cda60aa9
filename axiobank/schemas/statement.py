"""
Pydantic schemas for account statements.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, EmailStr, Field, model_validator


class StatementRequest(BaseModel):
    """
    Request for a PDF account statement.

    account_id is a string on purpose: a value that is not a UUID selects
    the customer's first account.
    """

    customer_id: str
    account_id: str = ""
    start_date: date
    end_date: date
    send_email: bool = True
    email: EmailStr | None = None

    @model_validator(mode="after")
    def validate_period(self) -> "StatementRequest":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class StatementLine(BaseModel):
    """One transaction row of a rendered statement."""

    transaction_date: datetime
    description: str
    reference: str
    amount: Decimal
    is_credit: bool
    balance_after: Decimal | None


class StatementSummary(BaseModel):
    """Totals printed under the transaction table."""

    total_credits: Decimal = Field(default=Decimal("0.00"))
    total_debits: Decimal = Field(default=Decimal("0.00"))
    transaction_count: int = 0

    @property
    def net_change(self) -> Decimal:
        return self.total_credits - self.total_debits
