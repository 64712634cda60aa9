"""
Pydantic schemas for account management.

This module defines request and response schemas for account operations:
- AccountCreate: Open a new account for an existing customer
- AccountUpdate: Partial update of mutable account fields
- AccountResponse: Account DTO (money as two-place strings)
"""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field
from pydantic_extra_types.currency_code import ISO4217

from axiobank.models.enums import AccountStatus, AccountType
from axiobank.schemas.common import Money


class AccountCreate(BaseModel):
    """
    Schema for opening an account.

    The account number is generated by the service; balance and available
    balance both start at initial_deposit.
    """

    customer_id: uuid.UUID = Field(description="UUID of the owning customer")
    account_type: AccountType = Field(description="Type of account")
    branch_id: uuid.UUID | None = Field(
        default=None,
        description="Servicing branch (defaults to the customer's branch)",
    )
    initial_deposit: Decimal = Field(
        default=Decimal("0.00"),
        ge=0,
        description="Opening balance",
        examples=["500.00"],
    )
    nickname: str | None = Field(default=None, max_length=100)
    minimum_balance: Decimal = Field(default=Decimal("0.00"), ge=0)
    interest_rate: Decimal = Field(
        default=Decimal("0.0000"),
        ge=0,
        le=1,
        description="Annual rate as a fraction (0.0125 = 1.25%)",
    )
    credit_limit: Decimal | None = Field(default=None, gt=0)
    currency: ISO4217 = Field(default="USD", description="ISO 4217 currency code")


class AccountUpdate(BaseModel):
    """
    Schema for a partial account update.

    Only fields explicitly set by the caller are applied. Setting status to
    CLOSED stamps closed_date.
    """

    status: AccountStatus | None = None
    nickname: str | None = Field(default=None, max_length=100)
    minimum_balance: Decimal | None = Field(default=None, ge=0)
    interest_rate: Decimal | None = Field(default=None, ge=0, le=1)
    credit_limit: Decimal | None = Field(default=None, gt=0)


class AccountResponse(BaseModel):
    """Account DTO."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    account_number: str
    customer_id: uuid.UUID
    branch_id: uuid.UUID | None
    account_type: AccountType
    status: AccountStatus
    nickname: str | None
    balance: Money
    available_balance: Money
    minimum_balance: Money
    interest_rate: Decimal
    credit_limit: Money | None
    currency: str
    opened_date: datetime
    closed_date: datetime | None
    last_transaction_date: datetime | None
    created_at: datetime
    updated_at: datetime
