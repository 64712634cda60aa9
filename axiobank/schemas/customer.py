"""
Pydantic schemas for customer records.

CustomerResponse deliberately has no SSN, tax id, annual income, credit
score or business license number fields; those never leave the service.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic_extra_types.country import CountryAlpha3

from axiobank.models.enums import CustomerStatus, CustomerType, RiskLevel


class CustomerCreate(BaseModel):
    """Schema for registering a customer."""

    customer_type: CustomerType = CustomerType.INDIVIDUAL
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=30)
    date_of_birth: date | None = None
    business_name: str | None = Field(default=None, max_length=255)

    address_line1: str | None = Field(default=None, max_length=255)
    address_line2: str | None = Field(default=None, max_length=255)
    city: str | None = Field(default=None, max_length=100)
    state: str | None = Field(default=None, max_length=50)
    zip_code: str | None = Field(default=None, max_length=20)
    country: CountryAlpha3 = Field(default="USA", description="ISO 3166 alpha-3 code")

    ssn: str | None = Field(default=None, max_length=20, description="Encrypted at rest")
    tax_id: str | None = Field(default=None, max_length=30, description="Encrypted at rest")
    business_license_number: str | None = Field(default=None, max_length=100)
    annual_income: Decimal | None = Field(default=None, ge=0)

    risk_level: RiskLevel = RiskLevel.LOW
    branch_id: uuid.UUID | None = None
    notes: str | None = None


class CustomerUpdate(BaseModel):
    """Partial customer update; unset fields are left untouched."""

    customer_type: CustomerType | None = None
    status: CustomerStatus | None = None
    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=30)
    date_of_birth: date | None = None
    business_name: str | None = Field(default=None, max_length=255)

    address_line1: str | None = Field(default=None, max_length=255)
    address_line2: str | None = Field(default=None, max_length=255)
    city: str | None = Field(default=None, max_length=100)
    state: str | None = Field(default=None, max_length=50)
    zip_code: str | None = Field(default=None, max_length=20)
    country: CountryAlpha3 | None = None

    ssn: str | None = Field(default=None, max_length=20)
    tax_id: str | None = Field(default=None, max_length=30)
    business_license_number: str | None = Field(default=None, max_length=100)
    annual_income: Decimal | None = Field(default=None, ge=0)

    risk_level: RiskLevel | None = None
    kyc_status: str | None = Field(default=None, max_length=20)
    branch_id: uuid.UUID | None = None
    notes: str | None = None


class CustomerResponse(BaseModel):
    """Customer DTO without sensitive fields."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    customer_number: str
    customer_type: CustomerType
    status: CustomerStatus
    first_name: str
    last_name: str
    business_name: str | None
    email: str | None
    phone: str | None
    date_of_birth: date | None
    address_line1: str | None
    address_line2: str | None
    city: str | None
    state: str | None
    zip_code: str | None
    country: str
    risk_level: RiskLevel
    kyc_status: str
    branch_id: uuid.UUID | None
    created_at: datetime
    updated_at: datetime
