"""
Customer model.

This module defines the Customer SQLAlchemy model. SSN and tax id are
stored only as Fernet ciphertext (see EncryptionService); annual income,
credit score and business license number are stored in plain columns but
are never exposed through customer DTOs.
"""

import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Integer, Numeric, String, Text, Uuid
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from axiobank.models.base import Base
from axiobank.models.enums import CustomerStatus, CustomerType, RiskLevel
from axiobank.models.mixins import SoftDeleteMixin, TimestampMixin


class Customer(Base, TimestampMixin, SoftDeleteMixin):
    """
    Bank customer (individual or organisation).

    Attributes:
        id: UUID primary key
        customer_number: Unique 7-digit number shown to staff and customers
        customer_type: CustomerType enum
        status: CustomerStatus enum
        first_name, last_name: Name of the individual or primary contact
        business_name: Registered name for non-individual customers
        email: Contact email (unique among live customers, enforced by service)
        phone: Contact number
        date_of_birth: Birth date (individuals)
        address_line1, address_line2, city, state, zip_code, country: Postal address
        ssn_encrypted: Fernet ciphertext of the SSN
        tax_id_encrypted: Fernet ciphertext of the tax id
        business_license_number: License number (business customers)
        annual_income: Declared yearly income
        credit_score: Latest credit score (synced from assessments)
        risk_level: Compliance risk rating
        kyc_status: Free-form KYC state (e.g., "VERIFIED", "PENDING")
        branch_id: Home branch
        notes: Staff notes
    """

    __tablename__ = "customers"

    customer_number: Mapped[str] = mapped_column(
        String(20), nullable=False, unique=True, index=True
    )
    customer_type: Mapped[CustomerType] = mapped_column(
        SQLEnum(CustomerType, name="customer_type"),
        nullable=False,
        default=CustomerType.INDIVIDUAL,
    )
    status: Mapped[CustomerStatus] = mapped_column(
        SQLEnum(CustomerStatus, name="customer_status"),
        nullable=False,
        default=CustomerStatus.ACTIVE,
        index=True,
    )

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    business_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)

    address_line1: Mapped[str | None] = mapped_column(String(255), nullable=True)
    address_line2: Mapped[str | None] = mapped_column(String(255), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    state: Mapped[str | None] = mapped_column(String(50), nullable=True)
    zip_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    country: Mapped[str] = mapped_column(String(50), nullable=False, default="USA")

    # Sensitive data
    ssn_encrypted: Mapped[str | None] = mapped_column(Text, nullable=True)
    tax_id_encrypted: Mapped[str | None] = mapped_column(Text, nullable=True)
    business_license_number: Mapped[str | None] = mapped_column(
        String(100), nullable=True
    )
    annual_income: Mapped[Decimal | None] = mapped_column(
        Numeric(15, 2), nullable=True
    )
    credit_score: Mapped[int | None] = mapped_column(Integer, nullable=True)

    risk_level: Mapped[RiskLevel] = mapped_column(
        SQLEnum(RiskLevel, name="risk_level"),
        nullable=False,
        default=RiskLevel.LOW,
        index=True,
    )
    kyc_status: Mapped[str] = mapped_column(String(20), nullable=False, default="PENDING")

    branch_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("branches.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return (
            f"Customer(id={self.id}, customer_number={self.customer_number}, "
            f"name={self.full_name})"
        )
