"""
Branch model.

A branch is the tenant boundary of the back office: staff, customers,
accounts, transactions and operational records all carry a branch_id.
"""

import uuid
from datetime import date

from sqlalchemy import Boolean, Date, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from axiobank.models.base import Base
from axiobank.models.mixins import TimestampMixin


class Branch(Base, TimestampMixin):
    """
    Physical bank branch.

    Attributes:
        id: UUID primary key
        name: Display name (e.g., "Downtown Branch")
        code: Unique short code (e.g., "DT001")
        address, city, state, zip_code: Postal address
        phone, email: Branch contact details
        manager_id: User who manages the branch (optional)
        is_active: Whether the branch is open for business
        opened_date: Date the branch opened
    """

    __tablename__ = "branches"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    code: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)

    address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    state: Mapped[str | None] = mapped_column(String(50), nullable=True)
    zip_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Plain column: users reference branches, so a FK here would be circular
    manager_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    opened_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    def __repr__(self) -> str:
        return f"Branch(id={self.id}, code={self.code}, name={self.name})"
