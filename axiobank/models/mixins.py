"""
Column mixins shared by the back-office models.

- TimestampMixin: created_at / updated_at, set in Python so they are
  available right after a flush on every backend
- SoftDeleteMixin: deleted_at; live rows have NULL and BaseRepository
  hides the rest
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlalchemy.orm import Mapped, mapped_column

from axiobank.core.formatting import utc_now


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
    )


class SoftDeleteMixin:
    """
    Rows are never removed while regulators may still ask for them.

    Closing an account or customer stamps deleted_at; the row stays for
    statements and the audit trail.
    """

    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
        index=True,
    )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def mark_deleted(self, when: datetime | None = None) -> None:
        self.deleted_at = when or utc_now()
