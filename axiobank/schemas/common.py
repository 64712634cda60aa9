"""
Common Pydantic schemas shared by every service.

This module provides:
- The uniform response envelope (ApiResponse, ListResponse)
- Pagination parameters
- Money serialization (Decimal in Python, two-place string on the wire)
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated, Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator

# Type variable for generic envelopes
DataT = TypeVar("DataT")

_CENT = Decimal("0.01")


def _format_money(value: Decimal) -> str:
    return str(Decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP))


# Money amounts stay Decimal in Python and serialize as "1234.50"
Money = Annotated[Decimal, PlainSerializer(_format_money, return_type=str)]


class ApiResponse(BaseModel, Generic[DataT]):
    """
    Uniform envelope returned by every single-item service operation.

    Attributes:
        success: Whether the operation succeeded
        message: Human-readable outcome
        data: Payload (None on failure)
        error: Machine-readable error code or detail (None on success)

    Example:
        >>> ApiResponse[str].ok("done", message="Card verified")
        ApiResponse[str](success=True, message='Card verified', data='done', error=None)
    """

    success: bool
    message: str
    data: DataT | None = None
    error: str | None = None

    @classmethod
    def ok(cls, data: Any = None, message: str = "Success") -> "ApiResponse[Any]":
        """Build a success envelope."""
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, message: str, error: str | None = None) -> "ApiResponse[Any]":
        """Build a failure envelope."""
        return cls(success=False, message=message, error=error)


class ListResponse(BaseModel, Generic[DataT]):
    """
    Uniform envelope for list operations.

    Attributes:
        success: Whether the operation succeeded
        message: Human-readable outcome
        data: Items for the current page (empty on failure)
        error: Machine-readable error code or detail
        total: Total number of items matching the query
        page: Current page number (1-indexed)
        page_size: Requested page size
    """

    success: bool
    message: str
    data: list[DataT] = Field(default_factory=list)
    error: str | None = None
    total: int = 0
    page: int = 1
    page_size: int = 0

    @classmethod
    def ok(
        cls,
        data: list[Any],
        message: str = "Success",
        total: int | None = None,
        page: int = 1,
        page_size: int | None = None,
    ) -> "ListResponse[Any]":
        """Build a success list envelope; totals default to the page contents."""
        return cls(
            success=True,
            message=message,
            data=data,
            total=len(data) if total is None else total,
            page=page,
            page_size=len(data) if page_size is None else page_size,
        )

    @classmethod
    def fail(cls, message: str, error: str | None = None) -> "ListResponse[Any]":
        """Build a failure list envelope."""
        return cls(success=False, message=message, error=error)


class PaginationParams(BaseModel):
    """
    Pagination parameters for list operations.

    Attributes:
        page: Page number (1-indexed)
        page_size: Number of items per page (max 100)
    """

    page: int = Field(default=1, ge=1, description="Page number (1-indexed)")
    page_size: int = Field(
        default=20,
        ge=1,
        le=100,
        description="Number of items per page (max 100)",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "page": 1,
                "page_size": 20,
            }
        }
    )

    @field_validator("page_size")
    @classmethod
    def validate_page_size(cls, value: int) -> int:
        """Ensure page_size doesn't exceed maximum allowed value."""
        if value > 100:
            return 100
        return value

    @property
    def offset(self) -> int:
        """
        Calculate SQL OFFSET from page number.

        Example:
            >>> PaginationParams(page=2, page_size=20).offset
            20
        """
        return (self.page - 1) * self.page_size
