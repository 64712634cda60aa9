"""
Exceptions raised inside the AxioBank back-office services.

Every exception carries a human-readable message plus a machine-readable
error code; the `envelope` decorator copies both into the failure envelope
(`message` and `error`). The HTTP-style status code is kept for callers that
expose the services over HTTP.

Exception hierarchy:
    AppException (base, 500)
    ├── ResourceError
    │   ├── NotFoundError (404)
    │   ├── AlreadyExistsError (409)
    │   └── ConflictError (409)
    ├── ValidationError (422)
    │   ├── InvalidInputError
    │   ├── InsufficientFundsError
    │   └── CardRejectedError
    ├── ExternalServiceError (502)
    │   └── EmailDeliveryError
    └── EncryptionError (500)
"""

from typing import Any


class AppException(Exception):
    """
    Base class of every back-office exception.

    Subclasses set `status_code` and `error_code` as class attributes;
    either can be overridden per instance.

    Attributes:
        message: Human-readable message, shown as the envelope message
        error_code: Machine-readable code, shown as the envelope error
        status_code: HTTP-style status
        details: Extra context for logs
    """

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if error_code is not None:
            self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
            }
        }


# =============================================================================
# Resource Errors
# =============================================================================


class ResourceError(AppException):
    """A record is missing or clashes with an existing one."""


class NotFoundError(ResourceError):
    """
    Raised when a record does not exist (or is soft-deleted).

    Example:
        >>> NotFoundError("Card").message
        'Card not found'
        >>> NotFoundError("Account", error_code="ACCOUNT_NOT_FOUND").error_code
        'ACCOUNT_NOT_FOUND'
    """

    status_code = 404
    error_code = "NOT_FOUND"

    def __init__(
        self,
        resource: str = "Resource",
        message: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.resource = resource
        super().__init__(
            message or f"{resource} not found",
            error_code=error_code,
            details=details,
        )


class AlreadyExistsError(ResourceError):
    """Raised when a unique business key (email, card number) is taken."""

    status_code = 409
    error_code = "ALREADY_EXISTS"

    def __init__(
        self,
        resource: str = "Resource",
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.resource = resource
        super().__init__(message or f"{resource} already exists", details=details)


class ConflictError(ResourceError):
    status_code = 409
    error_code = "CONFLICT"

    def __init__(
        self,
        message: str = "Resource conflict",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=details)


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(AppException):
    """A request breaks a business rule."""

    status_code = 422
    error_code = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str = "Validation failed",
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code=error_code, details=details)


class InvalidInputError(ValidationError):
    """
    Raised when one input value is malformed.

    Example:
        >>> err = InvalidInputError("cvv", "Invalid CVV")
        >>> err.message, err.error_code, err.details
        ('Invalid CVV', 'INVALID_INPUT', {'field': 'cvv'})
    """

    error_code = "INVALID_INPUT"

    def __init__(
        self,
        field: str | None = None,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        if message is None:
            message = f"Invalid input for field: {field}" if field else "Invalid input"
        if field:
            details = {**(details or {}), "field": field}
        super().__init__(message, details=details)


class InsufficientFundsError(ValidationError):
    """Raised when a debit exceeds the available balance."""

    error_code = "INSUFFICIENT_FUNDS"

    def __init__(
        self,
        available: Any = None,
        requested: Any = None,
        message: str = "Insufficient available balance",
    ) -> None:
        super().__init__(
            message,
            details={"available": str(available), "requested": str(requested)},
        )


class CardRejectedError(ValidationError):
    """
    Raised when a stored card cannot be charged.

    The error code names the reason: CARD_NOT_ACTIVE, INVALID_CVV or
    CARD_EXPIRED.
    """

    def __init__(self, message: str, error_code: str) -> None:
        super().__init__(message, error_code=error_code)


# =============================================================================
# Gateway and Crypto Errors
# =============================================================================


class ExternalServiceError(AppException):
    """Raised when an SMTP, SMS or card-network gateway call fails."""

    status_code = 502
    error_code = "EXTERNAL_SERVICE_ERROR"

    def __init__(
        self,
        service: str,
        message: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.service = service
        super().__init__(
            message or f"{service} request failed",
            error_code=error_code,
            details={**(details or {}), "service": service},
        )


class EmailDeliveryError(ExternalServiceError):
    error_code = "EMAIL_SEND_FAILED"

    def __init__(self, message: str) -> None:
        super().__init__("SMTP", message)


class EncryptionError(AppException):
    """Raised when field encryption or decryption fails."""

    error_code = "ENCRYPTION_ERROR"

    def __init__(
        self,
        message: str = "Encryption operation failed",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=details)
