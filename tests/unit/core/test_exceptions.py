"""
Unit tests for the exception hierarchy.
"""

from decimal import Decimal

from axiobank.exceptions import (
    AlreadyExistsError,
    AppException,
    CardRejectedError,
    EmailDeliveryError,
    ExternalServiceError,
    InsufficientFundsError,
    InvalidInputError,
    NotFoundError,
    ResourceError,
    ValidationError,
)


class TestExceptions:
    def test_not_found_defaults(self):
        error = NotFoundError("Card")

        assert isinstance(error, ResourceError)
        assert error.message == "Card not found"
        assert error.error_code == "NOT_FOUND"
        assert error.status_code == 404

    def test_error_code_override_is_per_instance(self):
        custom = NotFoundError("Customer", error_code="CUSTOMER_NOT_FOUND")

        assert custom.error_code == "CUSTOMER_NOT_FOUND"
        assert NotFoundError("Customer").error_code == "NOT_FOUND"

    def test_already_exists_message(self):
        error = AlreadyExistsError("Customer", message="A customer with this email already exists")

        assert error.message == "A customer with this email already exists"
        assert error.error_code == "ALREADY_EXISTS"
        assert error.status_code == 409

    def test_invalid_input_records_field(self):
        error = InvalidInputError("amount")

        assert isinstance(error, ValidationError)
        assert error.message == "Invalid input for field: amount"
        assert error.details == {"field": "amount"}
        assert error.status_code == 422

    def test_insufficient_funds(self):
        error = InsufficientFundsError(Decimal("10.00"), Decimal("25.00"))

        assert error.error_code == "INSUFFICIENT_FUNDS"
        assert error.message == "Insufficient available balance"
        assert error.details == {"available": "10.00", "requested": "25.00"}

    def test_card_rejected_carries_reason(self):
        error = CardRejectedError("Invalid CVV", "INVALID_CVV")

        assert isinstance(error, ValidationError)
        assert error.error_code == "INVALID_CVV"

    def test_email_delivery_is_external(self):
        error = EmailDeliveryError("Failed to send email: timeout")

        assert isinstance(error, ExternalServiceError)
        assert error.error_code == "EMAIL_SEND_FAILED"
        assert error.status_code == 502
        assert error.details == {"service": "SMTP"}

    def test_to_dict(self):
        error = AppException("Boom")

        assert error.to_dict() == {
            "error": {"code": "INTERNAL_ERROR", "message": "Boom", "details": {}}
        }
