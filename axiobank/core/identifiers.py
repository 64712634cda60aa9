"""
Identifier generation for customer-facing numbers and references.

All generators draw from the `secrets` module so numbers handed to
customers cannot be predicted from earlier ones.
"""

import secrets
import string

_LETTERS = string.ascii_uppercase
_ALPHANUMERIC = string.ascii_uppercase + string.digits


def generate_transaction_id() -> str:
    """
    Generate a transaction reference.

    Format: 3 uppercase letters, 2 digits, 5 uppercase alphanumerics.

    Example:
        >>> generate_transaction_id()  # doctest: +SKIP
        'QKD42A9XZ1'
    """
    letters = "".join(secrets.choice(_LETTERS) for _ in range(3))
    digits = "".join(secrets.choice(string.digits) for _ in range(2))
    tail = "".join(secrets.choice(_ALPHANUMERIC) for _ in range(5))
    return f"{letters}{digits}{tail}"


def generate_seven_digit_number() -> str:
    """Random number in [1000000, 9999999] as a string."""
    return str(1_000_000 + secrets.randbelow(9_000_000))


def generate_account_number() -> str:
    """Generate a 7-digit account number (uniqueness is checked by the caller)."""
    return generate_seven_digit_number()


def generate_customer_number() -> str:
    """Generate a 7-digit customer number (uniqueness is checked by the caller)."""
    return generate_seven_digit_number()
