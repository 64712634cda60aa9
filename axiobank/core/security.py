"""
Security utilities for cardholder data.

This module provides:
- One-way hashing of card numbers and CVVs with Argon2id
- Constant-time verification of a presented value against its hash
- Masking helpers for values that are safe to display
"""

import logging
import re

from argon2 import PasswordHasher
from argon2.exceptions import (
    InvalidHashError,
    VerificationError,
    VerifyMismatchError,
)

from axiobank.core.config import settings

logger = logging.getLogger(__name__)


# =============================================================================
# Card Secret Hashing with Argon2id
# =============================================================================
# PANs and CVVs are never stored in plain text. Only an Argon2id hash and,
# for PANs, the last four digits are persisted.
# =============================================================================

secret_hasher = PasswordHasher(
    time_cost=settings.argon2_time_cost,
    memory_cost=settings.argon2_memory_cost,
    parallelism=settings.argon2_parallelism,
    hash_len=32,
    salt_len=16,
)

_NON_DIGITS = re.compile(r"\D")


def digits_only(value: str) -> str:
    """Strip every non-digit character (spaces, dashes) from a value."""
    return _NON_DIGITS.sub("", value or "")


def hash_card_secret(value: str) -> str:
    """
    Hash a card number or CVV using Argon2id.

    Separators are stripped first so "4111 1111 1111 1111" and
    "4111111111111111" hash-verify identically.

    Args:
        value: Plain card number or CVV

    Returns:
        Argon2id hash string (includes algorithm, parameters, salt, and hash)
    """
    return secret_hasher.hash(digits_only(value))


def verify_card_secret(value: str, hashed_value: str | None) -> bool:
    """
    Verify a card number or CVV against its Argon2id hash.

    Args:
        value: Plain value presented by the caller
        hashed_value: Stored hash (None when nothing was stored)

    Returns:
        True if the value matches the hash, False otherwise

    Example:
        >>> stored = hash_card_secret("123")
        >>> verify_card_secret("123", stored)
        True
        >>> verify_card_secret("124", stored)
        False
    """
    if not hashed_value:
        return False
    try:
        secret_hasher.verify(hashed_value, digits_only(value))
        return True
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


def mask_card_number(card_number: str) -> str:
    """
    Mask a card number leaving only the last four digits visible.

    Example:
        >>> mask_card_number("4111111111111111")
        '**** **** **** 1111'
    """
    digits = digits_only(card_number)
    return f"**** **** **** {digits[-4:]}" if len(digits) >= 4 else "****"
