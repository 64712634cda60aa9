"""
Encryption service for customer identifiers (SSN, tax id).

Uses Fernet (AES-128-CBC + HMAC) for authenticated encryption.
Key is derived from SECRET_KEY using PBKDF2-HMAC-SHA256.

SECURITY NOTES:
- Ciphertext is authenticated, so tampered values fail to decrypt
- Changing SECRET_KEY makes existing ciphertext undecryptable
- Never log plaintext identifiers or key material
"""

import base64
import logging

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from axiobank.core.config import settings
from axiobank.exceptions import EncryptionError

logger = logging.getLogger(__name__)

_KDF_SALT = b"axiobank-customer-identifier-salt"
_KDF_ITERATIONS = 100_000


def _derive_key(secret_key: str) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=_KDF_SALT,
        iterations=_KDF_ITERATIONS,
    )
    return base64.urlsafe_b64encode(kdf.derive(secret_key.encode()))


class EncryptionService:
    """
    Service for encrypting and decrypting customer identifiers.

    Key derivation:
        - Algorithm: PBKDF2-HMAC-SHA256
        - Iterations: 100,000
        - Salt: Static application-specific salt
        - Output: 32-byte key for Fernet

    Example:
        >>> service = EncryptionService()
        >>> token = service.encrypt("123-45-6789")
        >>> service.decrypt(token)
        '123-45-6789'
    """

    def __init__(self, secret_key: str | None = None) -> None:
        """
        Initialize encryption service with a derived key.

        Args:
            secret_key: Key material (defaults to settings.secret_key)

        Raises:
            EncryptionError: If no usable key is configured
        """
        secret_key = secret_key or settings.secret_key
        if not secret_key:
            raise EncryptionError("Encryption key is not configured")
        self.cipher = Fernet(_derive_key(secret_key))

    def encrypt(self, plaintext: str | None) -> str | None:
        """
        Encrypt an identifier.

        Args:
            plaintext: Value to encrypt; None and "" pass through as None

        Returns:
            Fernet token, or None when there was nothing to encrypt
        """
        if not plaintext:
            return None
        return self.cipher.encrypt(plaintext.encode()).decode()

    def decrypt(self, ciphertext: str | None) -> str | None:
        """
        Decrypt an identifier.

        Args:
            ciphertext: Fernet token produced by encrypt()

        Returns:
            Plaintext value, or None when ciphertext is empty

        Raises:
            EncryptionError: If the token is invalid or was tampered with
        """
        if not ciphertext:
            return None
        try:
            return self.cipher.decrypt(ciphertext.encode()).decode()
        except InvalidToken:
            logger.error("Decryption failed: invalid or tampered ciphertext")
            raise EncryptionError("Failed to decrypt data (invalid or tampered)") from None
