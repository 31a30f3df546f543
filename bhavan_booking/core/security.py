"""Encryption of sensitive values kept in the local session store.

Uses Fernet (AES-128-CBC + HMAC-SHA256) symmetric encryption.
"""

import base64
import hashlib
import logging

from cryptography.fernet import Fernet, InvalidToken

logger = logging.getLogger(__name__)


def derive_key(key) -> bytes:
    """
    Normalize a configured key into a Fernet key.

    A valid Fernet key (32 url-safe base64 bytes) is used as-is. Any other
    passphrase is hashed with SHA-256 so it becomes 32 bytes.
    """
    if isinstance(key, str):
        key = key.encode()
    try:
        Fernet(key)
        return key
    except (ValueError, TypeError):
        return base64.urlsafe_b64encode(hashlib.sha256(key).digest())


class EncryptionService:
    """Encrypts values persisted on the device."""

    def __init__(self, key):
        if not key:
            raise ValueError(
                "Encryption key is empty. "
                "Generate one with: python -c 'from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())'"
            )
        self.cipher = Fernet(derive_key(key))

    def encrypt(self, data: str) -> str:
        if not data:
            return ""

        encrypted = self.cipher.encrypt(data.encode())
        return encrypted.decode()

    def decrypt(self, encrypted_data: str) -> str:
        """Returns an empty string when the value cannot be decrypted."""
        if not encrypted_data:
            return ""

        try:
            decrypted = self.cipher.decrypt(encrypted_data.encode())
            return decrypted.decode()
        except InvalidToken:
            logger.error("Decryption failed: invalid token or wrong key")
            return ""
