"""Service for encrypting and decrypting platform access tokens."""

import base64
import hashlib
from cryptography.fernet import Fernet, InvalidToken
from typing import Optional

from reelshelf.config import settings


class CredentialService:
    """Service for secure token management."""

    def __init__(self, secret_key: Optional[str] = None):
        """
        Initialize credential service with encryption key.

        Args:
            secret_key: Key material, defaults to settings.SECRET_KEY
        """
        self.cipher = self._get_cipher(secret_key or settings.SECRET_KEY)

    def _get_cipher(self, secret_key: str) -> Fernet:
        """
        Get Fernet cipher for encryption/decryption.

        Returns:
            Fernet cipher instance
        """
        # Create a 32-byte key from the secret
        key = hashlib.sha256(secret_key.encode()).digest()
        key_b64 = base64.urlsafe_b64encode(key)

        return Fernet(key_b64)

    def encrypt_token(self, token: Optional[str]) -> Optional[str]:
        """
        Encrypt a single token.

        Args:
            token: Plain token, None passes through

        Returns:
            Encrypted token as string
        """
        if token is None:
            return None
        return self.cipher.encrypt(token.encode()).decode()

    def decrypt_token(self, encrypted_token: Optional[str]) -> Optional[str]:
        """
        Decrypt a single token.

        Args:
            encrypted_token: Encrypted token string

        Returns:
            Plain token

        Raises:
            ValueError: If decryption fails
        """
        if encrypted_token is None:
            return None

        try:
            return self.cipher.decrypt(encrypted_token.encode()).decode()
        except InvalidToken as e:
            raise ValueError("Failed to decrypt token") from e


credential_service = CredentialService()
