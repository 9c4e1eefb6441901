"""Password-based AES-256-GCM cipher for string field values.

Wire format (base64 encoded as one string):
    [salt (16 bytes)] [nonce (12 bytes)] [ciphertext + auth tag]

A fresh salt and nonce are drawn for every value, so encrypting the same
plaintext twice yields different ciphertexts.
"""

import base64
import binascii
import logging
import secrets
from typing import Any

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from docgroup.core.encryption.policy import EncryptionPolicy
from docgroup.core.exceptions import DecryptionError, InvalidArgument

logger = logging.getLogger(__name__)

# Constants
SALT_SIZE = 16
NONCE_SIZE = 12  # 96 bits (standard for GCM)
KEY_SIZE = 32  # 256 bits
ITERATIONS = 100_000


class PasswordCipher:
    """Encrypts and decrypts strings with a key derived from a password.

    Non-string values pass through unchanged in both directions, so the
    cipher can be installed on entities with mixed field types.

    Example:
        >>> cipher = PasswordCipher("s3cret")
        >>> token = cipher.encrypt("alice@example.com")
        >>> cipher.decrypt(token)
        'alice@example.com'
    """

    def __init__(self, password: str, *, iterations: int = ITERATIONS):
        """Initialize the cipher.

        Args:
            password: Secret the per-value keys are derived from.
            iterations: PBKDF2 iteration count.

        Raises:
            InvalidArgument: If the password is empty.
        """
        if not password:
            raise InvalidArgument("Password must not be empty", argument="password")
        self._password = password.encode("utf-8")
        self._iterations = iterations

    def _derive_key(self, salt: bytes) -> bytes:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=KEY_SIZE,
            salt=salt,
            iterations=self._iterations,
        )
        return kdf.derive(self._password)

    def encrypt(self, value: Any) -> Any:
        """Encrypt a string value; other values are returned as is."""
        if not isinstance(value, str):
            return value
        salt = secrets.token_bytes(SALT_SIZE)
        nonce = secrets.token_bytes(NONCE_SIZE)
        ciphertext = AESGCM(self._derive_key(salt)).encrypt(nonce, value.encode("utf-8"), None)
        return base64.b64encode(salt + nonce + ciphertext).decode("ascii")

    def decrypt(self, value: Any) -> Any:
        """Decrypt a value produced by encrypt(); other values are returned as is.

        Raises:
            DecryptionError: If the value is not a valid token for this
                password (tampered, truncated or encrypted with another key).
        """
        if not isinstance(value, str):
            return value
        try:
            blob = base64.b64decode(value, validate=True)
        except binascii.Error as e:
            raise DecryptionError("Value is not valid base64") from e
        if len(blob) <= SALT_SIZE + NONCE_SIZE:
            raise DecryptionError("Encrypted value is too short")

        salt = blob[:SALT_SIZE]
        nonce = blob[SALT_SIZE : SALT_SIZE + NONCE_SIZE]
        ciphertext = blob[SALT_SIZE + NONCE_SIZE :]
        try:
            plaintext = AESGCM(self._derive_key(salt)).decrypt(nonce, ciphertext, None)
        except InvalidTag as e:
            raise DecryptionError("Authentication failed; wrong key or tampered value") from e
        return plaintext.decode("utf-8")

    def policy(self, fields: tuple[str, ...] | None = None) -> EncryptionPolicy:
        """Return an enabled EncryptionPolicy backed by this cipher."""
        return EncryptionPolicy.using(self.encrypt, self.decrypt, fields)


__all__ = ["PasswordCipher"]
