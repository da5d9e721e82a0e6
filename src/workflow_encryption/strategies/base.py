"""Strategy interface for payload encryption.

A strategy is a named authenticated-encryption scheme bound to a key. The
name is written into every envelope the strategy produces, so it has to stay
stable for as long as data tagged with it may still be read back.
"""

from enum import Enum
from typing import Protocol, runtime_checkable


class StrategyId(str, Enum):
    """Identifiers of the built-in strategies."""

    LIBSODIUM = "libsodium"
    AES_256_GCM = "aes-256-gcm"


@runtime_checkable
class EncryptionStrategy(Protocol):
    """Protocol for encryption strategies.

    Implementations must:
    - Embed any nonce or salt in the ciphertext so decryption needs only the key
    - Authenticate the ciphertext and raise DecryptionError on any mismatch
    - Never return partially decrypted or unauthenticated plaintext
    """

    identifier: str

    def encrypt(self, plaintext: bytes) -> bytes:
        """Encrypt plaintext bytes.

        Raises:
            EncryptionError: If encryption fails.
        """
        ...

    def decrypt(self, ciphertext: bytes) -> bytes:
        """Decrypt ciphertext produced by ``encrypt``.

        Raises:
            DecryptionError: If the ciphertext is truncated, malformed, or
                fails authentication (wrong key or tampering).
        """
        ...
