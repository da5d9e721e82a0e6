"""libsodium secretbox strategy.

XSalsa20-Poly1305 authenticated encryption through PyNaCl. The cipher key is
the 32-byte BLAKE2b digest of the configured key material, so any secret
length is accepted.

Wire format:
    [nonce (24 bytes)] [MAC (16 bytes)] [ciphertext]
"""

import logging

import nacl.encoding
import nacl.exceptions
import nacl.hash
import nacl.secret
import nacl.utils

from workflow_encryption.errors import DecryptionError, EncryptionError
from workflow_encryption.keys import KeyLike, KeyMaterial
from workflow_encryption.strategies.base import StrategyId

logger = logging.getLogger(__name__)

# Constants
NONCE_SIZE = nacl.secret.SecretBox.NONCE_SIZE  # 24 bytes
MAC_SIZE = nacl.secret.SecretBox.MACBYTES  # 16 bytes
HEADER_SIZE = NONCE_SIZE + MAC_SIZE


def derive_secretbox_key(key: KeyMaterial) -> bytes:
    """Derive the secretbox key as an unkeyed BLAKE2b-256 hash of the secret."""
    return nacl.hash.blake2b(
        key.reveal(),
        digest_size=nacl.secret.SecretBox.KEY_SIZE,
        encoder=nacl.encoding.RawEncoder,
    )


class LibsodiumStrategy:
    """Secret-key authenticated encryption with a random nonce per message.

    Example:
        >>> strategy = LibsodiumStrategy("my secret")
        >>> strategy.decrypt(strategy.encrypt(b"hello"))
        b'hello'
    """

    identifier = StrategyId.LIBSODIUM.value

    def __init__(self, key: KeyLike):
        self._box = nacl.secret.SecretBox(derive_secretbox_key(KeyMaterial.coerce(key)))

    def encrypt(self, plaintext: bytes) -> bytes:
        try:
            nonce = nacl.utils.random(NONCE_SIZE)
            return bytes(self._box.encrypt(plaintext, nonce))
        except nacl.exceptions.CryptoError as e:
            raise EncryptionError(f"Encryption failed: {e}") from e

    def decrypt(self, ciphertext: bytes) -> bytes:
        if len(ciphertext) < HEADER_SIZE:
            raise DecryptionError(
                f"Ciphertext too small: {len(ciphertext)} bytes, "
                f"minimum {HEADER_SIZE} bytes required"
            )
        try:
            return self._box.decrypt(ciphertext)
        except nacl.exceptions.CryptoError as e:
            logger.debug("libsodium decryption rejected ciphertext")
            raise DecryptionError(f"Decryption failed: {e}") from e

    def __repr__(self) -> str:
        return f"{type(self).__name__}(identifier={self.identifier!r})"
