"""AES-256-GCM envelope encryption strategy.

Each payload is encrypted with a fresh Data Encryption Key (DEK), which is
itself encrypted with the Key Encryption Key (KEK) derived from the
configured key material.

Design:
- Envelope encryption: DEK per payload, KEK for DEK encryption
- Algorithm: AES-256-GCM for authenticated encryption
- Nonce: 12 bytes (96 bits) per encryption operation
- KEK: a 32-byte raw key is used as-is, anything else goes through HKDF-SHA256

Wire format:
    [encrypted_dek (48 bytes)] [dek_nonce (12 bytes)] [data_nonce (12 bytes)] [ciphertext]

Where:
- encrypted_dek: DEK encrypted with KEK (32 byte key + 16 byte auth tag)
- dek_nonce: Nonce used for DEK encryption
- data_nonce: Nonce used for data encryption
- ciphertext: Data encrypted with DEK + auth tag
"""

import secrets

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from workflow_encryption.errors import DecryptionError, EncryptionError
from workflow_encryption.keys import KEY_SIZE, KeyLike, KeyMaterial
from workflow_encryption.strategies.base import StrategyId


# Constants
DEK_SIZE = 32  # 256 bits
NONCE_SIZE = 12  # 96 bits (standard for GCM)
AUTH_TAG_SIZE = 16  # 128 bits (standard for GCM)
ENCRYPTED_DEK_SIZE = DEK_SIZE + AUTH_TAG_SIZE  # 48 bytes
HKDF_INFO = b"workflow-encryption/aes-256-gcm/kek"


def derive_kek(key: KeyMaterial) -> bytes:
    """Derive the 32-byte KEK from key material."""
    secret = key.reveal()
    if len(secret) == KEY_SIZE:
        return secret
    return HKDF(
        algorithm=hashes.SHA256(),
        length=KEY_SIZE,
        salt=None,
        info=HKDF_INFO,
    ).derive(secret)


class AesGcmStrategy:
    """Envelope encryption with AES-256-GCM.

    Example:
        >>> strategy = AesGcmStrategy(generate_key())
        >>> blob = strategy.encrypt(b"sensitive data")
        >>> strategy.decrypt(blob)
        b'sensitive data'
    """

    identifier = StrategyId.AES_256_GCM.value

    # Header sizes for parsing encrypted blob
    HEADER_SIZE = ENCRYPTED_DEK_SIZE + NONCE_SIZE + NONCE_SIZE  # 72 bytes

    def __init__(self, key: KeyLike):
        self._kek_cipher = AESGCM(derive_kek(KeyMaterial.coerce(key)))

    def encrypt(self, plaintext: bytes) -> bytes:
        try:
            dek = AESGCM.generate_key(bit_length=256)
            dek_nonce = secrets.token_bytes(NONCE_SIZE)
            data_nonce = secrets.token_bytes(NONCE_SIZE)

            encrypted_dek = self._kek_cipher.encrypt(dek_nonce, dek, None)
            ciphertext = AESGCM(dek).encrypt(data_nonce, plaintext, None)

            return encrypted_dek + dek_nonce + data_nonce + ciphertext
        except (TypeError, ValueError, OverflowError) as e:
            raise EncryptionError(f"Encryption failed: {e}") from e

    def decrypt(self, blob: bytes) -> bytes:
        if len(blob) < self.HEADER_SIZE + AUTH_TAG_SIZE:
            raise DecryptionError(
                f"Encrypted blob too small: {len(blob)} bytes, "
                f"minimum {self.HEADER_SIZE + AUTH_TAG_SIZE} bytes required"
            )

        offset = 0
        encrypted_dek = blob[offset : offset + ENCRYPTED_DEK_SIZE]
        offset += ENCRYPTED_DEK_SIZE

        dek_nonce = blob[offset : offset + NONCE_SIZE]
        offset += NONCE_SIZE

        data_nonce = blob[offset : offset + NONCE_SIZE]
        offset += NONCE_SIZE

        ciphertext = blob[offset:]

        try:
            dek = self._kek_cipher.decrypt(dek_nonce, encrypted_dek, None)
            return AESGCM(dek).decrypt(data_nonce, ciphertext, None)
        except InvalidTag as e:
            raise DecryptionError("Decryption failed: authentication tag mismatch") from e
        except ValueError as e:
            raise DecryptionError(f"Decryption failed: {e}") from e

    def __repr__(self) -> str:
        return f"{type(self).__name__}(identifier={self.identifier!r})"
