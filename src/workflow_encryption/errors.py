"""Error taxonomy for workflow payload encryption.

None of these errors is retried by the library. Messages never include
plaintext or key material.
"""

from typing import Optional


class CryptoError(Exception):
    """Base exception for all encryption errors."""

    pass


class ConfigurationError(CryptoError):
    """Missing or invalid key material or configuration."""

    pass


class EncryptionError(CryptoError):
    """Error during encryption (value cannot be serialized, cipher failure)."""

    pass


class DecryptionError(CryptoError):
    """Error during decryption (includes tampering and wrong-key detection)."""

    pass


class MalformedEnvelopeError(CryptoError):
    """A value carries the encryption marker but is not a valid envelope."""

    pass


class UnknownStrategyError(CryptoError):
    """An envelope names a strategy that is not registered."""

    def __init__(self, strategy_id: str, known: Optional[list] = None):
        self.strategy_id = strategy_id
        self.known = list(known or [])
        message = f"Unknown encryption strategy: {strategy_id!r}"
        if self.known:
            message += f" (registered: {', '.join(self.known)})"
        super().__init__(message)
