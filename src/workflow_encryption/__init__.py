"""Transparent encryption of workflow event and step payloads.

Values leaving the process (outbound event data, persisted step results) are
wrapped in tagged envelopes; values coming back are unwrapped before user
code sees them.

Usage:
    from workflow_encryption import encryption_middleware

    middleware = encryption_middleware(key="my secret", encrypt_event_data=True)
    events = middleware.before_send([{"name": "my.event", "data": {"foo": "bar"}}])

    # Or drive the service directly
    from workflow_encryption import EncryptionService, LibsodiumStrategy

    service = EncryptionService(LibsodiumStrategy("my secret"))
    envelope = service.encrypt_value({"foo": "bar"})
    assert service.decrypt_value(envelope) == {"foo": "bar"}
"""

from workflow_encryption.config import EncryptionConfig
from workflow_encryption.envelope import (
    ENCRYPTION_MARKER,
    PAYLOAD_FIELD,
    STRATEGY_MARKER,
    Envelope,
    Plaintext,
    decode_value,
    is_encrypted_envelope,
    unwrap,
    wrap,
)
from workflow_encryption.errors import (
    ConfigurationError,
    CryptoError,
    DecryptionError,
    EncryptionError,
    MalformedEnvelopeError,
    UnknownStrategyError,
)
from workflow_encryption.keys import KeyMaterial, generate_key, generate_key_file
from workflow_encryption.middleware import EncryptionMiddleware, encryption_middleware
from workflow_encryption.registry import StrategyRegistry
from workflow_encryption.service import EncryptionService
from workflow_encryption.strategies import (
    AesGcmStrategy,
    EncryptionStrategy,
    LibsodiumStrategy,
    StrategyId,
    create_strategy,
)
from workflow_encryption.target import WHOLE_VALUE, EncryptionTarget

__version__ = "0.1.0"

__all__ = [
    # Config
    "EncryptionConfig",
    # Service
    "EncryptionService",
    "EncryptionTarget",
    "WHOLE_VALUE",
    # Middleware
    "EncryptionMiddleware",
    "encryption_middleware",
    # Marker protocol
    "ENCRYPTION_MARKER",
    "STRATEGY_MARKER",
    "PAYLOAD_FIELD",
    "Envelope",
    "Plaintext",
    "decode_value",
    "is_encrypted_envelope",
    "wrap",
    "unwrap",
    # Strategies
    "EncryptionStrategy",
    "StrategyId",
    "StrategyRegistry",
    "LibsodiumStrategy",
    "AesGcmStrategy",
    "create_strategy",
    # Keys
    "KeyMaterial",
    "generate_key",
    "generate_key_file",
    # Errors
    "CryptoError",
    "ConfigurationError",
    "EncryptionError",
    "DecryptionError",
    "MalformedEnvelopeError",
    "UnknownStrategyError",
]
