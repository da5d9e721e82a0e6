"""Encryption service for workflow payloads.

The service converts plaintext JSON-like values into tagged envelopes and
back. Both directions are idempotent: hooks pass every outbound value through
``encrypt_value`` and every stored step result through ``decrypt_value``
without first checking whether the work is needed.

Canonical encoding:
    Values are serialized as compact UTF-8 JSON with key order preserved.
"""

import json
import logging
from collections.abc import Mapping
from typing import Any, Iterable, Optional

from workflow_encryption.envelope import (
    Envelope,
    decode_payload,
    decode_value,
    encode_payload,
    is_encrypted_envelope,
    wrap,
)
from workflow_encryption.errors import DecryptionError, EncryptionError
from workflow_encryption.registry import StrategyRegistry
from workflow_encryption.strategies.base import EncryptionStrategy
from workflow_encryption.target import WHOLE_VALUE, EncryptionTarget

logger = logging.getLogger(__name__)

DEFAULT_STEP_DATA_FIELD = "data"


def serialize_value(value: Any) -> bytes:
    """Serialize a JSON-like value to its canonical byte encoding.

    Raises:
        EncryptionError: If the value is not JSON serializable.
    """
    try:
        return json.dumps(
            value, ensure_ascii=False, separators=(",", ":"), allow_nan=False
        ).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise EncryptionError(f"Value is not JSON serializable: {e}") from e


def deserialize_value(data: bytes) -> Any:
    """Inverse of ``serialize_value``.

    Raises:
        DecryptionError: If the bytes are not valid UTF-8 JSON.
    """
    try:
        return json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DecryptionError(f"Decrypted payload is not valid JSON: {e}") from e


class EncryptionService:
    """Encrypts and decrypts values with a fixed strategy registry.

    The service holds no mutable state, so one instance can be shared across
    threads and concurrent step evaluations.

    Example:
        >>> service = EncryptionService(LibsodiumStrategy("secret"))
        >>> envelope = service.encrypt_value({"foo": "bar"})
        >>> service.decrypt_value(envelope)
        {'foo': 'bar'}
    """

    def __init__(
        self,
        active: EncryptionStrategy,
        legacy: Optional[Iterable[EncryptionStrategy]] = None,
    ):
        """Initialize the service.

        Args:
            active: Strategy used for all new encryption.
            legacy: Strategies kept only to decrypt previously produced data.
        """
        self._registry = StrategyRegistry(active, legacy)

    @property
    def registry(self) -> StrategyRegistry:
        return self._registry

    @property
    def active_strategy_id(self) -> str:
        return self._registry.active_id

    # ------------------------------------------------------------------
    # Detection
    # ------------------------------------------------------------------

    @staticmethod
    def is_encrypted(value: Any) -> bool:
        """Return True if ``value`` is a well-formed encrypted envelope."""
        return is_encrypted_envelope(value)

    # ------------------------------------------------------------------
    # Values
    # ------------------------------------------------------------------

    def encrypt_value(self, value: Any, target: EncryptionTarget = WHOLE_VALUE) -> Any:
        """Encrypt ``value`` or the selected fields of it.

        Already-encrypted values are returned unchanged. With a field target,
        a mapping is shallow-copied and only selected fields that are
        present get encrypted; non-mapping values are encrypted whole.

        Raises:
            EncryptionError: If a value cannot be serialized or encrypted.
        """
        if (
            target.is_whole
            or not isinstance(value, Mapping)
            or is_encrypted_envelope(value)
        ):
            return self._encrypt_whole(value)

        result = dict(value)
        for field in target.fields:
            if field in result:
                result[field] = self._encrypt_whole(result[field])
        return result

    def decrypt_value(self, value: Any, target: EncryptionTarget = WHOLE_VALUE) -> Any:
        """Decrypt ``value`` or the selected fields of it.

        Values that are not envelopes, including plaintext written before
        encryption was enabled, are returned unchanged.

        Raises:
            MalformedEnvelopeError: If a value is marked but malformed.
            UnknownStrategyError: If an envelope names an unregistered strategy.
            DecryptionError: If authentication or decoding fails.
        """
        if (
            target.is_whole
            or not isinstance(value, Mapping)
            or isinstance(decode_value(value), Envelope)
        ):
            return self._decrypt_whole(value)

        result = dict(value)
        for field in target.fields:
            if field in result:
                result[field] = self._decrypt_whole(result[field])
        return result

    def _encrypt_whole(self, value: Any) -> Any:
        if is_encrypted_envelope(value):
            return value

        strategy = self._registry.active
        ciphertext = strategy.encrypt(serialize_value(value))
        return wrap(strategy.identifier, encode_payload(ciphertext))

    def _decrypt_whole(self, value: Any) -> Any:
        decoded = decode_value(value)
        if not isinstance(decoded, Envelope):
            return value

        strategy = self._registry.resolve(decoded.strategy_id)
        plaintext = strategy.decrypt(decode_payload(decoded.payload))
        logger.debug(f"Decrypted payload with strategy {decoded.strategy_id}")
        return deserialize_value(plaintext)

    # ------------------------------------------------------------------
    # Step trees
    # ------------------------------------------------------------------

    def encrypt_steps(
        self,
        steps: Mapping,
        field: str = DEFAULT_STEP_DATA_FIELD,
        target: EncryptionTarget = WHOLE_VALUE,
    ) -> dict:
        """Encrypt the payload field of every step entry.

        Args:
            steps: Mapping of step id to step entry.
            field: Name of the per-step payload field.
            target: Selection applied to each payload.

        Returns:
            New mapping; step ids and all other entry fields are unchanged.
        """
        result = {
            step_id: self._map_step(entry, field, lambda v: self.encrypt_value(v, target))
            for step_id, entry in steps.items()
        }
        logger.debug(f"Encrypted {len(result)} step payload(s)")
        return result

    def decrypt_steps(
        self,
        steps: Mapping,
        field: str = DEFAULT_STEP_DATA_FIELD,
        target: EncryptionTarget = WHOLE_VALUE,
    ) -> dict:
        """Decrypt the payload field of every step entry.

        Entries that are plaintext, carry only an error, or are not mappings
        pass through unchanged.
        """
        result = {
            step_id: self._map_step(entry, field, lambda v: self.decrypt_value(v, target))
            for step_id, entry in steps.items()
        }
        logger.debug(f"Decrypted {len(result)} step payload(s)")
        return result

    @staticmethod
    def _map_step(entry: Any, field: str, transform) -> Any:
        if not isinstance(entry, Mapping) or field not in entry:
            return entry
        updated = dict(entry)
        updated[field] = transform(entry[field])
        return updated

    def __repr__(self) -> str:
        return f"EncryptionService(registry={self._registry!r})"
