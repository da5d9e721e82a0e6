"""Marker protocol for encrypted values.

An encrypted value is a JSON object carrying a discriminant, the id of the
strategy that produced it and the base64 ciphertext:

    {"__ENCRYPTED__": true, "__STRATEGY__": "libsodium", "data": "<base64>"}

Incoming values are decoded into one of two variants, ``Plaintext`` or
``Envelope``, before anything branches on them. A value only counts as an
envelope when the discriminant is exactly ``true``; anything else,
including a user object that happens to carry a falsy ``__ENCRYPTED__``
key, is plaintext.
"""

import base64
import binascii
from dataclasses import dataclass
from typing import Any, Mapping, Tuple, Union

from workflow_encryption.errors import DecryptionError, MalformedEnvelopeError

ENCRYPTION_MARKER = "__ENCRYPTED__"
STRATEGY_MARKER = "__STRATEGY__"
PAYLOAD_FIELD = "data"


@dataclass(frozen=True)
class Plaintext:
    """A value that is not encrypted."""

    value: Any


@dataclass(frozen=True)
class Envelope:
    """A well-formed encrypted value."""

    strategy_id: str
    payload: str

    def to_dict(self) -> dict:
        return wrap(self.strategy_id, self.payload)


DecodedValue = Union[Plaintext, Envelope]


def _has_marker(value: Any) -> bool:
    # `is True` so that 1 or "true" stay plaintext
    return isinstance(value, Mapping) and value.get(ENCRYPTION_MARKER) is True


def decode_value(value: Any) -> DecodedValue:
    """Decode ``value`` into ``Plaintext`` or ``Envelope``.

    Raises:
        MalformedEnvelopeError: If the value carries the marker but lacks a
            string strategy id or payload.
    """
    if not _has_marker(value):
        return Plaintext(value)
    strategy_id, payload = unwrap(value)
    return Envelope(strategy_id, payload)


def is_encrypted_envelope(value: Any) -> bool:
    """Return True if ``value`` is a well-formed envelope. Never raises."""
    try:
        unwrap(value)
    except MalformedEnvelopeError:
        return False
    return True


def wrap(strategy_id: str, payload: str) -> dict:
    """Build the envelope structure."""
    return {
        ENCRYPTION_MARKER: True,
        STRATEGY_MARKER: strategy_id,
        PAYLOAD_FIELD: payload,
    }


def unwrap(envelope: Any) -> Tuple[str, str]:
    """Return ``(strategy_id, payload)`` from an envelope.

    Raises:
        MalformedEnvelopeError: If required attributes are missing or of the
            wrong type.
    """
    if not _has_marker(envelope):
        raise MalformedEnvelopeError(f"Value is not marked with {ENCRYPTION_MARKER}")

    strategy_id = envelope.get(STRATEGY_MARKER)
    if not isinstance(strategy_id, str) or not strategy_id:
        raise MalformedEnvelopeError(
            f"Envelope {STRATEGY_MARKER} must be a non-empty string, "
            f"got {type(strategy_id).__name__}"
        )

    payload = envelope.get(PAYLOAD_FIELD)
    if not isinstance(payload, str):
        raise MalformedEnvelopeError(
            f"Envelope {PAYLOAD_FIELD!r} must be a string, got {type(payload).__name__}"
        )

    return strategy_id, payload


def encode_payload(ciphertext: bytes) -> str:
    """Encode ciphertext as standard base64 text."""
    return base64.b64encode(ciphertext).decode("ascii")


def decode_payload(payload: str) -> bytes:
    """Decode base64 payload text.

    Only the canonical encoding is accepted, so two payload texts never
    decode to the same ciphertext.

    Raises:
        DecryptionError: If the text is not valid, canonical base64.
    """
    try:
        decoded = base64.b64decode(payload.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as e:
        raise DecryptionError(f"Invalid base64 payload: {e}") from e
    if encode_payload(decoded) != payload:
        raise DecryptionError("Invalid base64 payload: non-canonical encoding")
    return decoded
