"""Key material handling.

Key material is whatever secret the caller configures: a passphrase-like
string, raw bytes, or the contents of a key file. Each strategy derives its
own cipher key from it, so the same secret can feed several strategies.
"""

import base64
import secrets
from pathlib import Path
from typing import Union

from workflow_encryption.errors import ConfigurationError


# Constants
KEY_SIZE = 32  # 256 bits

KeyLike = Union["KeyMaterial", str, bytes]


class KeyMaterial:
    """Opaque wrapper around a secret.

    The secret is only reachable through ``reveal()``; ``repr`` and ``str``
    are redacted so the key never ends up in logs or tracebacks.

    Example:
        >>> key = KeyMaterial("correct horse battery staple")
        >>> repr(key)
        "KeyMaterial('**********')"
    """

    __slots__ = ("_secret",)

    def __init__(self, secret: Union[str, bytes]):
        if isinstance(secret, KeyMaterial):
            secret = secret.reveal()
        if isinstance(secret, str):
            secret = secret.encode("utf-8")
        if not isinstance(secret, (bytes, bytearray)):
            raise ConfigurationError(
                f"Encryption key must be str or bytes, got {type(secret).__name__}"
            )
        if not secret:
            raise ConfigurationError("Missing encryption key")
        self._secret = bytes(secret)

    @classmethod
    def coerce(cls, key: KeyLike) -> "KeyMaterial":
        """Return ``key`` as KeyMaterial, wrapping raw str/bytes."""
        if isinstance(key, cls):
            return key
        if key is None:
            raise ConfigurationError("Missing encryption key")
        return cls(key)

    @classmethod
    def from_file(cls, path: Path) -> "KeyMaterial":
        """Load key material from a key file (see ``load_key_file``)."""
        return cls(load_key_file(path))

    def reveal(self) -> bytes:
        """Return the raw secret bytes."""
        return self._secret

    def __len__(self) -> int:
        return len(self._secret)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KeyMaterial):
            return NotImplemented
        return secrets.compare_digest(self._secret, other._secret)

    def __hash__(self) -> int:
        return hash((KeyMaterial, len(self._secret)))

    def __repr__(self) -> str:
        return "KeyMaterial('**********')"

    __str__ = __repr__


def load_key_file(path: Path) -> bytes:
    """Load a 32-byte key from file.

    Args:
        path: File containing the key as raw bytes, base64 or hex text.

    Returns:
        32-byte key.

    Raises:
        ConfigurationError: If the file cannot be read or holds no valid key.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Key file not found: {path}")

    try:
        raw_content = path.read_bytes()
    except OSError as e:
        raise ConfigurationError(f"Failed to read key file: {e}") from e

    if len(raw_content) == KEY_SIZE:
        return raw_content

    stripped = raw_content.strip()

    try:
        decoded = base64.b64decode(stripped, validate=True)
        if len(decoded) == KEY_SIZE:
            return decoded
    except ValueError:
        pass

    try:
        decoded = bytes.fromhex(stripped.decode("ascii"))
        if len(decoded) == KEY_SIZE:
            return decoded
    except ValueError:
        pass

    raise ConfigurationError(
        f"Key file must contain {KEY_SIZE} bytes "
        f"(raw, base64, or hex encoded), got {len(raw_content)} bytes"
    )


def generate_key() -> bytes:
    """Generate a new 256-bit key.

    Returns:
        32 bytes of cryptographically secure random data.
    """
    return secrets.token_bytes(KEY_SIZE)


def encode_key(key: bytes, format: str = "base64") -> bytes:
    """Encode a key for storage: "raw", "base64", or "hex".

    Raises:
        ValueError: If format is invalid.
    """
    if format == "raw":
        return key
    if format == "base64":
        return base64.b64encode(key)
    if format == "hex":
        return key.hex().encode("ascii")
    raise ValueError(f"Invalid format: {format}. Use 'raw', 'base64', or 'hex'")


def generate_key_file(path: Path, format: str = "raw") -> None:
    """Generate a new key and save it to ``path``.

    Raises:
        ValueError: If format is invalid.
        OSError: If the file cannot be written.
    """
    encoded = encode_key(generate_key(), format)
    Path(path).write_bytes(encoded)
