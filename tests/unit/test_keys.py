"""Unit tests for key material handling.

Tests:
- KeyMaterial wrapping and redaction
- Key generation
- Key file loading (raw, base64, hex)
"""

import base64
from pathlib import Path

import pytest

from workflow_encryption.errors import ConfigurationError
from workflow_encryption.keys import (
    KEY_SIZE,
    KeyMaterial,
    encode_key,
    generate_key,
    generate_key_file,
    load_key_file,
)


class TestKeyMaterial:
    """Tests for the KeyMaterial wrapper."""

    def test_accepts_str(self):
        """String secrets are stored as UTF-8 bytes."""
        assert KeyMaterial("123").reveal() == b"123"

    def test_accepts_bytes(self):
        """Byte secrets are stored unchanged."""
        assert KeyMaterial(b"\x00\x01").reveal() == b"\x00\x01"

    def test_empty_secret_rejected(self):
        """Empty secret is a configuration error."""
        with pytest.raises(ConfigurationError, match="Missing encryption key"):
            KeyMaterial("")

    def test_none_rejected_by_coerce(self):
        """coerce(None) is a configuration error."""
        with pytest.raises(ConfigurationError, match="Missing encryption key"):
            KeyMaterial.coerce(None)

    def test_wrong_type_rejected(self):
        """Non str/bytes secrets are rejected."""
        with pytest.raises(ConfigurationError, match="must be str or bytes"):
            KeyMaterial(12345)

    def test_coerce_returns_same_instance(self):
        """coerce() passes KeyMaterial through."""
        key = KeyMaterial("secret")
        assert KeyMaterial.coerce(key) is key

    def test_repr_is_redacted(self):
        """repr and str never show the secret."""
        key = KeyMaterial("super-secret-value")
        assert "super-secret-value" not in repr(key)
        assert "super-secret-value" not in str(key)

    def test_equality_compares_secret(self):
        """Two wrappers of the same secret are equal."""
        assert KeyMaterial("a") == KeyMaterial(b"a")
        assert KeyMaterial("a") != KeyMaterial("b")


class TestKeyGeneration:
    """Tests for key generation functions."""

    def test_generate_key_returns_correct_length(self):
        """Generated key is 32 bytes."""
        assert len(generate_key()) == KEY_SIZE

    def test_generate_key_is_random(self):
        """Each generated key is unique."""
        assert len({generate_key() for _ in range(10)}) == 10

    def test_encode_key_invalid_format(self):
        """encode_key raises for invalid format."""
        with pytest.raises(ValueError, match="Invalid format"):
            encode_key(generate_key(), "pem")

    @pytest.mark.parametrize("format", ["raw", "base64", "hex"])
    def test_generate_key_file_loads_back(self, tmp_path: Path, format: str):
        """Key files in every format load back as 32 bytes."""
        key_path = tmp_path / "test.key"
        generate_key_file(key_path, format=format)
        assert len(load_key_file(key_path)) == KEY_SIZE


class TestLoadKeyFile:
    """Tests for load_key_file."""

    def test_raw_key(self, tmp_path: Path):
        """Raw 32-byte file is returned as-is."""
        key = generate_key()
        key_path = tmp_path / "raw.key"
        key_path.write_bytes(key)
        assert load_key_file(key_path) == key

    def test_base64_key_with_newline(self, tmp_path: Path):
        """Base64 key with trailing newline is decoded."""
        key = generate_key()
        key_path = tmp_path / "b64.key"
        key_path.write_text(base64.b64encode(key).decode("ascii") + "\n")
        assert load_key_file(key_path) == key

    def test_hex_key(self, tmp_path: Path):
        """Hex key is decoded."""
        key = generate_key()
        key_path = tmp_path / "hex.key"
        key_path.write_text(key.hex())
        assert load_key_file(key_path) == key

    def test_missing_file(self, tmp_path: Path):
        """Missing key file is a configuration error."""
        with pytest.raises(ConfigurationError, match="not found"):
            load_key_file(tmp_path / "nonexistent.key")

    def test_invalid_content(self, tmp_path: Path):
        """Content that decodes to the wrong size is rejected."""
        key_path = tmp_path / "bad.key"
        key_path.write_text("not a valid key")
        with pytest.raises(ConfigurationError, match="must contain 32 bytes"):
            load_key_file(key_path)

    def test_from_file_wraps_key(self, tmp_path: Path):
        """KeyMaterial.from_file returns the loaded bytes."""
        key = generate_key()
        key_path = tmp_path / "raw.key"
        key_path.write_bytes(key)
        assert KeyMaterial.from_file(key_path).reveal() == key
