"""Unit tests for encryption strategies.

Tests:
- Encrypt/decrypt roundtrip for both built-in strategies
- Nonce uniqueness
- Wrong key and tampering detection
- Truncated ciphertext
- Strategy factory
"""

import os

import pytest

from workflow_encryption.errors import DecryptionError, UnknownStrategyError
from workflow_encryption.keys import KeyMaterial, generate_key
from workflow_encryption.strategies import (
    AesGcmStrategy,
    EncryptionStrategy,
    LibsodiumStrategy,
    StrategyId,
    create_strategy,
)
from workflow_encryption.strategies.aes_gcm import derive_kek
from workflow_encryption.strategies.libsodium import HEADER_SIZE, NONCE_SIZE

STRATEGY_CLASSES = [LibsodiumStrategy, AesGcmStrategy]


@pytest.fixture(params=STRATEGY_CLASSES, ids=lambda cls: cls.identifier)
def strategy_cls(request):
    return request.param


class TestStrategyIds:
    """Tests for strategy identifiers."""

    def test_libsodium_identifier(self):
        """libsodium strategy is tagged 'libsodium'."""
        assert LibsodiumStrategy("k").identifier == "libsodium"
        assert StrategyId.LIBSODIUM.value == "libsodium"

    def test_aes_gcm_identifier(self):
        """AES-GCM strategy is tagged 'aes-256-gcm'."""
        assert AesGcmStrategy("k").identifier == "aes-256-gcm"

    def test_strategies_implement_protocol(self, strategy_cls):
        """Built-in strategies satisfy the EncryptionStrategy protocol."""
        assert isinstance(strategy_cls("k"), EncryptionStrategy)


class TestRoundtrip:
    """Tests for encrypt/decrypt roundtrip."""

    def test_roundtrip_empty_data(self, strategy_cls):
        """Empty data encrypts and decrypts."""
        strategy = strategy_cls("secret")
        assert strategy.decrypt(strategy.encrypt(b"")) == b""

    def test_roundtrip_small_data(self, strategy_cls):
        """Small data encrypts and decrypts."""
        strategy = strategy_cls("secret")
        assert strategy.decrypt(strategy.encrypt(b'{"foo":"foo"}')) == b'{"foo":"foo"}'

    def test_roundtrip_large_data(self, strategy_cls):
        """Large data encrypts and decrypts."""
        strategy = strategy_cls("secret")
        plaintext = os.urandom(256 * 1024)
        assert strategy.decrypt(strategy.encrypt(plaintext)) == plaintext

    def test_same_key_separate_instances(self, strategy_cls):
        """A new instance with the same key decrypts earlier ciphertext."""
        ciphertext = strategy_cls("secret").encrypt(b"persisted")
        assert strategy_cls("secret").decrypt(ciphertext) == b"persisted"

    def test_ciphertext_unique_per_encryption(self, strategy_cls):
        """Each encryption uses a fresh nonce."""
        strategy = strategy_cls("secret")
        assert strategy.encrypt(b"same") != strategy.encrypt(b"same")

    def test_plaintext_not_in_ciphertext(self, strategy_cls):
        """Ciphertext does not contain the plaintext."""
        strategy = strategy_cls("secret")
        assert b"sensitive data" not in strategy.encrypt(b"sensitive data")


class TestTamperDetection:
    """Tests for authentication failures."""

    def test_wrong_key_fails(self, strategy_cls):
        """Decrypting with another key raises DecryptionError."""
        ciphertext = strategy_cls("right key").encrypt(b"secret")
        with pytest.raises(DecryptionError):
            strategy_cls("wrong key").decrypt(ciphertext)

    def test_every_flipped_byte_fails(self, strategy_cls):
        """Flipping any single byte is detected."""
        strategy = strategy_cls("secret")
        ciphertext = strategy.encrypt(b"payload")
        for index in range(len(ciphertext)):
            tampered = bytearray(ciphertext)
            tampered[index] ^= 0x01
            with pytest.raises(DecryptionError):
                strategy.decrypt(bytes(tampered))

    def test_truncated_ciphertext_fails(self, strategy_cls):
        """Truncated ciphertext raises DecryptionError."""
        strategy = strategy_cls("secret")
        ciphertext = strategy.encrypt(b"payload")
        for length in (0, 10, len(ciphertext) - 1):
            with pytest.raises(DecryptionError):
                strategy.decrypt(ciphertext[:length])

    def test_error_message_hides_key(self, strategy_cls):
        """DecryptionError text does not contain the key."""
        ciphertext = strategy_cls("key-one-abcdef").encrypt(b"x")
        with pytest.raises(DecryptionError) as exc_info:
            strategy_cls("key-two-ghijkl").decrypt(ciphertext)
        assert "key-two-ghijkl" not in str(exc_info.value)


class TestLibsodiumWireFormat:
    """Tests for the secretbox layout."""

    def test_ciphertext_length(self):
        """Ciphertext is nonce + MAC + plaintext length."""
        ciphertext = LibsodiumStrategy("secret").encrypt(b'{"foo":"foo"}')
        assert len(ciphertext) == HEADER_SIZE + 13
        assert NONCE_SIZE == 24


class TestAesGcmKeyDerivation:
    """Tests for AES-GCM key handling."""

    def test_raw_32_byte_key_used_directly(self):
        """A 32-byte key is the KEK."""
        key = generate_key()
        assert derive_kek(KeyMaterial(key)) == key

    def test_short_key_is_stretched(self):
        """Other key lengths are stretched to 32 bytes."""
        kek = derive_kek(KeyMaterial("123"))
        assert len(kek) == 32
        assert kek == derive_kek(KeyMaterial("123"))

    def test_minimum_size(self):
        """Ciphertext carries the 72-byte header and 16-byte tag."""
        assert len(AesGcmStrategy("k").encrypt(b"")) == AesGcmStrategy.HEADER_SIZE + 16


class TestCreateStrategy:
    """Tests for the strategy factory."""

    def test_creates_libsodium(self):
        """Factory creates LibsodiumStrategy."""
        assert isinstance(create_strategy(StrategyId.LIBSODIUM, "k"), LibsodiumStrategy)

    def test_creates_from_string(self):
        """Factory accepts the plain string id."""
        assert isinstance(create_strategy("aes-256-gcm", "k"), AesGcmStrategy)

    def test_unknown_id(self):
        """Unknown id raises UnknownStrategyError."""
        with pytest.raises(UnknownStrategyError) as exc_info:
            create_strategy("rot13", "k")
        assert exc_info.value.strategy_id == "rot13"
