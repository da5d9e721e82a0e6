"""
Pytest fixtures and configuration for workflow encryption tests.
Provides shared keys, strategies and services.
"""

import pytest

from workflow_encryption.service import EncryptionService
from workflow_encryption.strategies import AesGcmStrategy, LibsodiumStrategy

TEST_KEY = "123"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep host environment variables out of config loading."""
    for name in (
        "WORKFLOW_ENCRYPTION_KEY",
        "WORKFLOW_ENCRYPTION_KEY_FILE",
        "WORKFLOW_ENCRYPTION_STRATEGY",
        "WORKFLOW_ENCRYPTION_ENCRYPT_EVENT_DATA",
        "WORKFLOW_ENCRYPTION_LEGACY_STRATEGIES",
        "WORKFLOW_ENCRYPTION_EVENT_FIELDS",
        "WORKFLOW_ENCRYPTION_STEP_FIELDS",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def key() -> str:
    return TEST_KEY


@pytest.fixture
def libsodium(key) -> LibsodiumStrategy:
    return LibsodiumStrategy(key)


@pytest.fixture
def aes_gcm(key) -> AesGcmStrategy:
    return AesGcmStrategy(key)


@pytest.fixture
def service(libsodium) -> EncryptionService:
    """Service with the default active strategy and no legacy strategies."""
    return EncryptionService(libsodium)
