"""Configuration for workflow payload encryption.

This module provides the configuration model consumed when the encryption
service and its hooks are constructed, either directly or from environment
variables.
"""

import os
from pathlib import Path
from typing import TYPE_CHECKING, Any, List, Optional

from pydantic import BaseModel, ConfigDict, SecretStr, field_validator

from workflow_encryption.errors import ConfigurationError
from workflow_encryption.keys import KeyMaterial
from workflow_encryption.service import DEFAULT_STEP_DATA_FIELD, EncryptionService
from workflow_encryption.strategies import EncryptionStrategy, StrategyId, create_strategy
from workflow_encryption.target import EncryptionTarget

if TYPE_CHECKING:
    from workflow_encryption.middleware import EncryptionMiddleware

ENV_PREFIX = "WORKFLOW_ENCRYPTION_"

_TRUTHY = {"1", "true", "yes", "on"}


def _split_list(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class EncryptionConfig(BaseModel):
    """Configuration for the encryption service and middleware.

    Attributes:
        key: Passphrase the active strategy derives its cipher key from,
            used as-is (a keygen key belongs in ``key_file``)
        key_file: File holding a 32-byte key (raw, base64, or hex), used when
            ``key`` is not set
        strategy: Built-in strategy used for new encryption
        encrypt_event_data: Encrypt the ``data`` of outbound events
        legacy_strategies: Strategy instances registered for decryption only
        legacy_strategy_ids: Built-in strategies registered for decryption
            only, bound to the same key material
        event_fields: Top-level event data fields to encrypt (None = whole)
        step_fields: Top-level step payload fields to encrypt (None = whole)
        step_data_field: Name of the payload field in step entries

    Example:
        >>> config = EncryptionConfig(key="my secret", encrypt_event_data=True)
        >>> middleware = config.build_middleware()
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    key: Optional[SecretStr] = None
    key_file: Optional[Path] = None
    strategy: StrategyId = StrategyId.LIBSODIUM
    encrypt_event_data: bool = False
    legacy_strategies: List[Any] = []
    legacy_strategy_ids: List[StrategyId] = []
    event_fields: Optional[List[str]] = None
    step_fields: Optional[List[str]] = None
    step_data_field: str = DEFAULT_STEP_DATA_FIELD

    @field_validator("key_file", mode="before")
    @classmethod
    def convert_key_file(cls, v):
        """Convert string paths to Path objects."""
        if isinstance(v, str):
            return Path(v) if v else None
        return v

    @field_validator("key", mode="before")
    @classmethod
    def empty_key_is_missing(cls, v):
        """Treat an empty key the same as no key."""
        if isinstance(v, str) and not v:
            return None
        return v

    @field_validator("legacy_strategies")
    @classmethod
    def validate_legacy_strategies(cls, v: List[Any]) -> List[Any]:
        """Require strategy objects (identifier + encrypt + decrypt)."""
        for strategy in v:
            if not isinstance(strategy, EncryptionStrategy):
                raise ValueError(
                    f"legacy_strategies entries must implement EncryptionStrategy, "
                    f"got {type(strategy).__name__}"
                )
        return v

    @field_validator("step_data_field")
    @classmethod
    def validate_step_data_field(cls, v: str) -> str:
        if not v:
            raise ValueError("step_data_field must not be empty")
        return v

    def key_material(self) -> KeyMaterial:
        """Resolve the configured key.

        Raises:
            ConfigurationError: If neither ``key`` nor ``key_file`` is set, or
                the key file is unusable.
        """
        if self.key is not None:
            return KeyMaterial(self.key.get_secret_value())
        if self.key_file is not None:
            return KeyMaterial.from_file(self.key_file)
        raise ConfigurationError("Missing encryption key")

    @property
    def event_target(self) -> EncryptionTarget:
        return EncryptionTarget.from_fields(self.event_fields)

    @property
    def step_target(self) -> EncryptionTarget:
        return EncryptionTarget.from_fields(self.step_fields)

    def build_service(self) -> EncryptionService:
        """Create the encryption service described by this config.

        Raises:
            ConfigurationError: If the key is missing or the strategies clash.
        """
        key = self.key_material()
        active = create_strategy(self.strategy, key)
        legacy = [
            create_strategy(strategy_id, key)
            for strategy_id in self.legacy_strategy_ids
            if strategy_id != self.strategy
        ]
        legacy.extend(self.legacy_strategies)
        return EncryptionService(active, legacy)

    def build_middleware(self) -> "EncryptionMiddleware":
        """Create the hook adapter described by this config."""
        from workflow_encryption.middleware import EncryptionMiddleware

        return EncryptionMiddleware(
            self.build_service(),
            encrypt_event_data=self.encrypt_event_data,
            event_target=self.event_target,
            step_target=self.step_target,
            step_data_field=self.step_data_field,
        )

    @classmethod
    def from_env(cls, prefix: str = ENV_PREFIX, **overrides) -> "EncryptionConfig":
        """Create config from environment variables.

        Environment variables:
            {prefix}KEY: Encryption secret
            {prefix}KEY_FILE: Path to a key file
            {prefix}STRATEGY: Active strategy id
            {prefix}ENCRYPT_EVENT_DATA: "true"/"1" to encrypt event data
            {prefix}LEGACY_STRATEGIES: Comma-separated decrypt-only strategy ids
            {prefix}EVENT_FIELDS: Comma-separated event data fields
            {prefix}STEP_FIELDS: Comma-separated step payload fields

        Args:
            prefix: Environment variable prefix (default: WORKFLOW_ENCRYPTION_)
            **overrides: Values that take precedence over the environment.
                An explicit ``key`` or ``key_file`` replaces both key
                variables, so an environment key never shadows a key file.

        Returns:
            EncryptionConfig with values from environment
        """
        kwargs = {}

        key = os.getenv(f"{prefix}KEY")
        if key:
            kwargs["key"] = key

        key_file = os.getenv(f"{prefix}KEY_FILE")
        if key_file:
            kwargs["key_file"] = Path(key_file)

        strategy = os.getenv(f"{prefix}STRATEGY")
        if strategy:
            kwargs["strategy"] = StrategyId(strategy.strip().lower())

        encrypt_event_data = os.getenv(f"{prefix}ENCRYPT_EVENT_DATA")
        if encrypt_event_data:
            kwargs["encrypt_event_data"] = encrypt_event_data.strip().lower() in _TRUTHY

        legacy = os.getenv(f"{prefix}LEGACY_STRATEGIES")
        if legacy:
            kwargs["legacy_strategy_ids"] = [StrategyId(s.lower()) for s in _split_list(legacy)]

        event_fields = os.getenv(f"{prefix}EVENT_FIELDS")
        if event_fields:
            kwargs["event_fields"] = _split_list(event_fields)

        step_fields = os.getenv(f"{prefix}STEP_FIELDS")
        if step_fields:
            kwargs["step_fields"] = _split_list(step_fields)

        explicit = {k: v for k, v in overrides.items() if v is not None}
        if "key" in explicit or "key_file" in explicit:
            kwargs.pop("key", None)
            kwargs.pop("key_file", None)
        kwargs.update(explicit)
        return cls(**kwargs)
