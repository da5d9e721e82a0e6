"""Strategy registry.

An ordered, read-only mapping from strategy id to strategy with exactly one
active entry. The active strategy encrypts new data; every registered
strategy can decrypt data tagged with its id.
"""

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Iterable, Iterator, Optional

from workflow_encryption.errors import ConfigurationError, UnknownStrategyError
from workflow_encryption.strategies.base import EncryptionStrategy

logger = logging.getLogger(__name__)


class StrategyRegistry(Mapping):
    """Immutable strategy lookup keyed by strategy id.

    Example:
        >>> registry = StrategyRegistry(LibsodiumStrategy(key), [AesGcmStrategy(old_key)])
        >>> registry.active.identifier
        'libsodium'
        >>> registry.resolve("aes-256-gcm")
        AesGcmStrategy(identifier='aes-256-gcm')
    """

    def __init__(
        self,
        active: EncryptionStrategy,
        legacy: Optional[Iterable[EncryptionStrategy]] = None,
    ):
        """Build the registry.

        Args:
            active: Strategy used for all new encryption.
            legacy: Additional strategies registered only for decryption.

        Raises:
            ConfigurationError: If a strategy has no identifier, or two
                strategies share one.
        """
        strategies = {}
        for strategy in [active, *(legacy or [])]:
            identifier = getattr(strategy, "identifier", None)
            if not isinstance(identifier, str) or not identifier:
                raise ConfigurationError(
                    f"Strategy {type(strategy).__name__} has no string identifier"
                )
            if identifier in strategies:
                raise ConfigurationError(f"Duplicate strategy identifier: {identifier!r}")
            strategies[identifier] = strategy

        self._strategies = MappingProxyType(strategies)
        self._active_id = active.identifier
        logger.debug(
            f"Strategy registry: active={self._active_id}, "
            f"legacy={[s for s in strategies if s != self._active_id]}"
        )

    @property
    def active(self) -> EncryptionStrategy:
        """The strategy used for new encryption."""
        return self._strategies[self._active_id]

    @property
    def active_id(self) -> str:
        return self._active_id

    @property
    def legacy_ids(self) -> list:
        return [s for s in self._strategies if s != self._active_id]

    def resolve(self, strategy_id: str) -> EncryptionStrategy:
        """Look up a strategy by id.

        Raises:
            UnknownStrategyError: If no strategy is registered under the id.
        """
        try:
            return self._strategies[strategy_id]
        except KeyError:
            raise UnknownStrategyError(strategy_id, list(self._strategies)) from None

    def __getitem__(self, strategy_id: str) -> EncryptionStrategy:
        return self._strategies[strategy_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._strategies)

    def __len__(self) -> int:
        return len(self._strategies)

    def __repr__(self) -> str:
        return f"StrategyRegistry(active={self._active_id!r}, legacy={self.legacy_ids!r})"
