"""Encryption strategies.

Usage:
    from workflow_encryption.strategies import StrategyId, create_strategy

    strategy = create_strategy(StrategyId.LIBSODIUM, "my secret")
"""

from typing import Union

from workflow_encryption.errors import UnknownStrategyError
from workflow_encryption.keys import KeyLike
from workflow_encryption.strategies.aes_gcm import AesGcmStrategy
from workflow_encryption.strategies.base import EncryptionStrategy, StrategyId
from workflow_encryption.strategies.libsodium import LibsodiumStrategy

_BUILTIN_STRATEGIES = {
    StrategyId.LIBSODIUM: LibsodiumStrategy,
    StrategyId.AES_256_GCM: AesGcmStrategy,
}


def create_strategy(strategy_id: Union[StrategyId, str], key: KeyLike) -> EncryptionStrategy:
    """Create a built-in strategy bound to ``key``.

    Raises:
        UnknownStrategyError: If ``strategy_id`` names no built-in strategy.
        ConfigurationError: If the key is missing or invalid.
    """
    try:
        strategy_id = StrategyId(strategy_id)
    except ValueError:
        raise UnknownStrategyError(
            str(strategy_id), [s.value for s in _BUILTIN_STRATEGIES]
        ) from None
    return _BUILTIN_STRATEGIES[strategy_id](key)


__all__ = [
    "AesGcmStrategy",
    "EncryptionStrategy",
    "LibsodiumStrategy",
    "StrategyId",
    "create_strategy",
]
