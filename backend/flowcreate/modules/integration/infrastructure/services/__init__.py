"""Integration infrastructure services."""

from .locks import AggregateLockRegistry
from .secret_resolver import EnvironmentSecretResolver, StaticSecretResolver
from .sync_target_store import InMemorySyncTargetStore

__all__ = [
    "AggregateLockRegistry",
    "EnvironmentSecretResolver",
    "InMemorySyncTargetStore",
    "StaticSecretResolver",
]
