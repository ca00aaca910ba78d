"""Factory for creating remote store instances.

Decouples store selection from store implementation: the SDK asks for a store
by the configured provider name without importing concrete backends.
"""

from __future__ import annotations

from collections.abc import Callable

from mapsync.contracts.config import MapSyncConfig
from mapsync.contracts.remote import RemoteStore
from mapsync.providers.firestore import FirestoreStore
from mapsync.providers.memory import InMemoryRemoteStore


def _create_firestore(config: MapSyncConfig, token: str) -> RemoteStore:
    return FirestoreStore(
        project_id=config.project_id or "",
        database=config.database,
        base_url=config.base_url,
        token=token or None,
        api_key=config.api_key,
        page_size=config.page_size,
        max_retries=config.max_retries,
        timeout=config.timeout_seconds,
    )


def _create_memory(config: MapSyncConfig, token: str) -> RemoteStore:
    if config.seed_path is None:
        return InMemoryRemoteStore()
    return InMemoryRemoteStore.from_file(config.seed_path)


_REGISTRY: dict[str, Callable[[MapSyncConfig, str], RemoteStore]] = {
    "firestore": _create_firestore,
    "memory": _create_memory,
}


def create_remote_store(config: MapSyncConfig, *, token: str = "") -> RemoteStore:
    """Create the remote store named by ``config.provider``.

    The returned store is an async context manager::

        async with create_remote_store(config, token=token) as remote:
            maps = await remote.list_collection("Maps")

    Raises:
        ValueError: If the provider name is not registered.
        ConfigError: If the memory provider's seed file cannot be loaded.
    """
    factory = _REGISTRY.get(config.provider)
    if factory is None:
        available = ", ".join(sorted(_REGISTRY))
        raise ValueError(f"Unknown provider: {config.provider!r}. Available: {available}")
    return factory(config, token)
