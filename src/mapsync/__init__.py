"""Public API surface for mapsync."""

__version__ = "1.0.0"

from mapsync.cache import CacheState, FileCacheStore
from mapsync.contracts.cache import CacheStore
from mapsync.contracts.config import MapSyncConfig
from mapsync.contracts.document import Document, Value, ValueKind
from mapsync.contracts.exceptions import (
    AuthenticationError,
    CacheStoreError,
    ConfigError,
    MapSyncError,
    RemoteStoreError,
    RemoteUnavailableError,
    SyncError,
)
from mapsync.contracts.models import (
    LocalStaticDataCache,
    LocalVersionCacheEntry,
    MapDescriptor,
    MapVersionRecord,
    StaticCollection,
    StaticDataVersionFlags,
    VersionedCollection,
)
from mapsync.contracts.remote import RemoteStore
from mapsync.contracts.sync import (
    CacheStatus,
    MapSyncOutcome,
    MapVersionCheck,
    StaticSyncOutcome,
    StaticSyncResult,
    SyncReport,
)
from mapsync.engine import SyncOrchestrator
from mapsync.engine.progress import SyncPhase, SyncProgress
from mapsync.providers import FirestoreStore, InMemoryRemoteStore, create_remote_store
from mapsync.sdk import MapSync, load_config

__all__ = [
    "AuthenticationError",
    "CacheState",
    "CacheStatus",
    "CacheStore",
    "CacheStoreError",
    "ConfigError",
    "Document",
    "FileCacheStore",
    "FirestoreStore",
    "InMemoryRemoteStore",
    "LocalStaticDataCache",
    "LocalVersionCacheEntry",
    "MapDescriptor",
    "MapSync",
    "MapSyncConfig",
    "MapSyncError",
    "MapSyncOutcome",
    "MapVersionCheck",
    "MapVersionRecord",
    "RemoteStore",
    "RemoteStoreError",
    "RemoteUnavailableError",
    "StaticCollection",
    "StaticDataVersionFlags",
    "StaticSyncOutcome",
    "StaticSyncResult",
    "SyncError",
    "SyncOrchestrator",
    "SyncPhase",
    "SyncProgress",
    "SyncReport",
    "Value",
    "ValueKind",
    "VersionedCollection",
    "create_remote_store",
    "load_config",
]
