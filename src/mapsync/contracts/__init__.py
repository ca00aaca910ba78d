"""Public contracts for mapsync."""

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

__all__ = [
    "AuthenticationError",
    "CacheStatus",
    "CacheStore",
    "CacheStoreError",
    "ConfigError",
    "Document",
    "LocalStaticDataCache",
    "LocalVersionCacheEntry",
    "MapDescriptor",
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
    "SyncReport",
    "Value",
    "ValueKind",
    "VersionedCollection",
]
