"""Exception hierarchy for mapsync.

All library errors inherit from :class:`MapSyncError`. The sync pipeline
itself degrades instead of raising: remote and cache failures are caught at
the per-map or per-collection boundary and recorded on the sync report.
"""

from __future__ import annotations


class MapSyncError(Exception):
    """Base exception for all mapsync errors."""


class ConfigError(MapSyncError):
    """Configuration loading or validation failure."""


class RemoteStoreError(MapSyncError):
    """A remote document store operation failed."""

    def __init__(self, message: str, *, path: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.path = path
        self.status_code = status_code


class RemoteUnavailableError(RemoteStoreError):
    """The remote store cannot be reached (no connectivity, DNS, timeout)."""


class AuthenticationError(RemoteStoreError):
    """Credentials are missing or were rejected by the remote store."""


class CacheStoreError(MapSyncError):
    """A local cache file could not be read or written."""

    def __init__(self, message: str, *, name: str | None = None) -> None:
        super().__init__(message)
        self.name = name


class SyncError(MapSyncError):
    """Engine-level synchronization failure."""
