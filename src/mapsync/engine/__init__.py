"""Sync engine: catalog, version and static-data reconciliation."""

from .catalog import MapCatalogSync
from .orchestrator import SyncOrchestrator
from .progress import NullSyncProgress, SyncProgress
from .static import StaticDataReconciler
from .versions import VersionReconciler

__all__ = [
    "MapCatalogSync",
    "NullSyncProgress",
    "StaticDataReconciler",
    "SyncOrchestrator",
    "SyncProgress",
    "VersionReconciler",
]
