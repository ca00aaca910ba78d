"""Sequences catalog, version and static-data reconciliation into one sync run."""

from __future__ import annotations

import logging
from collections.abc import Callable

from mapsync.cache.state import CacheState
from mapsync.contracts.cache import CacheStore
from mapsync.contracts.exceptions import CacheStoreError, RemoteStoreError
from mapsync.contracts.remote import RemoteStore
from mapsync.contracts.sync import SyncReport
from mapsync.engine.catalog import MapCatalogSync
from mapsync.engine.progress import NullSyncProgress, SyncPhase, SyncProgress
from mapsync.engine.static import StaticDataReconciler
from mapsync.engine.utils import ConcurrencyLimit
from mapsync.engine.versions import VersionReconciler
from mapsync.utils import epoch_now

_LOG = logging.getLogger(__name__)


class SyncOrchestrator:
    """Owns one remote store and one cache store and reconciles the latter against the former.

    The remote store is expected to be open already (``async with remote``).
    """

    def __init__(
        self,
        remote: RemoteStore,
        cache_store: CacheStore,
        *,
        commit_partial_versions: bool = True,
        cleanup_unused_map_files: bool = True,
        max_concurrent: int | None = None,
        progress: SyncProgress | None = None,
        clock: Callable[[], int] = epoch_now,
    ) -> None:
        self._remote = remote
        self._cache = CacheState(cache_store)
        self._cleanup_unused_map_files = cleanup_unused_map_files
        self._progress: SyncProgress = progress or NullSyncProgress()

        limit = ConcurrencyLimit(max_concurrent)
        self.catalog = MapCatalogSync(remote, self._cache)
        self.versions = VersionReconciler(
            remote,
            self._cache,
            commit_partial_versions=commit_partial_versions,
            limit=limit,
            progress=self._progress,
            clock=clock,
        )
        self.static = StaticDataReconciler(remote, self._cache, limit=limit, progress=self._progress, clock=clock)

    @property
    def cache(self) -> CacheState:
        return self._cache

    async def check_and_sync(self, on_complete: Callable[[SyncReport], None] | None = None) -> SyncReport:
        """Run one full reconciliation.

        Remote and cache failures never escape: they degrade to the cached
        state and are listed in ``SyncReport.errors``. *on_complete* is
        invoked exactly once, after both stages finish or the run is cut short.
        """
        report = SyncReport()
        try:
            await self._run(report)
        finally:
            report.errors = _collect_errors(report)
            if on_complete is not None:
                on_complete(report)
        return report

    async def _run(self, report: SyncReport) -> None:
        if not await self._remote_ready():
            _LOG.warning("Remote store not ready; keeping cached data")
            report.remote_ready = False
            return

        self._progress.phase_start(SyncPhase.CATALOG)
        catalog = await self.catalog.sync_catalog()
        self._progress.phase_done(SyncPhase.CATALOG)
        report.catalog_size = len(catalog)
        if not catalog:
            _LOG.info("Map catalog is empty; nothing to reconcile")
            return

        if self._cleanup_unused_map_files:
            try:
                report.removed_files = await self._cache.cleanup_unused_map_files(
                    descriptor.map_id for descriptor in catalog
                )
            except CacheStoreError as exc:
                _LOG.warning("Skipping cleanup of unused map files: %s", exc)

        report.checks, report.map_syncs = await self.versions.check_all_map_versions(catalog)
        report.static = await self.static.reconcile()
        _LOG.info(
            "Sync complete: %d map(s) updated, %d static collection(s) refreshed",
            len(report.maps_updated),
            len(report.collections_synced),
        )

    async def _remote_ready(self) -> bool:
        try:
            return await self._remote.is_ready()
        except RemoteStoreError as exc:
            _LOG.warning("Remote readiness check failed: %s", exc)
            return False


def _collect_errors(report: SyncReport) -> list[str]:
    errors = [f"check {check.map_id}: {check.error}" for check in report.checks if check.error]
    errors.extend(f"sync {outcome.map_id}: {outcome.error}" for outcome in report.map_syncs if outcome.error)
    if report.static is not None:
        errors.extend(
            f"static {outcome.collection.value}: {outcome.error}" for outcome in report.static.outcomes if outcome.error
        )
        if report.static.error:
            errors.append(f"static: {report.static.error}")
    return errors
