"""Flag-driven selective sync of the campus-wide static collections."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from mapsync.cache.state import CacheState
from mapsync.contracts.exceptions import CacheStoreError, RemoteStoreError
from mapsync.contracts.models import LocalStaticDataCache, StaticCollection, StaticDataVersionFlags
from mapsync.contracts.remote import RemoteStore
from mapsync.contracts.sync import StaticSyncOutcome, StaticSyncResult
from mapsync.engine.progress import NullSyncProgress, SyncPhase, SyncProgress
from mapsync.engine.utils import ConcurrencyLimit, normalize_document
from mapsync.utils import dump_json, epoch_now

_LOG = logging.getLogger(__name__)

STATIC_VERSIONS_COLLECTION = "StaticDataVersions"
GLOBAL_INFO_DOCUMENT = "GlobalInfo"
LAST_CHECK_FIELD = "last_check"


def select_collections(flags: StaticDataVersionFlags, local: LocalStaticDataCache | None) -> list[StaticCollection]:
    """Collections to sync: flagged remotely, never synced locally, or no local cache at all."""
    return [
        collection
        for collection in StaticCollection
        if flags.is_updated(collection) or local is None or not local.is_synced(collection)
    ]


class StaticDataReconciler:
    def __init__(
        self,
        remote: RemoteStore,
        cache: CacheState,
        *,
        limit: ConcurrencyLimit | None = None,
        progress: SyncProgress | None = None,
        clock: Callable[[], int] = epoch_now,
    ) -> None:
        self._remote = remote
        self._cache = cache
        self._limit = limit or ConcurrencyLimit()
        self._progress: SyncProgress = progress or NullSyncProgress()
        self._clock = clock

    async def check_static_flags(self) -> tuple[bool, StaticDataVersionFlags]:
        document = await self._limit.run(self._remote.get_document(STATIC_VERSIONS_COLLECTION, GLOBAL_INFO_DOCUMENT))
        if document is None:
            _LOG.info("No static data flags on remote; bootstrapping every static collection")
            return True, StaticDataVersionFlags.all_set()

        flags = StaticDataVersionFlags(
            infrastructure_updated=document.flag(StaticCollection.INFRASTRUCTURE.remote_flag),
            categories_updated=document.flag(StaticCollection.CATEGORIES.remote_flag),
            campus_updated=document.flag(StaticCollection.CAMPUS.remote_flag),
            last_check=document.first_epoch_seconds(LAST_CHECK_FIELD),
        )
        local = await self._cache.load_static_cache()
        has_local_cache = local is not None
        # A cache file exists but nothing was ever synced and no remote flag is raised.
        bootstrap_needed = local is not None and not local.any_synced() and not flags.any_updated()
        needs_update = not has_local_cache or bootstrap_needed or flags.any_updated()
        return needs_update, flags

    async def sync_selectively(self, flags: StaticDataVersionFlags) -> StaticSyncResult:
        """Sync the selected collections concurrently and settle local and remote flags.

        Local ``_synced`` flags are set and remote ``_updated`` flags are cleared
        only for collections whose write was read back successfully. The remote
        ``last_check`` stamp is written regardless.
        """
        result = StaticSyncResult(needs_update=True)
        local = await self._cache.load_static_cache()
        selected = select_collections(flags, local)
        if not selected:
            return result

        _LOG.info("Syncing static collections: %s", ", ".join(collection.value for collection in selected))
        self._progress.phase_start(SyncPhase.STATIC, total=len(selected))
        try:
            async with asyncio.TaskGroup() as tg:
                tasks = [tg.create_task(self._sync_collection_guarded(collection)) for collection in selected]
            self._progress.phase_done(SyncPhase.STATIC)
        except BaseException as exc:
            self._progress.phase_error(SyncPhase.STATIC, exc)
            raise
        result.outcomes = [task.result() for task in tasks]

        verified = result.verified
        try:
            await self._mark_synced(local, verified)
        except CacheStoreError as exc:
            _LOG.warning("Could not update local static data cache: %s", exc)
            result.error = str(exc)

        try:
            result.flags_reset = await self._reset_remote_flags(verified)
        except RemoteStoreError as exc:
            _LOG.warning("Could not reset remote static data flags: %s", exc)
            result.error = str(exc)
        return result

    async def reconcile(self) -> StaticSyncResult:
        try:
            needs_update, flags = await self.check_static_flags()
        except RemoteStoreError as exc:
            _LOG.warning("Static data flag check failed; keeping cached static data: %s", exc)
            return StaticSyncResult(needs_update=False, error=str(exc))
        if not needs_update:
            _LOG.info("Static data is up to date")
            return StaticSyncResult(needs_update=False)
        return await self.sync_selectively(flags)

    async def sync_collection(self, collection: StaticCollection) -> StaticSyncOutcome:
        """Replace the collection's local file and confirm it reads back non-empty."""
        documents = await self._limit.run(self._remote.list_collection(collection.value))
        payload = [normalize_document(document) for document in documents]
        await self._cache.store.write_text(collection.file_name, dump_json(payload))
        content = await self._cache.store.read_text(collection.file_name)
        verified = bool(content and content.strip())
        if not verified:
            _LOG.warning("Read-back of %s came back empty", collection.file_name)
        return StaticSyncOutcome(collection=collection, verified=verified, document_count=len(payload))

    async def _sync_collection_guarded(self, collection: StaticCollection) -> StaticSyncOutcome:
        try:
            return await self.sync_collection(collection)
        except (RemoteStoreError, CacheStoreError) as exc:
            _LOG.warning("Static sync of %s failed: %s", collection.value, exc)
            return StaticSyncOutcome(collection=collection, error=str(exc))
        finally:
            self._progress.item_done(SyncPhase.STATIC)

    async def _mark_synced(self, local: LocalStaticDataCache | None, verified: list[StaticCollection]) -> None:
        cache = local if local is not None else LocalStaticDataCache()
        updates: dict[str, Any] = {collection.local_flag: True for collection in verified}
        updates["cache_timestamp"] = self._clock()
        await self._cache.save_static_cache(cache.model_copy(update=updates))

    async def _reset_remote_flags(self, verified: list[StaticCollection]) -> list[str]:
        fields: dict[str, Any] = {collection.remote_flag: False for collection in verified}
        fields[LAST_CHECK_FIELD] = self._clock()
        await self._remote.update_fields(STATIC_VERSIONS_COLLECTION, GLOBAL_INFO_DOCUMENT, fields=fields)
        return [collection.remote_flag for collection in verified]
