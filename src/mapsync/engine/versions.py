"""Per-map version reconciliation for the versioned navigation-graph collections."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable

from mapsync.cache.state import CacheState
from mapsync.contracts.exceptions import CacheStoreError, RemoteStoreError
from mapsync.contracts.models import (
    DEFAULT_MAP_NAME,
    LocalVersionCacheEntry,
    MapDescriptor,
    MapVersionRecord,
    VersionedCollection,
)
from mapsync.contracts.remote import RemoteStore
from mapsync.contracts.sync import MapSyncOutcome, MapVersionCheck
from mapsync.engine.progress import NullSyncProgress, SyncPhase, SyncProgress
from mapsync.engine.utils import ConcurrencyLimit, resolve_version_record, versioned_payload
from mapsync.utils import epoch_now

_LOG = logging.getLogger(__name__)

MAP_VERSIONS_COLLECTION = "MapVersions"
VERSIONS_SUBCOLLECTION = "versions"


class VersionReconciler:
    def __init__(
        self,
        remote: RemoteStore,
        cache: CacheState,
        *,
        commit_partial_versions: bool = True,
        limit: ConcurrencyLimit | None = None,
        progress: SyncProgress | None = None,
        clock: Callable[[], int] = epoch_now,
    ) -> None:
        self._remote = remote
        self._cache = cache
        self._commit_partial_versions = commit_partial_versions
        self._limit = limit or ConcurrencyLimit()
        self._progress: SyncProgress = progress or NullSyncProgress()
        self._clock = clock

    async def check_map_version(self, map_id: str) -> tuple[bool, MapVersionRecord | None]:
        document = await self._limit.run(self._remote.get_document(MAP_VERSIONS_COLLECTION, map_id))
        if document is None:
            _LOG.warning("No version record for map %s; skipping", map_id)
            return False, None

        record = resolve_version_record(map_id, document, now=self._clock())
        local = await self._cache.load_version_cache(map_id)
        needs_update = local is None or local.cached_version != record.current_version
        if needs_update:
            cached = local.cached_version if local is not None else None
            _LOG.info("Map %s needs update: cached=%s remote=%s", map_id, cached, record.current_version)
        return needs_update, record

    async def sync_map_version(self, record: MapVersionRecord) -> MapSyncOutcome:
        """Write the versioned collections of *record* and commit the version locally.

        A missing version snapshot is a no-op. A snapshot missing one of the
        collections still commits unless ``commit_partial_versions`` is off. A
        failed local write leaves the cached version untouched so the next run
        retries the map.

        Raises:
            RemoteStoreError: If the version snapshot cannot be fetched.
        """
        outcome = MapSyncOutcome(map_id=record.map_id, version=record.current_version)
        snapshot = await self._limit.run(
            self._remote.get_document(
                MAP_VERSIONS_COLLECTION, record.map_id, VERSIONS_SUBCOLLECTION, record.current_version
            )
        )
        if snapshot is None:
            _LOG.warning("Version %s of map %s not found; nothing synced", record.current_version, record.map_id)
            return outcome

        for collection in VersionedCollection:
            value = snapshot.get(collection.key)
            if value is None:
                _LOG.warning(
                    "Version %s of map %s has no %s data", record.current_version, record.map_id, collection.key
                )
                outcome.skipped.append(collection.value)
                continue
            try:
                await self._cache.write_json(collection.file_name(record.map_id), versioned_payload(value))
            except CacheStoreError as exc:
                outcome.error = str(exc)
                _LOG.warning("Failed writing %s for map %s: %s", collection.key, record.map_id, exc)
                return outcome
            outcome.written.append(collection.value)

        if outcome.skipped and not self._commit_partial_versions:
            _LOG.warning(
                "Not recording version %s of map %s: missing %s",
                record.current_version,
                record.map_id,
                ", ".join(outcome.skipped),
            )
            return outcome

        await self._cache.save_version_cache(
            LocalVersionCacheEntry(
                map_id=record.map_id,
                cached_version=record.current_version,
                map_name=record.map_name,
                cache_timestamp=self._clock(),
            )
        )
        outcome.committed = True
        _LOG.info("Map %s synced to version %s", record.map_id, record.current_version)
        return outcome

    async def check_all_map_versions(
        self, catalog: Iterable[MapDescriptor]
    ) -> tuple[list[MapVersionCheck], list[MapSyncOutcome]]:
        """Check every cataloged map concurrently, then sync the ones that changed concurrently."""
        map_ids = [descriptor.map_id for descriptor in catalog]

        self._progress.phase_start(SyncPhase.CHECK, total=len(map_ids))
        try:
            async with asyncio.TaskGroup() as tg:
                check_tasks = [tg.create_task(self._check_guarded(map_id)) for map_id in map_ids]
            self._progress.phase_done(SyncPhase.CHECK)
        except BaseException as exc:
            self._progress.phase_error(SyncPhase.CHECK, exc)
            raise
        checks = [task.result() for task in check_tasks]

        pending: dict[str, MapVersionRecord] = {}
        for check in checks:
            if check.needs_update and check.remote is not None:
                pending.setdefault(check.map_id, check.remote)

        self._progress.phase_start(SyncPhase.MAPS, total=len(pending))
        try:
            async with asyncio.TaskGroup() as tg:
                sync_tasks = [tg.create_task(self._sync_guarded(record)) for record in pending.values()]
            self._progress.phase_done(SyncPhase.MAPS)
        except BaseException as exc:
            self._progress.phase_error(SyncPhase.MAPS, exc)
            raise
        return checks, [task.result() for task in sync_tasks]

    async def available_versions(self, map_id: str) -> list[str]:
        documents = await self._remote.list_collection(MAP_VERSIONS_COLLECTION, map_id, VERSIONS_SUBCOLLECTION)
        return sorted((document.id for document in documents), key=str.casefold)

    async def switch_version(self, map_id: str, version: str) -> MapSyncOutcome:
        """Sync a specific version of *map_id*, regardless of the one cached."""
        record = MapVersionRecord(
            map_id=map_id,
            current_version=version,
            map_name=DEFAULT_MAP_NAME,
            last_updated=self._clock(),
        )
        return await self.sync_map_version(record)

    async def current_version(self, map_id: str) -> str:
        return await self._cache.current_version(map_id)

    async def current_versions(self, catalog: Iterable[MapDescriptor]) -> dict[str, str]:
        return {descriptor.map_id: await self.current_version(descriptor.map_id) for descriptor in catalog}

    async def _check_guarded(self, map_id: str) -> MapVersionCheck:
        try:
            needs_update, record = await self.check_map_version(map_id)
        except RemoteStoreError as exc:
            _LOG.warning("Version check failed for map %s: %s", map_id, exc)
            return MapVersionCheck(map_id=map_id, error=str(exc))
        finally:
            self._progress.item_done(SyncPhase.CHECK)
        return MapVersionCheck(map_id=map_id, needs_update=needs_update, remote=record)

    async def _sync_guarded(self, record: MapVersionRecord) -> MapSyncOutcome:
        try:
            return await self.sync_map_version(record)
        except (RemoteStoreError, CacheStoreError) as exc:
            _LOG.warning("Sync failed for map %s: %s", record.map_id, exc)
            return MapSyncOutcome(map_id=record.map_id, version=record.current_version, error=str(exc))
        finally:
            self._progress.item_done(SyncPhase.MAPS)
