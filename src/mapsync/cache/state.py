"""Typed access to the cache files the sync engine owns.

Loaders never raise on bad local data: a missing, unreadable or malformed
file is reported as absent so that the next sync repairs it.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError

from mapsync.contracts.cache import CacheStore
from mapsync.contracts.exceptions import CacheStoreError
from mapsync.contracts.models import (
    UNKNOWN_VERSION,
    LocalStaticDataCache,
    LocalVersionCacheEntry,
    MapDescriptor,
    StaticCollection,
    VersionedCollection,
)
from mapsync.contracts.sync import CacheStatus
from mapsync.utils import dump_json, epoch_now

_LOG = logging.getLogger(__name__)

MAPS_FILE = "maps.json"
STATIC_CACHE_FILE = "static_data_cache.json"
EMPTY_ARRAY = "[]"

_VERSION_CACHE_PREFIX = "version_cache_"
_MAP_FILE_PREFIXES = (_VERSION_CACHE_PREFIX, *(f"{collection.key}_" for collection in VersionedCollection))

BASE_FILES: tuple[str, ...] = (
    MAPS_FILE,
    *(collection.file_name for collection in StaticCollection),
    STATIC_CACHE_FILE,
)


def version_cache_file(map_id: str) -> str:
    return f"{_VERSION_CACHE_PREFIX}{map_id}.json"


def map_files(map_id: str) -> list[str]:
    return [*(collection.file_name(map_id) for collection in VersionedCollection), version_cache_file(map_id)]


def _map_id_from_file(name: str) -> str | None:
    if not name.endswith(".json"):
        return None
    for prefix in _MAP_FILE_PREFIXES:
        if name.startswith(prefix):
            return name[len(prefix) : -len(".json")] or None
    return None


def parse_catalog(entries: Iterable[Any]) -> list[MapDescriptor]:
    """Validate raw catalog entries, dropping the ones without a usable ``map_id``."""
    catalog: list[MapDescriptor] = []
    for entry in entries:
        try:
            catalog.append(MapDescriptor.model_validate(entry))
        except ValidationError:
            _LOG.warning("Skipping invalid map catalog entry: %r", entry)
    return catalog


class CacheState:
    def __init__(self, store: CacheStore) -> None:
        self._store = store

    @property
    def store(self) -> CacheStore:
        return self._store

    async def load_json(self, name: str) -> Any | None:
        try:
            raw = await self._store.read_text(name)
        except CacheStoreError as exc:
            _LOG.warning("Treating unreadable cache file %s as absent: %s", name, exc)
            return None
        if raw is None or not raw.strip():
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            _LOG.warning("Treating malformed cache file %s as absent", name)
            return None

    async def write_json(self, name: str, payload: Any) -> None:
        await self._store.write_text(name, dump_json(payload))

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    async def load_catalog(self) -> list[MapDescriptor]:
        payload = await self.load_json(MAPS_FILE)
        if not isinstance(payload, list):
            if payload is not None:
                _LOG.warning("Ignoring %s: expected a JSON array", MAPS_FILE)
            return []
        return parse_catalog(payload)

    # ------------------------------------------------------------------
    # Version cache
    # ------------------------------------------------------------------

    async def load_version_cache(self, map_id: str) -> LocalVersionCacheEntry | None:
        payload = await self.load_json(version_cache_file(map_id))
        if payload is None:
            return None
        try:
            entry = LocalVersionCacheEntry.model_validate(payload)
        except ValidationError:
            _LOG.warning("Treating invalid version cache for map %s as absent", map_id)
            return None
        # Placeholder entries are created with an empty version.
        if not entry.cached_version:
            return None
        return entry

    async def current_version(self, map_id: str) -> str:
        """Cached version of *map_id*, or ``UNKNOWN_VERSION`` when none is recorded."""
        entry = await self.load_version_cache(map_id)
        return entry.cached_version if entry is not None else UNKNOWN_VERSION

    async def save_version_cache(self, entry: LocalVersionCacheEntry) -> None:
        await self.write_json(version_cache_file(entry.map_id), entry.model_dump(mode="json"))

    # ------------------------------------------------------------------
    # Static data cache
    # ------------------------------------------------------------------

    async def load_static_cache(self) -> LocalStaticDataCache | None:
        payload = await self.load_json(STATIC_CACHE_FILE)
        if payload is None:
            return None
        try:
            return LocalStaticDataCache.model_validate(payload)
        except ValidationError:
            _LOG.warning("Treating invalid %s as absent", STATIC_CACHE_FILE)
            return None

    async def save_static_cache(self, cache: LocalStaticDataCache) -> None:
        await self.write_json(STATIC_CACHE_FILE, cache.model_dump(mode="json"))

    # ------------------------------------------------------------------
    # Housekeeping
    # ------------------------------------------------------------------

    async def initialize_default_files(self) -> list[str]:
        """Create any missing base file with its default content; return the names created."""
        created: list[str] = []
        for name in BASE_FILES:
            if await self._store.exists(name):
                continue
            if name == STATIC_CACHE_FILE:
                await self.save_static_cache(LocalStaticDataCache())
            else:
                await self._store.write_text(name, EMPTY_ARRAY)
            created.append(name)
        return created

    async def initialize_map_files(self, map_ids: Iterable[str]) -> list[str]:
        created: list[str] = []
        for map_id in map_ids:
            for collection in VersionedCollection:
                name = collection.file_name(map_id)
                if not await self._store.exists(name):
                    await self._store.write_text(name, EMPTY_ARRAY)
                    created.append(name)
            name = version_cache_file(map_id)
            if not await self._store.exists(name):
                await self.save_version_cache(LocalVersionCacheEntry(map_id=map_id))
                created.append(name)
        return created

    async def cleanup_unused_map_files(self, map_ids: Iterable[str]) -> list[str]:
        """Delete per-map files whose map is no longer cataloged; return the names removed."""
        keep = set(map_ids)
        removed: list[str] = []
        for name in await self._store.list_names():
            map_id = _map_id_from_file(name)
            if map_id is None or map_id in keep:
                continue
            try:
                await self._store.delete(name)
            except CacheStoreError as exc:
                _LOG.warning("Could not remove unused map file %s: %s", name, exc)
                continue
            removed.append(name)
        if removed:
            _LOG.info("Removed %d unused map file(s)", len(removed))
        return removed

    async def is_map_data_fresh(self, map_id: str, *, max_age_hours: int = 24, now: int | None = None) -> bool:
        entry = await self.load_version_cache(map_id)
        if entry is None:
            return False
        current = epoch_now() if now is None else now
        return (current - entry.cache_timestamp) // 3600 < max_age_hours

    async def clear_caches(self) -> None:
        """Forget every sync marker so the next run re-downloads everything."""
        await self.save_static_cache(LocalStaticDataCache())
        for descriptor in await self.load_catalog():
            await self.save_version_cache(LocalVersionCacheEntry(map_id=descriptor.map_id))

    async def status(self) -> CacheStatus:
        catalog = await self.load_catalog()
        status = CacheStatus(data_dir=self._store.location)
        for name in BASE_FILES:
            status.base_files[name] = await self._store.exists(name)
        for descriptor in catalog:
            entry = await self.load_version_cache(descriptor.map_id)
            status.map_versions[descriptor.map_id] = entry.cached_version if entry is not None else "none"
            status.map_files[descriptor.map_id] = {
                name: await self._store.exists(name) for name in map_files(descriptor.map_id)
            }
        return status
