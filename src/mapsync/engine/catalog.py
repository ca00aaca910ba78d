"""Map catalog sync."""

from __future__ import annotations

import logging

from mapsync.cache.state import MAPS_FILE, CacheState, parse_catalog
from mapsync.contracts.exceptions import CacheStoreError, RemoteStoreError
from mapsync.contracts.models import MapDescriptor
from mapsync.contracts.remote import RemoteStore
from mapsync.engine.utils import normalize_document

_LOG = logging.getLogger(__name__)

MAPS_COLLECTION = "Maps"


class MapCatalogSync:
    def __init__(self, remote: RemoteStore, cache: CacheState) -> None:
        self._remote = remote
        self._cache = cache

    async def sync_catalog(self) -> list[MapDescriptor]:
        """Refresh ``maps.json`` from the remote catalog and return the maps it lists.

        When the remote catalog cannot be fetched the cached catalog is
        returned unchanged, so callers keep working offline.
        """
        try:
            documents = await self._remote.list_collection(MAPS_COLLECTION)
        except RemoteStoreError as exc:
            _LOG.warning("Map catalog unavailable, using cached catalog: %s", exc)
            return await self._cache.load_catalog()

        payload = [normalize_document(document) for document in documents]
        try:
            await self._cache.write_json(MAPS_FILE, payload)
        except CacheStoreError as exc:
            _LOG.warning("Could not persist map catalog: %s", exc)

        catalog = parse_catalog(payload)
        _LOG.info("Map catalog synced: %d map(s)", len(catalog))
        return catalog

    async def load_catalog(self) -> list[MapDescriptor]:
        return await self._cache.load_catalog()
