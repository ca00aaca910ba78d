"""Local cache store implementation and typed cache-state helpers."""

from mapsync.cache.files import FileCacheStore
from mapsync.cache.state import BASE_FILES, MAPS_FILE, STATIC_CACHE_FILE, CacheState, version_cache_file

__all__ = ["BASE_FILES", "MAPS_FILE", "STATIC_CACHE_FILE", "CacheState", "FileCacheStore", "version_cache_file"]
