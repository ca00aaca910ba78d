"""SDK composition root for mapsync."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from mapsync.auth import create_token_resolver
from mapsync.cache.files import FileCacheStore
from mapsync.cache.state import CacheState
from mapsync.contracts.cache import CacheStore
from mapsync.contracts.config import MapSyncConfig
from mapsync.contracts.exceptions import AuthenticationError, ConfigError
from mapsync.contracts.remote import RemoteStore
from mapsync.contracts.sync import CacheStatus, MapSyncOutcome, SyncReport
from mapsync.engine import SyncOrchestrator
from mapsync.engine.progress import SyncProgress
from mapsync.providers.factory import create_remote_store

_LOG = logging.getLogger(__name__)


def _resolve_path(value: Path | None, *, base_dir: Path) -> Path | None:
    if value is None:
        return None
    if value.is_absolute():
        return value
    return (base_dir / value).resolve()


def load_config(path: str | Path) -> MapSyncConfig:
    """Load and validate config from JSON, resolving relative paths against config directory."""
    config_path = Path(path).expanduser().resolve()
    config_dir = config_path.parent

    try:
        raw_payload: Any = json.loads(config_path.read_text(encoding="utf-8"))
        parsed = MapSyncConfig.model_validate(raw_payload)
    except OSError as exc:
        raise ConfigError(f"failed reading config file: {config_path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"invalid JSON in config file: {config_path}") from exc
    except ValidationError as exc:
        raise ConfigError(f"invalid config: {exc}") from exc

    return parsed.model_copy(
        update={
            "cache_dir": _resolve_path(parsed.cache_dir, base_dir=config_dir),
            "seed_path": _resolve_path(parsed.seed_path, base_dir=config_dir),
        }
    )


class MapSync:
    """mapsync SDK public API.

    Owns one configuration and builds a fresh remote store per operation, so
    an instance may be reused across sync cycles.
    """

    def __init__(
        self,
        *,
        config: MapSyncConfig,
        remote: RemoteStore | None = None,
        cache_store: CacheStore | None = None,
        progress: SyncProgress | None = None,
    ) -> None:
        self._config = config
        self._remote = remote
        self._cache_store = cache_store or FileCacheStore(config.cache_dir)
        self._progress = progress

    @classmethod
    async def from_config(cls, config: MapSyncConfig, *, progress: SyncProgress | None = None) -> MapSync:
        return cls(config=config, progress=progress)

    @property
    def cache(self) -> CacheState:
        return CacheState(self._cache_store)

    async def check_and_sync(self, on_complete: Callable[[SyncReport], None] | None = None) -> SyncReport:
        """Run one full sync cycle against the configured remote store.

        Missing or rejected credentials degrade like an unreachable remote:
        the cached data is kept and the report says the remote was not ready.
        A remote store that cannot be built from the config still fires
        *on_complete* with a not-ready report, then raises.

        Raises:
            ConfigError: If the configured remote store cannot be created.
        """
        try:
            remote = await self._resolve_remote()
        except AuthenticationError as exc:
            _LOG.warning("Remote credentials unavailable; keeping cached data: %s", exc)
            report = SyncReport(remote_ready=False, errors=[f"auth: {exc}"])
            if on_complete is not None:
                on_complete(report)
            return report
        except ConfigError as exc:
            _LOG.error("Remote store could not be created: %s", exc)
            if on_complete is not None:
                on_complete(SyncReport(remote_ready=False, errors=[f"config: {exc}"]))
            raise

        async with remote:
            return await self._orchestrator(remote).check_and_sync(on_complete)

    async def available_versions(self, map_id: str) -> list[str]:
        """List the version ids published for *map_id*.

        Raises:
            RemoteStoreError: If the remote listing fails.
        """
        remote = await self._resolve_remote()
        async with remote:
            return await self._orchestrator(remote).versions.available_versions(map_id)

    async def switch_version(self, map_id: str, version: str) -> MapSyncOutcome:
        """Download *version* of *map_id* into the cache and record it as current."""
        remote = await self._resolve_remote()
        async with remote:
            return await self._orchestrator(remote).versions.switch_version(map_id, version)

    async def current_version(self, map_id: str) -> str:
        return await self.cache.current_version(map_id)

    async def current_versions(self) -> dict[str, str]:
        """Cached version of every map in the cached catalog."""
        catalog = await self.cache.load_catalog()
        return {descriptor.map_id: await self.current_version(descriptor.map_id) for descriptor in catalog}

    async def initialize_cache(self) -> list[str]:
        """Create default cache files, plus per-map files for every cached catalog entry."""
        cache = self.cache
        created = await cache.initialize_default_files()
        catalog = await cache.load_catalog()
        created.extend(await cache.initialize_map_files(descriptor.map_id for descriptor in catalog))
        return created

    async def is_map_data_fresh(self, map_id: str, *, max_age_hours: int = 24) -> bool:
        return await self.cache.is_map_data_fresh(map_id, max_age_hours=max_age_hours)

    async def clear_caches(self) -> None:
        await self.cache.clear_caches()

    async def status(self) -> CacheStatus:
        return await self.cache.status()

    def _orchestrator(self, remote: RemoteStore) -> SyncOrchestrator:
        return SyncOrchestrator(
            remote,
            self._cache_store,
            commit_partial_versions=self._config.commit_partial_versions,
            cleanup_unused_map_files=self._config.cleanup_unused_map_files,
            max_concurrent=self._config.max_concurrent,
            progress=self._progress,
        )

    async def _resolve_remote(self) -> RemoteStore:
        if self._remote is not None:
            return self._remote

        token_resolver = create_token_resolver(self._config)
        token = await token_resolver.resolve()
        try:
            return create_remote_store(self._config, token=token)
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc
