"""Directory-backed cache store."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from mapsync.contracts.cache import CacheStore
from mapsync.contracts.exceptions import CacheStoreError

_LOG = logging.getLogger(__name__)


class FileCacheStore(CacheStore):
    """Stores each cache entity as ``<root>/<name>``.

    Blocking file I/O runs in a worker thread so that concurrent sync
    branches never stall the event loop.
    """

    def __init__(self, root: Path) -> None:
        self._root = root

    @property
    def root(self) -> Path:
        return self._root

    @property
    def location(self) -> str:
        return str(self._root)

    async def read_text(self, name: str) -> str | None:
        return await asyncio.to_thread(self._read, name)

    async def write_text(self, name: str, content: str) -> None:
        await asyncio.to_thread(self._write, name, content)

    async def exists(self, name: str) -> bool:
        return await asyncio.to_thread(self._path(name).is_file)

    async def delete(self, name: str) -> None:
        await asyncio.to_thread(self._delete, name)

    async def list_names(self) -> list[str]:
        return await asyncio.to_thread(self._list)

    def _path(self, name: str) -> Path:
        if not name or "/" in name or "\\" in name or name in {".", ".."}:
            raise CacheStoreError(f"invalid cache file name: {name!r}", name=name)
        return self._root / name

    def _read(self, name: str) -> str | None:
        path = self._path(name)
        if not path.is_file():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise CacheStoreError(f"failed reading cache file: {path}", name=name) from exc

    def _write(self, name: str, content: str) -> None:
        path = self._path(name)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise CacheStoreError(f"failed writing cache file: {path}", name=name) from exc
        _LOG.debug("Wrote %s (%d bytes)", path, len(content))

    def _delete(self, name: str) -> None:
        path = self._path(name)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise CacheStoreError(f"failed deleting cache file: {path}", name=name) from exc

    def _list(self) -> list[str]:
        if not self._root.is_dir():
            return []
        return sorted(path.name for path in self._root.glob("*.json") if path.is_file())
