"""In-memory remote store.

Serves documents from a nested seed mapping, which makes it usable for
offline demos (``provider: "memory"`` with a ``seed_path``) and as the base of
test fakes. Seed layout::

    {
        "Maps": {"M-1": {"map_id": "M-1", "map_name": "Main"}},
        "MapVersions": {
            "M-1": {
                "current_version": "v2",
                "__collections__": {"versions": {"v2": {"nodes": [], "edges": []}}},
            }
        },
    }
"""

from __future__ import annotations

import copy
import json
from collections.abc import Mapping
from pathlib import Path
from types import TracebackType
from typing import Any

from mapsync.contracts.document import Document
from mapsync.contracts.exceptions import ConfigError, RemoteStoreError
from mapsync.contracts.remote import RemoteStore

SUBCOLLECTIONS_KEY = "__collections__"


class InMemoryRemoteStore(RemoteStore):
    def __init__(
        self, seed: Mapping[str, Mapping[str, Mapping[str, Any]]] | None = None, *, ready: bool = True
    ) -> None:
        self.ready = ready
        self._documents: dict[tuple[str, ...], dict[str, Any]] = {}
        for collection, documents in (seed or {}).items():
            self._load((collection,), documents)

    @classmethod
    def from_file(cls, path: Path) -> InMemoryRemoteStore:
        try:
            seed = json.loads(path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise ConfigError(f"failed reading seed file: {path}") from exc
        except json.JSONDecodeError as exc:
            raise ConfigError(f"invalid JSON in seed file: {path}") from exc
        if not isinstance(seed, dict):
            raise ConfigError(f"seed file must hold a JSON object: {path}")
        return cls(seed)

    async def __aenter__(self) -> InMemoryRemoteStore:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        return None

    async def is_ready(self) -> bool:
        return self.ready

    async def get_document(self, *path: str) -> Document | None:
        key = _document_key(path)
        data = self._documents.get(key)
        if data is None:
            return None
        return Document.from_python(key[-1], data)

    async def list_collection(self, *path: str) -> list[Document]:
        parent = _collection_key(path)
        return [
            Document.from_python(key[-1], data)
            for key, data in self._documents.items()
            if key[:-1] == parent
        ]

    async def update_fields(self, *path: str, fields: Mapping[str, Any]) -> None:
        key = _document_key(path)
        self._documents.setdefault(key, {}).update(copy.deepcopy(dict(fields)))

    def set_document(self, *path: str, data: Mapping[str, Any]) -> None:
        self._documents[_document_key(path)] = copy.deepcopy(dict(data))

    def delete_document(self, *path: str) -> None:
        self._documents.pop(_document_key(path), None)

    def document_data(self, *path: str) -> dict[str, Any] | None:
        data = self._documents.get(_document_key(path))
        return copy.deepcopy(data) if data is not None else None

    def _load(self, collection: tuple[str, ...], documents: Mapping[str, Mapping[str, Any]]) -> None:
        for document_id, raw in documents.items():
            data = dict(raw)
            subcollections = data.pop(SUBCOLLECTIONS_KEY, None) or {}
            key = (*collection, document_id)
            self._documents[key] = copy.deepcopy(data)
            for name, children in subcollections.items():
                self._load((*key, name), children)


def _document_key(path: tuple[str, ...]) -> tuple[str, ...]:
    if not path or len(path) % 2 != 0:
        raise RemoteStoreError(f"not a document path: {'/'.join(path)}", path="/".join(path))
    return path


def _collection_key(path: tuple[str, ...]) -> tuple[str, ...]:
    if len(path) % 2 != 1:
        raise RemoteStoreError(f"not a collection path: {'/'.join(path)}", path="/".join(path))
    return path
