"""Engine helpers: document normalization, version resolution, fan-out limits."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import Any, TypeVar

from mapsync.contracts.document import Document, Value, ValueKind
from mapsync.contracts.models import (
    DEFAULT_MAP_NAME,
    DEFAULT_MAP_VERSION,
    MAP_NAME_FIELD_ALIASES,
    TIMESTAMP_FIELD_ALIASES,
    VERSION_FIELD_ALIASES,
    MapVersionRecord,
)
from mapsync.utils import dump_json

T = TypeVar("T")


def _stringify(value: Value) -> str:
    text = value.as_str()
    if text is not None:
        return text
    return dump_json(value.to_python(), indent=None)


def normalize_document(document: Document) -> dict[str, Any]:
    """Plain-dict form of a collection document as written to the local cache.

    List-valued fields become lists of strings (nulls kept as ``None``) and the
    document identifier is attached under ``id``.
    """
    payload: dict[str, Any] = {}
    for name, value in document.fields.items():
        items = value.as_list()
        if items is None:
            payload[name] = value.to_python()
        else:
            payload[name] = [None if item.is_null else _stringify(item) for item in items]
    payload["id"] = document.id
    return payload


def versioned_payload(value: Value) -> Any:
    """Content written for one versioned collection of a version snapshot.

    Arrays keep only their object entries; any other value is written as given.
    """
    items = value.as_list()
    if items is None:
        return value.to_python()
    return [item.to_python() for item in items if item.kind is ValueKind.MAP]


def resolve_version_record(map_id: str, document: Document, *, now: int) -> MapVersionRecord:
    last_updated = document.first_epoch_seconds(*TIMESTAMP_FIELD_ALIASES)
    return MapVersionRecord(
        map_id=map_id,
        current_version=document.first_str(*VERSION_FIELD_ALIASES, default=DEFAULT_MAP_VERSION),
        map_name=document.first_str(*MAP_NAME_FIELD_ALIASES, default=DEFAULT_MAP_NAME),
        last_updated=now if last_updated is None else last_updated,
    )


class ConcurrencyLimit:
    """Optional cap on in-flight remote calls shared by every fan-out stage."""

    def __init__(self, limit: int | None = None) -> None:
        self._semaphore = asyncio.Semaphore(limit) if limit else None

    async def run(self, op: Awaitable[T]) -> T:
        if self._semaphore is None:
            return await op
        async with self._semaphore:
            return await op
