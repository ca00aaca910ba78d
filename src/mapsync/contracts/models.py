"""Domain models for map catalogs, version records and cache entries."""

from __future__ import annotations

import math
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_MAP_VERSION = "v1.0.0"
DEFAULT_MAP_NAME = "Campus Map"
UNKNOWN_VERSION = "unknown"

VERSION_FIELD_ALIASES = ("current_version", "currentVersion", "version")
MAP_NAME_FIELD_ALIASES = ("map_name", "mapName", "name")
TIMESTAMP_FIELD_ALIASES = ("last_updated", "lastUpdated", "createdAt", "created_at", "updatedAt", "updated_at")


def _is_scalar(value: Any) -> bool:
    return isinstance(value, (str, int, float)) and not isinstance(value, bool)


class VersionedCollection(StrEnum):
    """Collections whose content is pinned to a per-map version."""

    NODES = "Nodes"
    EDGES = "Edges"

    @property
    def key(self) -> str:
        """Key of this collection inside a version subdocument."""
        return self.value.lower()

    def file_name(self, map_id: str) -> str:
        return f"{self.key}_{map_id}.json"


class StaticCollection(StrEnum):
    """Campus-wide collections synced through dirty flags."""

    INFRASTRUCTURE = "Infrastructure"
    CATEGORIES = "Categories"
    CAMPUS = "Campus"

    @property
    def file_name(self) -> str:
        return f"{self.value.lower()}.json"

    @property
    def remote_flag(self) -> str:
        return f"{self.value.lower()}_updated"

    @property
    def local_flag(self) -> str:
        return f"{self.value.lower()}_synced"


class MapDescriptor(BaseModel):
    """One entry of the map catalog.

    Only a missing or empty ``map_id`` rejects an entry. Scalar ids and names
    are coerced to text; unparseable coordinates and campus lists are dropped.
    """

    model_config = ConfigDict(extra="allow")

    map_id: str = Field(min_length=1)
    map_name: str = ""
    center_lat: float | None = None
    center_lng: float | None = None
    campus_included: list[str | None] = Field(default_factory=list)

    @field_validator("map_id", mode="before")
    @classmethod
    def coerce_map_id(cls, value: Any) -> Any:
        if _is_scalar(value):
            return str(value).strip()
        return value

    @field_validator("map_name", mode="before")
    @classmethod
    def coerce_map_name(cls, value: Any) -> str:
        return str(value) if _is_scalar(value) else ""

    @field_validator("center_lat", "center_lng", mode="before")
    @classmethod
    def coerce_coordinate(cls, value: Any) -> float | None:
        if isinstance(value, bool) or not isinstance(value, (int, float, str)):
            return None
        try:
            number = float(value)
        except ValueError:
            return None
        return number if math.isfinite(number) else None

    @field_validator("campus_included", mode="before")
    @classmethod
    def coerce_campus_ids(cls, value: Any) -> list[str | None]:
        if not isinstance(value, (list, tuple)):
            return []
        return [str(item) if _is_scalar(item) else None for item in value]


class MapVersionRecord(BaseModel):
    """Remote version pointer for one map, resolved from its version document."""

    map_id: str
    current_version: str = DEFAULT_MAP_VERSION
    map_name: str = DEFAULT_MAP_NAME
    last_updated: int = 0


class LocalVersionCacheEntry(BaseModel):
    """The version whose snapshot was last written locally for a map."""

    map_id: str
    cached_version: str = ""
    map_name: str = ""
    cache_timestamp: int = 0


class StaticDataVersionFlags(BaseModel):
    infrastructure_updated: bool = False
    categories_updated: bool = False
    campus_updated: bool = False
    last_check: int | None = None

    @classmethod
    def all_set(cls) -> StaticDataVersionFlags:
        return cls(infrastructure_updated=True, categories_updated=True, campus_updated=True)

    def is_updated(self, collection: StaticCollection) -> bool:
        return bool(getattr(self, collection.remote_flag))

    def any_updated(self) -> bool:
        return any(self.is_updated(collection) for collection in StaticCollection)


class LocalStaticDataCache(BaseModel):
    infrastructure_synced: bool = False
    categories_synced: bool = False
    campus_synced: bool = False
    cache_timestamp: int = 0

    def is_synced(self, collection: StaticCollection) -> bool:
        return bool(getattr(self, collection.local_flag))

    def any_synced(self) -> bool:
        return any(self.is_synced(collection) for collection in StaticCollection)
