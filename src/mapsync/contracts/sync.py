"""Result contracts returned by the sync pipeline."""

from __future__ import annotations

from pydantic import BaseModel, Field

from mapsync.contracts.models import MapVersionRecord, StaticCollection


class MapVersionCheck(BaseModel):
    map_id: str
    needs_update: bool = False
    remote: MapVersionRecord | None = None
    error: str | None = None


class MapSyncOutcome(BaseModel):
    map_id: str
    version: str
    written: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    committed: bool = False
    error: str | None = None


class StaticSyncOutcome(BaseModel):
    collection: StaticCollection
    verified: bool = False
    document_count: int = 0
    error: str | None = None


class StaticSyncResult(BaseModel):
    needs_update: bool = False
    outcomes: list[StaticSyncOutcome] = Field(default_factory=list)
    flags_reset: list[str] = Field(default_factory=list)
    error: str | None = None

    @property
    def verified(self) -> list[StaticCollection]:
        return [outcome.collection for outcome in self.outcomes if outcome.verified]


class SyncReport(BaseModel):
    """Value returned by :meth:`SyncOrchestrator.check_and_sync`."""

    remote_ready: bool = True
    catalog_size: int = 0
    checks: list[MapVersionCheck] = Field(default_factory=list)
    map_syncs: list[MapSyncOutcome] = Field(default_factory=list)
    static: StaticSyncResult | None = None
    removed_files: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)

    @property
    def maps_updated(self) -> list[str]:
        return [outcome.map_id for outcome in self.map_syncs if outcome.committed]

    @property
    def collections_synced(self) -> list[StaticCollection]:
        return self.static.verified if self.static is not None else []


class CacheStatus(BaseModel):
    """Snapshot of what the local cache currently holds."""

    data_dir: str
    map_versions: dict[str, str] = Field(default_factory=dict)
    base_files: dict[str, bool] = Field(default_factory=dict)
    map_files: dict[str, dict[str, bool]] = Field(default_factory=dict)
