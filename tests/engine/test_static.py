from __future__ import annotations

from collections.abc import Callable

import pytest

from mapsync.cache.state import CacheState
from mapsync.contracts.models import LocalStaticDataCache, StaticCollection, StaticDataVersionFlags
from mapsync.engine.progress import SyncPhase
from mapsync.engine.static import (
    GLOBAL_INFO_DOCUMENT,
    STATIC_VERSIONS_COLLECTION,
    StaticDataReconciler,
    select_collections,
)
from tests.fakes.cache import MemoryCacheStore
from tests.fakes.progress import RecordingProgress
from tests.fakes.remote import FakeRemoteStore
from tests.fakes.seed import FIXED_NOW, campus_seed

ALL_SYNCED = LocalStaticDataCache(infrastructure_synced=True, categories_synced=True, campus_synced=True)
GLOBAL_INFO = (STATIC_VERSIONS_COLLECTION, GLOBAL_INFO_DOCUMENT)


def make_reconciler(
    remote: FakeRemoteStore, cache_state: CacheState, clock: Callable[[], int], **kwargs: object
) -> StaticDataReconciler:
    return StaticDataReconciler(remote, cache_state, clock=clock, **kwargs)  # type: ignore[arg-type]


def set_flags(remote: FakeRemoteStore, **flags: bool) -> None:
    remote.set_document(*GLOBAL_INFO, data={f"{name}_updated": value for name, value in flags.items()})


@pytest.mark.parametrize(
    ("flags", "local", "expected"),
    [
        (StaticDataVersionFlags(), ALL_SYNCED, []),
        (StaticDataVersionFlags(campus_updated=True), ALL_SYNCED, [StaticCollection.CAMPUS]),
        (StaticDataVersionFlags(), None, list(StaticCollection)),
        (
            StaticDataVersionFlags(categories_updated=True),
            LocalStaticDataCache(infrastructure_synced=True, categories_synced=True),
            [StaticCollection.CATEGORIES, StaticCollection.CAMPUS],
        ),
    ],
)
def test_select_collections(
    flags: StaticDataVersionFlags, local: LocalStaticDataCache | None, expected: list[StaticCollection]
) -> None:
    assert select_collections(flags, local) == expected


@pytest.mark.asyncio
async def test_check_without_remote_record_bootstraps_everything(
    cache_state: CacheState, clock: Callable[[], int]
) -> None:
    remote = FakeRemoteStore({})

    needs_update, flags = await make_reconciler(remote, cache_state, clock).check_static_flags()

    assert needs_update is True
    assert flags == StaticDataVersionFlags.all_set()


@pytest.mark.asyncio
async def test_check_reads_remote_flags(
    remote: FakeRemoteStore, cache_state: CacheState, clock: Callable[[], int]
) -> None:
    await cache_state.save_static_cache(ALL_SYNCED)

    needs_update, flags = await make_reconciler(remote, cache_state, clock).check_static_flags()

    assert needs_update is True
    assert flags == StaticDataVersionFlags(categories_updated=True, last_check=1_699_990_000)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("local", "expected"),
    [
        (None, True),
        (ALL_SYNCED, False),
        (LocalStaticDataCache(), True),
        (LocalStaticDataCache(campus_synced=True), False),
    ],
)
async def test_check_with_clean_remote_flags(
    remote: FakeRemoteStore,
    cache_state: CacheState,
    clock: Callable[[], int],
    local: LocalStaticDataCache | None,
    expected: bool,
) -> None:
    set_flags(remote, infrastructure=False, categories=False, campus=False)
    if local is not None:
        await cache_state.save_static_cache(local)

    needs_update, _ = await make_reconciler(remote, cache_state, clock).check_static_flags()

    assert needs_update is expected


@pytest.mark.asyncio
async def test_sync_selectively_refreshes_flagged_collection(
    remote: FakeRemoteStore, cache_store: MemoryCacheStore, cache_state: CacheState, clock: Callable[[], int]
) -> None:
    await cache_state.save_static_cache(ALL_SYNCED)
    progress = RecordingProgress()

    result = await make_reconciler(remote, cache_state, clock, progress=progress).sync_selectively(
        StaticDataVersionFlags(categories_updated=True)
    )

    assert result.verified == [StaticCollection.CATEGORIES]
    assert result.outcomes[0].document_count == 2
    assert cache_store.load("categories.json") == [{"name": "Study", "id": "K-1"}, {"name": "Food", "id": "K-2"}]
    assert "infrastructure.json" not in cache_store.files
    assert await cache_state.load_static_cache() == ALL_SYNCED.model_copy(update={"cache_timestamp": FIXED_NOW})
    assert remote.update_calls == [(GLOBAL_INFO, {"categories_updated": False, "last_check": FIXED_NOW})]
    assert result.flags_reset == ["categories_updated"]
    assert progress.events == [
        ("start", SyncPhase.STATIC, 1),
        ("item", SyncPhase.STATIC, None),
        ("done", SyncPhase.STATIC, None),
    ]


@pytest.mark.asyncio
async def test_sync_normalizes_list_fields(
    remote: FakeRemoteStore, cache_store: MemoryCacheStore, cache_state: CacheState, clock: Callable[[], int]
) -> None:
    await make_reconciler(remote, cache_state, clock).sync_collection(StaticCollection.INFRASTRUCTURE)

    assert cache_store.load("infrastructure.json") == [{"name": "Library", "category_ids": ["K-1", "K-2"], "id": "I-1"}]


@pytest.mark.asyncio
async def test_failed_read_back_keeps_remote_flag_set(
    remote: FakeRemoteStore, cache_store: MemoryCacheStore, cache_state: CacheState, clock: Callable[[], int]
) -> None:
    await cache_state.save_static_cache(LocalStaticDataCache(infrastructure_synced=True, campus_synced=True))
    cache_store.lost_writes.add("categories.json")

    result = await make_reconciler(remote, cache_state, clock).sync_selectively(
        StaticDataVersionFlags(categories_updated=True)
    )

    assert result.verified == []
    assert remote.update_calls == [(GLOBAL_INFO, {"last_check": FIXED_NOW})]
    stored = remote.document_data(*GLOBAL_INFO)
    assert stored is not None
    assert stored["categories_updated"] is True
    assert stored["last_check"] == FIXED_NOW
    local = await cache_state.load_static_cache()
    assert local is not None and local.categories_synced is False


@pytest.mark.asyncio
async def test_remote_fetch_failure_is_scoped_to_its_collection(
    remote: FakeRemoteStore, cache_state: CacheState, clock: Callable[[], int]
) -> None:
    remote.fail("Categories")

    result = await make_reconciler(remote, cache_state, clock).sync_selectively(StaticDataVersionFlags.all_set())

    by_collection = {outcome.collection: outcome for outcome in result.outcomes}
    assert by_collection[StaticCollection.CATEGORIES].error is not None
    assert result.verified == [StaticCollection.INFRASTRUCTURE, StaticCollection.CAMPUS]
    assert remote.update_calls[0][1] == {
        "infrastructure_updated": False,
        "campus_updated": False,
        "last_check": FIXED_NOW,
    }


@pytest.mark.asyncio
async def test_remote_flag_write_failure_is_recorded_not_raised(
    remote: FakeRemoteStore, cache_state: CacheState, clock: Callable[[], int]
) -> None:
    remote.fail(*GLOBAL_INFO)

    result = await make_reconciler(remote, cache_state, clock).sync_selectively(
        StaticDataVersionFlags(categories_updated=True)
    )

    assert result.error is not None
    assert result.flags_reset == []
    local = await cache_state.load_static_cache()
    assert local is not None and local.categories_synced is True


@pytest.mark.asyncio
async def test_empty_selection_touches_nothing(
    remote: FakeRemoteStore, cache_store: MemoryCacheStore, cache_state: CacheState, clock: Callable[[], int]
) -> None:
    await cache_state.save_static_cache(ALL_SYNCED)
    writes_before = list(cache_store.write_calls)

    result = await make_reconciler(remote, cache_state, clock).sync_selectively(StaticDataVersionFlags())

    assert result.outcomes == []
    assert remote.update_calls == []
    assert cache_store.write_calls == writes_before


@pytest.mark.asyncio
async def test_reconcile_bootstraps_fresh_install(cache_store: MemoryCacheStore, cache_state: CacheState) -> None:
    seed = campus_seed()
    del seed["StaticDataVersions"]
    remote = FakeRemoteStore(seed)

    result = await make_reconciler(remote, cache_state, lambda: FIXED_NOW).reconcile()

    assert result.needs_update is True
    assert result.verified == list(StaticCollection)
    assert await cache_state.load_static_cache() == ALL_SYNCED.model_copy(update={"cache_timestamp": FIXED_NOW})
    assert remote.document_data(*GLOBAL_INFO) == {
        "infrastructure_updated": False,
        "categories_updated": False,
        "campus_updated": False,
        "last_check": FIXED_NOW,
    }


@pytest.mark.asyncio
async def test_reconcile_skips_when_up_to_date(
    remote: FakeRemoteStore, cache_state: CacheState, clock: Callable[[], int]
) -> None:
    set_flags(remote, infrastructure=False, categories=False, campus=False)
    await cache_state.save_static_cache(ALL_SYNCED)

    result = await make_reconciler(remote, cache_state, clock).reconcile()

    assert result.needs_update is False
    assert remote.list_calls == []


@pytest.mark.asyncio
async def test_reconcile_check_failure_keeps_cached_static_data(
    remote: FakeRemoteStore, cache_state: CacheState, clock: Callable[[], int]
) -> None:
    remote.fail(*GLOBAL_INFO)

    result = await make_reconciler(remote, cache_state, clock).reconcile()

    assert result.needs_update is False
    assert result.error is not None
    assert remote.list_calls == []
