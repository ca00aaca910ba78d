"""Shared test fixtures for mapsync tests."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from mapsync.cache.state import CacheState
from tests.fakes.cache import MemoryCacheStore
from tests.fakes.remote import FakeRemoteStore
from tests.fakes.seed import FIXED_NOW, campus_seed


@pytest.fixture
def remote() -> FakeRemoteStore:
    return FakeRemoteStore(campus_seed())


@pytest.fixture
def cache_store() -> MemoryCacheStore:
    return MemoryCacheStore()


@pytest.fixture
def cache_state(cache_store: MemoryCacheStore) -> CacheState:
    return CacheState(cache_store)


@pytest.fixture
def clock() -> Callable[[], int]:
    return lambda: FIXED_NOW
