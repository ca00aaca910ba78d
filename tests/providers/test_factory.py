import json
from pathlib import Path

import pytest

from mapsync.contracts.config import MapSyncConfig
from mapsync.contracts.exceptions import ConfigError
from mapsync.providers.factory import create_remote_store
from mapsync.providers.firestore import FirestoreStore
from mapsync.providers.memory import InMemoryRemoteStore


def test_create_firestore_store() -> None:
    config = MapSyncConfig(
        provider="firestore",
        project_id="campus-nav",
        database="maps",
        base_url="http://localhost:8080/v1",
    )

    store = create_remote_store(config, token="tok")

    assert isinstance(store, FirestoreStore)
    assert store.documents_url == "http://localhost:8080/v1/projects/campus-nav/databases/maps/documents"


def test_create_empty_memory_store() -> None:
    store = create_remote_store(MapSyncConfig(provider="memory"))

    assert isinstance(store, InMemoryRemoteStore)


@pytest.mark.asyncio
async def test_create_memory_store_from_seed(tmp_path: Path) -> None:
    seed_file = tmp_path / "seed.json"
    seed_file.write_text(json.dumps({"Maps": {"M-1": {"map_id": "M-1"}}}), encoding="utf-8")

    store = create_remote_store(MapSyncConfig(provider="memory", seed_path=seed_file))

    async with store:
        maps = await store.list_collection("Maps")
    assert [document.id for document in maps] == ["M-1"]


def test_missing_seed_file_is_config_error(tmp_path: Path) -> None:
    config = MapSyncConfig(provider="memory", seed_path=tmp_path / "missing.json")

    with pytest.raises(ConfigError, match="seed file"):
        create_remote_store(config)


def test_create_remote_store_raises_for_unknown_provider() -> None:
    config = MapSyncConfig.model_construct(provider="supabase")

    with pytest.raises(ValueError, match="Unknown provider"):
        create_remote_store(config)
