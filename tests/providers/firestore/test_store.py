from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest

from mapsync.contracts.exceptions import AuthenticationError, RemoteStoreError, RemoteUnavailableError
from mapsync.providers.firestore import FirestoreStore

DOCUMENTS = "/v1/projects/campus-nav/databases/(default)/documents"


def _doc(path: str, fields: dict[str, object]) -> dict[str, object]:
    return {"name": f"projects/campus-nav/databases/(default)/documents/{path}", "fields": fields}


class Recorder:
    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: list[httpx.Request] = []
        self._handler = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._handler(request)


def make_store(handler: Callable[[httpx.Request], httpx.Response], **kwargs: object) -> FirestoreStore:
    options: dict[str, object] = {"project_id": "campus-nav", "max_retries": 0}
    options.update(kwargs)
    return FirestoreStore(transport=httpx.MockTransport(handler), **options)  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_get_document_decodes_fields() -> None:
    recorder = Recorder(
        lambda request: httpx.Response(
            200, json=_doc("MapVersions/M-1", {"currentVersion": {"stringValue": "v2"}, "n": {"integerValue": "3"}})
        )
    )

    async with make_store(recorder) as store:
        document = await store.get_document("MapVersions", "M-1")

    assert document is not None
    assert document.id == "M-1"
    assert document.first_str("currentVersion") == "v2"
    assert document.to_dict() == {"currentVersion": "v2", "n": 3, "id": "M-1"}
    request = recorder.requests[0]
    assert request.method == "GET"
    assert request.url.path == f"{DOCUMENTS}/MapVersions/M-1"


@pytest.mark.asyncio
async def test_missing_document_is_none() -> None:
    async with make_store(lambda request: httpx.Response(404, json={"error": {"message": "not found"}})) as store:
        assert await store.get_document("MapVersions", "M-9") is None


@pytest.mark.asyncio
async def test_auth_header_and_api_key() -> None:
    recorder = Recorder(lambda request: httpx.Response(200, json=_doc("Maps/M-1", {})))

    async with make_store(recorder, token="secret", api_key="k-123") as store:
        await store.get_document("Maps", "M-1")

    request = recorder.requests[0]
    assert request.headers["Authorization"] == "Bearer secret"
    assert request.url.params["key"] == "k-123"


@pytest.mark.asyncio
async def test_anonymous_requests_carry_no_auth_header() -> None:
    recorder = Recorder(lambda request: httpx.Response(200, json=_doc("Maps/M-1", {})))

    async with make_store(recorder) as store:
        await store.get_document("Maps", "M-1")

    assert "Authorization" not in recorder.requests[0].headers
    assert "key" not in recorder.requests[0].url.params


@pytest.mark.asyncio
async def test_path_segments_are_escaped() -> None:
    recorder = Recorder(lambda request: httpx.Response(200, json=_doc("Campus/Main%20Hall", {})))

    async with make_store(recorder) as store:
        await store.get_document("Campus", "Main Hall")

    assert recorder.requests[0].url.raw_path.decode().endswith("/Campus/Main%20Hall")


@pytest.mark.asyncio
async def test_list_collection_follows_page_tokens() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params.get("pageToken") == "page-2":
            return httpx.Response(200, json={"documents": [_doc("Categories/K-2", {"name": {"stringValue": "Food"}})]})
        return httpx.Response(
            200,
            json={
                "documents": [_doc("Categories/K-1", {"name": {"stringValue": "Study"}})],
                "nextPageToken": "page-2",
            },
        )

    recorder = Recorder(handler)

    async with make_store(recorder, page_size=1) as store:
        documents = await store.list_collection("Categories")

    assert [document.id for document in documents] == ["K-1", "K-2"]
    assert [request.url.params.get("pageToken") for request in recorder.requests] == [None, "page-2"]
    assert all(request.url.params["pageSize"] == "1" for request in recorder.requests)


@pytest.mark.asyncio
async def test_list_empty_collection() -> None:
    async with make_store(lambda request: httpx.Response(200, json={})) as store:
        assert await store.list_collection("MapVersions", "M-1", "versions") == []


@pytest.mark.asyncio
async def test_update_fields_sends_merge_patch() -> None:
    recorder = Recorder(lambda request: httpx.Response(200, json=_doc("StaticDataVersions/GlobalInfo", {})))

    async with make_store(recorder) as store:
        await store.update_fields(
            "StaticDataVersions", "GlobalInfo", fields={"categories_updated": False, "last_check": 1_700_000_500}
        )

    request = recorder.requests[0]
    assert request.method == "PATCH"
    assert request.url.path == f"{DOCUMENTS}/StaticDataVersions/GlobalInfo"
    assert request.url.params.get_list("updateMask.fieldPaths") == ["categories_updated", "last_check"]
    assert json.loads(request.content) == {
        "fields": {
            "categories_updated": {"booleanValue": False},
            "last_check": {"integerValue": "1700000500"},
        }
    }


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code", [401, 403])
async def test_rejected_credentials_raise_authentication_error(status_code: int) -> None:
    handler = lambda request: httpx.Response(status_code, json={"error": {"message": "denied"}})  # noqa: E731

    async with make_store(handler) as store:
        with pytest.raises(AuthenticationError, match="denied") as excinfo:
            await store.get_document("Maps", "M-1")

    assert excinfo.value.status_code == status_code


@pytest.mark.asyncio
async def test_server_error_raises_remote_store_error() -> None:
    async with make_store(lambda request: httpx.Response(500, text="boom")) as store:
        with pytest.raises(RemoteStoreError, match="500") as excinfo:
            await store.list_collection("Maps")

    assert excinfo.value.status_code == 500
    assert excinfo.value.path == "Maps"


@pytest.mark.asyncio
async def test_connection_failure_raises_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("no route to host", request=request)

    async with make_store(handler) as store:
        with pytest.raises(RemoteUnavailableError):
            await store.get_document("Maps", "M-1")


UNDECODABLE_FIELDS = [
    {"x": {"weirdValue": 1}},
    {"n": {"integerValue": "three"}},
    {"lat": {"doubleValue": "north"}},
    {"x": 7},
    {"tags": {"arrayValue": {"values": [{"stringValue": "a"}, {}]}}},
]


@pytest.mark.asyncio
@pytest.mark.parametrize("fields", UNDECODABLE_FIELDS)
async def test_undecodable_document_raises_remote_store_error(fields: dict[str, object]) -> None:
    handler = lambda request: httpx.Response(200, json=_doc("Maps/M-1", fields))  # noqa: E731

    async with make_store(handler) as store:
        with pytest.raises(RemoteStoreError, match="undecodable document") as excinfo:
            await store.get_document("Maps", "M-1")

    assert excinfo.value.path == "Maps/M-1"


@pytest.mark.asyncio
async def test_undecodable_listing_raises_remote_store_error() -> None:
    payload = {"documents": [_doc("Maps/M-1", {}), _doc("Maps/M-2", {"x": {"weirdValue": 1}})]}

    async with make_store(lambda request: httpx.Response(200, json=payload)) as store:
        with pytest.raises(RemoteStoreError, match="undecodable document") as excinfo:
            await store.list_collection("Maps")

    assert excinfo.value.path == "Maps"


@pytest.mark.asyncio
async def test_is_ready_reads_one_catalog_entry() -> None:
    recorder = Recorder(lambda request: httpx.Response(200, json={}))

    async with make_store(recorder) as store:
        assert await store.is_ready() is True

    request = recorder.requests[0]
    assert request.url.path == f"{DOCUMENTS}/Maps"
    assert request.url.params["pageSize"] == "1"


@pytest.mark.asyncio
async def test_is_ready_false_when_offline_or_unauthorized() -> None:
    def offline(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("offline", request=request)

    async with make_store(offline) as store:
        assert await store.is_ready() is False
    async with make_store(lambda request: httpx.Response(403, json={})) as store:
        assert await store.is_ready() is False


@pytest.mark.asyncio
async def test_requests_require_open_store() -> None:
    store = make_store(lambda request: httpx.Response(200, json={}))

    with pytest.raises(RemoteStoreError, match="async with"):
        await store.get_document("Maps", "M-1")


def test_documents_url_uses_database_and_base_url() -> None:
    store = FirestoreStore(project_id="campus-nav", database="maps-db", base_url="http://localhost:8080/v1/")

    assert store.documents_url == "http://localhost:8080/v1/projects/campus-nav/databases/maps-db/documents"
