"""Firestore remote store over the REST API."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import TracebackType
from typing import Any
from urllib.parse import quote

import httpx

from mapsync.contracts.config import DEFAULT_FIRESTORE_URL
from mapsync.contracts.document import Document
from mapsync.contracts.exceptions import AuthenticationError, RemoteStoreError, RemoteUnavailableError
from mapsync.contracts.remote import RemoteStore
from mapsync.providers.firestore._retrying_transport import RetryingTransport
from mapsync.providers.firestore.codec import decode_document, encode_fields, field_path

_LOG = logging.getLogger(__name__)

# Collection read by is_ready(); any readable collection would do.
_READINESS_COLLECTION = "Maps"
# Upper bound on pages fetched for one collection listing.
_MAX_PAGES = 1000


class FirestoreStore(RemoteStore):
    def __init__(
        self,
        *,
        project_id: str,
        database: str = "(default)",
        base_url: str = DEFAULT_FIRESTORE_URL,
        token: str | None = None,
        api_key: str | None = None,
        page_size: int = 300,
        max_retries: int = 3,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._project_id = project_id
        self._database = database
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._api_key = api_key
        self._page_size = page_size
        self._max_retries = max_retries
        self._timeout = timeout
        self._transport = transport

        self._client: httpx.AsyncClient | None = None

    @property
    def documents_url(self) -> str:
        return f"{self._base_url}/projects/{self._project_id}/databases/{self._database}/documents"

    async def __aenter__(self) -> FirestoreStore:
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        params = {"key": self._api_key} if self._api_key else None
        self._client = httpx.AsyncClient(
            base_url=self.documents_url + "/",
            headers=headers,
            params=params,
            limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
            timeout=httpx.Timeout(self._timeout),
            transport=RetryingTransport(transport=self._transport, max_retries=self._max_retries),
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def is_ready(self) -> bool:
        try:
            await self._request("GET", (_READINESS_COLLECTION,), params={"pageSize": 1})
        except RemoteStoreError as exc:
            _LOG.warning("Firestore is not reachable: %s", exc)
            return False
        return True

    async def get_document(self, *path: str) -> Document | None:
        payload = await self._request("GET", path, allow_missing=True)
        if payload is None:
            return None
        return _decode(payload, path)

    async def list_collection(self, *path: str) -> list[Document]:
        documents: list[Document] = []
        page_token: str | None = None
        for _ in range(_MAX_PAGES):
            params: dict[str, Any] = {"pageSize": self._page_size}
            if page_token:
                params["pageToken"] = page_token
            payload = await self._request("GET", path, params=params) or {}
            documents.extend(_decode(raw, path) for raw in payload.get("documents", []))
            page_token = payload.get("nextPageToken")
            if not page_token:
                return documents
        raise RemoteStoreError("Collection listing exceeded page budget", path="/".join(path))

    async def update_fields(self, *path: str, fields: Mapping[str, Any]) -> None:
        params = [("updateMask.fieldPaths", field_path(name)) for name in fields]
        await self._request("PATCH", path, params=params, json={"fields": encode_fields(fields)})

    async def _request(
        self,
        method: str,
        path: tuple[str, ...],
        *,
        params: Any = None,
        json: dict[str, Any] | None = None,
        allow_missing: bool = False,
    ) -> dict[str, Any] | None:
        if self._client is None:
            raise RemoteStoreError("Store is not initialized. Use 'async with'.")
        joined = "/".join(path)
        url = "/".join(quote(segment, safe="") for segment in path)
        try:
            response = await self._client.request(method, url, params=params, json=json)
        except httpx.TransportError as exc:
            raise RemoteUnavailableError(f"Firestore request failed: {exc}", path=joined) from exc

        if response.status_code == 404 and allow_missing:
            return None
        if response.status_code in (401, 403):
            raise AuthenticationError(
                f"Firestore rejected credentials ({response.status_code}): {_error_message(response)}",
                path=joined,
                status_code=response.status_code,
            )
        if response.is_error:
            raise RemoteStoreError(
                f"Firestore {method} failed ({response.status_code}): {_error_message(response)}",
                path=joined,
                status_code=response.status_code,
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise RemoteStoreError("Firestore returned invalid JSON", path=joined) from exc
        if not isinstance(payload, dict):
            raise RemoteStoreError("Firestore response is not an object", path=joined)
        return payload


def _decode(raw: Any, path: tuple[str, ...]) -> Document:
    try:
        return decode_document(raw)
    except (AttributeError, TypeError, ValueError) as exc:
        raise RemoteStoreError(f"Firestore returned an undecodable document: {exc}", path="/".join(path)) from exc


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
        return str(payload["error"].get("message", ""))
    return str(payload)[:200]
