"""Remote document store contract.

Every concrete store must implement this interface so the sync engine can
reconcile against it without knowing which backend it talks to. Paths are
given as alternating collection / document segments, e.g.
``("MapVersions", "M-1", "versions", "v2")``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from types import TracebackType
from typing import Any

from mapsync.contracts.document import Document


class RemoteStore(ABC):
    @abstractmethod
    async def __aenter__(self) -> RemoteStore: ...

    @abstractmethod
    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None: ...

    @abstractmethod
    async def is_ready(self) -> bool:
        """Return whether the store is reachable and authorized."""

    @abstractmethod
    async def get_document(self, *path: str) -> Document | None:
        """Fetch one document, or ``None`` when it does not exist.

        Raises:
            RemoteStoreError: If the fetch fails for any other reason.
        """

    @abstractmethod
    async def list_collection(self, *path: str) -> list[Document]:
        """Fetch every document of a collection (top-level or nested)."""

    @abstractmethod
    async def update_fields(self, *path: str, fields: Mapping[str, Any]) -> None:
        """Merge *fields* into a document, leaving other fields untouched."""
