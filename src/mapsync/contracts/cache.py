"""Local cache store contract."""

from __future__ import annotations

from abc import ABC, abstractmethod


class CacheStore(ABC):
    """Named JSON files on durable local storage."""

    @property
    @abstractmethod
    def location(self) -> str:
        """Human-readable location of the store (e.g. a directory path)."""

    @abstractmethod
    async def read_text(self, name: str) -> str | None:
        """Return the file content, or ``None`` when the file does not exist.

        Raises:
            CacheStoreError: If the file exists but cannot be read.
        """

    @abstractmethod
    async def write_text(self, name: str, content: str) -> None:
        """Replace the file content.

        Raises:
            CacheStoreError: If the write fails.
        """

    @abstractmethod
    async def exists(self, name: str) -> bool: ...

    @abstractmethod
    async def delete(self, name: str) -> None: ...

    @abstractmethod
    async def list_names(self) -> list[str]:
        """Names of all JSON files in the store."""
