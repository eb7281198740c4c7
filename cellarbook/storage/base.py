"""Abstract storage interfaces shared by every backend."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from cellarbook.errors import StorageError
from cellarbook.schemas.catalog import CatalogEntry, CatalogEntryCreate
from cellarbook.schemas.wine import WineCreate, WineRecord


class WineStore(ABC):
    """Persistence for the user's wine records.

    Ids are assigned by the store, never reused, and ``created_at`` is set
    once at insert. Updates are whole-record read-modify-write with no
    concurrency token: the last writer wins.
    """

    @abstractmethod
    async def list_all(self) -> list[WineRecord]:
        """Return every wine in id order."""

    @abstractmethod
    async def get(self, wine_id: int) -> WineRecord | None:
        """Return one wine, or None when it does not exist."""

    @abstractmethod
    async def list_by_category(self, category: str) -> list[WineRecord]:
        """Return wines whose category equals ``category`` exactly."""

    @abstractmethod
    async def insert(self, wine: WineCreate) -> WineRecord:
        """Store a new wine, assigning its id and creation time."""

    @abstractmethod
    async def update(self, wine_id: int, changes: dict[str, Any]) -> WineRecord | None:
        """Apply ``changes`` (attribute name to value) to one wine.

        Returns:
            The updated wine, or None when it does not exist.
        """

    @abstractmethod
    async def delete(self, wine_id: int) -> bool:
        """Delete one wine. Returns False when it did not exist."""

    async def close(self) -> None:
        """Release any resources held by the store."""


class CatalogStore(ABC):
    """Read-mostly store for catalog reference rows."""

    @abstractmethod
    async def list_all(self) -> list[CatalogEntry]:
        """Return every catalog entry in id order."""

    @abstractmethod
    async def search(self, query: str, limit: int | None = None) -> list[CatalogEntry]:
        """Case-insensitive substring match over the descriptive columns."""

    @abstractmethod
    async def count(self) -> int:
        """Number of catalog entries."""

    @abstractmethod
    async def truncate(self) -> None:
        """Remove every catalog entry."""

    @abstractmethod
    async def insert(self, entry: CatalogEntryCreate) -> CatalogEntry:
        """Store one catalog entry."""

    async def insert_batch(
        self, entries: Sequence[CatalogEntryCreate]
    ) -> list[tuple[int, str]]:
        """Insert entries one by one, skipping those the backend rejects.

        Returns:
            (position in ``entries``, error message) for every rejected entry.
        """
        failures: list[tuple[int, str]] = []
        for position, entry in enumerate(entries):
            try:
                await self.insert(entry)
            except StorageError as e:
                failures.append((position, str(e)))
        return failures

    async def close(self) -> None:
        """Release any resources held by the store."""
