"""In-memory storage backend, used by tests and throwaway local runs."""

import itertools
import logging
from datetime import datetime, timezone
from typing import Any

from cellarbook.schemas.catalog import CatalogEntry, CatalogEntryCreate
from cellarbook.schemas.wine import WineCreate, WineRecord
from cellarbook.storage.base import CatalogStore, WineStore

logger = logging.getLogger(__name__)

CATALOG_SEARCH_FIELDS = ("name", "wine_type", "sub_type", "producer", "region", "country")


class MemoryWineStore(WineStore):
    """Dict-backed wine store. Ids come from a counter and are never reused."""

    def __init__(self) -> None:
        self._wines: dict[int, WineRecord] = {}
        self._ids = itertools.count(1)

    async def list_all(self) -> list[WineRecord]:
        return list(self._wines.values())

    async def get(self, wine_id: int) -> WineRecord | None:
        return self._wines.get(wine_id)

    async def list_by_category(self, category: str) -> list[WineRecord]:
        return [wine for wine in self._wines.values() if wine.category.value == category]

    async def insert(self, wine: WineCreate) -> WineRecord:
        record = WineRecord.model_validate(
            {
                **wine.model_dump(),
                "id": next(self._ids),
                "created_at": datetime.now(timezone.utc),
            }
        )
        self._wines[record.id] = record
        logger.debug("Inserted wine %d (%s)", record.id, record.name)
        return record

    async def update(self, wine_id: int, changes: dict[str, Any]) -> WineRecord | None:
        existing = self._wines.get(wine_id)
        if existing is None:
            return None

        # id and created_at are immutable
        changes = {k: v for k, v in changes.items() if k not in ("id", "created_at")}
        updated = WineRecord.model_validate({**existing.model_dump(), **changes})
        self._wines[wine_id] = updated
        return updated

    async def delete(self, wine_id: int) -> bool:
        return self._wines.pop(wine_id, None) is not None


class MemoryCatalogStore(CatalogStore):
    """Dict-backed catalog store preserving insertion order."""

    def __init__(self) -> None:
        self._entries: dict[int, CatalogEntry] = {}
        self._ids = itertools.count(1)

    async def list_all(self) -> list[CatalogEntry]:
        return list(self._entries.values())

    async def search(self, query: str, limit: int | None = None) -> list[CatalogEntry]:
        needle = query.lower()
        results = []
        for entry in self._entries.values():
            if any(
                needle in value.lower()
                for value in (getattr(entry, field) for field in CATALOG_SEARCH_FIELDS)
                if value
            ):
                results.append(entry)
                if limit is not None and len(results) >= limit:
                    break
        return results

    async def count(self) -> int:
        return len(self._entries)

    async def truncate(self) -> None:
        self._entries.clear()
        self._ids = itertools.count(1)

    async def insert(self, entry: CatalogEntryCreate) -> CatalogEntry:
        stored = CatalogEntry.model_validate({**entry.model_dump(), "id": next(self._ids)})
        self._entries[stored.id] = stored
        return stored
