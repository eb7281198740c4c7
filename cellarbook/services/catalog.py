"""Catalog lookup used to prefill new wines."""

import logging

from cellarbook.schemas.catalog import CatalogEntry
from cellarbook.storage.base import CatalogStore

logger = logging.getLogger(__name__)

DEFAULT_MIN_QUERY_LENGTH = 3
DEFAULT_SEARCH_LIMIT = 10
MAX_SEARCH_LIMIT = 100


class CatalogSearch:
    """Case-insensitive substring search over the catalog.

    Queries shorter than ``min_length`` after stripping return nothing
    without touching the store.
    """

    def __init__(
        self,
        store: CatalogStore,
        min_length: int = DEFAULT_MIN_QUERY_LENGTH,
        default_limit: int = DEFAULT_SEARCH_LIMIT,
    ) -> None:
        self.store = store
        self.min_length = min_length
        self.default_limit = default_limit

    async def search(self, query: str, limit: int | None = None) -> list[CatalogEntry]:
        query = query.strip()
        if len(query) < self.min_length:
            return []

        if limit is None:
            limit = self.default_limit
        limit = min(max(limit, 1), MAX_SEARCH_LIMIT)

        results = await self.store.search(query, limit)
        logger.debug("Catalog search %r returned %d entries", query, len(results))
        return results

    async def list_all(self) -> list[CatalogEntry]:
        return await self.store.list_all()
