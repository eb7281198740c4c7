"""Build storage backends from configuration."""

import logging
from dataclasses import dataclass

from cellarbook.config import Settings
from cellarbook.database import Database
from cellarbook.storage.base import CatalogStore, WineStore
from cellarbook.storage.memory import MemoryCatalogStore, MemoryWineStore
from cellarbook.storage.sql import SQLCatalogStore, SQLWineStore

logger = logging.getLogger(__name__)


@dataclass
class Stores:
    """The pair of stores an application instance works against."""

    wines: WineStore
    catalog: CatalogStore
    database: Database | None = None

    async def close(self) -> None:
        await self.wines.close()
        await self.catalog.close()
        if self.database is not None:
            await self.database.close()


def memory_stores() -> Stores:
    """Fresh, empty in-memory stores."""
    return Stores(wines=MemoryWineStore(), catalog=MemoryCatalogStore())


async def build_stores(settings: Settings) -> Stores:
    """Create and initialize the backend selected by ``database.backend``."""
    if settings.database_backend == "memory":
        logger.warning("Using in-memory storage; data is lost on restart")
        return memory_stores()

    database = Database(settings.database_url, echo=settings.database_echo)
    await database.init()
    return Stores(
        wines=SQLWineStore(database),
        catalog=SQLCatalogStore(database),
        database=database,
    )
