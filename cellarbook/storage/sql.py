"""Relational storage backend built on SQLAlchemy's async ORM."""

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

from pydantic_core import to_jsonable_python
from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import SQLAlchemyError

from cellarbook.database import UNICODE_LOWER, Database
from cellarbook.errors import StorageError
from cellarbook.models import CatalogRow, WineRow
from cellarbook.schemas.catalog import CatalogEntry, CatalogEntryCreate
from cellarbook.schemas.wine import WineCreate, WineRecord
from cellarbook.storage.base import CatalogStore, WineStore

logger = logging.getLogger(__name__)

_IMMUTABLE_FIELDS = frozenset({"id", "created_at"})


@contextmanager
def translate_errors(action: str) -> Iterator[None]:
    """Re-raise SQLAlchemy failures as StorageError.

    ``OverflowError`` comes straight from the sqlite driver when a bound
    integer does not fit in 64 bits.
    """
    try:
        yield
    except (SQLAlchemyError, OverflowError) as e:
        raise StorageError(f"Failed to {action}") from e


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SQLWineStore(WineStore):
    """Wine store backed by the ``wines`` table."""

    def __init__(self, database: Database) -> None:
        self.database = database

    @staticmethod
    def _to_record(row: WineRow) -> WineRecord:
        return WineRecord.model_validate(row)

    async def list_all(self) -> list[WineRecord]:
        with translate_errors("list wines"):
            async with self.database.session() as session:
                result = await session.execute(select(WineRow).order_by(WineRow.id))
                return [self._to_record(row) for row in result.scalars().all()]

    async def get(self, wine_id: int) -> WineRecord | None:
        with translate_errors(f"fetch wine {wine_id}"):
            async with self.database.session() as session:
                row = await session.get(WineRow, wine_id)
                return self._to_record(row) if row else None

    async def list_by_category(self, category: str) -> list[WineRecord]:
        with translate_errors(f"list wines in category {category}"):
            async with self.database.session() as session:
                result = await session.execute(
                    select(WineRow).where(WineRow.category == category).order_by(WineRow.id)
                )
                return [self._to_record(row) for row in result.scalars().all()]

    async def insert(self, wine: WineCreate) -> WineRecord:
        with translate_errors("add wine"):
            async with self.database.session() as session:
                row = WineRow(**wine.model_dump(mode="json"))
                session.add(row)
                await session.flush()
                await session.refresh(row)
                logger.debug("Inserted wine %d (%s)", row.id, row.name)
                return self._to_record(row)

    async def update(self, wine_id: int, changes: dict[str, Any]) -> WineRecord | None:
        with translate_errors(f"update wine {wine_id}"):
            async with self.database.session() as session:
                row = await session.get(WineRow, wine_id)
                if row is None:
                    return None

                for field, value in changes.items():
                    if field in _IMMUTABLE_FIELDS:
                        continue
                    setattr(row, field, to_jsonable_python(value))

                await session.flush()
                return self._to_record(row)

    async def delete(self, wine_id: int) -> bool:
        with translate_errors(f"delete wine {wine_id}"):
            async with self.database.session() as session:
                result = await session.execute(delete(WineRow).where(WineRow.id == wine_id))
                return result.rowcount > 0


class SQLCatalogStore(CatalogStore):
    """Catalog store backed by the ``wine_catalog`` table."""

    SEARCH_COLUMNS = (
        CatalogRow.name,
        CatalogRow.wine_type,
        CatalogRow.sub_type,
        CatalogRow.producer,
        CatalogRow.region,
        CatalogRow.country,
    )

    def __init__(self, database: Database) -> None:
        self.database = database

    async def list_all(self) -> list[CatalogEntry]:
        with translate_errors("list catalog"):
            async with self.database.session() as session:
                result = await session.execute(select(CatalogRow).order_by(CatalogRow.id))
                return [CatalogEntry.model_validate(row) for row in result.scalars().all()]

    async def search(self, query: str, limit: int | None = None) -> list[CatalogEntry]:
        if self.database.is_sqlite:
            pattern = f"%{_escape_like(query.lower())}%"
            lower = getattr(func, UNICODE_LOWER)
            matches = [lower(column).like(pattern, escape="\\") for column in self.SEARCH_COLUMNS]
        else:
            pattern = f"%{_escape_like(query)}%"
            matches = [column.ilike(pattern, escape="\\") for column in self.SEARCH_COLUMNS]

        stmt = select(CatalogRow).where(or_(*matches)).order_by(CatalogRow.id)
        if limit is not None:
            stmt = stmt.limit(limit)

        with translate_errors("search catalog"):
            async with self.database.session() as session:
                result = await session.execute(stmt)
                return [CatalogEntry.model_validate(row) for row in result.scalars().all()]

    async def count(self) -> int:
        with translate_errors("count catalog"):
            async with self.database.session() as session:
                result = await session.execute(select(func.count(CatalogRow.id)))
                return result.scalar() or 0

    async def truncate(self) -> None:
        with translate_errors("clear catalog"):
            async with self.database.session() as session:
                await session.execute(delete(CatalogRow))

    async def insert(self, entry: CatalogEntryCreate) -> CatalogEntry:
        with translate_errors("add catalog entry"):
            async with self.database.session() as session:
                row = CatalogRow(**entry.model_dump())
                session.add(row)
                await session.flush()
                return CatalogEntry.model_validate(row)

    async def insert_batch(
        self, entries: Sequence[CatalogEntryCreate]
    ) -> list[tuple[int, str]]:
        """Insert a batch in one transaction, one savepoint per row.

        A rejected row rolls back only its own savepoint. Failing to open
        the transaction at all raises StorageError.
        """
        failures: list[tuple[int, str]] = []
        with translate_errors("import catalog batch"):
            async with self.database.session() as session:
                for position, entry in enumerate(entries):
                    try:
                        async with session.begin_nested():
                            session.add(CatalogRow(**entry.model_dump()))
                    except SQLAlchemyError as e:
                        failures.append((position, str(e.__cause__ or e)))
        return failures
