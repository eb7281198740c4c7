"""SQLAlchemy async engine setup for the relational backend."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from cellarbook.storage.legacy import upgrade_legacy_notes_column

logger = logging.getLogger(__name__)

# SQL function name for Unicode-aware lower-casing on SQLite
UNICODE_LOWER = "unicode_lower"


class Base(DeclarativeBase):
    """Declarative base for all CellarBook tables."""


def _enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    """Let SQLAlchemy, not the sqlite driver, emit BEGIN so SAVEPOINT works."""

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def _register_unicode_lower(engine: AsyncEngine) -> None:
    """Add ``unicode_lower()``; SQLite's own lower() folds ASCII only."""

    @event.listens_for(engine.sync_engine, "connect")
    def _create_lower_function(dbapi_connection, connection_record):
        dbapi_connection.create_function(UNICODE_LOWER, 1, _unicode_lower)



class Database:
    """Owns one async engine and its session factory.

    Shared by the SQL wine and catalog stores so both use one connection pool.
    """

    def __init__(self, url: str, echo: bool = False) -> None:
        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, echo=echo)
        if self.is_sqlite:
            _enable_sqlite_savepoints(self.engine)
            _register_unicode_lower(self.engine)
        self.sessionmaker = async_sessionmaker(self.engine, expire_on_commit=False)

    @property
    def is_sqlite(self) -> bool:
        return self.engine.dialect.name == "sqlite"

    async def init(self) -> None:
        """Upgrade legacy columns and create any missing tables."""
        # Import models so they register on Base.metadata
        from cellarbook.models import CatalogRow, WineRow  # noqa: F401

        database_path = self.engine.url.database
        if self.is_sqlite and database_path and database_path != ":memory:":
            Path(database_path).parent.mkdir(parents=True, exist_ok=True)

        async with self.engine.begin() as conn:
            await conn.run_sync(upgrade_legacy_notes_column)
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database initialized at %s", self.engine.url.render_as_string(hide_password=True))

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a session that commits on success and rolls back on error."""
        async with self.sessionmaker() as session:
            try:
                yield session
                await session.commit()
            except BaseException:
                await session.rollback()
                raise

    async def close(self) -> None:
        """Dispose of the engine's connection pool."""
        await self.engine.dispose()
