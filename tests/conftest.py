"""Pytest configuration and fixtures for CellarBook tests."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from cellarbook.config import CellarBookConfig, Settings
from cellarbook.database import Database
from cellarbook.main import create_app
from cellarbook.storage.factory import Stores, memory_stores
from cellarbook.storage.sql import SQLCatalogStore, SQLWineStore

CATALOG_CSV = """NAME,PRODUCER,WINE,COUNTRY,REGION,TYPE,SUB_TYPE,VINTAGE_CONFIG
Château Margaux,Château Margaux,Bordeaux Blend,France,Margaux,Red,Dry,standard
Cloudy Bay Sauvignon Blanc,Cloudy Bay,Sauvignon Blanc,New Zealand,Marlborough,White,Dry,standard
Taylor's 20 Year Tawny,Taylor's,Port,Portugal,Douro,Fortified,Tawny,nv
Aspall Dry Cider,Aspall,Cider,England,Suffolk,,Dry,nv
"""


@pytest.fixture
def test_settings() -> Settings:
    """Settings with defaults and the in-memory backend."""
    return Settings(CellarBookConfig(database={"backend": "memory"}))


@pytest.fixture
def stores() -> Stores:
    """Fresh, empty in-memory stores."""
    return memory_stores()


@pytest_asyncio.fixture
async def client(test_settings: Settings, stores: Stores) -> AsyncGenerator[AsyncClient, None]:
    """Async test client against an app using the in-memory stores."""
    app = create_app(settings=test_settings, stores=stores)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def database(tmp_path: Path) -> AsyncGenerator[Database, None]:
    """Initialized SQLite database in a temporary directory."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'cellarbook.db'}")
    await db.init()
    yield db
    await db.close()


@pytest.fixture
def sql_wine_store(database: Database) -> SQLWineStore:
    return SQLWineStore(database)


@pytest.fixture
def sql_catalog_store(database: Database) -> SQLCatalogStore:
    return SQLCatalogStore(database)


@pytest.fixture
def catalog_csv_bytes() -> bytes:
    """A small catalog export in the upstream column layout."""
    return CATALOG_CSV.encode("utf-8")


@pytest.fixture
def red_wine_payload() -> dict:
    """A Red wine with two vintages, as a client would send it."""
    return {
        "name": "Château Margaux",
        "category": "Red",
        "producer": "Château Margaux",
        "region": "Margaux",
        "country": "France",
        "vintageStocks": [
            {"vintage": 2019, "stock": 2},
            {"vintage": 2020, "stock": 1},
        ],
    }
