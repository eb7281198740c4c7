"""Tests for the offline catalog import."""

from pathlib import Path

import pytest

from cellarbook.cli import import_catalog as import_cli
from cellarbook.config import CellarBookConfig, Settings
from cellarbook.errors import StorageError
from cellarbook.main import create_app
from cellarbook.schemas.catalog import CatalogEntryCreate
from cellarbook.services.catalog_import import (
    build_entry,
    import_catalog,
    load_catalog_if_empty,
    read_catalog_csv,
)
from cellarbook.storage.memory import MemoryCatalogStore


class RejectingStore(MemoryCatalogStore):
    """Memory store refusing entries whose name starts with ``Bad``."""

    async def insert(self, entry: CatalogEntryCreate):
        if entry.name.startswith("Bad"):
            raise StorageError(f"Failed to add catalog entry {entry.name}")
        return await super().insert(entry)


class TestParsing:
    """Test reading catalog CSV files."""

    def test_upstream_headers(self, catalog_csv_bytes):
        """Test the upstream upper-case layout maps to entry fields."""
        mapping, rows = read_catalog_csv(catalog_csv_bytes)
        assert mapping == {
            "NAME": "name",
            "PRODUCER": "producer",
            "WINE": "wine_type",
            "COUNTRY": "country",
            "REGION": "region",
            "TYPE": "category",
            "SUB_TYPE": "sub_type",
        }
        assert len(rows) == 4

    def test_camel_and_lower_case_headers(self):
        """Test lower-case and camelCase headers are accepted."""
        mapping, _ = read_catalog_csv(b"name,subType,wine\nA,B,C\n")
        assert mapping == {"name": "name", "subType": "sub_type", "wine": "wine_type"}

    def test_missing_name_column(self):
        """Test a file without a NAME column is rejected."""
        with pytest.raises(ValueError, match="NAME"):
            read_catalog_csv(b"PRODUCER,WINE\nA,B\n")

    def test_empty_file(self):
        """Test an empty file is rejected."""
        with pytest.raises(ValueError):
            read_catalog_csv(b"")

    def test_latin1_fallback(self):
        """Test non UTF-8 files are decoded as Latin-1."""
        _, rows = read_catalog_csv("NAME\nCh\xe2teau Latour\n".encode("latin-1"))
        assert rows[0]["NAME"] == "Château Latour"

    def test_utf8_bom(self):
        """Test a BOM does not end up in the first header."""
        mapping, _ = read_catalog_csv("NAME,TYPE\nA,Red\n".encode("utf-8-sig"))
        assert "NAME" in mapping

    def test_blank_type_becomes_other(self):
        """Test a blank TYPE cell maps to category Other."""
        entry = build_entry({"NAME": " Aspall ", "TYPE": ""}, {"NAME": "name", "TYPE": "category"})
        assert entry.name == "Aspall"
        assert entry.category == "Other"

    def test_blank_name_skipped(self):
        """Test a row without a name builds nothing."""
        assert build_entry({"NAME": "  "}, {"NAME": "name"}) is None


class TestImport:
    """Test running the import against a store."""

    @pytest.mark.asyncio
    async def test_import_replaces_catalog(self, catalog_csv_bytes):
        """Test the catalog is truncated and repopulated."""
        store = MemoryCatalogStore()
        await store.insert(CatalogEntryCreate(name="Stale Entry"))

        result = await import_catalog(store, catalog_csv_bytes)

        assert (result.attempted, result.inserted, result.failed) == (4, 4, 0)
        names = [entry.name for entry in await store.list_all()]
        assert "Stale Entry" not in names
        assert names[0] == "Château Margaux"

        cider = (await store.search("Aspall"))[0]
        assert cider.category == "Other"
        assert cider.wine_type == "Cider"
        assert cider.sub_type == "Dry"

    @pytest.mark.asyncio
    async def test_rejected_rows_are_skipped(self):
        """Test the import continues past rows the store refuses."""
        content = b"NAME,TYPE\nGood One,Red\nBad Two,Red\n,White\nGood Three,White\n"
        store = RejectingStore()

        result = await import_catalog(store, content, batch_size=2)

        assert result.attempted == 4
        assert result.inserted == 2
        assert result.failed == 2
        assert len(result.errors) == 2
        assert [entry.name for entry in await store.list_all()] == ["Good One", "Good Three"]

    @pytest.mark.asyncio
    async def test_load_if_empty(self, tmp_path: Path, catalog_csv_bytes):
        """Test startup seeding only runs against an empty catalog."""
        csv_path = tmp_path / "catalog.csv"
        csv_path.write_bytes(catalog_csv_bytes)
        store = MemoryCatalogStore()

        first = await load_catalog_if_empty(store, csv_path)
        second = await load_catalog_if_empty(store, csv_path)

        assert first is not None and first.inserted == 4
        assert second is None
        assert await store.count() == 4

    @pytest.mark.asyncio
    async def test_sql_store_import(self, sql_catalog_store, catalog_csv_bytes):
        """Test importing into the SQL backend."""
        result = await import_catalog(sql_catalog_store, catalog_csv_bytes, batch_size=3)
        assert result.inserted == 4
        assert await sql_catalog_store.count() == 4
        assert [e.name for e in await sql_catalog_store.search("marg")] == ["Château Margaux"]


class TestImportCli:
    """Test the import command line entry point."""

    def test_import_into_sqlite(self, tmp_path: Path, catalog_csv_bytes, capsys):
        """Test a successful run exits 0 and reports counts."""
        csv_path = tmp_path / "catalog.csv"
        csv_path.write_bytes(catalog_csv_bytes)
        url = f"sqlite+aiosqlite:///{tmp_path / 'import.db'}"

        exit_code = import_cli.main([str(csv_path), "--database-url", url])

        assert exit_code == 0
        assert "Inserted:  4" in capsys.readouterr().out

    def test_missing_file(self, tmp_path: Path):
        """Test a missing file exits non-zero."""
        assert import_cli.main([str(tmp_path / "nope.csv")]) == 1

    def test_missing_name_column(self, tmp_path: Path):
        """Test a file without NAME exits non-zero."""
        csv_path = tmp_path / "catalog.csv"
        csv_path.write_text("PRODUCER\nX\n")
        url = f"sqlite+aiosqlite:///{tmp_path / 'import.db'}"
        assert import_cli.main([str(csv_path), "--database-url", url]) == 1

    def test_unreachable_database(self, tmp_path: Path, catalog_csv_bytes):
        """Test a database that cannot be opened exits non-zero."""
        csv_path = tmp_path / "catalog.csv"
        csv_path.write_bytes(catalog_csv_bytes)
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        url = f"sqlite+aiosqlite:///{blocker / 'sub' / 'import.db'}"
        assert import_cli.main([str(csv_path), "--database-url", url]) == 1

    def test_dry_run(self, tmp_path: Path, catalog_csv_bytes, capsys):
        """Test a dry run reports without creating a database."""
        csv_path = tmp_path / "catalog.csv"
        csv_path.write_bytes(catalog_csv_bytes)
        url = f"sqlite+aiosqlite:///{tmp_path / 'import.db'}"

        assert import_cli.main([str(csv_path), "--database-url", url, "--dry-run"]) == 0
        assert "Would import 4 of 4 rows" in capsys.readouterr().out
        assert not (tmp_path / "import.db").exists()


class TestStartupSeeding:
    """Test the catalog is seeded from ``catalog.csv_path`` at startup."""

    @pytest.mark.asyncio
    async def test_lifespan_seeds_empty_catalog(self, tmp_path: Path, catalog_csv_bytes):
        """Test an app without injected stores builds them and loads the CSV."""
        csv_path = tmp_path / "catalog.csv"
        csv_path.write_bytes(catalog_csv_bytes)
        settings = Settings(
            CellarBookConfig(database={"backend": "memory"}, catalog={"csv_path": str(csv_path)})
        )
        app = create_app(settings=settings)

        async with app.router.lifespan_context(app):
            assert await app.state.stores.catalog.count() == 4
            results = await app.state.catalog_search.search("marg")
            assert [entry.name for entry in results] == ["Château Margaux"]

        assert app.state.stores is None

    @pytest.mark.asyncio
    async def test_missing_csv_does_not_block_startup(self, tmp_path: Path):
        """Test a configured but absent file only logs a warning."""
        settings = Settings(
            CellarBookConfig(
                database={"backend": "memory"},
                catalog={"csv_path": str(tmp_path / "absent.csv")},
            )
        )
        app = create_app(settings=settings)

        async with app.router.lifespan_context(app):
            assert await app.state.stores.catalog.count() == 0
