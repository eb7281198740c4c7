"""Import a wine catalog CSV into the CellarBook database.

The existing catalog is cleared first, then every row is inserted on a
best-effort basis: rows the database rejects are logged and skipped.

Usage:
    cellarbook-import-catalog data/wines.csv
    cellarbook-import-catalog data/wines.csv --database-url sqlite+aiosqlite:///./other.db
    cellarbook-import-catalog data/wines.csv --dry-run
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError

from cellarbook.config import settings
from cellarbook.database import Database
from cellarbook.errors import StorageError
from cellarbook.services.catalog_import import (
    ImportResult,
    build_entry,
    import_catalog,
    read_catalog_csv,
)
from cellarbook.storage.sql import SQLCatalogStore

logger = logging.getLogger("cellarbook.import")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def preview(content: bytes) -> int:
    """Parse without writing anything; returns the number of importable rows."""
    mapping, rows = read_catalog_csv(content)
    usable = sum(1 for row in rows if build_entry(row, mapping) is not None)
    print("[DRY RUN] Columns:")
    for header, target in mapping.items():
        print(f"  {header} -> {target}")
    print(f"[DRY RUN] Would import {usable} of {len(rows)} rows")
    return usable


async def run_import(content: bytes, database_url: str, batch_size: int) -> ImportResult:
    database = Database(database_url, echo=settings.database_echo)
    try:
        await database.init()
        return await import_catalog(SQLCatalogStore(database), content, batch_size=batch_size)
    finally:
        await database.close()


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    default_csv = settings.catalog_csv_path
    parser = argparse.ArgumentParser(
        description="Replace the wine catalog with the contents of a CSV file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Expected columns (case-insensitive, extra columns are ignored):
  NAME, PRODUCER, WINE, COUNTRY, REGION, TYPE, SUB_TYPE
        """,
    )
    parser.add_argument(
        "csv_file",
        type=Path,
        nargs="?" if default_csv else None,
        default=default_csv,
        help="CSV file to import"
        + (f" (default: {default_csv})" if default_csv else ""),
    )
    parser.add_argument(
        "--database-url",
        default=settings.database_url,
        help="SQLAlchemy async database URL (default: from config)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=settings.catalog_import_batch_size,
        help=f"Rows per batch (default: {settings.catalog_import_batch_size})",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Parse the file and report without touching the database",
    )
    args = parser.parse_args(argv)

    configure_logging(settings.log_level)

    if not args.csv_file.is_file():
        logger.error("CSV file not found: %s", args.csv_file)
        return 1

    try:
        content = args.csv_file.read_bytes()
        if args.dry_run:
            preview(content)
            return 0
        result = asyncio.run(run_import(content, args.database_url, args.batch_size))
    except ValueError as e:
        logger.error("Could not read %s: %s", args.csv_file, e)
        return 1
    except (StorageError, SQLAlchemyError, OSError):
        logger.exception("Catalog import failed")
        return 1
    except KeyboardInterrupt:
        logger.warning("Import interrupted")
        return 130

    print(f"Attempted: {result.attempted}")
    print(f"Inserted:  {result.inserted}")
    print(f"Failed:    {result.failed}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
