"""Offline CSV import for the wine catalog.

The import replaces the whole catalog: the table is truncated, then every
row is inserted on a best-effort basis. Rows the store rejects are logged
and skipped; the run only fails outright when the file cannot be read or
the store cannot be reached.
"""

import csv
import io
import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import ValidationError

from cellarbook.schemas.catalog import CatalogEntryCreate
from cellarbook.storage.base import CatalogStore

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 1000
DEFAULT_CATEGORY = "Other"

# Normalized header -> CatalogEntryCreate field
HEADER_ALIASES: dict[str, str] = {
    "name": "name",
    "producer": "producer",
    "wine": "wine_type",
    "country": "country",
    "region": "region",
    "type": "category",
    "category": "category",
    "subtype": "sub_type",
}


def _normalize_header(header: str) -> str:
    """NAME, name and SUB_TYPE/subType/sub_type all reduce to one key."""
    return header.strip().lower().replace("_", "").replace(" ", "")


@dataclass
class ImportResult:
    """Outcome of one catalog import run."""

    attempted: int = 0
    inserted: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)


def read_catalog_csv(file_content: bytes) -> tuple[dict[str, str], list[dict[str, str]]]:
    """Decode CSV bytes into a header mapping and raw rows.

    Tries UTF-8 (with or without BOM) first and falls back to Latin-1.

    Returns:
        Tuple of (mapping, rows): mapping is source header -> field name for
        every recognized column, rows are dicts keyed by source header.

    Raises:
        ValueError: If the file has no header or no NAME column.
    """
    try:
        text = file_content.decode("utf-8-sig")
    except UnicodeDecodeError:
        text = file_content.decode("latin-1")

    reader = csv.DictReader(io.StringIO(text))
    if not reader.fieldnames:
        raise ValueError("CSV file has no headers")

    mapping: dict[str, str] = {}
    for header in reader.fieldnames:
        if not header:
            continue
        target = HEADER_ALIASES.get(_normalize_header(header))
        if target and target not in mapping.values():
            mapping[header] = target

    if "name" not in mapping.values():
        raise ValueError("CSV file has no NAME column")

    return mapping, list(reader)


def build_entry(row: dict[str, str], mapping: dict[str, str]) -> CatalogEntryCreate | None:
    """Turn one CSV row into a catalog entry, or None when it has no name.

    Blank cells become None and a blank TYPE becomes "Other".
    """
    values: dict[str, str | None] = {}
    for header, target in mapping.items():
        raw = row.get(header)
        cleaned = raw.strip() if isinstance(raw, str) else ""
        values[target] = cleaned or None

    if not values.get("name"):
        return None
    if not values.get("category"):
        values["category"] = DEFAULT_CATEGORY
    return CatalogEntryCreate(**values)


def _batched(items: list, size: int) -> Iterator[tuple[int, list]]:
    for start in range(0, len(items), size):
        yield start, items[start : start + size]


async def import_catalog(
    store: CatalogStore,
    file_content: bytes,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> ImportResult:
    """Replace the catalog with the rows of a CSV file.

    Args:
        store: Catalog store to repopulate.
        file_content: Raw CSV bytes.
        batch_size: Rows handed to the store per batch; progress is logged
            after each batch.

    Returns:
        ImportResult with per-row counts.

    Raises:
        ValueError: If the file cannot be parsed.
        StorageError: If the store cannot be truncated or reached.
    """
    mapping, rows = read_catalog_csv(file_content)
    logger.info("Parsed %d catalog rows (columns: %s)", len(rows), ", ".join(mapping))

    result = ImportResult(attempted=len(rows))
    entries: list[tuple[int, CatalogEntryCreate]] = []
    for line_no, row in enumerate(rows, start=2):
        try:
            entry = build_entry(row, mapping)
        except ValidationError as e:
            entry = None
            reason = str(e)
        else:
            reason = "missing name"
        if entry is None:
            result.failed += 1
            result.errors.append(f"Line {line_no}: {reason}")
            logger.warning("Skipping catalog line %d: %s", line_no, reason)
            continue
        entries.append((line_no, entry))

    await store.truncate()
    logger.info("Cleared existing catalog")

    batch_size = max(batch_size, 1)
    for start, batch in _batched(entries, batch_size):
        failures = await store.insert_batch([entry for _, entry in batch])
        for position, message in failures:
            line_no = batch[position][0]
            result.errors.append(f"Line {line_no}: {message}")
            logger.warning("Failed to import catalog line %d: %s", line_no, message)
        result.failed += len(failures)
        result.inserted += len(batch) - len(failures)
        logger.info(
            "Imported %d/%d catalog rows", min(start + len(batch), len(entries)), len(entries)
        )

    logger.info(
        "Catalog import finished: %d attempted, %d inserted, %d failed",
        result.attempted,
        result.inserted,
        result.failed,
    )
    return result


async def import_catalog_file(
    store: CatalogStore,
    path: Path,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> ImportResult:
    """Read ``path`` and run ``import_catalog`` on its contents."""
    logger.info("Importing catalog from %s", path)
    return await import_catalog(store, path.read_bytes(), batch_size=batch_size)


async def load_catalog_if_empty(
    store: CatalogStore,
    path: Path,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> ImportResult | None:
    """Seed an empty catalog from ``path`` at startup.

    Returns None when the catalog already has entries.
    """
    if await store.count() > 0:
        logger.debug("Catalog already populated; skipping %s", path)
        return None
    return await import_catalog_file(store, path, batch_size=batch_size)
