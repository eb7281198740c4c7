"""Upgrades for data written by older clients and schema versions.

Early releases stored tasting notes in a ``description`` field. The field
was renamed to ``notes``; payloads and tables still carrying the old name
are upgraded here, before anything else sees them.
"""

import logging
from typing import Any

from sqlalchemy import inspect, text
from sqlalchemy.engine import Connection

logger = logging.getLogger(__name__)

LEGACY_NOTES_FIELD = "description"


def upgrade_legacy_payload(data: Any) -> Any:
    """Rename a legacy ``description`` key to ``notes``.

    ``notes`` wins when both are present. Non-dict input is returned as is
    so that schema validation can report it.
    """
    if not isinstance(data, dict) or LEGACY_NOTES_FIELD not in data:
        return data

    upgraded = dict(data)
    description = upgraded.pop(LEGACY_NOTES_FIELD)
    if "notes" not in upgraded:
        upgraded["notes"] = description
    return upgraded


def upgrade_legacy_notes_column(connection: Connection) -> int:
    """Copy a legacy ``wines.description`` column into ``notes``.

    The ``notes`` column is added when missing. Only rows with no notes
    are touched. Runs synchronously inside
    ``AsyncConnection.run_sync``.

    Returns:
        Number of rows upgraded.
    """
    inspector = inspect(connection)
    if "wines" not in inspector.get_table_names():
        return 0

    columns = {column["name"] for column in inspector.get_columns("wines")}
    if LEGACY_NOTES_FIELD not in columns:
        return 0
    if "notes" not in columns:
        connection.execute(text("ALTER TABLE wines ADD COLUMN notes TEXT"))
        logger.info("Added notes column to legacy wines table")

    result = connection.execute(
        text(
            "UPDATE wines SET notes = description "
            "WHERE notes IS NULL AND description IS NOT NULL"
        )
    )
    upgraded = max(result.rowcount, 0)
    if upgraded:
        logger.info("Upgraded %d legacy wine descriptions to notes", upgraded)
    return upgraded
