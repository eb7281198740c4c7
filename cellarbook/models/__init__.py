"""SQLAlchemy table models for CellarBook."""

from cellarbook.models.catalog import CatalogRow
from cellarbook.models.wine import WineRow

__all__ = [
    "CatalogRow",
    "WineRow",
]
