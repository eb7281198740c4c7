"""Pydantic schemas for the CellarBook API."""

from cellarbook.schemas.catalog import CatalogEntry, CatalogEntryCreate
from cellarbook.schemas.wine import (
    StockAdjustment,
    VintageAdd,
    VintageEntry,
    VintageStockUpdate,
    WineCategory,
    WineCreate,
    WinePatch,
    WineRecord,
)

__all__ = [
    "CatalogEntry",
    "CatalogEntryCreate",
    "StockAdjustment",
    "VintageAdd",
    "VintageEntry",
    "VintageStockUpdate",
    "WineCategory",
    "WineCreate",
    "WinePatch",
    "WineRecord",
]
