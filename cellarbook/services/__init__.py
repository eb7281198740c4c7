"""Services for CellarBook."""

from cellarbook.services.catalog import CatalogSearch
from cellarbook.services.catalog_import import ImportResult, import_catalog
from cellarbook.services.inventory import InventoryService

__all__ = ["CatalogSearch", "ImportResult", "InventoryService", "import_catalog"]
