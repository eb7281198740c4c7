"""FastAPI dependencies resolving services from application state."""

from typing import Annotated

from fastapi import Depends, Path, Request

from cellarbook.services.catalog import CatalogSearch
from cellarbook.services.inventory import InventoryService

# Largest value a SQLite INTEGER primary key can hold
MAX_WINE_ID = 2**63 - 1


def get_inventory_service(request: Request) -> InventoryService:
    return request.app.state.inventory


def get_catalog_search(request: Request) -> CatalogSearch:
    return request.app.state.catalog_search


Inventory = Annotated[InventoryService, Depends(get_inventory_service)]
Catalog = Annotated[CatalogSearch, Depends(get_catalog_search)]
WineId = Annotated[int, Path(ge=1, le=MAX_WINE_ID, description="Wine ID")]
