"""Catalog search endpoints."""

from fastapi import APIRouter, Query

from cellarbook.dependencies import Catalog
from cellarbook.schemas.catalog import CatalogEntry
from cellarbook.services.catalog import MAX_SEARCH_LIMIT

router = APIRouter()


@router.get("/search")
async def search_catalog(
    catalog: Catalog,
    q: str = Query("", description="Text matched against name, wine, sub-type, producer, region and country"),
    limit: int | None = Query(None, ge=1, le=MAX_SEARCH_LIMIT),
) -> list[CatalogEntry]:
    """Search the catalog to prefill a new wine.

    Queries shorter than the configured minimum length return an empty list.
    """
    return await catalog.search(q, limit)


@router.get("")
async def list_catalog(catalog: Catalog) -> list[CatalogEntry]:
    """List the whole catalog."""
    return await catalog.list_all()
