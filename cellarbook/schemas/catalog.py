"""Pydantic schemas for the read-only wine catalog."""

from pydantic import Field

from cellarbook.schemas.wine import CamelModel


class CatalogEntryBase(CamelModel):
    """Reference data describing a known wine."""

    name: str
    category: str = "Other"
    wine_type: str | None = Field(None, alias="wine")
    sub_type: str | None = None
    producer: str | None = None
    region: str | None = None
    country: str | None = None


class CatalogEntryCreate(CatalogEntryBase):
    """Catalog row produced by the offline import."""

    pass


class CatalogEntry(CatalogEntryBase):
    """Catalog row as returned by the API."""

    id: int
