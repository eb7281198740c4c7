"""Pydantic schemas for wine records and their vintage entries."""

import enum
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from cellarbook.storage.legacy import upgrade_legacy_payload


class WineCategory(str, enum.Enum):
    """Fixed set of drink categories."""

    RED = "Red"
    WHITE = "White"
    ROSE = "Rose"
    FORTIFIED = "Fortified"
    BEER = "Beer"
    CIDER = "Cider"
    OTHER = "Other"


class CamelModel(BaseModel):
    """Base model exchanging camelCase JSON while keeping snake_case attributes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class VintageEntry(CamelModel):
    """Bottle count for a single vintage year."""

    model_config = ConfigDict(frozen=True)

    vintage: int
    stock: int


class WineFields(CamelModel):
    """Optional descriptive fields shared by every wine schema."""

    wine_type: str | None = Field(None, alias="wine", max_length=255)
    sub_type: str | None = Field(None, max_length=255)
    producer: str | None = Field(None, max_length=255)
    region: str | None = Field(None, max_length=255)
    country: str | None = Field(None, max_length=255)
    image_url: str | None = Field(None, max_length=2048)
    rating: int | None = Field(None, ge=1, le=5)
    notes: str | None = Field(None, max_length=5000)


class WineCreate(WineFields):
    """Schema for adding a wine to the cellar."""

    name: str = Field(..., min_length=1, max_length=255)
    category: WineCategory
    stock_level: int = 0
    vintage_stocks: list[VintageEntry] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def upgrade_legacy_fields(cls, data: Any) -> Any:
        return upgrade_legacy_payload(data)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name must not be blank")
        return v


# Fields a patch may not set to null
_REQUIRED_FIELDS = ("name", "category", "stock_level", "vintage_stocks")


class WinePatch(WineFields):
    """Partial update for a wine.

    Only fields present in the request body are applied; an explicit null
    clears an optional field. Use ``changes()`` rather than reading the
    attributes directly, since an absent field and a null field both read
    as ``None``.
    """

    name: str | None = Field(None, min_length=1, max_length=255)
    category: WineCategory | None = None
    stock_level: int | None = None
    vintage_stocks: list[VintageEntry] | None = None

    @model_validator(mode="before")
    @classmethod
    def upgrade_legacy_fields(cls, data: Any) -> Any:
        return upgrade_legacy_payload(data)

    @field_validator(*_REQUIRED_FIELDS, mode="before")
    @classmethod
    def reject_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("Field cannot be null")
        return v

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str | None) -> str | None:
        if v is not None:
            v = v.strip()
            if not v:
                raise ValueError("Name must not be blank")
        return v

    def changes(self) -> dict[str, Any]:
        """Return only the fields the client supplied, keyed by attribute name."""
        return {name: getattr(self, name) for name in self.model_fields_set}


class WineRecord(WineFields):
    """A stored wine as returned by the API."""

    id: int
    name: str
    category: WineCategory
    stock_level: int = Field(..., ge=0)
    vintage_stocks: list[VintageEntry] = Field(default_factory=list)
    created_at: datetime


class VintageAdd(CamelModel):
    """Request body for adding bottles of a vintage."""

    vintage: int
    count: int = 1


class VintageStockUpdate(CamelModel):
    """Request body for setting the stock of one vintage."""

    stock: int


class StockAdjustment(CamelModel):
    """Request body for direct stock changes on wines without vintages."""

    action: Literal["increment", "decrement", "set"]
    amount: int = 1
