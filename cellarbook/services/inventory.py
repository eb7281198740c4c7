"""Inventory service: the single write path for wine records.

Every mutation reads the stored wine, applies the change, reconciles the
stock level against the vintage entries and writes the merged fields back
in one ``WineStore.update`` call.
"""

import logging
from typing import Any, Literal

from cellarbook.errors import StockDerivedFromVintages, VintageNotApplicable, WineNotFound
from cellarbook.schemas.wine import (
    VintageEntry,
    WineCategory,
    WineCreate,
    WinePatch,
    WineRecord,
)
from cellarbook.services import vintage as vintage_model
from cellarbook.storage.base import WineStore

logger = logging.getLogger(__name__)

StockAction = Literal["increment", "decrement", "set"]


class InventoryService:
    """Apply inventory operations against a ``WineStore``."""

    def __init__(
        self,
        wine_store: WineStore,
        max_stock_level: int = vintage_model.DEFAULT_MAX_STOCK_LEVEL,
        min_vintage_year: int = vintage_model.MIN_VINTAGE_YEAR,
    ) -> None:
        self.wine_store = wine_store
        self.max_stock_level = max_stock_level
        self.min_vintage_year = min_vintage_year

    def _reconcile(
        self,
        category: WineCategory,
        stock_level: int,
        entries: list[VintageEntry],
    ) -> tuple[int, list[VintageEntry]]:
        """Return the (stock_level, vintage_stocks) pair to store."""
        if not vintage_model.is_vintage_applicable(category):
            return vintage_model.clamp_stock(stock_level, self.max_stock_level), []
        if entries:
            return vintage_model.compute_total(entries), entries
        return vintage_model.clamp_stock(stock_level, self.max_stock_level), []

    async def _require(self, wine_id: int) -> WineRecord:
        wine = await self.wine_store.get(wine_id)
        if wine is None:
            raise WineNotFound(wine_id)
        return wine

    async def _write(self, wine_id: int, changes: dict[str, Any]) -> WineRecord:
        updated = await self.wine_store.update(wine_id, changes)
        # Deleted between read and write
        if updated is None:
            raise WineNotFound(wine_id)
        return updated

    async def _write_vintages(
        self, wine: WineRecord, entries: list[VintageEntry]
    ) -> WineRecord:
        stock_level, entries = self._reconcile(wine.category, wine.stock_level, entries)
        return await self._write(
            wine.id, {"stock_level": stock_level, "vintage_stocks": entries}
        )

    def _require_vintage_tracking(self, wine: WineRecord) -> None:
        if not vintage_model.is_vintage_applicable(wine.category):
            raise VintageNotApplicable(wine.category.value)

    async def list_all(self) -> list[WineRecord]:
        return await self.wine_store.list_all()

    async def list_by_category(self, category: str) -> list[WineRecord]:
        return await self.wine_store.list_by_category(category)

    async def get(self, wine_id: int) -> WineRecord:
        return await self._require(wine_id)

    async def delete(self, wine_id: int) -> None:
        if not await self.wine_store.delete(wine_id):
            raise WineNotFound(wine_id)
        logger.info("Deleted wine %d", wine_id)

    async def create(self, data: WineCreate) -> WineRecord:
        """Add a wine, normalizing its vintages and deriving its stock level.

        Raises:
            InvalidVintageYear: If any supplied vintage is out of range.
        """
        entries = vintage_model.normalize_entries(
            data.vintage_stocks, minimum=self.min_vintage_year
        )
        stock_level, entries = self._reconcile(data.category, data.stock_level, entries)
        wine = await self.wine_store.insert(
            data.model_copy(update={"stock_level": stock_level, "vintage_stocks": entries})
        )
        logger.info("Added wine %d (%s)", wine.id, wine.name)
        return wine

    async def update(self, wine_id: int, patch: WinePatch) -> WineRecord:
        """Apply the fields the client sent, then reconcile the stock level.

        A category change to one without vintage tracking clears the
        vintage entries; the stock level they summed to is kept unless the
        patch also sets it.

        Raises:
            WineNotFound: If no wine has ``wine_id``.
            InvalidVintageYear: If a supplied vintage is out of range.
        """
        wine = await self._require(wine_id)
        changes = patch.changes()

        category = changes.get("category", wine.category)
        stock_level = changes.get("stock_level", wine.stock_level)
        if "vintage_stocks" in changes:
            entries = vintage_model.normalize_entries(
                changes["vintage_stocks"], minimum=self.min_vintage_year
            )
        else:
            entries = list(wine.vintage_stocks)

        stock_level, entries = self._reconcile(category, stock_level, entries)
        changes["stock_level"] = stock_level
        changes["vintage_stocks"] = entries
        return await self._write(wine_id, changes)

    async def list_vintages(
        self, wine_id: int, descending: bool = False
    ) -> list[VintageEntry]:
        wine = await self._require(wine_id)
        return vintage_model.sorted_by_year(wine.vintage_stocks, descending=descending)

    async def add_vintage(self, wine_id: int, year: int, count: int = 1) -> WineRecord:
        """Add ``count`` bottles of ``year``, merging into an existing entry.

        Raises:
            WineNotFound: If no wine has ``wine_id``.
            VintageNotApplicable: If the wine's category has no vintages.
            InvalidVintageYear: If ``year`` is out of range.
        """
        wine = await self._require(wine_id)
        self._require_vintage_tracking(wine)
        entries = vintage_model.add_or_merge_vintage(
            wine.vintage_stocks, year, count, minimum=self.min_vintage_year
        )
        return await self._write_vintages(wine, entries)

    async def set_vintage_stock(self, wine_id: int, year: int, stock: int) -> WineRecord:
        """Set the bottle count of ``year``; zero or less removes it."""
        wine = await self._require(wine_id)
        self._require_vintage_tracking(wine)
        if stock > 0 and not any(entry.vintage == year for entry in wine.vintage_stocks):
            # Creating an entry, so the year must be in range
            vintage_model.validate_vintage_year(year, minimum=self.min_vintage_year)
        entries = vintage_model.set_vintage_stock(wine.vintage_stocks, year, stock)
        return await self._write_vintages(wine, entries)

    async def remove_vintage(self, wine_id: int, year: int) -> WineRecord:
        wine = await self._require(wine_id)
        self._require_vintage_tracking(wine)
        entries = vintage_model.remove_vintage(wine.vintage_stocks, year)
        return await self._write_vintages(wine, entries)

    async def adjust_stock(
        self, wine_id: int, action: StockAction, amount: int = 1
    ) -> WineRecord:
        """Change the stock level of a wine tracked without vintages.

        Raises:
            WineNotFound: If no wine has ``wine_id``.
            StockDerivedFromVintages: If the wine has vintage entries.
        """
        wine = await self._require(wine_id)
        if wine.vintage_stocks:
            raise StockDerivedFromVintages(wine_id)

        if action == "increment":
            new_level = wine.stock_level + amount
        elif action == "decrement":
            new_level = wine.stock_level - amount
        else:
            new_level = amount

        new_level = vintage_model.clamp_stock(new_level, self.max_stock_level)
        logger.debug(
            "Stock of wine %d: %s %d -> %d", wine_id, action, wine.stock_level, new_level
        )
        return await self._write(wine_id, {"stock_level": new_level})
