"""Per-vintage stock endpoints."""

from cellarbook.dependencies import Inventory, WineId
from cellarbook.schemas.wine import VintageAdd, VintageEntry, VintageStockUpdate, WineRecord


async def list_vintages(
    wine_id: WineId,
    inventory: Inventory,
    descending: bool = False,
) -> list[VintageEntry]:
    """List a wine's vintage entries ordered by year."""
    return await inventory.list_vintages(wine_id, descending=descending)


async def add_vintage(wine_id: WineId, body: VintageAdd, inventory: Inventory) -> WineRecord:
    """Add bottles of a vintage; an existing year has its stock incremented."""
    return await inventory.add_vintage(wine_id, body.vintage, body.count)


async def set_vintage_stock(
    wine_id: WineId,
    year: int,
    body: VintageStockUpdate,
    inventory: Inventory,
) -> WineRecord:
    """Set the bottle count of one vintage. A count of zero removes it."""
    return await inventory.set_vintage_stock(wine_id, year, body.stock)


async def remove_vintage(wine_id: WineId, year: int, inventory: Inventory) -> WineRecord:
    """Remove one vintage from a wine."""
    return await inventory.remove_vintage(wine_id, year)
