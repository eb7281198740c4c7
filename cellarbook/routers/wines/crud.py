"""Wine CRUD endpoints (list, get, create, update, delete)."""

from cellarbook.dependencies import Inventory, WineId
from cellarbook.schemas.wine import WineCreate, WinePatch, WineRecord


async def list_wines(inventory: Inventory) -> list[WineRecord]:
    """List every wine in the cellar."""
    return await inventory.list_all()


async def list_wines_by_category(category: str, inventory: Inventory) -> list[WineRecord]:
    """List wines of one category (exact match, e.g. ``Red``)."""
    return await inventory.list_by_category(category)


async def get_wine(wine_id: WineId, inventory: Inventory) -> WineRecord:
    """Get a single wine."""
    return await inventory.get(wine_id)


async def create_wine(wine: WineCreate, inventory: Inventory) -> WineRecord:
    """Add a wine to the cellar.

    For Red, White and Rose wines with vintage entries the stock level is
    the sum of the entries; other categories never carry vintages.
    """
    return await inventory.create(wine)


async def update_wine(
    wine_id: WineId, wine_patch: WinePatch, inventory: Inventory
) -> WineRecord:
    """Update the fields present in the request body."""
    return await inventory.update(wine_id, wine_patch)


async def delete_wine(wine_id: WineId, inventory: Inventory) -> None:
    """Delete a wine."""
    await inventory.delete(wine_id)
