"""Direct stock level endpoint for wines tracked without vintages."""

from cellarbook.dependencies import Inventory, WineId
from cellarbook.schemas.wine import StockAdjustment, WineRecord


async def adjust_stock(
    wine_id: WineId, body: StockAdjustment, inventory: Inventory
) -> WineRecord:
    """Increment, decrement or set the stock level.

    The result is clamped to [0, max_stock_level]. Wines whose stock comes
    from vintage entries must be changed through the vintage endpoints.
    """
    return await inventory.adjust_stock(wine_id, body.action, body.amount)
