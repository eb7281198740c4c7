"""Wine management router package."""

from fastapi import APIRouter

from .crud import (
    create_wine,
    delete_wine,
    get_wine,
    list_wines,
    list_wines_by_category,
    update_wine,
)
from .stock import adjust_stock
from .vintages import add_vintage, list_vintages, remove_vintage, set_vintage_stock

router = APIRouter()

# CRUD endpoints - Note: /category/{category} must come before /{wine_id}
router.add_api_route("", list_wines, methods=["GET"])
router.add_api_route("", create_wine, methods=["POST"], status_code=201)
router.add_api_route("/category/{category}", list_wines_by_category, methods=["GET"])
router.add_api_route("/{wine_id}", get_wine, methods=["GET"])
router.add_api_route("/{wine_id}", update_wine, methods=["PATCH"])
router.add_api_route("/{wine_id}", delete_wine, methods=["DELETE"], status_code=204)

# Vintage endpoints
router.add_api_route("/{wine_id}/vintages", list_vintages, methods=["GET"])
router.add_api_route("/{wine_id}/vintages", add_vintage, methods=["POST"])
router.add_api_route("/{wine_id}/vintages/{year}", set_vintage_stock, methods=["PUT"])
router.add_api_route("/{wine_id}/vintages/{year}", remove_vintage, methods=["DELETE"])

# Stock endpoint
router.add_api_route("/{wine_id}/stock", adjust_stock, methods=["POST"])

__all__ = ["router"]
