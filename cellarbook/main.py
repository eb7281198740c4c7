"""FastAPI application entry point for CellarBook."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from cellarbook import __version__
from cellarbook.config import Settings, get_settings
from cellarbook.errors import CellarValidationError, NotFoundError, StorageError
from cellarbook.routers import catalog, wines
from cellarbook.services.catalog import CatalogSearch
from cellarbook.services.catalog_import import load_catalog_if_empty
from cellarbook.services.inventory import InventoryService
from cellarbook.storage.factory import Stores, build_stores

logger = logging.getLogger(__name__)


def _field_name(loc: tuple) -> str:
    # Drop the leading "body"/"path"/"query" marker
    parts = loc[1:] if len(loc) > 1 else loc
    return ".".join(str(part) for part in parts)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report schema violations as 400 with one entry per offending field."""
    errors = [
        {"field": _field_name(tuple(error.get("loc", ()))), "message": error.get("msg", "")}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid request data", "errors": errors},
    )


async def cellar_validation_handler(
    request: Request, exc: CellarValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"detail": exc.message, "errors": exc.to_errors()},
    )


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    """Log the underlying failure and hide it from the client."""
    logger.error(
        "Storage error on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content={"detail": "Internal storage error"})


def attach_stores(app: FastAPI, stores: Stores, settings: Settings) -> None:
    """Expose the stores and the services built on them via ``app.state``."""
    app.state.stores = stores
    app.state.inventory = InventoryService(
        stores.wines,
        max_stock_level=settings.max_stock_level,
        min_vintage_year=settings.min_vintage_year,
    )
    app.state.catalog_search = CatalogSearch(
        stores.catalog,
        min_length=settings.catalog_search_min_length,
        default_limit=settings.catalog_search_limit,
    )


async def seed_catalog(stores: Stores, settings: Settings) -> None:
    """Load ``catalog.csv_path`` into the catalog when it is empty."""
    csv_path = settings.catalog_csv_path
    if csv_path is None:
        return
    if not csv_path.is_file():
        logger.warning("Catalog CSV %s not found; catalog not seeded", csv_path)
        return
    try:
        result = await load_catalog_if_empty(
            stores.catalog, csv_path, batch_size=settings.catalog_import_batch_size
        )
    except ValueError as e:
        logger.error("Could not seed catalog from %s: %s", csv_path, e)
        return
    if result is not None:
        logger.info("Seeded catalog with %d entries from %s", result.inserted, csv_path)


def create_app(settings: Settings | None = None, stores: Stores | None = None) -> FastAPI:
    """Build the application.

    Args:
        settings: Settings to use; defaults to the global settings.
        stores: Pre-built stores. When omitted, the backend selected by
            ``database.backend`` is created at startup and closed at shutdown.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        owned: Stores | None = None
        if getattr(app.state, "stores", None) is None:
            owned = await build_stores(settings)
            attach_stores(app, owned, settings)

        await seed_catalog(app.state.stores, settings)
        logger.info("%s %s started", settings.app_name, __version__)

        yield

        if owned is not None:
            await owned.close()
            app.state.stores = None
        logger.info("%s stopped", settings.app_name)

    app = FastAPI(
        title=settings.app_name,
        description="Personal wine cellar inventory with per-vintage stock tracking",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.stores = None
    if stores is not None:
        attach_stores(app, stores, settings)

    # Rate limiter applied to every route
    limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[f"{settings.rate_limit_per_minute}/minute"],
    )
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # Only allow origins from the whitelist; empty list means same-origin only
    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH"],
            allow_headers=["Content-Type"],
            max_age=600,
        )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(CellarValidationError, cellar_validation_handler)
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(StorageError, storage_error_handler)

    @app.get("/health", tags=["Health"])
    async def health_check() -> JSONResponse:
        """Health check endpoint."""
        return JSONResponse(
            content={
                "status": "healthy",
                "version": __version__,
                "app_name": settings.app_name,
            }
        )

    app.include_router(wines.router, prefix="/api/wines", tags=["Wines"])
    app.include_router(catalog.router, prefix="/api/catalog", tags=["Catalog"])

    return app


app = create_app()
