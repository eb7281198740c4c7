"""Pydantic models for CellarBook configuration.

These models define the structure of config.toml.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    rate_limit_per_minute: int = 120
    # CORS configuration - empty list means same-origin only
    cors_origins: list[str] = []


class DatabaseConfig(BaseModel):
    """Storage backend configuration."""

    backend: Literal["sql", "memory"] = "sql"
    url: str = "sqlite+aiosqlite:///./data/cellarbook.db"
    echo: bool = False


class InventoryConfig(BaseModel):
    """Stock and vintage limits."""

    max_stock_level: int = Field(default=9999, ge=0)
    min_vintage_year: int = 1900


class CatalogConfig(BaseModel):
    """Wine catalog search and import configuration."""

    search_min_length: int = Field(default=3, ge=1)
    search_limit: int = Field(default=10, ge=1, le=100)
    csv_path: Path | None = None
    import_batch_size: int = Field(default=1000, ge=1)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


class CellarBookConfig(BaseModel):
    """Main CellarBook configuration loaded from config.toml."""

    app_name: str = "CellarBook"
    server: ServerConfig = Field(default_factory=ServerConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    inventory: InventoryConfig = Field(default_factory=InventoryConfig)
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
