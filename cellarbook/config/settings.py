"""Global settings instance for CellarBook.

The settings object provides a flat interface over the structured
configuration loaded from config.toml and environment variables.
"""

import logging
from pathlib import Path

from cellarbook.config.loader import load_config
from cellarbook.config.schema import CellarBookConfig

logger = logging.getLogger(__name__)


class Settings:
    """Flat accessor for the structured CellarBookConfig."""

    def __init__(self, config: CellarBookConfig | None = None):
        """Initialize settings.

        Args:
            config: Optional CellarBookConfig instance. If not provided, loads from file.
        """
        self._config = config or load_config()

    @property
    def config(self) -> CellarBookConfig:
        """Get the full configuration object."""
        return self._config

    # Application
    @property
    def app_name(self) -> str:
        return self._config.app_name

    @property
    def debug(self) -> bool:
        return self._config.server.debug

    # Server
    @property
    def host(self) -> str:
        return self._config.server.host

    @property
    def port(self) -> int:
        return self._config.server.port

    @property
    def rate_limit_per_minute(self) -> int:
        return self._config.server.rate_limit_per_minute

    @property
    def cors_origins(self) -> list[str]:
        return self._config.server.cors_origins

    # Database
    @property
    def database_backend(self) -> str:
        return self._config.database.backend

    @property
    def database_url(self) -> str:
        return self._config.database.url

    @property
    def database_echo(self) -> bool:
        return self._config.database.echo

    # Inventory
    @property
    def max_stock_level(self) -> int:
        return self._config.inventory.max_stock_level

    @property
    def min_vintage_year(self) -> int:
        return self._config.inventory.min_vintage_year

    # Catalog
    @property
    def catalog_search_min_length(self) -> int:
        return self._config.catalog.search_min_length

    @property
    def catalog_search_limit(self) -> int:
        return self._config.catalog.search_limit

    @property
    def catalog_csv_path(self) -> Path | None:
        return self._config.catalog.csv_path

    @property
    def catalog_import_batch_size(self) -> int:
        return self._config.catalog.import_batch_size

    # Logging
    @property
    def log_level(self) -> str:
        return self._config.logging.level


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance.

    The settings are loaded once and cached for subsequent calls.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset the global settings instance.

    This is primarily useful for testing to reload configuration.
    """
    global _settings
    _settings = None


class _SettingsProxy:
    """Proxy object that lazily loads settings on first access."""

    def __getattr__(self, name: str):
        return getattr(get_settings(), name)

    def __repr__(self) -> str:
        return repr(get_settings())


settings = _SettingsProxy()
