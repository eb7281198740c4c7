"""CellarBook configuration module.

This module provides TOML-based configuration with environment variable overrides.

Configuration is loaded from the following locations (in order of priority):
1. Environment variables (highest priority)
2. ./config.toml (project root - for development)
3. ~/.config/cellarbook/config.toml (user config)
4. /etc/cellarbook/config.toml (system config)
"""

from cellarbook.config.schema import (
    CatalogConfig,
    CellarBookConfig,
    DatabaseConfig,
    InventoryConfig,
    LoggingConfig,
    ServerConfig,
)
from cellarbook.config.settings import Settings, get_settings, reset_settings, settings

__all__ = [
    "CatalogConfig",
    "CellarBookConfig",
    "DatabaseConfig",
    "InventoryConfig",
    "LoggingConfig",
    "ServerConfig",
    "Settings",
    "get_settings",
    "reset_settings",
    "settings",
]
