"""Configuration loader for CellarBook.

Loads configuration from TOML files. Environment variables can override
any configuration value.
"""

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from cellarbook.config.schema import CellarBookConfig

logger = logging.getLogger(__name__)

ENV_PREFIX = "CELLARBOOK"

# Keys whose environment values are coerced before validation
_INT_KEYS = {
    "port",
    "rate_limit_per_minute",
    "max_stock_level",
    "min_vintage_year",
    "search_min_length",
    "search_limit",
    "import_batch_size",
}
_BOOL_KEYS = {"debug", "echo"}


def get_config_search_paths() -> list[Path]:
    """Get the list of paths to search for configuration files.

    Returns paths in priority order (first found wins):
    1. ./config.toml (project root - for development)
    2. ~/.config/cellarbook/config.toml (user config)
    3. /etc/cellarbook/config.toml (system config)
    """
    return [
        Path.cwd() / "config.toml",
        Path.home() / ".config" / "cellarbook" / "config.toml",
        Path("/etc/cellarbook/config.toml"),
    ]


def find_config_file() -> Path | None:
    """Find the first existing config file from search paths."""
    for path in get_config_search_paths():
        if path.exists() and path.is_file():
            logger.debug("Found config file: %s", path)
            return path
    return None


def load_toml_file(path: Path) -> dict[str, Any]:
    """Load a TOML file and return its contents as a dictionary."""
    with open(path, "rb") as f:
        return tomllib.load(f)


def apply_env_overrides(config_dict: dict[str, Any], prefix: str = ENV_PREFIX) -> None:
    """Apply environment variable overrides to configuration dictionary.

    Environment variables are mapped as follows:
    - CELLARBOOK_SERVER_HOST -> config_dict["server"]["host"]
    - CELLARBOOK_DATABASE_URL -> config_dict["database"]["url"]
    - etc.

    Note: This modifies config_dict in place.
    """
    env_mappings = {
        # Server
        f"{prefix}_SERVER_HOST": ("server", "host"),
        f"{prefix}_SERVER_PORT": ("server", "port"),
        f"{prefix}_SERVER_DEBUG": ("server", "debug"),
        f"{prefix}_RATE_LIMIT_PER_MINUTE": ("server", "rate_limit_per_minute"),
        f"{prefix}_DEBUG": ("server", "debug"),  # Shorthand
        f"{prefix}_HOST": ("server", "host"),  # Shorthand
        f"{prefix}_PORT": ("server", "port"),  # Shorthand
        # Database
        f"{prefix}_DATABASE_BACKEND": ("database", "backend"),
        f"{prefix}_DATABASE_URL": ("database", "url"),
        f"{prefix}_DATABASE_ECHO": ("database", "echo"),
        # Inventory
        f"{prefix}_MAX_STOCK_LEVEL": ("inventory", "max_stock_level"),
        f"{prefix}_MIN_VINTAGE_YEAR": ("inventory", "min_vintage_year"),
        # Catalog
        f"{prefix}_CATALOG_SEARCH_MIN_LENGTH": ("catalog", "search_min_length"),
        f"{prefix}_CATALOG_SEARCH_LIMIT": ("catalog", "search_limit"),
        f"{prefix}_CATALOG_CSV_PATH": ("catalog", "csv_path"),
        f"{prefix}_CATALOG_IMPORT_BATCH_SIZE": ("catalog", "import_batch_size"),
        # Logging
        f"{prefix}_LOG_LEVEL": ("logging", "level"),
    }

    for env_var, path in env_mappings.items():
        value = os.environ.get(env_var)
        if value is None:
            continue

        section, key = path
        config_dict.setdefault(section, {})

        if key in _INT_KEYS:
            config_dict[section][key] = int(value)
        elif key in _BOOL_KEYS:
            config_dict[section][key] = value.lower() in ("true", "1", "yes")
        elif key == "level":
            config_dict[section][key] = value.upper()
        else:
            config_dict[section][key] = value


def load_config(config_file: Path | None = None) -> CellarBookConfig:
    """Load configuration from TOML file with environment variable overrides.

    Args:
        config_file: Optional path to config file. If not provided,
                     searches default locations.

    Returns:
        CellarBookConfig instance with all settings loaded.
    """
    config_dict: dict[str, Any] = {}

    if config_file is None:
        config_file = find_config_file()

    if config_file and config_file.exists():
        logger.info("Loading config from: %s", config_file)
        config_dict = load_toml_file(config_file)
    else:
        logger.info("No config file found, using defaults with env overrides")

    apply_env_overrides(config_dict)

    return CellarBookConfig(**config_dict)
