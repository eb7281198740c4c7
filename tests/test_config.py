"""Tests for the CellarBook configuration system."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from cellarbook.config.loader import (
    apply_env_overrides,
    find_config_file,
    get_config_search_paths,
    load_config,
    load_toml_file,
)
from cellarbook.config.schema import (
    CatalogConfig,
    CellarBookConfig,
    DatabaseConfig,
    InventoryConfig,
    ServerConfig,
)
from cellarbook.config.settings import Settings, get_settings, reset_settings


class TestSchemaDefaults:
    """Test default values in schema models."""

    def test_server_config_defaults(self):
        """Test ServerConfig has correct defaults."""
        config = ServerConfig()
        assert config.host == "127.0.0.1"
        assert config.port == 8000
        assert config.debug is False
        assert config.rate_limit_per_minute == 120
        assert config.cors_origins == []

    def test_database_config_defaults(self):
        """Test DatabaseConfig defaults to a local SQLite file."""
        config = DatabaseConfig()
        assert config.backend == "sql"
        assert config.url == "sqlite+aiosqlite:///./data/cellarbook.db"
        assert config.echo is False

    def test_inventory_config_defaults(self):
        """Test InventoryConfig defaults."""
        config = InventoryConfig()
        assert config.max_stock_level == 9999
        assert config.min_vintage_year == 1900

    def test_catalog_config_defaults(self):
        """Test CatalogConfig defaults."""
        config = CatalogConfig()
        assert config.search_min_length == 3
        assert config.search_limit == 10
        assert config.csv_path is None
        assert config.import_batch_size == 1000

    def test_invalid_backend_rejected(self):
        """Test an unknown backend fails validation."""
        with pytest.raises(ValidationError):
            DatabaseConfig(backend="mongo")

    def test_search_limit_capped(self):
        """Test the search limit cannot exceed 100."""
        with pytest.raises(ValidationError):
            CatalogConfig(search_limit=500)


class TestConfigSearchPaths:
    """Test configuration file search."""

    def test_config_search_paths_order(self):
        """Test config search paths are in correct priority order."""
        paths = get_config_search_paths()
        assert len(paths) == 3
        assert paths[0] == Path.cwd() / "config.toml"
        assert paths[1] == Path.home() / ".config" / "cellarbook" / "config.toml"
        assert paths[2] == Path("/etc/cellarbook/config.toml")

    def test_find_config_file_in_cwd(self, tmp_path, monkeypatch):
        """Test finding config file in current directory."""
        monkeypatch.chdir(tmp_path)
        (tmp_path / "config.toml").write_text('app_name = "Test"\n')
        assert find_config_file() == tmp_path / "config.toml"


class TestTomlLoading:
    """Test TOML file loading."""

    def test_load_toml_file(self, tmp_path):
        """Test loading a TOML file."""
        path = tmp_path / "config.toml"
        path.write_text('[server]\nport = 9000\n\n[catalog]\nsearch_limit = 25\n')
        data = load_toml_file(path)
        assert data["server"]["port"] == 9000
        assert data["catalog"]["search_limit"] == 25

    def test_load_config_from_file(self, tmp_path):
        """Test a full config file is applied over the defaults."""
        path = tmp_path / "config.toml"
        path.write_text(
            'app_name = "My Cellar"\n'
            "[database]\n"
            'backend = "memory"\n'
            "[inventory]\n"
            "max_stock_level = 500\n"
            "[catalog]\n"
            'csv_path = "data/catalog.csv"\n'
            "[logging]\n"
            'level = "DEBUG"\n'
        )
        with patch.dict(os.environ, {}, clear=True):
            config = load_config(path)
        assert config.app_name == "My Cellar"
        assert config.database.backend == "memory"
        assert config.inventory.max_stock_level == 500
        assert config.catalog.csv_path == Path("data/catalog.csv")
        assert config.logging.level == "DEBUG"


class TestEnvOverrides:
    """Test environment variable overrides."""

    def test_apply_server_overrides(self):
        """Test server settings from the environment."""
        config_dict: dict = {}
        env = {"CELLARBOOK_HOST": "0.0.0.0", "CELLARBOOK_PORT": "9001"}
        with patch.dict(os.environ, env, clear=True):
            apply_env_overrides(config_dict)
        assert config_dict["server"] == {"host": "0.0.0.0", "port": 9001}

    def test_apply_database_overrides(self):
        """Test database settings from the environment."""
        config_dict: dict = {"database": {"echo": False}}
        env = {
            "CELLARBOOK_DATABASE_URL": "sqlite+aiosqlite:///tmp/x.db",
            "CELLARBOOK_DATABASE_BACKEND": "memory",
            "CELLARBOOK_DATABASE_ECHO": "yes",
        }
        with patch.dict(os.environ, env, clear=True):
            apply_env_overrides(config_dict)
        assert config_dict["database"] == {
            "url": "sqlite+aiosqlite:///tmp/x.db",
            "backend": "memory",
            "echo": True,
        }

    def test_apply_inventory_and_logging_overrides(self):
        """Test integer coercion and upper-cased log level."""
        config_dict: dict = {}
        env = {"CELLARBOOK_MAX_STOCK_LEVEL": "24", "CELLARBOOK_LOG_LEVEL": "warning"}
        with patch.dict(os.environ, env, clear=True):
            apply_env_overrides(config_dict)
        assert config_dict["inventory"]["max_stock_level"] == 24
        assert config_dict["logging"]["level"] == "WARNING"

    def test_env_wins_over_file(self, tmp_path):
        """Test environment values override the file."""
        path = tmp_path / "config.toml"
        path.write_text("[server]\nport = 9000\n")
        with patch.dict(os.environ, {"CELLARBOOK_PORT": "9100"}, clear=True):
            config = load_config(path)
        assert config.server.port == 9100


class TestSettings:
    """Test the flat settings accessor."""

    def setup_method(self):
        reset_settings()

    def teardown_method(self):
        reset_settings()

    def test_settings_property_accessors(self):
        """Test each property reads through to the config."""
        settings = Settings(
            CellarBookConfig(
                server={"port": 8100, "cors_origins": ["http://localhost:5173"]},
                database={"backend": "memory"},
                catalog={"search_min_length": 4},
            )
        )
        assert settings.port == 8100
        assert settings.cors_origins == ["http://localhost:5173"]
        assert settings.database_backend == "memory"
        assert settings.catalog_search_min_length == 4
        assert settings.max_stock_level == 9999
        assert settings.log_level == "INFO"

    def test_get_settings_singleton(self, tmp_path, monkeypatch):
        """Test get_settings returns the cached instance."""
        monkeypatch.chdir(tmp_path)
        assert get_settings() is get_settings()

    def test_reset_settings_clears_cache(self, tmp_path, monkeypatch):
        """Test reset_settings forces a reload."""
        monkeypatch.chdir(tmp_path)
        first = get_settings()
        reset_settings()
        assert get_settings() is not first
