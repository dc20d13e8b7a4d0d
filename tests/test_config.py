"""
Tests for configuration system
"""

import os
from pathlib import Path

import pytest

from config import app_config
from config.app_config import (
    AdAccountConfig,
    AppConfig,
    AuthConfig,
    StorageConfig,
    UIConfig,
    get_config,
    reload_config
)


class TestStorageConfig:
    """Test record store configuration"""

    def test_default_values(self, monkeypatch):
        """Test default configuration values"""
        monkeypatch.delenv("ADCREATIVEX_DB_PATH", raising=False)
        config = StorageConfig()

        assert config.backend == "sqlite"
        assert config.db_path == "data/adcreativex.db"
        assert config.directory_key == "adcreativex_users"
        assert config.session_key == "adcreativex_user"

    def test_db_path_from_env(self, monkeypatch):
        """Test the database path can come from the environment"""
        monkeypatch.setenv("ADCREATIVEX_DB_PATH", "/tmp/elsewhere.db")
        assert StorageConfig().db_path == "/tmp/elsewhere.db"

    def test_to_dict(self):
        """Test conversion to dictionary"""
        config_dict = StorageConfig(backend="memory", db_path="x.db").to_dict()

        assert config_dict == {
            "backend": "memory",
            "db_path": "x.db",
            "directory_key": "adcreativex_users",
            "session_key": "adcreativex_user",
            "credentials_key": "adcreativex_credentials"
        }


class TestAuthConfig:
    """Test session and identity configuration"""

    def test_default_latencies(self):
        """Test simulated latencies match the hosted backend's pacing"""
        config = AuthConfig()

        assert config.login_latency_seconds == 1.0
        assert config.register_latency_seconds == 1.0
        assert config.update_latency_seconds == 0.5
        assert config.verify_passwords is True


class TestAppConfig:
    """Test main application configuration"""

    def test_default_initialization(self):
        """Test default configuration initialization"""
        config = AppConfig()

        assert isinstance(config.storage, StorageConfig)
        assert isinstance(config.auth, AuthConfig)
        assert isinstance(config.ad_account, AdAccountConfig)
        assert isinstance(config.ui, UIConfig)

    def test_environment_detection(self, monkeypatch):
        """Test environment detection"""
        monkeypatch.setenv("APP_ENV", "production")
        assert AppConfig().environment == "production"

        monkeypatch.setenv("APP_ENV", "development")
        assert AppConfig().environment == "development"

    def test_debug_flag(self, monkeypatch):
        """Test debug flag configuration"""
        monkeypatch.setenv("DEBUG", "true")
        assert AppConfig().debug is True

        monkeypatch.setenv("DEBUG", "false")
        assert AppConfig().debug is False

    def test_production_overrides(self, monkeypatch):
        """Test production environment overrides"""
        monkeypatch.setenv("APP_ENV", "production")
        config = AppConfig.load()

        assert config.environment == "production"
        assert config.debug is False
        assert config.logging.level == "INFO"
        assert config.ad_account.failure_threshold == 2

    def test_development_overrides(self, monkeypatch):
        """Test development environment overrides"""
        monkeypatch.setenv("APP_ENV", "development")
        config = AppConfig.load()

        assert config.debug is True
        assert config.logging.level == "DEBUG"

    def test_test_overrides(self, monkeypatch):
        """Test the test environment uses memory storage and no latency"""
        monkeypatch.setenv("APP_ENV", "test")
        config = AppConfig.load()

        assert config.storage.backend == "memory"
        assert config.auth.login_latency_seconds == 0.0
        assert config.auth.bcrypt_rounds == 4
        assert config.logging.enable_file_logging is False

    def test_validate_ok(self, tmp_path):
        """Test a sane configuration has no errors"""
        config = AppConfig()
        config.storage.db_path = str(tmp_path / "data" / "x.db")
        config.logging.log_file = str(tmp_path / "logs" / "app.log")

        assert config.validate() == []

    def test_validate_errors(self):
        """Test validation catches bad values"""
        config = AppConfig()
        config.storage.backend = "redis"
        config.storage.session_key = config.storage.directory_key
        config.auth.login_latency_seconds = -1
        config.auth.bcrypt_rounds = 2
        config.ad_account.failure_threshold = 0
        config.logging.enable_file_logging = False

        errors = config.validate()

        assert "Unknown storage backend 'redis'" in errors
        assert "Storage keys must be distinct" in errors
        assert "auth.login_latency_seconds must not be negative" in errors
        assert "auth.bcrypt_rounds must be between 4 and 31" in errors
        assert "ad_account.failure_threshold must be at least 1" in errors

    def test_validate_creates_directories(self, tmp_path):
        """Test validation creates necessary directories"""
        config = AppConfig()
        config.storage.db_path = os.path.join(str(tmp_path), "subdir", "test.db")
        config.logging.log_file = os.path.join(str(tmp_path), "logs", "test.log")
        config.logging.enable_file_logging = True

        config.validate()

        assert Path(tmp_path, "subdir").exists()
        assert Path(tmp_path, "logs").exists()


class TestConfigSingleton:
    """Test configuration singleton behavior"""

    def setup_method(self):
        """Keep the global configuration free of file side effects"""
        self._original_env = os.environ.get("APP_ENV")
        os.environ["APP_ENV"] = "test"
        reload_config()

    def teardown_method(self):
        """Restore the environment"""
        if self._original_env is not None:
            os.environ["APP_ENV"] = self._original_env
        else:
            os.environ.pop("APP_ENV", None)
        app_config._config = None

    def test_get_config_singleton(self):
        """Test that get_config returns the same instance"""
        assert get_config() is get_config()

    def test_get_config_uses_environment(self):
        """Test the global configuration carries the APP_ENV overrides"""
        config = get_config()

        assert config.environment == "test"
        assert config.storage.backend == "memory"
        assert config.auth.register_latency_seconds == 0.0

    def test_reload_config(self):
        """Test configuration reloading"""
        config1 = get_config()
        config2 = reload_config()

        assert config1 is not config2
        assert isinstance(config2, AppConfig)


if __name__ == "__main__":
    pytest.main([__file__])
