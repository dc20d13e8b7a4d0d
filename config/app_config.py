"""
Unified Configuration System for AdCreativeX

This module provides a centralized configuration system that consolidates all application settings,
supports environment-based overrides, and provides type-safe configuration access.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, Optional, List
import os
from pathlib import Path


@dataclass
class StorageConfig:
    """Durable record store settings"""
    backend: str = "sqlite"  # "sqlite" or "memory"
    db_path: str = field(default_factory=lambda: os.getenv("ADCREATIVEX_DB_PATH", "data/adcreativex.db"))
    directory_key: str = "adcreativex_users"
    session_key: str = "adcreativex_user"
    credentials_key: str = "adcreativex_credentials"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for diagnostics"""
        return {
            "backend": self.backend,
            "db_path": self.db_path,
            "directory_key": self.directory_key,
            "session_key": self.session_key,
            "credentials_key": self.credentials_key
        }


@dataclass
class AuthConfig:
    """Session and identity configuration"""
    # Simulated backend latency, in seconds
    login_latency_seconds: float = 1.0
    register_latency_seconds: float = 1.0
    update_latency_seconds: float = 0.5
    verify_passwords: bool = True
    bcrypt_rounds: int = 12


@dataclass
class AdAccountConfig:
    """Ad-account link configuration"""
    provider_name: str = "Meta Ads"
    link_latency_seconds: float = 1.5
    failure_threshold: int = 3
    recovery_timeout: int = 60


@dataclass
class UIConfig:
    """User interface configuration"""
    app_title: str = "AdCreativeX"
    tagline: str = "Creative ads that perform, from creators brands trust."
    show_notifications: bool = True


@dataclass
class LoggingConfig:
    """Logging and monitoring configuration"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    enable_file_logging: bool = True
    log_file: str = "logs/app.log"


@dataclass
class AppConfig:
    """Main application configuration"""
    storage: StorageConfig = field(default_factory=StorageConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    ad_account: AdAccountConfig = field(default_factory=AdAccountConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Environment settings
    environment: str = field(default_factory=lambda: os.getenv("APP_ENV", "development"))
    debug: bool = field(default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true")

    @classmethod
    def load(cls) -> 'AppConfig':
        """Load the configuration for the current APP_ENV"""
        from config.environments import get_environment_config
        return get_environment_config()

    def validate(self) -> List[str]:
        """Validate configuration and return list of errors"""
        errors = []

        if self.storage.backend not in ("sqlite", "memory"):
            errors.append(f"Unknown storage backend '{self.storage.backend}'")

        keys = [self.storage.directory_key, self.storage.session_key, self.storage.credentials_key]
        if len(set(keys)) != len(keys):
            errors.append("Storage keys must be distinct")

        for name in ("login_latency_seconds", "register_latency_seconds", "update_latency_seconds"):
            if getattr(self.auth, name) < 0:
                errors.append(f"auth.{name} must not be negative")

        if not 4 <= self.auth.bcrypt_rounds <= 31:
            errors.append("auth.bcrypt_rounds must be between 4 and 31")

        if self.ad_account.failure_threshold < 1:
            errors.append("ad_account.failure_threshold must be at least 1")

        # Check file paths exist
        if self.storage.backend == "sqlite":
            db_dir = Path(self.storage.db_path).parent
            if not db_dir.exists():
                db_dir.mkdir(parents=True, exist_ok=True)

        if self.logging.enable_file_logging:
            log_dir = Path(self.logging.log_file).parent
            if not log_dir.exists():
                log_dir.mkdir(parents=True, exist_ok=True)

        return errors


# Global configuration instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get the global configuration instance, built for the current APP_ENV"""
    global _config
    if _config is None:
        _config = AppConfig.load()

        # Validate configuration
        errors = _config.validate()
        if errors:
            import warnings
            for error in errors:
                warnings.warn(f"Configuration error: {error}")

    return _config


def reload_config() -> AppConfig:
    """Reload configuration (useful for testing)"""
    global _config
    _config = None
    return get_config()
