"""
Test environment configuration overrides
"""

from dataclasses import dataclass
from config.app_config import AppConfig


@dataclass
class TestingConfig(AppConfig):
    """Configuration for automated tests: in-memory store, no simulated latency"""

    def __post_init__(self):

        self.environment = "test"
        self.debug = False

        # Nothing touches the filesystem
        self.storage.backend = "memory"
        self.logging.enable_file_logging = False

        # Operations complete immediately and hashing stays cheap
        self.auth.login_latency_seconds = 0.0
        self.auth.register_latency_seconds = 0.0
        self.auth.update_latency_seconds = 0.0
        self.auth.bcrypt_rounds = 4
        self.ad_account.link_latency_seconds = 0.0


def get_testing_config() -> TestingConfig:
    """Get test-specific configuration"""
    return TestingConfig()
