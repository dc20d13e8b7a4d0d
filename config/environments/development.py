"""
Development environment configuration overrides
"""

import os
from dataclasses import dataclass
from config.app_config import AppConfig


@dataclass
class DevelopmentConfig(AppConfig):
    """Development environment configuration"""
    
    def __post_init__(self):
        
        # Development-specific overrides
        self.environment = "development"
        self.debug = True
        
        # More verbose logging in development
        self.logging.level = "DEBUG"
        self.logging.enable_file_logging = True
        self.logging.log_file = "logs/dev-app.log"
        
        # Development UI changes
        self.ui.app_title = "🧪 AdCreativeX (DEV)"
        
        # Separate database so local experiments never touch real accounts
        self.storage.db_path = os.getenv("ADCREATIVEX_DB_PATH", "data/adcreativex-dev.db")
        
        # Faster feedback while iterating on forms
        self.auth.login_latency_seconds = 0.3
        self.auth.register_latency_seconds = 0.3
        self.auth.update_latency_seconds = 0.2
        self.auth.bcrypt_rounds = 6
        self.ad_account.link_latency_seconds = 0.5


def get_development_config() -> DevelopmentConfig:
    """Get development-specific configuration"""
    return DevelopmentConfig()
