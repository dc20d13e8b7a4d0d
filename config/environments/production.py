"""
Production environment configuration overrides
"""

from dataclasses import dataclass
from config.app_config import AppConfig


@dataclass
class ProductionConfig(AppConfig):
    """Production environment configuration"""
    
    def __post_init__(self):
        
        # Production-specific overrides
        self.environment = "production"
        self.debug = False
        
        # Production logging - less verbose, focus on errors
        self.logging.level = "INFO"
        self.logging.enable_file_logging = True
        self.logging.log_file = "logs/prod-app.log"
        
        # Production UI - clean and professional
        self.ui.app_title = "AdCreativeX"
        
        # Production security settings
        self.storage.backend = "sqlite"
        self.auth.verify_passwords = True
        self.auth.bcrypt_rounds = 12
        
        # Trip the ad-account breaker sooner and back off longer
        self.ad_account.failure_threshold = 2
        self.ad_account.recovery_timeout = 120


def get_production_config() -> ProductionConfig:
    """Get production-specific configuration"""
    return ProductionConfig()
