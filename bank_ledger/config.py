"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class BankLedgerConfig(BaseSettings):
    """Bank ledger configuration"""

    # Persistence
    snapshot_path: str = "bank_data.json"
    statement_dir: str = "."

    # Account numbering
    account_number_prefix: str = "ACC"
    account_number_start: int = 100100

    # Credentials
    credential_pattern: str = r"^[0-9]{4,6}$"  # 4-6 ASCII digit PIN

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text
    log_file: Optional[str] = None  # If None, logs to stderr

    class Config:
        env_prefix = "BANK_LEDGER_"
        env_file = ".env"
        case_sensitive = False


# Global configuration instance
config = BankLedgerConfig()


def get_config() -> BankLedgerConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> BankLedgerConfig:
    """Reload configuration from environment"""
    global config
    config = BankLedgerConfig()
    return config
