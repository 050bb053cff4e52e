"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class WalletConfig(BaseSettings):
    """Wallet ledger configuration"""

    model_config = SettingsConfigDict(
        env_prefix="WALLET_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Aggregation
    default_workers: int = 4  # Used when a worker count is not given

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text

    # Dump files
    accounts_dump_name: str = "accounts.dump"
    payments_dump_name: str = "payments.dump"
    favorites_dump_name: str = "favorites.dump"
    history_file_prefix: str = "payments"  # payments1.dump, payments2.dump, ...
    dump_extension: str = ".dump"


# Global configuration instance
config = WalletConfig()


def get_config() -> WalletConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> WalletConfig:
    """Reload configuration from environment"""
    global config
    config = WalletConfig()
    return config
