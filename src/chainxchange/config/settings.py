"""Application settings and configuration."""

from decimal import Decimal
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


def get_default_data_dir() -> Path:
    """Return the default data directory."""
    return Path.home() / ".chainxchange"


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    app_name: str = "ChainXchange"
    app_version: str = "0.1.0"
    log_level: str = "INFO"

    # Data directory (database lives here unless database_url is set)
    data_dir: Optional[Path] = None
    database_url: Optional[str] = None

    # Upstream price provider
    coingecko_base_url: str = "https://api.coingecko.com/api/v3"
    user_agent: str = "ChainXchange/1.0"
    use_stub_provider: bool = False

    # Request queue behavior
    request_timeout_seconds: float = 15.0
    rate_limit_max_attempts: int = 3
    rate_limit_default_retry_after_seconds: float = 10.0

    # Cache TTLs (seconds)
    price_cache_ttl_seconds: int = 120
    markets_cache_ttl_seconds: int = 300
    coin_info_cache_ttl_seconds: int = 3600
    chart_cache_ttl_seconds: int = 300
    valuation_cache_ttl_seconds: int = 120
    coalesce_cache_fetches: bool = False

    # Simulation
    starting_cash: Decimal = Decimal("10000")

    def get_data_dir(self) -> Path:
        """Get the data directory, creating it if needed."""
        data_dir = self.data_dir or get_default_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def get_database_url(self) -> str:
        """Get database URL, deriving from data_dir if not set."""
        if self.database_url:
            return self.database_url
        db_path = self.get_data_dir() / "chainxchange.db"
        return f"sqlite:///{db_path}"


# Global settings instance (can be replaced at runtime)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the current settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Replace the global settings instance."""
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Reset settings to force reload."""
    global _settings
    _settings = None
