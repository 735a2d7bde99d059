"""
Application Configuration

All settings loaded from environment variables.
"""

from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # Application
    app_name: str = "Candle Chart Backend"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "info"

    # Series source (CSV: timestamp, open, high, low, close, volume)
    source_csv_path: str = "data/stocks.csv"

    # SQLite (durable candle store, built once from the source)
    sqlite_path: str = "data/candles.db"
    # Seconds to wait for another process holding the store's write lock
    sqlite_busy_timeout: float = 30.0

    # Candles endpoint
    default_candle_limit: int = 500
    max_candle_limit: int = 100_000

    # Redis (derived-result cache, optional)
    redis_url: str = "redis://localhost:6379"
    enable_cache: bool = True
    cache_key_prefix: str = "chart"

    # CORS (Frontend URL)
    allowed_origins: list[str] = ["http://localhost:3000"]

    # Browser bundle, mounted at "/" when the directory exists
    static_dir: Optional[str] = "static"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
