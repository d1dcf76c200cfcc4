# pos_backend/config/settings.py
from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App Info
    app_name: str = "POS Backend API"
    version: str = "1.0.0"
    debug: bool = False

    # Database
    database_url: str = "sqlite:///./pos.db"

    # Inventory policy: when False a sale may never drive stock below zero
    allow_negative_stock: bool = False

    # Analytics
    recent_sales_limit: int = 10
    timezone: Optional[str] = None  # IANA name, system local zone when unset

    # Logging
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 10000
    cors_origins: List[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Settings loaded once per process"""
    return Settings()
