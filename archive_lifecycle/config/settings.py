# archive_lifecycle/config/settings.py

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Application ---
    app_name: str = "archive-lifecycle"
    environment: Literal["dev", "test", "prod"] = "dev"
    debug: bool = False
    version: str = "0.1.0"

    # --- Document store ---
    store_backend: Literal["memory", "redis", "sql"] = "memory"
    redis_url: str = "redis://localhost:6379/0"
    database_url: str = "postgresql+asyncpg://localhost/archive_lifecycle"
    collection_prefix: str = ""

    # --- Name resolution ---
    actor_collection: str = "users"
    unknown_actor_name: str = "Unknown"

    # --- Filtering ---
    local_timezone: str = "UTC"

    # --- Observability ---
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


@lru_cache
def get_settings() -> AppSettings:
    return AppSettings()
