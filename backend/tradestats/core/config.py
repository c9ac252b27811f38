from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Trade Stats"
    debug: bool = False
    log_level: str = "INFO"
    database_url: str = "postgresql+asyncpg://postgres:postgres@db:5432/tradestats"
    # Threads used to aggregate strategies side by side; 1 keeps it sequential.
    comparison_workers: int = Field(default=1, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="TRADESTATS_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
