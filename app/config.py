# app/config.py
"""
Runtime settings for the invoice dashboard service.

Values come from environment variables (or a local `.env` file) through
Pydantic Settings. `get_settings()` caches a single instance per process.
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    database_url: str = Field(
        "sqlite+aiosqlite:///db.sqlite",
        validation_alias=AliasChoices("DATABASE_URL", "POSTGRES_URL", "database_url"),
    )
    db_pool_size: int = Field(5, alias="DB_POOL_SIZE")
    db_connect_timeout: float = Field(10.0, alias="DB_CONNECT_TIMEOUT")
    db_pool_recycle: int = Field(60 * 30, alias="DB_POOL_RECYCLE")
    db_echo: bool = Field(False, alias="DB_ECHO")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")
    session_secret: str = Field("change-me", alias="SESSION_SECRET")

    # Invoices
    invoice_timezone: str = Field("UTC", alias="INVOICE_TIMEZONE")
    bcrypt_rounds: int = Field(10, alias="BCRYPT_ROUNDS")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("database_url")
    @classmethod
    def _async_driver(cls, value: str) -> str:
        # Hosted Postgres providers hand out plain postgres:// URLs
        for prefix in ("postgres://", "postgresql://"):
            if value.startswith(prefix):
                return "postgresql+asyncpg://" + value[len(prefix):]
        return value

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
