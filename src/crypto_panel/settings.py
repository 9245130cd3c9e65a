from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # API Ninjas
    api_base_url: str = Field(
        default="https://api.api-ninjas.com",
        validation_alias="CRYPTO_API_BASE_URL",
    )
    api_key: str = Field(default="", validation_alias="CRYPTO_API_KEY")
    http_timeout_seconds: float = Field(default=10.0, gt=0, validation_alias="HTTP_TIMEOUT_SECONDS")

    # Refresh
    default_refresh_interval_seconds: int = Field(
        default=3600,
        ge=1,
        validation_alias="DEFAULT_REFRESH_INTERVAL_SECONDS",
    )
    min_staleness_seconds: float = Field(default=300.0, ge=0, validation_alias="MIN_STALENESS_SECONDS")

    # Settings document
    database_url: str = Field(
        default="sqlite+aiosqlite:///crypto_panel.db",
        validation_alias="DATABASE_URL",
    )

    # Web host
    host: str = Field(default="127.0.0.1", validation_alias="HOST")
    port: int = Field(default=8000, validation_alias="PORT")

    # Logging
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
