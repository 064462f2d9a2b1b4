"""Application settings parsed from environment variables and defaults."""

import json
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    app_name: str = "Nature Education API"
    environment: str = "development"
    api_prefix: str = "/api"

    database_url: str
    test_database_url: Optional[str] = None

    access_token_expires_minutes: int = 60 * 24
    jwt_secret_key: str
    jwt_algorithm: str = "HS256"

    log_level: str = "INFO"
    cors_origins: list[str] | str = Field(default_factory=lambda: DEFAULT_CORS_ORIGINS.copy())

    # An empty key leaves the Billetweb integration unconfigured.
    billetweb_api_key: str = ""
    billetweb_api_url: str = "https://www.billetweb.fr/api"
    billetweb_request_timeout_seconds: float = 10.0
    billetweb_cache_ttl_seconds: int = 5 * 60
    billetweb_sync_enabled: bool = True
    billetweb_sync_interval_seconds: int = 15 * 60
    billetweb_sync_startup_delay_seconds: float = 5.0
    billetweb_sync_batch_size: int = 5
    billetweb_sync_soft_target_seconds: float = 30.0

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_cors_origins(cls, value: str | list[str] | None) -> list[str]:
        """Normalize CORS origins from JSON, CSV, or list inputs."""
        if isinstance(value, list):
            cleaned = [origin.strip() for origin in value if isinstance(origin, str) and origin.strip()]
            return cleaned or DEFAULT_CORS_ORIGINS.copy()
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                return DEFAULT_CORS_ORIGINS.copy()
            try:
                parsed = json.loads(stripped)
            except json.JSONDecodeError:
                parsed = None
            if isinstance(parsed, list):
                cleaned = [str(origin).strip() for origin in parsed if str(origin).strip()]
                if cleaned:
                    return cleaned
            origins = [origin.strip() for origin in stripped.split(",") if origin.strip()]
            if origins:
                return origins
        return DEFAULT_CORS_ORIGINS.copy()

    @field_validator("billetweb_api_url", mode="after")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        """Drop trailing slashes so endpoint paths can be appended verbatim."""
        return value.rstrip("/")

    @field_validator("billetweb_sync_batch_size", mode="after")
    @classmethod
    def _positive_batch_size(cls, value: int) -> int:
        if value < 1:
            raise ValueError("BILLETWEB_SYNC_BATCH_SIZE must be at least 1")
        return value

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """Return cached settings to avoid re-parsing environment variables."""
    return Settings()


settings = get_settings()
