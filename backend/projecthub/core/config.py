"""Application configuration via pydantic-settings.

All config is sourced from environment variables. Never use os.getenv() directly.
"""

import json
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """PostgreSQL configuration — project records and the enum catalog."""

    model_config = SettingsConfigDict(env_prefix="")

    database_url: str
    database_pool_size: int = 5
    database_max_overflow: int = 10
    database_echo: bool = False

    @field_validator("database_url")
    @classmethod
    def validate_database_url_not_empty(cls, v: str, info) -> str:
        if not v or not v.strip():
            raise ValueError(
                f"{info.field_name.upper()} must be set via environment variable. "
                "No default is provided for security reasons."
            )
        return v


class RedisSettings(BaseSettings):
    """Redis configuration — enum catalog cache."""

    model_config = SettingsConfigDict(env_prefix="")

    redis_url: str = "redis://redis:6379/0"


class CatalogSettings(BaseSettings):
    """Enum catalog caching."""

    model_config = SettingsConfigDict(env_prefix="")

    enum_cache_ttl: int = 300  # seconds
    enum_cache_enabled: bool = True


class ProxySettings(BaseSettings):
    """Reverse proxy served by the frontend host."""

    model_config = SettingsConfigDict(env_prefix="")

    # Base URL including any path prefix, no trailing slash
    proxy_backend_url: str = "http://localhost:8000"
    proxy_mount_path: str = "/api"
    # Answer CORS preflight locally instead of forwarding OPTIONS upstream
    proxy_answer_preflight: bool = False

    @field_validator("proxy_backend_url")
    @classmethod
    def normalize_backend_url(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            v = f"https://{v}"
        return v.rstrip("/")


class FrontendSettings(BaseSettings):
    """Server-rendered project list UI."""

    model_config = SettingsConfigDict(env_prefix="")

    frontend_api_base_url: str = "http://localhost:8000"


class Settings(BaseSettings):
    """ProjectHub application settings.

    Environment variables are the single source of truth.
    Defaults are development-safe values only.
    """

    model_config = SettingsConfigDict(env_file=".env")

    app_env: str = "development"

    # Nested settings groups
    redis: RedisSettings = RedisSettings()
    catalog: CatalogSettings = CatalogSettings()
    proxy: ProxySettings = ProxySettings()
    frontend: FrontendSettings = FrontendSettings()

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Observability
    log_level: str = "INFO"

    # Generic table listing
    default_page_limit: int = 100
    max_page_limit: int = 1000

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        if isinstance(v, str):
            return json.loads(v)
        return v

    @property
    def database(self) -> DatabaseSettings:
        """Read on first use; only processes that open a database need DATABASE_URL."""
        return get_database_settings()


@lru_cache
def get_database_settings() -> DatabaseSettings:
    return DatabaseSettings()


settings = Settings()
