"""Application Configuration: environment-driven settings via pydantic-settings.

Invariants:
    - Every setting can be overridden by a SIDELOAD_* environment variable
    - get_settings() is cached (lru_cache): single instance per process
    - cache_ttl_ms is strictly positive

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all settings: caching on, 100ms per-render TTL
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="SIDELOAD_", case_sensitive=False,
    )

    # Render cache
    cache_enabled: bool = True
    cache_ttl_ms: int = 100

    @field_validator("cache_ttl_ms")
    @classmethod
    def ttl_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("cache_ttl_ms must be > 0")
        return v

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
