"""Application Configuration: environment-driven settings via pydantic-settings.

Invariants:
    - get_settings() is cached (lru_cache): single instance per process
    - Every setting has a default; the dialect works with no environment at all

Design Decisions:
    - Env prefix REST_DIALECT_ keeps the library from colliding with host app variables
    - strict_count off by default: a failing count() keeps the listing and drops the header
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Dialect settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="REST_DIALECT_", case_sensitive=False,
        extra="ignore",
    )

    # Dialect
    id_param: str = ":id"
    total_count_header: str = "X-Total-Count"
    strict_count: bool = False

    @field_validator("total_count_header")
    @classmethod
    def header_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("total_count_header cannot be empty")
        return v

    # API
    cors_origins: list[str] = ["http://localhost:3000"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
