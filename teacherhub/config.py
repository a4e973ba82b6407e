"""Settings — TeacherHub configuration read from the environment (and .env).

Invariants:
    - get_settings() is cached, so one Settings instance serves the process
    - cascade_mode starts as legacy (partial Group cascade) unless set otherwise
    - Every field has a default that runs against a local SQLite file
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

from teacherhub.core.domain_types import CascadeMode


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Durable storage
    database_url: str = "sqlite+aiosqlite:///./teacherhub.db"

    @field_validator("database_url", mode="before")
    @classmethod
    def use_async_sqlite_driver(cls, v: str) -> str:
        """Plain sqlite:// URLs need the aiosqlite driver for the async engine."""
        if isinstance(v, str) and v.startswith("sqlite://"):
            return v.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return v

    storage_key: str = "teacherHubData"

    # Store behaviour
    cascade_mode: CascadeMode = CascadeMode.LEGACY

    # Export
    export_filename_prefix: str = "teacherhub-backup"

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
