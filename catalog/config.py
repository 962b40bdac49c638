"""Application Configuration: environment-driven settings via pydantic-settings.

Invariants:
    - Settings are frozen once constructed (no mutation after startup begins)
    - get_settings() is cached (lru_cache): single instance per process
    - DATABASE_URL wins over the pg_* parts when both are set

Design Decisions:
    - Defaults target a local PostgreSQL on the standard port; PG_PORT is the
      knob a container supervisor sets before startup
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore", frozen=True,
    )

    # Store
    pg_host: str = "localhost"
    pg_port: int = 5432
    pg_user: str = "postgres"
    pg_password: str = "vertx-in-action"
    pg_database: str = "postgres"
    database_url: str | None = None

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str | None) -> str | None:
        """asyncpg needs postgresql+asyncpg://, hosting platforms hand out postgresql://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10
    create_schema: bool = True

    # Listener
    http_host: str = "0.0.0.0"
    http_port: int = 8080

    # Worker pool for blocking-capable startup work
    blocking_pool_size: int = 20

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def resolved_database_url(self) -> str:
        if self.database_url:
            return self.database_url
        return (
            f"postgresql+asyncpg://{self.pg_user}:{self.pg_password}"
            f"@{self.pg_host}:{self.pg_port}/{self.pg_database}"
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
