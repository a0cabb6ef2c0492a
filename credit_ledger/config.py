"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - Pool, connector and runner bounds are validated once at startup

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

from credit_ledger.core.domain_types import IsolationLevel


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    app_name: str = "credit-ledger"

    # Database
    database_url: str = (
        "postgresql+asyncpg://ledger:ledger@db:5432/ledger"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting providers hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    db_pool_max_connections: int = Field(10, ge=1, le=100)
    db_idle_timeout_ms: int = Field(10_000, ge=0, le=30_000)
    db_connect_timeout_ms: int = Field(10_000, ge=0, le=30_000)

    # Connector: total attempts, so 4 means three retries
    db_connect_retry_max_attempts: int = Field(4, ge=1, le=11)
    db_connect_retry_base_delay_ms: int = Field(1000, ge=0, le=30_000)

    # Transactions
    db_default_isolation_level: IsolationLevel | None = None
    transaction_retry_base_delay_ms: int = Field(10, ge=0, le=5_000)
    transfer_max_retries: int = Field(3, ge=0, le=10)

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
