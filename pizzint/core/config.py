"""Pydantic-settings configuration for the PIZZINT tracker.

Loads the upstream API location, storage backend selection and database
connection parameters from a .env file with defaults for local development.
Computed fields produce fully-formed connection URLs.
"""

from pathlib import Path

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .enums import StorageBackend


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Project
    project_name: str = "PIZZINT Tracker"
    debug: bool = False
    log_json: bool = False

    # Upstream API
    pizzint_api_url: str = "https://www.pizzint.watch/api/dashboard-data"
    fetch_timeout_seconds: float = 30.0
    fetch_max_attempts: int = 1  # next scheduled tick is the retry

    # Storage
    storage_backend: StorageBackend = StorageBackend.DATABASE
    data_file: Path = Path("data/readings.json")
    max_file_readings: int = Field(default=10_000, gt=0)  # ~70 days at 10 min intervals
    max_file_spikes: int = Field(default=100, gt=0)

    # PostgreSQL
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_db: str = "pizzint"
    postgres_user: str = "pizzint"
    postgres_password: str = ""
    db_pool_size: int = 2
    db_pool_pre_ping: bool = True
    db_sslmode: str = "prefer"  # Set to "require" for hosted databases

    # Scheduling
    collect_interval_minutes: int = 10
    cron_secret: str = ""

    @computed_field
    @property
    def async_database_url(self) -> str:
        """Async connection string for asyncpg."""
        base = (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )
        if self.db_sslmode and self.db_sslmode != "disable":
            return f"{base}?ssl={self.db_sslmode}"
        return base

    @computed_field
    @property
    def sync_database_url(self) -> str:
        """Sync connection string for psycopg2 (used by Alembic)."""
        base = (
            f"postgresql+psycopg2://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )
        if self.db_sslmode and self.db_sslmode != "disable":
            return f"{base}?sslmode={self.db_sslmode}"
        return base


# Singleton instance
settings = Settings()
