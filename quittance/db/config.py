from __future__ import annotations

import re
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL


class Settings(BaseSettings):
    """
    Database connection settings, read from the environment or a local .env.

    DATABASE_URL wins when present; otherwise the POSTGRES_* parts are combined.
    """

    DATABASE_URL: Optional[str] = Field(
        default=None, description="Full SQLAlchemy URL (postgresql:// or sqlite://)."
    )

    # Fallback PostgreSQL parts, used only when DATABASE_URL is unset
    POSTGRES_HOST: str = Field(default="localhost", description="PostgreSQL host")
    POSTGRES_PORT: int = Field(default=5432, description="PostgreSQL port")
    POSTGRES_DB: Optional[str] = Field(default=None, description="PostgreSQL database")
    POSTGRES_USER: Optional[str] = Field(default=None, description="PostgreSQL role")
    POSTGRES_PASSWORD: Optional[str] = Field(default=None, description="PostgreSQL password")

    # Engine and pool
    SQL_ECHO: bool = Field(default=False, description="Log every SQL statement")
    DB_POOL_SIZE: int = Field(default=10, ge=1, description="Persistent connections kept in the pool")
    DB_MAX_OVERFLOW: int = Field(default=5, ge=0, description="Extra connections allowed under load")
    DB_POOL_TIMEOUT: float = Field(
        default=10.0, gt=0, description="Seconds to wait for a pooled connection before failing"
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @property
    def database_url(self) -> str:
        """
        Driver-neutral database URL: DATABASE_URL when set, otherwise a
        PostgreSQL URL assembled from the POSTGRES_* variables with the
        credentials escaped.
        """
        if self.DATABASE_URL:
            return self.DATABASE_URL

        missing = [
            name
            for name in ("POSTGRES_USER", "POSTGRES_PASSWORD", "POSTGRES_DB")
            if not getattr(self, name)
        ]
        if missing:
            raise ValueError(
                "Database configuration missing: set DATABASE_URL or " + ", ".join(missing)
            )
        url = URL.create(
            "postgresql",
            username=self.POSTGRES_USER,
            password=self.POSTGRES_PASSWORD,
            host=self.POSTGRES_HOST,
            port=self.POSTGRES_PORT,
            database=self.POSTGRES_DB,
        )
        return url.render_as_string(hide_password=False)

    @property
    def async_database_url(self) -> str:
        """URL with an asyncio driver: asyncpg for PostgreSQL, aiosqlite for SQLite."""
        return to_async_url(self.database_url)

    @property
    def sync_database_url(self) -> str:
        """URL with any async driver tag stripped, for Alembic offline mode."""
        url = self.database_url
        url = re.sub(r"^postgresql\+\w+://", "postgresql://", url)
        return re.sub(r"^sqlite\+\w+://", "sqlite://", url)


# PUBLIC_INTERFACE
def to_async_url(url: str) -> str:
    """Rewrite a SQLAlchemy URL to use the asyncio driver for its dialect."""
    if url.startswith(("postgresql+asyncpg://", "sqlite+aiosqlite://")):
        return url
    if url.startswith("sqlite"):
        return re.sub(r"^sqlite(\+\w+)?://", "sqlite+aiosqlite://", url)
    return re.sub(r"^postgres(ql)?(\+\w+)?://", "postgresql+asyncpg://", url)


# PUBLIC_INTERFACE
@lru_cache
def get_settings() -> Settings:
    """Return the cached database settings."""
    return Settings()
