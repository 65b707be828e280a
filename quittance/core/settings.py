from __future__ import annotations

import logging
import secrets
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class AppSettings(BaseSettings):
    """
    Application-level settings for the FastAPI service.

    This is separate from quittance.db.config.Settings, which focuses on the database layer.
    """

    # FastAPI metadata
    APP_NAME: str = Field(default="Quittance API")
    APP_DESCRIPTION: str = Field(
        default=(
            "Backend API for rental property management: properties, tenants, "
            "leases, rent receipts and the organizations (SCI) that own them."
        )
    )
    APP_VERSION: str = Field(default="0.1.0")
    LOG_LEVEL: str = Field(default="INFO")

    # CORS
    CORS_ORIGINS: List[str] = Field(
        default_factory=lambda: ["*"],
        description="Comma-separated list or JSON array of allowed origins. Default: *",
    )
    CORS_ALLOW_CREDENTIALS: bool = Field(default=True)
    CORS_ALLOW_METHODS: List[str] = Field(default_factory=lambda: ["*"])
    CORS_ALLOW_HEADERS: List[str] = Field(default_factory=lambda: ["*"])

    # Startup behavior
    RUN_MIGRATIONS_ON_STARTUP: bool = Field(
        default=True,
        description="If true, run Alembic migrations (upgrade head) at app startup.",
    )
    DB_CONNECT_MAX_ATTEMPTS: int = Field(
        default=5, ge=1, description="Connection attempts before startup gives up."
    )
    DB_CONNECT_INITIAL_DELAY: float = Field(
        default=0.5, gt=0, description="Seconds to wait after the first failed attempt."
    )
    DB_CONNECT_MAX_DELAY: float = Field(
        default=8.0, gt=0, description="Upper bound for the doubling retry delay, in seconds."
    )

    # Tokens
    DEBUG: bool = Field(default=False)
    JWT_SECRET_KEY: str = Field(
        default="",
        description="HMAC signing key for access tokens. Required unless DEBUG is set.",
    )
    JWT_ALGORITHM: str = Field(default="HS256")
    ACCESS_TOKEN_EXPIRE_HOURS: int = Field(default=24, ge=1)

    # Password hashing (Argon2id)
    ARGON2_MEMORY_COST: int = Field(default=19456, description="Memory cost in KiB")
    ARGON2_TIME_COST: int = Field(default=2, ge=1)
    ARGON2_PARALLELISM: int = Field(default=1, ge=1)

    # Environment label
    ENVIRONMENT: Optional[str] = Field(
        default=None, description="Environment label (dev/test/prod)"
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _parse_cors_origins(cls, v):
        """
        Accept both JSON array format and comma-separated formats for CORS origins.
        """
        if v is None:
            return ["*"]
        if isinstance(v, str):
            parts = [p.strip() for p in v.split(",") if p.strip()]
            return parts or ["*"]
        if isinstance(v, list):
            return v or ["*"]
        return ["*"]

    @model_validator(mode="after")
    def _validate_secret_key(self) -> "AppSettings":
        """
        Require a signing key of at least 32 characters.

        With DEBUG enabled a random key is generated instead; tokens then do not
        survive a restart.
        """
        if not self.JWT_SECRET_KEY:
            if not self.DEBUG:
                raise ValueError(
                    "JWT_SECRET_KEY is required. Set it in the environment or .env file, "
                    "or set DEBUG=true to use a generated development key."
                )
            self.JWT_SECRET_KEY = secrets.token_hex(32)
            logger.warning("Using auto-generated JWT_SECRET_KEY; tokens will not persist across restarts.")
        if len(self.JWT_SECRET_KEY) < 32:
            raise ValueError("JWT_SECRET_KEY must be at least 32 characters.")
        return self


# PUBLIC_INTERFACE
@lru_cache
def get_app_settings() -> AppSettings:
    """
    Return the AppSettings instance populated from environment variables.

    Cached: the signing key and hashing parameters are read once per process.
    Tests that change the environment should call get_app_settings.cache_clear().
    """
    return AppSettings()
