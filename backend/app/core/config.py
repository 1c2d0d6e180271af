# backend/app/core/config.py
import json
import logging
import os
from pathlib import Path
from typing import Annotated, List, Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .constants import DEFAULT_DEV_ORIGINS, DEFAULT_UPSERT_BATCH_SIZE
from .enums import AccountRole


logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"  # Goes up to backend/.env
    logger.debug("[CONFIG] Looking for .env at: %s (exists=%s)", env_path, env_path.exists())
    load_dotenv(env_path)


class Settings(BaseSettings):
    environment: Literal["development", "test", "staging", "production"] = Field(
        default="development",
        description="Deployment environment name",
    )

    # Database
    database_url: str = Field(
        default="postgresql+psycopg2://localhost:5432/scheduler",
        alias="DATABASE_URL",
        description="SQLAlchemy URL of the primary database",
    )
    database_pool_size: int = Field(default=5, ge=1)
    database_max_overflow: int = Field(default=5, ge=0)
    database_statement_timeout_ms: int = Field(
        default=15000,
        ge=0,
        description="Per-statement timeout applied on PostgreSQL connections (0 disables)",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")

    # HTTP
    cors_allowed_origins: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_DEV_ORIGINS),
        alias="CORS_ALLOWED_ORIGINS",
        description="Origins allowed by the CORS middleware (comma separated in env)",
    )

    # Availability engine
    availability_upsert_batch_size: int = Field(
        default=DEFAULT_UPSERT_BATCH_SIZE,
        ge=1,
        description="Maximum rows written per upsert statement",
    )
    availability_elevated_roles: Annotated[List[AccountRole], NoDecode] = Field(
        default_factory=lambda: [AccountRole.ADMIN],
        alias="AVAILABILITY_ELEVATED_ROLES",
        description="Roles allowed to act on other users' availability (comma separated in env)",
    )

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("cors_allowed_origins", "availability_elevated_roles", mode="before")
    @classmethod
    def _split_comma_list(cls, value: object) -> object:
        if isinstance(value, str):
            stripped = value.strip()
            if stripped.startswith("["):
                return json.loads(stripped)
            return [item.strip() for item in stripped.split(",") if item.strip()]
        return value

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        normalized = (value or "INFO").strip().upper()
        if normalized not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value}")
        return normalized

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_database_url(self, override: Optional[str] = None) -> str:
        """Return the database URL, honoring an explicit override."""
        return override or self.database_url


settings = Settings()
