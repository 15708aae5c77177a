# backend/helpdesk/core/config.py
import logging
import os
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import pytz

from .constants import (
    DEFAULT_APP_TZ,
    DEFAULT_MAX_DAY_MINUTES,
    DEFAULT_MAX_RANGE_DAYS,
    DEFAULT_REGISTRY_TTL_SECONDS,
)


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"  # Goes up to backend/.env
    logger.debug(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)


class Settings(BaseSettings):
    """Runtime configuration for the presence backend."""

    model_config = SettingsConfigDict(
        env_file=None,
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    environment: Literal["development", "testing", "production"] = Field(
        default="development",
        validation_alias=AliasChoices("ENVIRONMENT", "environment"),
    )
    database_url: str = Field(
        default="sqlite:///./presence.db",
        validation_alias=AliasChoices("DATABASE_URL", "database_url"),
        description="SQLAlchemy URL for the presence store",
    )
    database_echo: bool = Field(default=False, description="Echo SQL statements")

    # Presence module
    app_tz: str = Field(
        default=DEFAULT_APP_TZ,
        validation_alias=AliasChoices("APP_TZ", "app_tz"),
        description="IANA timezone used when a caller does not supply one",
    )
    presence_max_day_minutes: int = Field(
        default=DEFAULT_MAX_DAY_MINUTES,
        validation_alias=AliasChoices("MAX_DAY_MINUTES", "presence_max_day_minutes"),
        description="Maximum planned minutes per user per local day",
    )
    presence_max_range_days: int = Field(
        default=DEFAULT_MAX_RANGE_DAYS,
        validation_alias=AliasChoices("MAX_RANGE_DAYS", "presence_max_range_days"),
        description="Maximum number of days a single plan may repeat over",
    )
    presence_registry_ttl_seconds: float = Field(
        default=DEFAULT_REGISTRY_TTL_SECONDS,
        validation_alias=AliasChoices(
            "PRESENCE_REGISTRY_TTL_SECONDS", "presence_registry_ttl_seconds"
        ),
        description="How long cached status/office catalogs stay fresh",
    )
    presence_seed_on_startup: bool = Field(
        default=True,
        validation_alias=AliasChoices("PRESENCE_SEED_ON_STARTUP", "presence_seed_on_startup"),
        description="Create tables and insert the baseline catalog when the app starts",
    )

    @field_validator("presence_max_day_minutes", "presence_max_range_days")
    @classmethod
    def _positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    @field_validator("presence_registry_ttl_seconds")
    @classmethod
    def _non_negative_ttl(cls, v: float) -> float:
        if v < 0:
            raise ValueError("TTL cannot be negative")
        return v

    @field_validator("app_tz")
    @classmethod
    def _known_timezone(cls, v: str) -> str:
        if v not in pytz.all_timezones_set:
            raise ValueError(f"Unknown timezone: {v}")
        return v

    def get_database_url(self) -> str:
        """Return the database URL, forcing in-memory SQLite under pytest."""
        if is_running_tests() and not os.getenv("DATABASE_URL"):
            return "sqlite+pysqlite:///:memory:"
        return self.database_url


settings = Settings()
