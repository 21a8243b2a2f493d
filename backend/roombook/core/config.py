# backend/roombook/core/config.py
import logging
import os
from pathlib import Path
from typing import Any, Callable, Optional, cast

try:
    from dotenv import load_dotenv as _real_load_dotenv

    load_dotenv = cast(Callable[..., bool], _real_load_dotenv)
except Exception:  # pragma: no cover - optional on CI

    def load_dotenv(*_args: Any, **_kwargs: Any) -> bool:
        return False


from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import pytz

from .constants import (
    DEFAULT_DATE_WINDOW_DAYS,
    DEFAULT_OPERATING_TIMEZONE,
    DEFAULT_SESSION_SWEEP_INTERVAL_SECONDS,
    DEFAULT_SESSION_TIMEOUT_SECONDS,
)


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"  # Goes up to backend/.env
    logger.info(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)


class Settings(BaseSettings):
    environment: str = Field(default="development", description="Deployment environment name")

    database_url: str = Field(
        default="sqlite:///./roombook.db",
        description="SQLAlchemy URL of the reservation store",
    )
    database_echo: bool = False

    operating_timezone: str = Field(
        default=DEFAULT_OPERATING_TIMEZONE,
        description="Single civil time zone every schedule and timestamp is interpreted in",
    )

    session_timeout_seconds: int = Field(
        default=DEFAULT_SESSION_TIMEOUT_SECONDS,
        description="Inactivity window after which a booking session expires",
    )
    session_sweep_interval_seconds: int = Field(
        default=DEFAULT_SESSION_SWEEP_INTERVAL_SECONDS,
        description="How often the background sweep expires idle booking sessions",
    )
    date_window_days: int = Field(
        default=DEFAULT_DATE_WINDOW_DAYS,
        description="Number of selectable dates offered, starting today",
    )

    log_level: str = "INFO"
    is_testing: bool = False

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("operating_timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            pytz.timezone(v)
        except pytz.UnknownTimeZoneError as exc:
            raise ValueError(f"Unknown operating timezone: {v}") from exc
        return v

    @field_validator(
        "session_timeout_seconds", "session_sweep_interval_seconds", "date_window_days"
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = (v or "INFO").strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level

    def get_database_url(self) -> str:
        """Get the database URL, forcing an in-memory store under tests unless overridden."""
        if (self.is_testing or is_running_tests()) and not os.getenv("DATABASE_URL"):
            return "sqlite:///:memory:"
        return self.database_url

    @property
    def is_sqlite(self) -> bool:
        return self.get_database_url().startswith("sqlite")


settings = Settings()
logger.info(
    "[CONFIG] environment=%s operating_timezone=%s session_timeout=%ss",
    settings.environment,
    settings.operating_timezone,
    settings.session_timeout_seconds,
)


def get_settings(env: Optional[dict[str, str]] = None) -> Settings:
    """Build a fresh Settings instance, optionally from an explicit mapping."""
    if env is None:
        return Settings()
    return Settings(**{k.lower(): v for k, v in env.items()})
