"""Configuration for finlove.

Uses pydantic-settings so every value can come from the environment
(``FINLOVE_`` prefix) or a ``.env`` file. Services never read the
environment themselves: a ``Settings`` instance is built once and passed to
``AppContext``.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_GEMINI_MODELS = (
    "gemini-1.5-flash",
    "gemini-1.5-flash-8b",
    "gemini-2.0-flash-exp",
    "gemini-pro",
)


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="FINLOVE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Storage
    database_url: Optional[str] = Field(
        default=None,
        description="SQLAlchemy URL; defaults to the SQLite file under ~/.finlove",
    )

    # Secrets
    jwt_secret: str = Field(
        default="change-me",
        min_length=8,
        description="HS256 signing secret for session tokens",
    )
    token_ttl_days: int = Field(default=7, ge=1)
    cron_secret: Optional[str] = Field(
        default=None,
        description="Bearer token required by the rollover trigger; unset disables the check",
    )
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)
    login_failure_delay: float = Field(
        default=1.0,
        ge=0.0,
        description="Seconds to wait before rejecting bad credentials",
    )

    # Links in outgoing emails
    app_url: str = Field(default="http://localhost:8000")

    # Recurring rollover
    rollover_lookahead_days: int = Field(default=7, ge=0)
    rollover_max_iterations: int = Field(default=12, ge=1)
    notification_workers: int = Field(default=4, ge=1)

    # Financial advice
    gemini_api_key: Optional[str] = None
    gemini_models: tuple[str, ...] = DEFAULT_GEMINI_MODELS
    advice_cache_hours: int = Field(default=24, ge=0)

    # Logging
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=False)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level '{v}'")
        return level

    @field_validator("app_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    """Get the process-wide settings (read once)."""
    return Settings()
