"""Configuration using pydantic-settings.

Every setting has a default, so a plain ``extracolumn`` run exports the
Diagnostics column. Values can be overridden with ``EXTRACOLUMN_*``
environment variables, a ``.env`` file, or command line flags.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from extracolumn.ranges import parse_spreadsheet_id, validate_column_range
from extracolumn.transport import DEFAULT_TIMEOUT

AUTH_MODES = ("adc", "service_account", "keyring", "token")
LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Export settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="EXTRACOLUMN_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Source
    spreadsheet_id: str = "1FQzuRQwlFrGGu10N8-ne3HYfbl9tbIoaWA2bqlE6bKo"
    range_reference: str = "Diagnostics!F:F"

    # Output, relative paths resolve against the working directory
    output_path: Path = Path("diagnostics.txt")

    # Authentication
    auth_mode: str = "adc"
    service_account_path: Path | None = None
    access_token: str | None = None
    keyring_service: str = "extracolumn"
    keyring_username: str = "token"

    # HTTP
    timeout: float = DEFAULT_TIMEOUT

    # Logging
    log_level: str = "WARNING"
    log_json: bool = False

    @field_validator("spreadsheet_id")
    @classmethod
    def _parse_spreadsheet_id(cls, v: str) -> str:
        spreadsheet_id = parse_spreadsheet_id(v)
        if not spreadsheet_id:
            raise ValueError("spreadsheet_id must not be empty")
        return spreadsheet_id

    @field_validator("range_reference")
    @classmethod
    def _validate_range(cls, v: str) -> str:
        return validate_column_range(v)

    @field_validator("auth_mode")
    @classmethod
    def _validate_auth_mode(cls, v: str) -> str:
        mode = v.strip().lower().replace("-", "_")
        if mode not in AUTH_MODES:
            raise ValueError(f"auth_mode must be one of: {', '.join(AUTH_MODES)}")
        return mode

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of: {', '.join(LOG_LEVELS)}")
        return level

    @field_validator("timeout")
    @classmethod
    def _validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
