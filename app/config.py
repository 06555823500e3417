"""
Application configuration using Pydantic Settings.

Centralizes all environment variables and app settings.
Using Pydantic BaseSettings gives us validation and type safety for config.
"""

import re
from datetime import timedelta
from functools import lru_cache
from typing import Any, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_DURATION_UNITS = {"": "seconds", "s": "seconds", "m": "minutes", "h": "hours", "d": "days"}


def parse_duration(value: Any) -> Any:
    """
    Accept "7d", "12h", "30m", "45s" or a bare number of seconds.
    Anything else is handed to pydantic unchanged (e.g. ISO 8601 durations).
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return timedelta(seconds=value)
    if isinstance(value, str):
        match = _DURATION_RE.match(value.lower())
        if match:
            amount, unit = match.groups()
            return timedelta(**{_DURATION_UNITS[unit]: int(amount)})
    return value


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    All sensitive/configurable values should live here.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra env vars not defined here
    )

    # Application
    app_name: str = "OTP Auth Service"
    debug: bool = False

    # MongoDB - Motor (async driver) connection string
    mongodb_url: str = "mongodb://localhost:27017"
    mongodb_database: str = "otp_auth_db"

    # JWT signing (HS256)
    jwt_secret: Optional[str] = None
    jwt_expires_in: timedelta = timedelta(days=7)

    # Password hashing
    bcrypt_rounds: int = 10

    # SMTP for OTP delivery
    email_host: str = "smtp.gmail.com"
    email_port: int = 587
    email_user: Optional[str] = None
    email_password: Optional[str] = None  # App password for Gmail
    email_from: Optional[str] = None

    @field_validator("jwt_secret", "email_user", "email_password", "email_from", mode="before")
    @classmethod
    def strip_optional(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not isinstance(v, str):
            return v
        return v.strip() or None

    @field_validator("jwt_expires_in", mode="before")
    @classmethod
    def parse_expires_in(cls, v: Any) -> Any:
        return parse_duration(v)

    @property
    def email_sender(self) -> Optional[str]:
        return self.email_from or self.email_user


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings instance.
    Using lru_cache avoids re-reading .env on every request.
    """
    return Settings()
