"""
Application settings.

Values come from environment variables (or a local ``.env`` file) and are
validated by pydantic-settings.
"""
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from domain.enums import CurrencyCode


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "Hotel Reporting API"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"

    # Security (override SECRET_KEY outside development)
    SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=30, ge=1)
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: str = "admin123"
    ADMIN_EMAIL: str = "admin@example.com"

    # Hotel calendar
    HOTEL_TIMEZONE: str = "Africa/Cairo"
    HOTEL_FALLBACK_TIMEZONE: str = "UTC"
    HOTEL_CHECK_OUT_TIME: str = "10:00"

    # Reporting defaults
    DEFAULT_CURRENCY: CurrencyCode = CurrencyCode.EGP
    DEFAULT_REPORT_DAYS: int = Field(default=7, ge=1)

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "standard"


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
