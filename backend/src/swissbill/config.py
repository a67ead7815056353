"""
Application configuration loaded from environment variables.

All configuration is validated at startup to fail fast on misconfiguration.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with validation.

    All settings are loaded from environment variables with the same name.
    Use .env file for local development.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Billing defaults
    default_country: str = Field(
        default="CH",
        min_length=2,
        max_length=2,
        description="ISO country code used when a party's country cannot be recognised",
    )
    default_currency: Literal["CHF", "EUR"] = Field(
        default="CHF",
        description="Currency used when an invoice does not carry one",
    )

    # Rendering
    render_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Advisory timeout for a single bill render request",
    )

    # Server
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Root logging level",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode with detailed error messages"
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are loaded once at startup and cached for subsequent calls.
    """
    return Settings()
