"""
Configuration Management for Taka Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Everything a running tracker depends on (where data lives, the PIN
rules, the first-run defaults) is declared and validated in one place.

These are deployment settings. The user's own choices (language, theme,
currency, PIN) live in the Preferences model and are persisted in the
store, seeded from the defaults below.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TrackerSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    Every variable is prefixed with TAKA_TRACKER_ (e.g. TAKA_TRACKER_DATA_DIR).
    """

    model_config = SettingsConfigDict(
        env_prefix="TAKA_TRACKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = Field(
        default="taka_tracker",
        min_length=1,
        description="Application name, used in export file names",
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug logging",
    )

    # Storage
    data_dir: Path = Field(
        default=Path.home() / ".taka_tracker",
        description="Directory holding the JSON snapshots",
    )
    storage_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many times a snapshot write is attempted",
    )

    # Access gate
    pin_length: int = Field(
        default=4,
        ge=4,
        le=4,
        description="Number of digits in the PIN",
    )
    pin_error_delay_ms: int = Field(
        default=800,
        ge=0,
        le=10_000,
        description="How long a wrong PIN stays on screen before the entry is cleared",
    )

    # First-run defaults for user preferences
    default_language: str = Field(
        default="bn",
        pattern="^(bn|en)$",
        description="Language used until the user picks one",
    )
    default_theme: str = Field(
        default="light",
        pattern="^(light|dark)$",
        description="Color theme used until the user picks one",
    )
    default_currency: str = Field(
        default="৳",
        min_length=1,
        max_length=5,
        description="Currency symbol shown next to amounts",
    )

    @field_validator("default_currency")
    @classmethod
    def strip_currency(cls, v: str) -> str:
        """Currency symbols are displayed verbatim, so surrounding spaces are dropped."""
        v = v.strip()
        if not v:
            raise ValueError("Currency symbol cannot be blank")
        return v

    @property
    def pin_error_delay_seconds(self) -> float:
        """Get the PIN error delay in seconds."""
        return self.pin_error_delay_ms / 1000


@lru_cache()
def get_settings() -> TrackerSettings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return TrackerSettings()
