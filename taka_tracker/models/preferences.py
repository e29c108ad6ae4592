"""
User Preferences

The process-wide settings the user controls: language, theme, currency,
notification flags and the PIN. One Preferences object is created at
startup from the store and handed to the components that need it.

Lock status is deliberately not part of this model: the app always
starts locked, whatever was stored.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from taka_tracker.config import TrackerSettings


class Language(str, Enum):
    BN = "bn"
    EN = "en"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"

    def toggled(self) -> "Theme":
        return Theme.DARK if self == Theme.LIGHT else Theme.LIGHT


class NotificationPreferences(BaseModel):
    """Which reminders and alerts the user opted into."""

    budget_alert: bool = Field(
        default=False,
        alias="budgetAlert",
        description="Flag expenses that push a category over its budget"
    )
    daily_reminder: bool = Field(
        default=False,
        alias="dailyReminder",
        description="Remind the user to record the day's transactions"
    )

    model_config = ConfigDict(populate_by_name=True)


class Preferences(BaseModel):
    """
    Process-wide user settings.

    Mutable: the facade updates it in place and persists each change.
    """
    model_config = ConfigDict(validate_assignment=True)

    language: Language = Language.BN
    theme: Theme = Theme.LIGHT
    currency: str = Field(default="৳", min_length=1, max_length=5)
    pin: Optional[str] = Field(
        default=None,
        repr=False,
        pattern=r"^[0-9]{4}$",
        description="4 digit PIN, None until the first unlock"
    )
    notifications: NotificationPreferences = Field(
        default_factory=NotificationPreferences
    )

    @field_validator("currency")
    @classmethod
    def currency_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Currency symbol cannot be blank")
        return v

    @property
    def has_pin(self) -> bool:
        return self.pin is not None

    @classmethod
    def defaults(cls, settings: TrackerSettings) -> "Preferences":
        """Preferences for a first run, taken from the deployment settings."""
        return cls(
            language=Language(settings.default_language),
            theme=Theme(settings.default_theme),
            currency=settings.default_currency,
        )
