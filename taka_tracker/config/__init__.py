"""Configuration package."""

from taka_tracker.config.settings import TrackerSettings, get_settings

__all__ = [
    "TrackerSettings",
    "get_settings",
]
