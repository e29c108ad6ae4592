"""Structured logging package."""

from taka_tracker.telemetry.logger import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
