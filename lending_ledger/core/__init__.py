"""Core utilities for configuration, clocks, and logging."""

from .clock import ManualTickSource, TickSource, WallClockTickSource
from .config import AppSettings, load_settings
from .logging_config import get_logger, setup_logging

__all__ = [
    "AppSettings",
    "load_settings",
    "ManualTickSource",
    "TickSource",
    "WallClockTickSource",
    "get_logger",
    "setup_logging",
]
