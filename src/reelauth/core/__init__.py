"""Core ReelAuth utilities.

This module exports core utilities for use throughout the application.
"""

from reelauth.core.clock import Clock, FrozenClock, SystemClock
from reelauth.core.config import Settings, TokenSettings, get_settings
from reelauth.core.logging import (
    bind_correlation_id,
    clear_context,
    configure_logging,
    get_logger,
)

__all__ = [
    "Clock",
    "FrozenClock",
    "Settings",
    "SystemClock",
    "TokenSettings",
    "bind_correlation_id",
    "clear_context",
    "configure_logging",
    "get_logger",
    "get_settings",
]
