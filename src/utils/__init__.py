"""
Utility modules for the Document Conflict Checker.

Provides logging utilities and id/clock helpers.
"""

from src.utils.ids import Clock, RandomSource, new_token, utc_now
from src.utils.logger import (
    LogContext,
    get_logger,
    setup_logging,
)

__all__ = [
    # Ids & time
    "Clock",
    "RandomSource",
    "new_token",
    "utc_now",
    # Logging
    "get_logger",
    "setup_logging",
    "LogContext",
]
