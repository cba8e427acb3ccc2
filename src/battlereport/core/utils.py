"""
Utility functions for BattleReport.

This module provides:
- Performance timing helpers
- Logging setup
- Duration formatting and safe arithmetic
"""

from __future__ import annotations

import logging
import math
import time
from datetime import timedelta
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from battlereport.core.config import LoggingConfig

logger = logging.getLogger(__name__)


class PerformanceMonitor:
    """
    Context manager for monitoring performance of code blocks.

    Usage:
        with PerformanceMonitor("building report"):
            build_report(...)
    """

    def __init__(self, operation_name: str, log_level: int = logging.DEBUG):
        self.operation_name = operation_name
        self.log_level = log_level
        self.start_time: float | None = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed = time.perf_counter() - (self.start_time or 0)
        if exc_type is not None:
            logger.error(f"{self.operation_name} failed after {elapsed:.3f}s: {exc_val}")
        else:
            logger.log(self.log_level, f"{self.operation_name} completed in {elapsed:.3f}s")
        return False


def configure_logging(config: LoggingConfig) -> None:
    """
    Install root handlers from a LoggingConfig.

    A rotating file handler is added when ``config.file`` is set. Like
    logging.basicConfig, nothing happens if the root logger already has
    handlers.
    """
    if logging.getLogger().handlers:
        return

    level = getattr(logging, str(config.level).upper(), logging.INFO)
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if config.file:
        handlers.append(
            RotatingFileHandler(
                config.file,
                maxBytes=config.file_max_bytes,
                backupCount=config.file_backup_count,
            )
        )
    logging.basicConfig(level=level, format=config.format, handlers=handlers)


def format_duration(duration: timedelta) -> str:
    """
    Format a round duration for display.

    Rounds of an hour or more show hours and minutes ("1h 5m"),
    shorter rounds show minutes and seconds ("12m 30s").
    """
    seconds = max(0, math.floor(duration.total_seconds()))
    minutes = seconds // 60
    hours = minutes // 60

    if hours > 0:
        return f"{hours}h {minutes % 60}m"
    return f"{minutes}m {seconds % 60}s"


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """
    Safely divide two numbers, returning default if denominator is zero.

    Args:
        numerator: The numerator
        denominator: The denominator
        default: Value to return if division is not possible

    Returns:
        Result of division or default value
    """
    if denominator == 0:
        return default
    return numerator / denominator


def kd_ratio(kills: int, deaths: int) -> float:
    """Kills per death, or raw kills when the player never died (2 decimals)."""
    return round(safe_divide(kills, deaths, default=float(kills)), 2)
