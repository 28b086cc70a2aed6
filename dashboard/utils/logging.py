"""
Logging utilities for the advisory client dashboard.

CRITICAL PRIVACY RULES:
- NEVER log Supabase Auth tokens, passwords, or service keys
- NEVER log full client payloads (income, mortgage and insurance figures are PII)
- Log ids, field NAMES and table names instead of values

Acceptable logging:
- High-level events (e.g., "Client 1f2e... updated")
- Which child tables a fan-out update touched
- Error codes and sanitized error messages
"""

import logging
from typing import Optional

from dashboard.config import settings


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Get a configured logger for the specified module.

    Args:
        name: Module name (typically __name__)
        level: Optional logging level (defaults to settings.LOG_LEVEL)

    Returns:
        Configured logger instance

    Usage:
        >>> from dashboard.utils.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("High-level event occurred")
    """
    logger = logging.getLogger(name)

    if level is None:
        level = logging.getLevelName(settings.LOG_LEVEL.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger.setLevel(level)

    # Add handler if not already configured (avoid duplicate handlers)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
