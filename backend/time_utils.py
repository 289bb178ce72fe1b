"""
Time utilities for the task board backend.

This module provides a single source of truth for time operations,
ensuring consistency across all endpoints.
"""

import logging
from datetime import datetime, timezone, date
from typing import Any, Optional

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    """
    Get current UTC time.
    Single source of truth for "now" throughout the application.

    Returns:
        timezone-aware datetime in UTC
    """
    return datetime.now(timezone.utc)


def parse_due_date(value: Any) -> Optional[datetime]:
    """
    Leniently parse a task due date.

    Accepts datetime/date objects and ISO 8601 strings (a trailing "Z" is
    treated as UTC). Anything else, including empty strings, yields None so
    callers can drop the value instead of failing the request.

    Args:
        value: Raw due date from the request body

    Returns:
        timezone-aware datetime, or None if the value can't be parsed
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            logger.debug(f"Ignoring unparseable due date: {value!r}")
            return None
    else:
        logger.debug(f"Ignoring due date of unsupported type: {type(value).__name__}")
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
