"""
Timestamp helpers shared by the codec, the store and the history views.

Every formatter here is total: bad input produces a sentinel string instead of
an exception, and normalize_timestamp() falls back to the current time.
"""

import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

logger = logging.getLogger(__name__)

INVALID_TIME = "Invalid time"
INVALID_DATE = "Invalid date"
UNKNOWN_TIME = "Unknown time"


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def _parse(value: Any) -> Optional[datetime]:
    """Parse a datetime, ISO-like string or epoch milliseconds; None if impossible."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    # bool is an int subclass but never a point in time
    if isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    return None


def normalize_timestamp(value: Any) -> datetime:
    """
    Coerce a point-in-time value into an aware datetime.

    Args:
        value: datetime, ISO-8601 string, or epoch milliseconds

    Returns:
        datetime: Parsed value, or the current UTC time if it cannot be parsed
    """
    parsed = _parse(value)
    return parsed if parsed is not None else utc_now()


def is_valid_timestamp(value: Any) -> bool:
    """True if value parses as a point in time without falling back to now."""
    return _parse(value) is not None


def to_iso_string(value: Any) -> str:
    """Portable storage form: UTC ISO-8601 with milliseconds and a Z suffix."""
    dt = normalize_timestamp(value).astimezone(timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_timestamp(value: Any, fmt: str = "%H:%M") -> str:
    """Format as a short local time, e.g. '14:05'."""
    try:
        if value is None:
            dt = utc_now()
        else:
            dt = _parse(value)
            if dt is None:
                return INVALID_TIME
        return dt.astimezone().strftime(fmt)
    except Exception as e:
        logger.error(f"Error formatting timestamp {value!r}: {e}")
        return INVALID_TIME


def format_date(value: Any, fmt: str = "%x") -> str:
    """Format as a short local date in the current locale's order, e.g. '10/16/26'."""
    try:
        if value is None:
            dt = utc_now()
        else:
            dt = _parse(value)
            if dt is None:
                return INVALID_DATE
        return dt.astimezone().strftime(fmt)
    except Exception as e:
        logger.error(f"Error formatting date {value!r}: {e}")
        return INVALID_DATE


def relative_time(value: Any, now: Optional[datetime] = None) -> str:
    """
    Human-relative description of a point in time.

    Args:
        value: datetime, ISO-8601 string, or epoch milliseconds
        now: Reference time (defaults to the current time)

    Returns:
        str: "Just now", "5m ago", "3h ago", "Yesterday", "4 days ago",
            "2 weeks ago" or an absolute date
    """
    try:
        if not isinstance(value, (datetime, str, int, float)) or isinstance(value, bool):
            return UNKNOWN_TIME

        dt = _parse(value)
        if dt is None:
            return INVALID_TIME

        reference = normalize_timestamp(now) if now is not None else utc_now()
        diff = reference - dt
        diff_minutes = math.floor(diff / timedelta(minutes=1))
        diff_hours = math.floor(diff / timedelta(hours=1))
        diff_days = math.floor(diff / timedelta(days=1))

        if diff_minutes < 1:
            return "Just now"
        if diff_minutes < 60:
            return f"{diff_minutes}m ago"
        if diff_hours < 24:
            return f"{diff_hours}h ago"
        if diff_days == 1:
            return "Yesterday"
        if diff_days < 7:
            return f"{diff_days} days ago"
        if diff_days < 30:
            return f"{math.ceil(diff_days / 7)} weeks ago"

        return format_date(dt)
    except Exception as e:
        logger.error(f"Error getting relative time for {value!r}: {e}")
        return UNKNOWN_TIME
