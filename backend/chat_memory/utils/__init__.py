"""Utilities module."""

from .timestamp import (
    normalize_timestamp,
    is_valid_timestamp,
    to_iso_string,
    format_timestamp,
    format_date,
    relative_time,
    utc_now,
)

__all__ = [
    'normalize_timestamp',
    'is_valid_timestamp',
    'to_iso_string',
    'format_timestamp',
    'format_date',
    'relative_time',
    'utc_now',
]
