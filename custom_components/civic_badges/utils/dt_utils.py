# File: utils/dt_utils.py
"""Date and time utilities for Civic Badges.

Pure Python date/time functions with ZERO Home Assistant dependencies.
Uses standard library datetime plus dateutil for lenient ISO parsing.

Functions:
    - dt_now_utc: Current UTC datetime
    - as_utc: Normalize a datetime to UTC
    - dt_to_iso: Serialize a datetime for storage
    - dt_to_utc: Parse a stored timestamp back to an aware UTC datetime
    - dt_epoch_millis: Milliseconds since the Unix epoch
    - dt_format_date: Short human date for certificates
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from dateutil import parser as dt_parser

DISPLAY_UNKNOWN = "Unknown"

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def dt_now_utc() -> datetime:
    """Return the current datetime in UTC (timezone-aware)."""
    return datetime.now(UTC)


def as_utc(dt_obj: datetime) -> datetime:
    """Convert a datetime to UTC; naive values are assumed to already be UTC."""
    if dt_obj.tzinfo is None:
        return dt_obj.replace(tzinfo=UTC)
    return dt_obj.astimezone(UTC)


def dt_to_iso(dt_obj: datetime) -> str:
    """Return the UTC ISO 8601 representation used in storage.

    Example:
        datetime(2025, 4, 7, 14, 30, tzinfo=UTC) → "2025-04-07T14:30:00+00:00"
    """
    return as_utc(dt_obj).isoformat()


def dt_to_utc(value: str | None) -> datetime | None:
    """Parse an ISO timestamp string into an aware UTC datetime.

    Returns:
        UTC datetime, or None if the value is empty, not a string or unparseable.
    """
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = dt_parser.isoparse(value)
    except (ValueError, OverflowError):
        return None
    return as_utc(parsed)


def dt_epoch_millis(dt_obj: datetime) -> int:
    """Return whole milliseconds since the Unix epoch for a datetime."""
    return (as_utc(dt_obj) - _EPOCH) // timedelta(milliseconds=1)


def dt_format_date(dt_obj: datetime | None) -> str:
    """Format a datetime as a short, locale-neutral date ("Apr 7, 2025")."""
    if dt_obj is None:
        return DISPLAY_UNKNOWN
    utc = as_utc(dt_obj)
    return f"{utc:%b} {utc.day}, {utc.year}"
