"""UTC datetime utilities."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from dateutil.parser import isoparse


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-aware datetime.

    This function should be used instead of datetime.now() or datetime.utcnow()
    to ensure all timestamps are timezone-aware and in UTC.

    Returns:
        Timezone-aware datetime in UTC

    Example:
        >>> now = utc_now()
        >>> now.tzinfo
        datetime.timezone.utc
    """
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware datetime; naive values are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_iso_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an ISO 8601 timestamp into an aware datetime.

    Accepts full timestamps with or without an offset
    ("2026-01-03T12:00:00-05:00", "2026-01-03T17:00:00Z") and bare dates.
    Naive values are interpreted as UTC.

    Args:
        value: Raw timestamp, usually a string from a reservation payload

    Returns:
        Aware datetime, or None if the value is empty or cannot be parsed

    Example:
        >>> parse_iso_timestamp("2026-01-03T12:00:00-05:00").isoformat()
        '2026-01-03T12:00:00-05:00'
        >>> parse_iso_timestamp("not-a-date") is None
        True
    """
    if not isinstance(value, str) or not value.strip():
        return None

    try:
        parsed = isoparse(value.strip())
    except (ValueError, OverflowError):
        return None

    return ensure_utc(parsed)


def to_iso(value: datetime) -> str:
    """Format an aware datetime as ISO 8601 with millisecond precision and a Z suffix."""
    return ensure_utc(value).astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )
