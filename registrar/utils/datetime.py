# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""DateTime utilities for the registrar core.

Design Decisions:
-----------------
1. Enrollment dates are stored as ISO 8601 strings in UTC
2. Store-generated timestamps come back as timezone-aware datetimes
3. Older documents may hold either form, so readers accept both

Usage:
------
    from registrar.utils.datetime import utc_now, format_iso

    enrollment_date = format_iso(utc_now())
"""

from datetime import datetime, timezone
from typing import Any


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Returns:
        Timezone-aware datetime representing current UTC time.
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Ensure a datetime is timezone-aware UTC.

    Args:
        dt: A datetime object (naive or aware) or None.

    Returns:
        Timezone-aware UTC datetime or None.

    Note:
        - If dt is None, returns None
        - If dt is naive, assumes UTC and adds tzinfo
        - If dt is aware, converts to UTC
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def format_iso(dt: datetime | None) -> str | None:
    """Format a datetime as ISO 8601 string.

    Args:
        dt: Datetime to format.

    Returns:
        ISO 8601 formatted string or None.
    """
    if dt is None:
        return None

    dt_utc = ensure_utc(dt)
    return dt_utc.isoformat()


def parse_iso(iso_string: str | None) -> datetime | None:
    """Parse an ISO 8601 datetime string.

    Args:
        iso_string: ISO 8601 formatted string.

    Returns:
        Timezone-aware UTC datetime or None.
    """
    if iso_string is None:
        return None

    dt = datetime.fromisoformat(iso_string.replace("Z", "+00:00"))
    return ensure_utc(dt)


def to_timestamp(value: Any) -> float:
    """Best-effort conversion of a stored timestamp to epoch seconds.

    Accepts datetimes (including store timestamp subclasses), ISO strings
    and numbers. Anything unparseable sorts first.

    Args:
        value: Stored timestamp value.

    Returns:
        Seconds since the epoch, or 0.0.
    """
    if isinstance(value, datetime):
        return ensure_utc(value).timestamp()
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str) and value:
        try:
            return parse_iso(value).timestamp()
        except ValueError:
            return 0.0
    return 0.0
