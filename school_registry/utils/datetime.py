# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""DateTime utilities for School Registry.

All timestamps are stored in UTC and all Python datetimes are timezone-aware.

Usage:
    from school_registry.utils.datetime import utc_now

    created_at = mapped_column(DateTime(timezone=True), default=utc_now)
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Returns:
        Timezone-aware datetime representing current UTC time.
    """
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes and convert aware ones to UTC.

    Some drivers (SQLite) hand back naive values even for timezone-aware
    columns; comparisons always go through this helper.

    Args:
        value: Datetime to normalize.

    Returns:
        Timezone-aware datetime in UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def current_year() -> int:
    """Get the current calendar year in UTC."""
    return utc_now().year
