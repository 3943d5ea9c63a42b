# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""UTC timestamp helpers.

Timestamp columns are DateTime(timezone=True). PostgreSQL hands back
aware values; SQLite hands back naive ones, which are read as UTC.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to a naive value or convert an aware one; None passes through."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_iso(value: datetime | None) -> str | None:
    """ISO 8601 text in UTC, or None."""
    return None if value is None else ensure_utc(value).isoformat()
