# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""DateTime utilities for StudyPilot.

All timestamps are stored as timezone-aware UTC values. Calendar-day
reporting (weekly progress, learning streaks) converts those instants into
one configured reporting timezone before taking the date, so an event at
23:30 local time never lands in the next day's bucket.

Usage:
------
    from src.utils.datetime import utc_now, local_date

    created_at = Column(DateTime(timezone=True), default=utc_now)
    day = local_date(attempt.completed_at, ZoneInfo("Europe/Istanbul"))
"""

from datetime import date, datetime, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Example:
        >>> utc_now().tzinfo
        datetime.timezone.utc
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Ensure a datetime is timezone-aware UTC.

    Args:
        dt: A datetime object (naive or aware) or None.

    Returns:
        Timezone-aware UTC datetime or None.

    Note:
        Naive values are assumed to already be UTC. SQLite drops tzinfo on
        read, so rows loaded in tests come back naive.
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def get_zone(name: str) -> ZoneInfo:
    """Resolve an IANA timezone name."""
    return ZoneInfo(name)


def local_date(dt: datetime | None, tz: tzinfo) -> date | None:
    """Return the calendar date of an instant in the given timezone.

    Args:
        dt: Instant to convert (naive values are treated as UTC).
        tz: Reporting timezone.

    Returns:
        Calendar date in tz, or None if dt is None.
    """
    aware = ensure_utc(dt)
    if aware is None:
        return None
    return aware.astimezone(tz).date()


def today_in(tz: tzinfo) -> date:
    """Get today's calendar date in the given timezone."""
    return utc_now().astimezone(tz).date()


def last_n_days(end: date, days: int) -> list[date]:
    """List `days` consecutive dates ending at `end`, oldest first.

    Example:
        >>> last_n_days(date(2025, 3, 3), 3)
        [datetime.date(2025, 3, 1), datetime.date(2025, 3, 2), datetime.date(2025, 3, 3)]
    """
    return [end - timedelta(days=offset) for offset in range(days - 1, -1, -1)]


def minutes_between(start: datetime, end: datetime) -> float:
    """Elapsed minutes between two instants."""
    return (ensure_utc(end) - ensure_utc(start)).total_seconds() / 60


def format_iso(dt: datetime | None) -> str | None:
    """Format a datetime as ISO 8601 string.

    Args:
        dt: Datetime to format.

    Returns:
        ISO 8601 formatted string or None.
    """
    if dt is None:
        return None

    return ensure_utc(dt).isoformat()


def parse_iso(iso_string: str | None) -> datetime | None:
    """Parse an ISO 8601 datetime string.

    Args:
        iso_string: ISO 8601 formatted string, "Z" suffix accepted.

    Returns:
        Timezone-aware UTC datetime or None.
    """
    if iso_string is None:
        return None

    dt = datetime.fromisoformat(iso_string.replace("Z", "+00:00"))
    return ensure_utc(dt)
