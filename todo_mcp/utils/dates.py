"""Timestamp helpers and relative-time formatting."""

from datetime import datetime, timezone

# Coarsest unit first; months and years are fixed-length approximations
_UNITS: list[tuple[str, int]] = [
    ("year", 365 * 24 * 60 * 60),
    ("month", 30 * 24 * 60 * 60),
    ("day", 24 * 60 * 60),
    ("hour", 60 * 60),
    ("minute", 60),
    ("second", 1),
]


def utcnow() -> datetime:
    """Get the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes, convert aware ones to UTC.

    Args:
        dt: The datetime to normalize.

    Returns:
        An aware datetime in UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_relative_time(then: datetime, now: datetime | None = None) -> str:
    """Format a past instant as a human-readable relative string.

    Uses the coarsest unit that applies: years, months (30 days), days,
    hours, minutes, then seconds.

    Args:
        then: The instant to describe.
        now: Reference time. Defaults to the current UTC time.

    Returns:
        A string such as "3 hours ago", or "just now" for deltas under
        one second (including instants in the future).
    """
    reference = ensure_utc(now) if now is not None else utcnow()
    delta = (reference - ensure_utc(then)).total_seconds()

    if delta < 1:
        return "just now"

    seconds = int(delta)
    for unit, size in _UNITS:
        count = seconds // size
        if count > 0:
            return f"{count} {unit}{'s' if count > 1 else ''} ago"

    return "just now"


def format_relative_or_none(then: datetime | None, now: datetime | None = None) -> str | None:
    """Relative-time rendering that passes None through."""
    if then is None:
        return None
    return format_relative_time(then, now)


def format_iso_datetime(dt: datetime | None) -> str | None:
    """Format a datetime as ISO 8601 in UTC, or None when unset."""
    if dt is None:
        return None
    return ensure_utc(dt).isoformat()
