"""Unit tests for relative-time formatting."""

from datetime import datetime, timedelta, timezone

from todo_mcp.utils.dates import (
    ensure_utc,
    format_iso_datetime,
    format_relative_or_none,
    format_relative_time,
)


class TestFormatRelativeTime:
    """Tests for format_relative_time function."""

    def test_under_one_second_is_just_now(self, now: datetime) -> None:
        """Deltas below one second should render as 'just now'."""
        assert format_relative_time(now - timedelta(seconds=0.5), now) == "just now"

    def test_future_is_just_now(self, now: datetime) -> None:
        """Instants after the reference time should render as 'just now'."""
        assert format_relative_time(now + timedelta(minutes=5), now) == "just now"

    def test_seconds(self, now: datetime) -> None:
        """Whole seconds should use the second unit."""
        assert format_relative_time(now - timedelta(seconds=1), now) == "1 second ago"
        assert format_relative_time(now - timedelta(seconds=45), now) == "45 seconds ago"

    def test_ninety_seconds_is_one_minute(self, now: datetime) -> None:
        """Counts are floored to the coarsest unit."""
        assert format_relative_time(now - timedelta(seconds=90), now) == "1 minute ago"

    def test_hours(self, now: datetime) -> None:
        """3700 seconds should render as one hour."""
        assert format_relative_time(now - timedelta(seconds=3700), now) == "1 hour ago"
        assert format_relative_time(now - timedelta(hours=5), now) == "5 hours ago"

    def test_days_months_years(self, now: datetime) -> None:
        """Months are 30 days and years are 365 days."""
        assert format_relative_time(now - timedelta(days=2), now) == "2 days ago"
        assert format_relative_time(now - timedelta(days=29), now) == "29 days ago"
        assert format_relative_time(now - timedelta(days=30), now) == "1 month ago"
        assert format_relative_time(now - timedelta(days=364), now) == "12 months ago"
        assert format_relative_time(now - timedelta(days=800), now) == "2 years ago"

    def test_naive_datetimes_are_utc(self, now: datetime) -> None:
        """Naive inputs should be treated as UTC."""
        naive = (now - timedelta(minutes=3)).replace(tzinfo=None)
        assert format_relative_time(naive, now) == "3 minutes ago"


class TestHelpers:
    """Tests for the small timestamp helpers."""

    def test_relative_or_none_passes_none(self, now: datetime) -> None:
        """None should stay None."""
        assert format_relative_or_none(None, now) is None

    def test_relative_or_none_formats(self, now: datetime) -> None:
        """Set values should be formatted."""
        assert format_relative_or_none(now - timedelta(days=1), now) == "1 day ago"

    def test_ensure_utc_converts_offsets(self) -> None:
        """Aware datetimes in other zones should be converted to UTC."""
        plus_two = timezone(timedelta(hours=2))
        result = ensure_utc(datetime(2024, 1, 15, 14, 0, tzinfo=plus_two))
        assert result == datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)
        assert result.tzinfo == timezone.utc

    def test_format_iso_datetime(self, now: datetime) -> None:
        """ISO output should carry the UTC offset."""
        assert format_iso_datetime(now) == "2024-01-15T12:00:00+00:00"
        assert format_iso_datetime(None) is None
