"""Tests for local calendar date handling."""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from src.core.context import UserContext
from src.core.exceptions import InvalidInput
from src.domains.workouts.calendar import (
    as_utc,
    day_bounds,
    parse_local_date,
    week_window,
    weekday_sunday_first,
)


class TestParseLocalDate:
    """Date strings are parsed from their parts, never as timestamps."""

    def test_parses_components(self):
        assert parse_local_date("2024-01-06") == date(2024, 1, 6)

    def test_accepts_unpadded(self):
        assert parse_local_date("2024-1-6") == date(2024, 1, 6)

    def test_passes_dates_through(self):
        assert parse_local_date(date(2024, 3, 1)) == date(2024, 3, 1)

    @pytest.mark.parametrize("value", ["2024/01/06", "06-01-2024", "2024-01-06T00:00:00Z", "", "2024-02-30"])
    def test_rejects_bad_values(self, value: str):
        with pytest.raises(InvalidInput):
            parse_local_date(value)

    def test_rejects_datetimes(self):
        """A timestamp would carry a zone-dependent day."""
        with pytest.raises(InvalidInput):
            parse_local_date(datetime(2024, 1, 6, 23, 0))


class TestWeeks:
    def test_weekday_numbering_starts_on_sunday(self):
        assert weekday_sunday_first(date(2024, 1, 7)) == 0  # Sunday
        assert weekday_sunday_first(date(2024, 1, 8)) == 1  # Monday
        assert weekday_sunday_first(date(2024, 1, 6)) == 6  # Saturday

    def test_week_window_is_sunday_to_saturday(self):
        assert week_window(date(2024, 1, 10)) == (date(2024, 1, 7), date(2024, 1, 13))
        assert week_window(date(2024, 1, 7)) == (date(2024, 1, 7), date(2024, 1, 13))
        assert week_window(date(2024, 1, 6)) == (date(2023, 12, 31), date(2024, 1, 6))


class TestDayBounds:
    def test_utc_day(self):
        start, end = day_bounds(date(2024, 1, 6), ZoneInfo("UTC"))
        assert start == datetime(2024, 1, 6, 0, 0, tzinfo=timezone.utc)
        assert end == datetime(2024, 1, 6, 23, 59, 59, tzinfo=timezone.utc)

    def test_negative_offset_day_shifts_to_next_utc_instant(self):
        """Local midnight in Sao Paulo (UTC-3) is 03:00 UTC."""
        start, end = day_bounds(date(2024, 1, 6), ZoneInfo("America/Sao_Paulo"))
        assert start == datetime(2024, 1, 6, 3, 0, tzinfo=timezone.utc)
        assert end == datetime(2024, 1, 7, 2, 59, 59, tzinfo=timezone.utc)


class TestLocalDate:
    def test_late_evening_stays_on_local_day(self):
        """23:30 local on the 6th is already the 7th in UTC."""
        ctx = UserContext(user_id=None, tz=ZoneInfo("America/Sao_Paulo"))
        now = datetime(2024, 1, 7, 2, 30, tzinfo=timezone.utc)
        assert ctx.local_date(now) == date(2024, 1, 6)

    def test_naive_values_are_utc(self):
        ctx = UserContext(user_id=None, tz=ZoneInfo("UTC"))
        assert ctx.local_date(datetime(2024, 1, 6, 23, 59)) == date(2024, 1, 6)
        assert as_utc(datetime(2024, 1, 6, 12, 0)).tzinfo == timezone.utc
