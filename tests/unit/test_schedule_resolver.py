"""Tests for schedule rule expansion (once / weekly)."""

from dataclasses import dataclass, field
from datetime import date, timedelta

from src.domains.workouts.calendar import iter_days, weekday_sunday_first
from src.domains.workouts.models import ScheduleType
from src.domains.workouts.schedule import expand, matches


@dataclass
class Rule:
    schedule_type: ScheduleType | str | None
    scheduled_date: date | None = None
    recurrence_days: list[int] | None = field(default=None)
    start_date: date | None = None
    end_date: date | None = None


class TestWeeklyExpansion:
    """Weekly rules produce every in-range day whose weekday is listed."""

    def test_mon_wed_fri_over_a_month(self):
        """[1,3,5] returns exactly the Mondays, Wednesdays and Fridays in range."""
        rule = Rule(ScheduleType.WEEKLY, recurrence_days=[1, 3, 5])
        start, end = date(2024, 1, 1), date(2024, 1, 31)

        result = expand(rule, start, end)

        expected = [d for d in iter_days(start, end) if weekday_sunday_first(d) in {1, 3, 5}]
        assert result == expected
        assert result[0] == date(2024, 1, 1)  # Monday
        assert all(d.weekday() in (0, 2, 4) for d in result)

    def test_over_arbitrary_ranges(self):
        """Same property holds for ranges starting on each weekday."""
        rule = Rule(ScheduleType.WEEKLY, recurrence_days=[1, 3, 5])
        for offset in range(7):
            start = date(2023, 12, 25) + timedelta(days=offset)
            end = start + timedelta(days=17)
            result = expand(rule, start, end)
            assert result == [d for d in iter_days(start, end) if weekday_sunday_first(d) in {1, 3, 5}]

    def test_weekend_days_use_sunday_zero(self):
        """0 is Sunday and 6 is Saturday."""
        rule = Rule(ScheduleType.WEEKLY, recurrence_days=[0, 6])

        result = expand(rule, date(2024, 1, 1), date(2024, 1, 7))

        assert result == [date(2024, 1, 6), date(2024, 1, 7)]

    def test_clamped_to_rule_bounds(self):
        """start_date/end_date limit the produced dates."""
        rule = Rule(
            ScheduleType.WEEKLY,
            recurrence_days=[1],
            start_date=date(2024, 1, 8),
            end_date=date(2024, 1, 22),
        )

        result = expand(rule, date(2024, 1, 1), date(2024, 2, 29))

        assert result == [date(2024, 1, 8), date(2024, 1, 15), date(2024, 1, 22)]

    def test_empty_recurrence_days_produce_nothing(self):
        rule = Rule(ScheduleType.WEEKLY, recurrence_days=[])
        assert expand(rule, date(2024, 1, 1), date(2024, 1, 31)) == []

    def test_inverted_rule_bounds_produce_nothing(self):
        rule = Rule(
            ScheduleType.WEEKLY,
            recurrence_days=[1, 2, 3],
            start_date=date(2024, 2, 1),
            end_date=date(2024, 1, 1),
        )
        assert expand(rule, date(2024, 1, 1), date(2024, 3, 1)) == []

    def test_string_schedule_type_accepted(self):
        rule = Rule("weekly", recurrence_days=[3])
        assert expand(rule, date(2024, 1, 1), date(2024, 1, 7)) == [date(2024, 1, 3)]


class TestOnceExpansion:
    """One-time rules produce their date iff it is inside the range."""

    def test_date_inside_range(self):
        rule = Rule(ScheduleType.ONCE, scheduled_date=date(2024, 1, 10))
        assert expand(rule, date(2024, 1, 1), date(2024, 1, 31)) == [date(2024, 1, 10)]

    def test_date_on_range_edges(self):
        """Range bounds are inclusive."""
        rule = Rule(ScheduleType.ONCE, scheduled_date=date(2024, 1, 10))
        assert expand(rule, date(2024, 1, 10), date(2024, 1, 10)) == [date(2024, 1, 10)]

    def test_date_outside_range(self):
        rule = Rule(ScheduleType.ONCE, scheduled_date=date(2024, 2, 10))
        assert expand(rule, date(2024, 1, 1), date(2024, 1, 31)) == []

    def test_missing_date_produces_nothing(self):
        rule = Rule(ScheduleType.ONCE)
        assert expand(rule, date(2024, 1, 1), date(2024, 1, 31)) == []


class TestMalformedInput:
    """Bad rules and ranges are ignored, never raised."""

    def test_inverted_range(self):
        rule = Rule(ScheduleType.WEEKLY, recurrence_days=[0, 1, 2, 3, 4, 5, 6])
        assert expand(rule, date(2024, 1, 31), date(2024, 1, 1)) == []

    def test_unknown_schedule_type(self):
        rule = Rule("monthly", recurrence_days=[1])
        assert expand(rule, date(2024, 1, 1), date(2024, 1, 31)) == []

    def test_missing_schedule_type(self):
        rule = Rule(None, scheduled_date=date(2024, 1, 5))
        assert expand(rule, date(2024, 1, 1), date(2024, 1, 31)) == []


class TestMatches:
    """Every expanded date satisfies the rule that produced it."""

    def test_expanded_dates_match(self):
        rule = Rule(ScheduleType.WEEKLY, recurrence_days=[2, 4], start_date=date(2024, 1, 3))
        for day in expand(rule, date(2024, 1, 1), date(2024, 3, 1)):
            assert matches(rule, day)

    def test_day_before_start_does_not_match(self):
        rule = Rule(ScheduleType.WEEKLY, recurrence_days=[1], start_date=date(2024, 1, 8))
        assert not matches(rule, date(2024, 1, 1))
        assert matches(rule, date(2024, 1, 8))
