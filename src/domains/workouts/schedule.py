"""Schedule rule expansion.

Turns one assignment-style rule (``once`` or ``weekly``) into the concrete
calendar dates it covers inside a query range. Pure and stateless: safe to
call concurrently for any number of rules.
"""
from datetime import date
from typing import Protocol, Sequence

from src.domains.workouts.calendar import iter_days, weekday_sunday_first
from src.domains.workouts.models import ScheduleType


class ScheduleRule(Protocol):
    """Anything carrying schedule columns: PlanAssignment, TrainingPlan self-schedules."""

    schedule_type: ScheduleType | str | None
    scheduled_date: date | None
    recurrence_days: Sequence[int] | None
    start_date: date | None
    end_date: date | None


def _schedule_type(rule: ScheduleRule) -> ScheduleType | None:
    try:
        return ScheduleType(rule.schedule_type) if rule.schedule_type is not None else None
    except ValueError:
        return None


def _within_bounds(rule: ScheduleRule, day: date) -> bool:
    if rule.start_date is not None and day < rule.start_date:
        return False
    if rule.end_date is not None and day > rule.end_date:
        return False
    return True


def matches(rule: ScheduleRule, day: date) -> bool:
    """Does ``rule`` produce an occurrence on ``day``?"""
    schedule_type = _schedule_type(rule)

    if schedule_type == ScheduleType.ONCE:
        return rule.scheduled_date is not None and rule.scheduled_date == day

    if schedule_type == ScheduleType.WEEKLY:
        if not rule.recurrence_days:
            return False
        if weekday_sunday_first(day) not in rule.recurrence_days:
            return False
        return _within_bounds(rule, day)

    return False


def expand(rule: ScheduleRule, range_start: date, range_end: date) -> list[date]:
    """All dates in ``[range_start, range_end]`` produced by ``rule``, ascending.

    Malformed rules (no recurrence days, inverted bounds, missing date,
    unknown type) expand to nothing rather than raising.
    """
    if range_start > range_end:
        return []

    schedule_type = _schedule_type(rule)

    if schedule_type == ScheduleType.ONCE:
        scheduled = rule.scheduled_date
        if scheduled is not None and range_start <= scheduled <= range_end:
            return [scheduled]
        return []

    if schedule_type == ScheduleType.WEEKLY:
        if not rule.recurrence_days:
            return []
        if rule.start_date and rule.end_date and rule.start_date > rule.end_date:
            return []
        # Clamp to the rule's own bounds before walking days
        start = max(range_start, rule.start_date) if rule.start_date else range_start
        end = min(range_end, rule.end_date) if rule.end_date else range_end
        return [day for day in iter_days(start, end) if matches(rule, day)]

    return []
