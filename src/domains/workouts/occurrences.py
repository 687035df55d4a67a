"""Occurrence aggregation: today / this week / upcoming / past views.

Each view expands every schedule rule over its window, merges the results,
drops duplicate ``(plan_id, display_date)`` pairs keeping the first one seen,
and orders the result. Output depends only on the inputs and the completion
lookups, so identical inputs always give identical lists.
"""
import enum
import logging
import uuid
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from typing import Iterable, Sequence

from src.config.settings import settings
from src.core.context import UserContext
from src.domains.workouts.calendar import week_window
from src.domains.workouts.completion import CompletionOracle, CompletionStatus
from src.domains.workouts.schedule import ScheduleRule, expand

logger = logging.getLogger(__name__)


class OccurrenceKind(str, enum.Enum):
    TODAY = "today"
    WEEK = "week"
    UPCOMING = "upcoming"
    PAST = "past"


class OccurrenceSource(str, enum.Enum):
    ASSIGNMENT = "assignment"
    SELF_SCHEDULE = "self_schedule"


@dataclass(frozen=True)
class Occurrence:
    """A concrete (plan, date) pair. Derived on every read, never stored."""

    plan_id: uuid.UUID
    display_date: date
    source_assignment: ScheduleRule
    source: OccurrenceSource = OccurrenceSource.ASSIGNMENT
    completion_status: CompletionStatus | None = None

    @property
    def key(self) -> tuple[uuid.UUID, date]:
        return self.plan_id, self.display_date


def _plan_id(rule: ScheduleRule) -> uuid.UUID:
    # TrainingPlan self-schedules carry their own id as the plan id
    plan_id = getattr(rule, "plan_id", None)
    return plan_id if plan_id is not None else rule.id


def expand_all(
    rules: Iterable[ScheduleRule],
    range_start: date,
    range_end: date,
    source: OccurrenceSource = OccurrenceSource.ASSIGNMENT,
) -> list[Occurrence]:
    """Expand rules in input order; each rule's dates ascending."""
    occurrences: list[Occurrence] = []
    for rule in rules:
        for day in expand(rule, range_start, range_end):
            occurrences.append(
                Occurrence(
                    plan_id=_plan_id(rule),
                    display_date=day,
                    source_assignment=rule,
                    source=source,
                )
            )
    return occurrences


def dedupe(occurrences: Iterable[Occurrence]) -> list[Occurrence]:
    """Keep the first occurrence of each (plan_id, display_date)."""
    seen: set[tuple[uuid.UUID, date]] = set()
    unique: list[Occurrence] = []
    for occurrence in occurrences:
        if occurrence.key in seen:
            continue
        seen.add(occurrence.key)
        unique.append(occurrence)
    return unique


def sort_by_date(occurrences: Iterable[Occurrence]) -> list[Occurrence]:
    """Stable ascending sort; same-day entries keep their merge order."""
    return sorted(occurrences, key=lambda o: o.display_date)


class OccurrenceAggregator:
    """Builds the occurrence lists the workouts screen renders."""

    def __init__(self, oracle: CompletionOracle, ctx: UserContext):
        self.oracle = oracle
        self.ctx = ctx

    async def today(
        self,
        assignments: Sequence[ScheduleRule],
        now: datetime,
    ) -> list[Occurrence]:
        """Today's occurrences that have not been completed yet."""
        today = self.ctx.local_date(now)
        candidates = dedupe(expand_all(assignments, today, today))

        pending: list[Occurrence] = []
        for occurrence in candidates:
            if await self.oracle.is_completed_on_date(occurrence.plan_id, today):
                logger.debug("Dropping %s from today: already completed", occurrence.plan_id)
                continue
            pending.append(replace(occurrence, completion_status=CompletionStatus.INCOMPLETE))
        return pending

    async def this_week(
        self,
        assignments: Sequence[ScheduleRule],
        now: datetime,
        self_schedules: Sequence[ScheduleRule] = (),
    ) -> list[Occurrence]:
        """Sunday-Saturday window, assignments merged with self-schedules."""
        today = self.ctx.local_date(now)
        week_start, week_end = week_window(today)

        merged = expand_all(assignments, week_start, week_end) + expand_all(
            self_schedules, week_start, week_end, source=OccurrenceSource.SELF_SCHEDULE
        )
        occurrences = sort_by_date(dedupe(merged))
        return await self._annotate(occurrences, today)

    async def upcoming(
        self,
        assignments: Sequence[ScheduleRule],
        now: datetime,
        window_days: int | None = None,
    ) -> list[Occurrence]:
        """Rolling window starting tomorrow; today is excluded."""
        window_days = window_days if window_days is not None else settings.UPCOMING_WINDOW_DAYS
        today = self.ctx.local_date(now)
        occurrences = sort_by_date(
            dedupe(expand_all(assignments, today + timedelta(days=1), today + timedelta(days=window_days)))
        )
        return [replace(o, completion_status=CompletionStatus.UPCOMING) for o in occurrences]

    async def past(
        self,
        assignments: Sequence[ScheduleRule],
        now: datetime,
        window_days: int | None = None,
    ) -> list[Occurrence]:
        """The last ``window_days`` days before today, each marked completed or incomplete."""
        window_days = window_days if window_days is not None else settings.PAST_WINDOW_DAYS
        today = self.ctx.local_date(now)
        occurrences = sort_by_date(
            dedupe(expand_all(assignments, today - timedelta(days=window_days), today - timedelta(days=1)))
        )
        return await self._annotate(occurrences, today)

    async def _annotate(self, occurrences: list[Occurrence], today: date) -> list[Occurrence]:
        annotated: list[Occurrence] = []
        for occurrence in occurrences:
            status = await self.oracle.completion_status(occurrence.plan_id, occurrence.display_date, today)
            annotated.append(replace(occurrence, completion_status=status))
        return annotated
