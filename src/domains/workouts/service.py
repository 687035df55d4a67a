"""Workout service with database operations.

This is the main entry point that composes the workout sub-services via mixins:
- AssignmentServiceMixin: schedule rules (assignments, admin self-schedules)
- SessionServiceMixin: session start/resume, set logging, finalization, history

Occurrence views and completion lookups are defined directly here.
"""
import uuid
from datetime import date, datetime
from typing import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.context import UserContext
from src.core.exceptions import InvalidInput
from src.domains.workouts.assignment_service import AssignmentServiceMixin
from src.domains.workouts.calendar import utc_now
from src.domains.workouts.completion import CompletionOracle
from src.domains.workouts.occurrences import Occurrence, OccurrenceAggregator, OccurrenceKind
from src.domains.workouts.session_service import SessionServiceMixin


class WorkoutService(AssignmentServiceMixin, SessionServiceMixin):
    """Service for handling workout operations for one caller.

    ``ctx`` may be None; user-scoped operations then raise NotAuthenticated.
    ``clock`` returns the current UTC instant and is swapped out in tests.
    """

    def __init__(
        self,
        db: AsyncSession,
        ctx: UserContext | None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.db = db
        self.ctx = ctx
        self.clock = clock

    async def is_completed_on_date(self, plan_id: uuid.UUID, day: date | str) -> bool:
        return await CompletionOracle(self.db, self.ctx).is_completed_on_date(plan_id, day)

    async def resolve_occurrences(
        self,
        kind: OccurrenceKind | str,
        now: datetime | None = None,
    ) -> list[Occurrence]:
        """Occurrences of the user's assignments for one view.

        Self-schedules are merged into the week view only.
        """
        try:
            kind = OccurrenceKind(kind)
        except ValueError:
            raise InvalidInput(f"Unknown occurrence kind: {kind}", field="kind") from None

        ctx = self._require_ctx()
        now = now or self.clock()
        aggregator = OccurrenceAggregator(CompletionOracle(self.db, ctx), ctx)
        assignments = await self.list_assignments()

        if kind == OccurrenceKind.TODAY:
            return await aggregator.today(assignments, now)
        if kind == OccurrenceKind.WEEK:
            self_schedules = await self.list_self_schedules()
            return await aggregator.this_week(assignments, now, self_schedules)
        if kind == OccurrenceKind.UPCOMING:
            return await aggregator.upcoming(assignments, now)
        return await aggregator.past(assignments, now)
