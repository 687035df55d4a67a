"""Per-date completion lookups for a user's plans."""
import enum
import logging
import uuid
from datetime import date

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.context import UserContext
from src.core.exceptions import NotAuthenticated, PersistenceFailure
from src.domains.workouts.calendar import day_bounds, parse_local_date
from src.domains.workouts.models import SessionStatus, WorkoutSession

logger = logging.getLogger(__name__)


class CompletionStatus(str, enum.Enum):
    """Label shown next to a scheduled occurrence."""

    COMPLETED = "completed"
    INCOMPLETE = "incomplete"
    UPCOMING = "upcoming"


class CompletionOracle:
    """Read-only check of whether a plan had a completed session on a date.

    Holds no mutable state; one instance can serve concurrent lookups.
    """

    def __init__(self, db: AsyncSession, ctx: UserContext | None):
        if ctx is None:
            raise NotAuthenticated()
        self.db = db
        self.ctx = ctx

    async def is_completed_on_date(self, plan_id: uuid.UUID, day: date | str) -> bool:
        """True iff a completed session of this plan started within the local day."""
        day = parse_local_date(day)
        start, end = day_bounds(day, self.ctx.tz)

        try:
            result = await self.db.execute(
                select(WorkoutSession.id)
                .where(
                    WorkoutSession.user_id == self.ctx.user_id,
                    WorkoutSession.plan_id == plan_id,
                    WorkoutSession.status == SessionStatus.COMPLETED,
                    WorkoutSession.started_at >= start,
                    WorkoutSession.started_at <= end,
                )
                .limit(1)
            )
        except SQLAlchemyError as e:
            logger.error("Completion lookup failed for plan %s on %s: %s", plan_id, day, e)
            raise PersistenceFailure("completion lookup") from e

        return result.scalar_one_or_none() is not None

    async def completion_status(
        self,
        plan_id: uuid.UUID,
        day: date,
        today: date,
    ) -> CompletionStatus:
        """Future dates are upcoming without a lookup; others completed/incomplete."""
        if day > today:
            return CompletionStatus.UPCOMING
        if await self.is_completed_on_date(plan_id, day):
            return CompletionStatus.COMPLETED
        return CompletionStatus.INCOMPLETE
