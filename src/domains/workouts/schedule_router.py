"""Occurrence and completion endpoints backing the workouts screen."""
import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import get_db
from src.core.exceptions import WorkoutEngineError
from src.domains.auth.dependencies import CurrentContext
from src.domains.workouts.calendar import parse_local_date
from src.domains.workouts.errors import to_http_exception
from src.domains.workouts.occurrences import Occurrence
from src.domains.workouts.schemas import CompletionResponse, OccurrenceResponse
from src.domains.workouts.service import WorkoutService

logger = logging.getLogger(__name__)

schedule_router = APIRouter()


def _plan_name(occurrence: Occurrence) -> str | None:
    rule = occurrence.source_assignment
    plan = getattr(rule, "plan", None)
    if plan is not None:
        return plan.name
    # Self-schedules are the plan itself
    return getattr(rule, "name", None)


@schedule_router.get("/occurrences", response_model=list[OccurrenceResponse])
async def list_occurrences(
    ctx: CurrentContext,
    db: Annotated[AsyncSession, Depends(get_db)],
    kind: Annotated[str, Query()] = "today",
) -> list[OccurrenceResponse]:
    """Occurrences for one view: ``today``, ``week``, ``upcoming`` or ``past``."""
    workout_service = WorkoutService(db, ctx)
    try:
        occurrences = await workout_service.resolve_occurrences(kind)
    except WorkoutEngineError as e:
        raise to_http_exception(e) from e

    return [
        OccurrenceResponse(
            plan_id=o.plan_id,
            plan_name=_plan_name(o),
            display_date=o.display_date,
            source=o.source,
            completion_status=o.completion_status,
        )
        for o in occurrences
    ]


@schedule_router.get("/completion", response_model=CompletionResponse)
async def get_completion(
    ctx: CurrentContext,
    db: Annotated[AsyncSession, Depends(get_db)],
    plan_id: Annotated[UUID, Query()],
    date: Annotated[str, Query(description="Local calendar date, YYYY-MM-DD")],
) -> CompletionResponse:
    """Whether the plan has a completed session on the given local date."""
    workout_service = WorkoutService(db, ctx)
    try:
        day = parse_local_date(date)
        completed = await workout_service.is_completed_on_date(plan_id, day)
    except WorkoutEngineError as e:
        raise to_http_exception(e) from e
    return CompletionResponse(plan_id=plan_id, date=day, completed=completed)
