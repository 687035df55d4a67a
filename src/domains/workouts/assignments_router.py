"""Plan assignment endpoints."""
import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import get_db
from src.core.exceptions import WorkoutEngineError
from src.domains.auth.dependencies import CurrentContext
from src.domains.workouts.errors import to_http_exception
from src.domains.workouts.schemas import AssignmentCreate, AssignmentResponse
from src.domains.workouts.service import WorkoutService

logger = logging.getLogger(__name__)

assignments_router = APIRouter()


@assignments_router.get("/assignments", response_model=list[AssignmentResponse])
async def list_assignments(
    ctx: CurrentContext,
    db: Annotated[AsyncSession, Depends(get_db)],
    user_id: Annotated[UUID | None, Query()] = None,
) -> list[AssignmentResponse]:
    """Active assignments for the current user (admins may pass ``user_id``)."""
    workout_service = WorkoutService(db, ctx)
    try:
        assignments = await workout_service.list_assignments(user_id=user_id)
    except WorkoutEngineError as e:
        raise to_http_exception(e) from e
    return [AssignmentResponse.model_validate(a) for a in assignments]


@assignments_router.post("/assignments", response_model=AssignmentResponse, status_code=status.HTTP_201_CREATED)
async def assign_plan(
    request: AssignmentCreate,
    ctx: CurrentContext,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AssignmentResponse:
    """Assign a plan to a user, replacing any existing rule for the pair."""
    workout_service = WorkoutService(db, ctx)
    try:
        assignment = await workout_service.assign_plan(
            plan_id=request.plan_id,
            user_id=request.user_id,
            schedule_type=request.schedule_type,
            scheduled_date=request.scheduled_date,
            recurrence_days=request.recurrence_days,
            start_date=request.start_date,
            end_date=request.end_date,
        )
    except WorkoutEngineError as e:
        raise to_http_exception(e) from e
    return AssignmentResponse.model_validate(assignment)


@assignments_router.delete("/assignments/{plan_id}/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def unassign_plan(
    plan_id: UUID,
    user_id: UUID,
    ctx: CurrentContext,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Response:
    workout_service = WorkoutService(db, ctx)
    try:
        await workout_service.unassign_plan(plan_id, user_id)
    except WorkoutEngineError as e:
        raise to_http_exception(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)
