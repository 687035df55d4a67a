"""Workout session endpoints: start/resume, set logging, finalize, history."""
import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import get_db
from src.core.exceptions import WorkoutEngineError
from src.domains.auth.dependencies import CurrentContext
from src.domains.workouts.errors import to_http_exception
from src.domains.workouts.schemas import (
    SessionDetailResponse,
    SessionExerciseResponse,
    SessionResponse,
    SessionStart,
    SetLogInput,
    SetLogResponse,
)
from src.domains.workouts.service import WorkoutService

logger = logging.getLogger(__name__)

sessions_router = APIRouter()


# Session endpoints

@sessions_router.post("/sessions", response_model=SessionDetailResponse, status_code=201)
async def start_session(
    request: SessionStart,
    ctx: CurrentContext,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SessionDetailResponse:
    """Start a session from a template.

    Fails with 409 while another session is in progress, so the client can
    offer to resume it instead.
    """
    workout_service = WorkoutService(db, ctx)
    try:
        bundle = await workout_service.start_session(request.plan_id, allow_repeat=request.allow_repeat)
    except WorkoutEngineError as e:
        raise to_http_exception(e) from e
    return SessionDetailResponse.model_validate(bundle)


@sessions_router.get("/sessions/active", response_model=SessionDetailResponse | None)
async def get_active_session(
    ctx: CurrentContext,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SessionDetailResponse | None:
    """The user's in-progress session, if any. Used to resume after an app restart."""
    workout_service = WorkoutService(db, ctx)
    try:
        bundle = await workout_service.get_active_session()
    except WorkoutEngineError as e:
        raise to_http_exception(e) from e
    if bundle is None:
        return None
    return SessionDetailResponse.model_validate(bundle)


@sessions_router.get("/sessions/history", response_model=list[SessionResponse])
async def list_session_history(
    ctx: CurrentContext,
    db: Annotated[AsyncSession, Depends(get_db)],
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> list[SessionResponse]:
    """Finished sessions, newest first."""
    workout_service = WorkoutService(db, ctx)
    try:
        sessions = await workout_service.list_history(limit=limit, offset=offset)
    except WorkoutEngineError as e:
        raise to_http_exception(e) from e
    return [SessionResponse.model_validate(s) for s in sessions]


@sessions_router.get("/sessions/{session_id}", response_model=SessionDetailResponse)
async def get_session(
    session_id: UUID,
    ctx: CurrentContext,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SessionDetailResponse:
    workout_service = WorkoutService(db, ctx)
    try:
        bundle = await workout_service.get_session(session_id)
    except WorkoutEngineError as e:
        raise to_http_exception(e) from e
    return SessionDetailResponse.model_validate(bundle)


@sessions_router.post("/sessions/{session_id}/complete", response_model=SessionResponse)
async def complete_session(
    session_id: UUID,
    ctx: CurrentContext,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SessionResponse:
    """Finalize as completed and return the aggregates."""
    workout_service = WorkoutService(db, ctx)
    try:
        session = await workout_service.complete_session(session_id)
    except WorkoutEngineError as e:
        raise to_http_exception(e) from e
    return SessionResponse.model_validate(session)


@sessions_router.post("/sessions/{session_id}/abort", response_model=SessionResponse)
async def abort_session(
    session_id: UUID,
    ctx: CurrentContext,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SessionResponse:
    workout_service = WorkoutService(db, ctx)
    try:
        session = await workout_service.abort_session(session_id)
    except WorkoutEngineError as e:
        raise to_http_exception(e) from e
    return SessionResponse.model_validate(session)


# Exercise endpoints

@sessions_router.post("/session-exercises/{exercise_id}/start", response_model=SessionExerciseResponse)
async def start_exercise(
    exercise_id: UUID,
    ctx: CurrentContext,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SessionExerciseResponse:
    workout_service = WorkoutService(db, ctx)
    try:
        exercise = await workout_service.start_exercise(exercise_id)
    except WorkoutEngineError as e:
        raise to_http_exception(e) from e
    return SessionExerciseResponse.model_validate(exercise)


@sessions_router.post("/session-exercises/{exercise_id}/complete", response_model=SessionExerciseResponse)
async def complete_exercise(
    exercise_id: UUID,
    ctx: CurrentContext,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SessionExerciseResponse:
    workout_service = WorkoutService(db, ctx)
    try:
        exercise = await workout_service.complete_exercise(exercise_id)
    except WorkoutEngineError as e:
        raise to_http_exception(e) from e
    return SessionExerciseResponse.model_validate(exercise)


# Set endpoints

@sessions_router.post("/set-logs/{set_id}/log", response_model=SetLogResponse)
async def log_set(
    set_id: UUID,
    request: SetLogInput,
    ctx: CurrentContext,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SetLogResponse:
    """Record the reps and weight actually performed."""
    workout_service = WorkoutService(db, ctx)
    try:
        set_log = await workout_service.log_set(
            set_id,
            actual_reps=request.actual_reps,
            actual_weight=request.actual_weight,
            rest_seconds_actual=request.rest_seconds_actual,
        )
    except WorkoutEngineError as e:
        raise to_http_exception(e) from e
    return SetLogResponse.model_validate(set_log)


@sessions_router.post("/set-logs/{set_id}/skip", response_model=SetLogResponse)
async def skip_set(
    set_id: UUID,
    ctx: CurrentContext,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SetLogResponse:
    workout_service = WorkoutService(db, ctx)
    try:
        set_log = await workout_service.skip_set(set_id)
    except WorkoutEngineError as e:
        raise to_http_exception(e) from e
    return SetLogResponse.model_validate(set_log)


@sessions_router.get("/plan-exercises/{plan_exercise_id}/previous", response_model=list[SetLogResponse])
async def get_previous_exercise_data(
    plan_exercise_id: UUID,
    ctx: CurrentContext,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[SetLogResponse]:
    """Sets from the last completed session with this exercise. Empty if none."""
    workout_service = WorkoutService(db, ctx)
    try:
        set_logs = await workout_service.get_previous_exercise_data(plan_exercise_id)
    except WorkoutEngineError as e:
        raise to_http_exception(e) from e
    return [SetLogResponse.model_validate(s) for s in set_logs or []]
