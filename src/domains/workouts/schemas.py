"""Workout schemas for request/response validation."""
from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from src.domains.workouts.completion import CompletionStatus
from src.domains.workouts.occurrences import OccurrenceSource
from src.domains.workouts.models import ScheduleType, SessionStatus


# Occurrence schemas

class OccurrenceResponse(BaseModel):
    """A scheduled (plan, date) pair."""

    plan_id: UUID
    plan_name: str | None = None
    display_date: date
    source: OccurrenceSource
    completion_status: CompletionStatus | None = None


class CompletionResponse(BaseModel):
    plan_id: UUID
    date: date
    completed: bool


# Session schemas

class SessionStart(BaseModel):
    """Start session request."""

    plan_id: UUID
    allow_repeat: bool = False


class SetLogResponse(BaseModel):
    """Set log response."""

    id: UUID
    session_exercise_id: UUID
    set_index: int
    target_reps: int | None = None
    target_weight: float | None = None
    actual_reps: int | None = None
    actual_weight: float | None = None
    rest_seconds_actual: int | None = None
    completed_at: datetime | None = None
    skipped: bool

    class Config:
        from_attributes = True


class SessionExerciseResponse(BaseModel):
    """Session exercise snapshot response."""

    id: UUID
    session_id: UUID
    plan_exercise_id: UUID | None = None
    name: str
    type: str
    order_index: int
    target_sets: int
    target_reps: int | None = None
    target_weight: float | None = None
    target_rest_seconds: int
    target_time_seconds: int | None = None
    target_distance_m: int | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None

    class Config:
        from_attributes = True


class SessionResponse(BaseModel):
    """Session row without children."""

    id: UUID
    user_id: UUID
    plan_id: UUID | None = None
    status: SessionStatus
    started_at: datetime
    ended_at: datetime | None = None
    total_seconds: int | None = None
    exercises_completed: int | None = None
    total_volume: float | None = None
    notes: str | None = None

    class Config:
        from_attributes = True


class SessionDetailResponse(BaseModel):
    """Session with exercises and set logs, used to render or resume it."""

    session: SessionResponse
    exercises: list[SessionExerciseResponse] = []
    set_logs: list[SetLogResponse] = []

    class Config:
        from_attributes = True


class SetLogInput(BaseModel):
    """Log set request. Range checks happen in the service."""

    actual_reps: int
    actual_weight: float | None = None
    rest_seconds_actual: int | None = None


# Assignment schemas

class AssignmentCreate(BaseModel):
    """Assign plan request."""

    plan_id: UUID
    user_id: UUID
    schedule_type: ScheduleType
    scheduled_date: date | None = None
    recurrence_days: list[int] | None = Field(None, max_length=7)
    start_date: date | None = None
    end_date: date | None = None

    @field_validator("recurrence_days")
    @classmethod
    def validate_days(cls, v: list[int] | None) -> list[int] | None:
        if v is not None and any(day < 0 or day > 6 for day in v):
            raise ValueError("recurrence days must be between 0 (Sunday) and 6")
        return v

    @model_validator(mode="after")
    def validate_schedule(self) -> "AssignmentCreate":
        if self.schedule_type == ScheduleType.ONCE and self.scheduled_date is None:
            raise ValueError("scheduled_date is required for one-time assignments")
        if self.schedule_type == ScheduleType.WEEKLY and not self.recurrence_days:
            raise ValueError("recurrence_days is required for weekly assignments")
        return self


class AssignmentResponse(BaseModel):
    """Assignment response."""

    id: UUID
    plan_id: UUID
    user_id: UUID
    assigned_by: UUID | None = None
    schedule_type: ScheduleType
    scheduled_date: date | None = None
    recurrence_days: list[int] | None = None
    start_date: date | None = None
    end_date: date | None = None
    is_active: bool
    created_at: datetime | None = None

    class Config:
        from_attributes = True
