"""Workout models for the TrainDay platform."""
import enum
import uuid
from datetime import date, datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.config.database import Base
from src.core.models import TimestampMixin, UUIDMixin


class PlanStatus(str, enum.Enum):
    """Lifecycle of a workout template."""

    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class ScheduleType(str, enum.Enum):
    """How an assignment repeats."""

    ONCE = "once"
    WEEKLY = "weekly"


class SessionStatus(str, enum.Enum):
    """Workout session status. COMPLETED and ABORTED are terminal."""

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        return self in (SessionStatus.COMPLETED, SessionStatus.ABORTED)


class TrainingPlan(Base, UUIDMixin, TimestampMixin):
    """Workout template built by an admin.

    The optional schedule columns are the admin's own published self-schedule;
    they follow the same rule shape as PlanAssignment.
    """

    __tablename__ = "training_plans"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[PlanStatus] = mapped_column(
        Enum(PlanStatus, name="plan_status_enum", values_callable=lambda x: [e.value for e in x]),
        default=PlanStatus.DRAFT,
        nullable=False,
    )

    # Self-schedule (admins only)
    schedule_type: Mapped[ScheduleType | None] = mapped_column(
        Enum(ScheduleType, name="schedule_type_enum", values_callable=lambda x: [e.value for e in x]),
        nullable=True,
    )
    scheduled_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    recurrence_days: Mapped[list[int] | None] = mapped_column(JSON, nullable=True)  # 0=Sunday
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    # Relationships
    exercises: Mapped[list["PlanExercise"]] = relationship(
        "PlanExercise",
        back_populates="plan",
        order_by="PlanExercise.position",
        lazy="selectin",
        passive_deletes=True,  # Let DB handle CASCADE DELETE
    )

    def __repr__(self) -> str:
        return f"<TrainingPlan {self.name}>"


class PlanExercise(Base, UUIDMixin):
    """One exercise slot of a template with its targets."""

    __tablename__ = "plan_exercises"

    plan_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("training_plans.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(50), default="strength", nullable=False)
    sets: Mapped[int] = mapped_column(Integer, default=3, nullable=False)
    reps: Mapped[int | None] = mapped_column(Integer, nullable=True)
    weight: Mapped[float | None] = mapped_column(Float, nullable=True)
    rest_seconds: Mapped[int] = mapped_column(Integer, default=60, nullable=False)
    time_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)  # Timed exercises
    distance_m: Mapped[int | None] = mapped_column(Integer, nullable=True)  # Cardio
    # Per-set targets, e.g. [{"reps": 12, "weight": 40}, {"reps": 10, "weight": 45}]
    set_details: Mapped[list[dict] | None] = mapped_column(JSON, nullable=True)

    # Relationships
    plan: Mapped["TrainingPlan"] = relationship(
        "TrainingPlan",
        back_populates="exercises",
    )

    def __repr__(self) -> str:
        return f"<PlanExercise plan={self.plan_id} position={self.position}>"


class PlanAssignment(Base, UUIDMixin, TimestampMixin):
    """Schedule rule binding a template to a user."""

    __tablename__ = "plan_assignments"
    __table_args__ = (
        UniqueConstraint("plan_id", "user_id", name="uq_plan_assignment_plan_user"),
    )

    plan_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("training_plans.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    assigned_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    schedule_type: Mapped[ScheduleType] = mapped_column(
        Enum(ScheduleType, name="schedule_type_enum", values_callable=lambda x: [e.value for e in x]),
        default=ScheduleType.ONCE,
        nullable=False,
    )
    scheduled_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    recurrence_days: Mapped[list[int] | None] = mapped_column(JSON, nullable=True)  # 0=Sunday
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    plan: Mapped["TrainingPlan"] = relationship("TrainingPlan", lazy="joined")

    def __repr__(self) -> str:
        return f"<PlanAssignment plan={self.plan_id} user={self.user_id} type={self.schedule_type.value}>"


class WorkoutSession(Base, UUIDMixin):
    """One performance of a template by a user."""

    __tablename__ = "workout_sessions"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    plan_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("training_plans.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    status: Mapped[SessionStatus] = mapped_column(
        Enum(SessionStatus, name="session_status_enum", values_callable=lambda x: [e.value for e in x]),
        default=SessionStatus.IN_PROGRESS,
        nullable=False,
    )
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
    )
    ended_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Aggregates, written once by complete_session
    total_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    exercises_completed: Mapped[int | None] = mapped_column(Integer, nullable=True)
    total_volume: Mapped[float | None] = mapped_column(Float, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    exercises: Mapped[list["SessionExercise"]] = relationship(
        "SessionExercise",
        back_populates="session",
        order_by="SessionExercise.order_index",
        lazy="selectin",
        passive_deletes=True,
    )

    @property
    def is_finalized(self) -> bool:
        return self.status.is_terminal

    def __repr__(self) -> str:
        return f"<WorkoutSession id={self.id} plan={self.plan_id} status={self.status.value}>"


class SessionExercise(Base, UUIDMixin):
    """Snapshot of a template exercise taken when the session started."""

    __tablename__ = "session_exercises"

    session_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("workout_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    plan_exercise_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("plan_exercises.id", ondelete="SET NULL"),
        nullable=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(50), default="strength", nullable=False)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False)
    target_sets: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    target_reps: Mapped[int | None] = mapped_column(Integer, nullable=True)
    target_weight: Mapped[float | None] = mapped_column(Float, nullable=True)
    target_rest_seconds: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    target_time_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    target_distance_m: Mapped[int | None] = mapped_column(Integer, nullable=True)
    set_details: Mapped[list[dict] | None] = mapped_column(JSON, nullable=True)
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    session: Mapped["WorkoutSession"] = relationship(
        "WorkoutSession",
        back_populates="exercises",
    )
    set_logs: Mapped[list["SetLog"]] = relationship(
        "SetLog",
        back_populates="session_exercise",
        order_by="SetLog.set_index",
        lazy="selectin",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<SessionExercise session={self.session_id} order={self.order_index}>"


class SetLog(Base, UUIDMixin):
    """Target and actual values for one set of a session exercise."""

    __tablename__ = "set_logs"
    __table_args__ = (
        UniqueConstraint("session_exercise_id", "set_index", name="uq_set_log_exercise_index"),
    )

    session_exercise_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("session_exercises.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    set_index: Mapped[int] = mapped_column(Integer, nullable=False)  # 1-based
    target_reps: Mapped[int | None] = mapped_column(Integer, nullable=True)
    target_weight: Mapped[float | None] = mapped_column(Float, nullable=True)
    actual_reps: Mapped[int | None] = mapped_column(Integer, nullable=True)
    actual_weight: Mapped[float | None] = mapped_column(Float, nullable=True)
    rest_seconds_actual: Mapped[int | None] = mapped_column(Integer, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    skipped: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Relationships
    session_exercise: Mapped["SessionExercise"] = relationship(
        "SessionExercise",
        back_populates="set_logs",
    )

    @property
    def is_addressed(self) -> bool:
        """Logged or skipped."""
        return self.completed_at is not None

    def __repr__(self) -> str:
        return f"<SetLog exercise={self.session_exercise_id} set={self.set_index}>"


# Import for type hints
from src.domains.users.models import User  # noqa: E402, F401
