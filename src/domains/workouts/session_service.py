"""Session lifecycle operations (start, set logging, finalize, resume, history)."""
import logging
import math
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from src.core.exceptions import (
    InvalidInput,
    InvalidSessionTransition,
    NoExercisesInTemplate,
    PersistenceFailure,
    PlanAlreadyCompleted,
    SessionAlreadyInProgress,
    SessionExerciseNotFound,
    SessionNotFound,
    SetLogNotFound,
    TemplateNotFound,
)
from src.domains.workouts.calendar import as_utc
from src.domains.workouts.completion import CompletionOracle
from src.domains.workouts.service_base import ServiceContextMixin
from src.domains.workouts.models import (
    PlanExercise,
    SessionExercise,
    SessionStatus,
    SetLog,
    TrainingPlan,
    WorkoutSession,
)

logger = logging.getLogger(__name__)


@dataclass
class SessionBundle:
    """A session with its exercises (by order_index) and set logs (by exercise, then set_index)."""

    session: WorkoutSession
    exercises: list[SessionExercise] = field(default_factory=list)
    set_logs: list[SetLog] = field(default_factory=list)


@dataclass(frozen=True)
class SessionTotals:
    total_seconds: int
    exercises_completed: int
    total_volume: float


def build_set_logs(exercise: SessionExercise, plan_exercise: PlanExercise) -> list[SetLog]:
    """Set logs for one exercise from the template snapshot.

    Per-set details win when present (one log per detail, falling back to the
    exercise-level target for any missing value); otherwise the single target
    pair is repeated ``target_sets`` times.
    """
    details = plan_exercise.set_details or []
    if details:
        return [
            SetLog(
                session_exercise_id=exercise.id,
                set_index=index,
                target_reps=(detail or {}).get("reps") or exercise.target_reps,
                target_weight=(detail or {}).get("weight") or exercise.target_weight,
                skipped=False,
            )
            for index, detail in enumerate(details, start=1)
        ]

    return [
        SetLog(
            session_exercise_id=exercise.id,
            set_index=index,
            target_reps=exercise.target_reps,
            target_weight=exercise.target_weight,
            skipped=False,
        )
        for index in range(1, exercise.target_sets + 1)
    ]


def compute_session_totals(
    started_at: datetime,
    ended_at: datetime,
    exercises: Iterable[SessionExercise],
    set_logs: Iterable[SetLog],
) -> SessionTotals:
    """Aggregates for a finished session. Pure: same rows, same totals."""
    elapsed = (as_utc(ended_at) - as_utc(started_at)).total_seconds()
    total_seconds = max(0, math.floor(elapsed))

    exercises_completed = sum(1 for exercise in exercises if exercise.completed_at is not None)

    total_volume = 0.0
    for log in set_logs:
        if log.completed_at is None or log.skipped:
            continue
        if log.actual_reps is None or log.actual_weight is None:
            continue
        total_volume += log.actual_reps * log.actual_weight

    return SessionTotals(
        total_seconds=total_seconds,
        exercises_completed=exercises_completed,
        total_volume=total_volume,
    )


class SessionServiceMixin(ServiceContextMixin):
    """Mixin providing the session state machine for WorkoutService.

    Nothing is cached between calls: every operation reads the persisted
    rows, so a session can be resumed after an app restart.
    """

    # Loading

    async def _load_exercises(self, session_id: uuid.UUID) -> list[SessionExercise]:
        result = await self._execute(
            "load session exercises",
            select(SessionExercise)
            .where(SessionExercise.session_id == session_id)
            .order_by(SessionExercise.order_index),
        )
        return list(result.scalars().all())

    async def _load_set_logs(self, session_id: uuid.UUID) -> list[SetLog]:
        result = await self._execute(
            "load set logs",
            select(SetLog)
            .join(SessionExercise, SetLog.session_exercise_id == SessionExercise.id)
            .where(SessionExercise.session_id == session_id)
            .order_by(SessionExercise.order_index, SetLog.set_index),
        )
        return list(result.scalars().all())

    async def _load_bundle(self, session: WorkoutSession) -> SessionBundle:
        return SessionBundle(
            session=session,
            exercises=await self._load_exercises(session.id),
            set_logs=await self._load_set_logs(session.id),
        )

    async def _get_owned_session(self, session_id: uuid.UUID) -> WorkoutSession:
        ctx = self._require_ctx()
        result = await self._execute(
            "load session",
            select(WorkoutSession).where(
                WorkoutSession.id == session_id,
                WorkoutSession.user_id == ctx.user_id,
            ),
        )
        session = result.scalar_one_or_none()
        if session is None:
            raise SessionNotFound(session_id)
        return session

    async def _get_owned_exercise(
        self, exercise_id: uuid.UUID
    ) -> tuple[SessionExercise, WorkoutSession]:
        ctx = self._require_ctx()
        result = await self._execute(
            "load session exercise",
            select(SessionExercise, WorkoutSession)
            .join(WorkoutSession, SessionExercise.session_id == WorkoutSession.id)
            .where(
                SessionExercise.id == exercise_id,
                WorkoutSession.user_id == ctx.user_id,
            ),
        )
        row = result.one_or_none()
        if row is None:
            raise SessionExerciseNotFound(exercise_id)
        return row[0], row[1]

    async def _get_owned_set_log(self, set_id: uuid.UUID) -> tuple[SetLog, WorkoutSession]:
        ctx = self._require_ctx()
        result = await self._execute(
            "load set log",
            select(SetLog, WorkoutSession)
            .join(SessionExercise, SetLog.session_exercise_id == SessionExercise.id)
            .join(WorkoutSession, SessionExercise.session_id == WorkoutSession.id)
            .where(
                SetLog.id == set_id,
                WorkoutSession.user_id == ctx.user_id,
            ),
        )
        row = result.one_or_none()
        if row is None:
            raise SetLogNotFound(set_id)
        return row[0], row[1]

    @staticmethod
    def _ensure_in_progress(session: WorkoutSession, attempted: str) -> None:
        if session.is_finalized:
            raise InvalidSessionTransition(session.id, session.status.value, attempted)

    # Start / resume

    async def get_active_session(self) -> SessionBundle | None:
        """Most recent in-progress session of the user, with exercises and set logs."""
        ctx = self._require_ctx()
        result = await self._execute(
            "load active session",
            select(WorkoutSession)
            .where(
                WorkoutSession.user_id == ctx.user_id,
                WorkoutSession.status == SessionStatus.IN_PROGRESS,
            )
            .order_by(WorkoutSession.started_at.desc())
            .limit(1),
        )
        session = result.scalar_one_or_none()
        if session is None:
            return None
        return await self._load_bundle(session)

    async def start_session(
        self,
        plan_id: uuid.UUID,
        allow_repeat: bool = False,
    ) -> SessionBundle:
        """Create an in-progress session from a template snapshot.

        Session, exercises and set logs are written in one unit of work; on a
        storage error everything is rolled back and PersistenceFailure raised.

        Args:
            plan_id: The template to perform.
            allow_repeat: Start even if this plan already has a completed
                session today.
        """
        ctx = self._require_ctx()

        active = await self.get_active_session()
        if active is not None:
            raise SessionAlreadyInProgress(active.session.id)

        result = await self._execute(
            "load template",
            select(TrainingPlan).where(TrainingPlan.id == plan_id),
        )
        template = result.scalar_one_or_none()
        if template is None:
            logger.warning(f"[SESSION] Template not found: {plan_id}")
            raise TemplateNotFound(plan_id)

        result = await self._execute(
            "load template exercises",
            select(PlanExercise)
            .where(PlanExercise.plan_id == plan_id)
            .order_by(PlanExercise.position),
        )
        template_exercises = list(result.scalars().all())
        if not template_exercises:
            logger.warning(f"[SESSION] Template {plan_id} has no exercises")
            raise NoExercisesInTemplate(plan_id)

        now = self.clock()
        if not allow_repeat:
            oracle = CompletionOracle(self.db, ctx)
            today = ctx.local_date(now)
            if await oracle.is_completed_on_date(plan_id, today):
                raise PlanAlreadyCompleted(plan_id, today)

        session = WorkoutSession(
            user_id=ctx.user_id,
            plan_id=plan_id,
            status=SessionStatus.IN_PROGRESS,
            started_at=now,
        )
        self.db.add(session)

        try:
            await self.db.flush()

            exercises: list[SessionExercise] = []
            for order_index, plan_exercise in enumerate(template_exercises, start=1):
                details = plan_exercise.set_details or []
                exercise = SessionExercise(
                    session_id=session.id,
                    plan_exercise_id=plan_exercise.id,
                    name=plan_exercise.name,
                    type=plan_exercise.type,
                    order_index=order_index,
                    target_sets=len(details) if details else max(0, plan_exercise.sets or 0),
                    target_reps=plan_exercise.reps,
                    target_weight=plan_exercise.weight,
                    target_rest_seconds=max(0, plan_exercise.rest_seconds or 0),
                    target_time_seconds=plan_exercise.time_seconds,
                    target_distance_m=plan_exercise.distance_m,
                    set_details=plan_exercise.set_details,
                )
                self.db.add(exercise)
                exercises.append(exercise)
            await self.db.flush()

            set_logs: list[SetLog] = []
            for exercise, plan_exercise in zip(exercises, template_exercises):
                logs = build_set_logs(exercise, plan_exercise)
                self.db.add_all(logs)
                set_logs.extend(logs)

            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"[SESSION] Failed to start session for plan {plan_id}: {e}")
            raise PersistenceFailure("start session") from e

        logger.info(
            f"[SESSION] Started session {session.id} for plan {plan_id} "
            f"({len(exercises)} exercises, {len(set_logs)} sets)"
        )
        return SessionBundle(session=session, exercises=exercises, set_logs=set_logs)

    async def get_session(self, session_id: uuid.UUID) -> SessionBundle:
        """Any session of the user, finished or not."""
        session = await self._get_owned_session(session_id)
        return await self._load_bundle(session)

    # Exercises

    async def start_exercise(self, exercise_id: uuid.UUID) -> SessionExercise:
        """Stamp started_at once; repeated calls change nothing."""
        exercise, session = await self._get_owned_exercise(exercise_id)
        self._ensure_in_progress(session, "start exercise in")
        if exercise.started_at is None:
            exercise.started_at = self.clock()
            await self._commit("start exercise")
        return exercise

    async def complete_exercise(self, exercise_id: uuid.UUID) -> SessionExercise:
        """Stamp completed_at once; repeated calls change nothing.

        Set logs are not checked: an exercise can be completed with sets left
        unaddressed.
        """
        exercise, session = await self._get_owned_exercise(exercise_id)
        self._ensure_in_progress(session, "complete exercise in")
        if exercise.completed_at is None:
            exercise.completed_at = self.clock()
            await self._commit("complete exercise")
        return exercise

    # Sets

    async def log_set(
        self,
        set_id: uuid.UUID,
        actual_reps: int,
        actual_weight: float | None = None,
        rest_seconds_actual: int | None = None,
    ) -> SetLog:
        """Record the reps/weight actually performed for a set."""
        if actual_reps is None or actual_reps < 1:
            raise InvalidInput("Reps must be at least 1", field="actual_reps")
        if actual_weight is not None and actual_weight <= 0:
            raise InvalidInput("Weight must be positive", field="actual_weight")
        if rest_seconds_actual is not None and rest_seconds_actual < 0:
            raise InvalidInput("Rest seconds cannot be negative", field="rest_seconds_actual")

        set_log, session = await self._get_owned_set_log(set_id)
        self._ensure_in_progress(session, "log set in")

        set_log.actual_reps = actual_reps
        set_log.actual_weight = actual_weight
        set_log.rest_seconds_actual = rest_seconds_actual
        set_log.completed_at = self.clock()
        await self._commit("log set")
        return set_log

    async def skip_set(self, set_id: uuid.UUID) -> SetLog:
        """Mark a set as skipped. Skipped sets count as addressed."""
        set_log, session = await self._get_owned_set_log(set_id)
        self._ensure_in_progress(session, "skip set in")

        set_log.skipped = True
        set_log.completed_at = self.clock()
        await self._commit("skip set")
        return set_log

    # Finalize

    async def complete_session(self, session_id: uuid.UUID) -> WorkoutSession:
        """Finalize as completed and write the aggregates."""
        session = await self._get_owned_session(session_id)
        self._ensure_in_progress(session, "complete")

        bundle = await self._load_bundle(session)
        ended_at = self.clock()
        totals = compute_session_totals(session.started_at, ended_at, bundle.exercises, bundle.set_logs)

        session.status = SessionStatus.COMPLETED
        session.ended_at = ended_at
        session.total_seconds = totals.total_seconds
        session.exercises_completed = totals.exercises_completed
        session.total_volume = totals.total_volume
        await self._commit("complete session")

        logger.info(
            f"[SESSION] Completed session {session.id}: {totals.total_seconds}s, "
            f"{totals.exercises_completed} exercises, volume={totals.total_volume}"
        )
        return session

    async def abort_session(self, session_id: uuid.UUID) -> WorkoutSession:
        """Finalize as aborted. No aggregates are written."""
        session = await self._get_owned_session(session_id)
        self._ensure_in_progress(session, "abort")

        session.status = SessionStatus.ABORTED
        session.ended_at = self.clock()
        await self._commit("abort session")

        logger.info(f"[SESSION] Aborted session {session.id}")
        return session

    # History

    async def list_history(self, limit: int = 10, offset: int = 0) -> list[WorkoutSession]:
        """Finished sessions, newest first."""
        ctx = self._require_ctx()
        result = await self._execute(
            "list history",
            select(WorkoutSession)
            .where(
                WorkoutSession.user_id == ctx.user_id,
                WorkoutSession.status.in_([SessionStatus.COMPLETED, SessionStatus.ABORTED]),
            )
            .order_by(WorkoutSession.started_at.desc())
            .limit(limit)
            .offset(offset),
        )
        return list(result.scalars().all())

    async def get_previous_exercise_data(self, plan_exercise_id: uuid.UUID) -> list[SetLog] | None:
        """Set logs from the last completed session that included this template exercise."""
        ctx = self._require_ctx()
        result = await self._execute(
            "load previous exercise",
            select(SessionExercise.id)
            .join(WorkoutSession, SessionExercise.session_id == WorkoutSession.id)
            .where(
                WorkoutSession.user_id == ctx.user_id,
                WorkoutSession.status == SessionStatus.COMPLETED,
                SessionExercise.plan_exercise_id == plan_exercise_id,
            )
            .order_by(WorkoutSession.started_at.desc())
            .limit(1),
        )
        session_exercise_id = result.scalar_one_or_none()
        if session_exercise_id is None:
            return None

        result = await self._execute(
            "load previous set logs",
            select(SetLog)
            .where(SetLog.session_exercise_id == session_exercise_id)
            .order_by(SetLog.set_index),
        )
        return list(result.scalars().all())
