"""Assignment source: loads schedule rules and lets admins manage them."""
import logging
import uuid
from datetime import date
from typing import Sequence

from sqlalchemy import select

from src.core.exceptions import AccessDenied, InvalidInput, NotFoundError, TemplateNotFound
from src.domains.users.models import User
from src.domains.workouts.models import PlanAssignment, PlanStatus, ScheduleType, TrainingPlan
from src.domains.workouts.service_base import ServiceContextMixin

logger = logging.getLogger(__name__)


class AssignmentNotFound(NotFoundError):
    entity = "Assignment"


def validate_rule(
    schedule_type: ScheduleType,
    scheduled_date: date | None,
    recurrence_days: Sequence[int] | None,
    start_date: date | None,
    end_date: date | None,
) -> list[int] | None:
    """Reject rules that could never produce an occurrence.

    Returns the normalized (sorted, unique) recurrence days.
    """
    if schedule_type == ScheduleType.ONCE:
        if scheduled_date is None:
            raise InvalidInput("One-time assignments need a scheduled date", field="scheduled_date")
        return None

    if not recurrence_days:
        raise InvalidInput("Weekly assignments need at least one day", field="recurrence_days")
    if any(day < 0 or day > 6 for day in recurrence_days):
        raise InvalidInput("Recurrence days must be between 0 (Sunday) and 6", field="recurrence_days")
    if start_date is not None and end_date is not None and end_date < start_date:
        raise InvalidInput("End date cannot be before start date", field="end_date")
    return sorted(set(recurrence_days))


class AssignmentServiceMixin(ServiceContextMixin):
    """Mixin providing assignment reads and admin writes for WorkoutService."""

    async def list_assignments(self, user_id: uuid.UUID | None = None) -> list[PlanAssignment]:
        """Active assignments of published plans, newest first.

        Users only see their own; admins may ask for anyone's.
        """
        ctx = self._require_ctx()
        target_id = user_id or ctx.user_id
        if target_id != ctx.user_id and not ctx.is_admin:
            raise AccessDenied()

        result = await self._execute(
            "list assignments",
            select(PlanAssignment)
            .join(TrainingPlan, PlanAssignment.plan_id == TrainingPlan.id)
            .where(
                PlanAssignment.user_id == target_id,
                PlanAssignment.is_active == True,  # noqa: E712
                TrainingPlan.status == PlanStatus.PUBLISHED,
            )
            .order_by(PlanAssignment.created_at.desc(), PlanAssignment.id),
        )
        return list(result.scalars().unique().all())

    async def list_self_schedules(self) -> list[TrainingPlan]:
        """Published plans the admin scheduled for themself. Empty for non-admins."""
        ctx = self._require_ctx()
        if not ctx.is_admin:
            return []

        result = await self._execute(
            "list self schedules",
            select(TrainingPlan)
            .where(
                TrainingPlan.user_id == ctx.user_id,
                TrainingPlan.status == PlanStatus.PUBLISHED,
                TrainingPlan.schedule_type.is_not(None),
            )
            .order_by(TrainingPlan.created_at.desc(), TrainingPlan.id),
        )
        return list(result.scalars().all())

    async def assign_plan(
        self,
        plan_id: uuid.UUID,
        user_id: uuid.UUID,
        schedule_type: ScheduleType,
        scheduled_date: date | None = None,
        recurrence_days: Sequence[int] | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> PlanAssignment:
        """Create or replace the schedule rule binding ``plan_id`` to ``user_id``."""
        ctx = self._require_ctx()
        if not ctx.is_admin:
            raise AccessDenied("Only admins can assign plans")

        schedule_type = ScheduleType(schedule_type)
        days = validate_rule(schedule_type, scheduled_date, recurrence_days, start_date, end_date)
        if schedule_type == ScheduleType.WEEKLY and start_date is None:
            start_date = ctx.local_date(self.clock())

        plan = await self._get("load plan", TrainingPlan, plan_id)
        if plan is None:
            raise TemplateNotFound(plan_id)
        if await self._get("load user", User, user_id) is None:
            raise NotFoundError(user_id)

        result = await self._execute(
            "load assignment",
            select(PlanAssignment).where(
                PlanAssignment.plan_id == plan_id,
                PlanAssignment.user_id == user_id,
            ),
        )
        assignment = result.scalar_one_or_none()
        if assignment is None:
            assignment = PlanAssignment(plan_id=plan_id, user_id=user_id)
            self.db.add(assignment)

        assignment.assigned_by = ctx.user_id
        assignment.schedule_type = schedule_type
        assignment.scheduled_date = scheduled_date if schedule_type == ScheduleType.ONCE else None
        assignment.recurrence_days = days
        assignment.start_date = start_date if schedule_type == ScheduleType.WEEKLY else None
        assignment.end_date = end_date if schedule_type == ScheduleType.WEEKLY else None
        assignment.is_active = True
        await self._commit("assign plan")
        await self._refresh("reload assignment", assignment)

        logger.info(f"[ASSIGNMENT] Plan {plan_id} assigned to {user_id} ({schedule_type.value})")
        return assignment

    async def unassign_plan(self, plan_id: uuid.UUID, user_id: uuid.UUID) -> None:
        """Remove the assignment. Past sessions are kept."""
        ctx = self._require_ctx()
        if not ctx.is_admin:
            raise AccessDenied("Only admins can unassign plans")

        result = await self._execute(
            "load assignment",
            select(PlanAssignment).where(
                PlanAssignment.plan_id == plan_id,
                PlanAssignment.user_id == user_id,
            ),
        )
        assignment = result.scalar_one_or_none()
        if assignment is None:
            raise AssignmentNotFound(f"{plan_id}/{user_id}")

        await self.db.delete(assignment)
        await self._commit("unassign plan")
        logger.info(f"[ASSIGNMENT] Plan {plan_id} unassigned from {user_id}")
