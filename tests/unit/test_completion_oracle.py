"""Tests for per-date completion lookups."""

import uuid
from datetime import date, datetime, timezone
from typing import Any
from zoneinfo import ZoneInfo

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.context import UserContext
from src.core.exceptions import InvalidInput, NotAuthenticated
from src.domains.workouts.completion import CompletionOracle, CompletionStatus
from src.domains.workouts.models import SessionStatus, WorkoutSession


async def add_session(
    db_session: AsyncSession,
    user_id: uuid.UUID,
    plan_id: uuid.UUID,
    started_at: datetime,
    status: SessionStatus = SessionStatus.COMPLETED,
) -> WorkoutSession:
    session = WorkoutSession(
        user_id=user_id,
        plan_id=plan_id,
        status=status,
        started_at=started_at,
        ended_at=started_at if status != SessionStatus.IN_PROGRESS else None,
    )
    db_session.add(session)
    await db_session.commit()
    return session


class TestIsCompletedOnDate:
    """A plan is completed on a day iff a completed session started within it."""

    async def test_completed_session_counts(
        self,
        db_session: AsyncSession,
        user_context: UserContext,
        sample_plan: dict[str, Any],
    ):
        await add_session(
            db_session, user_context.user_id, sample_plan["id"],
            datetime(2024, 1, 6, 9, 30, tzinfo=timezone.utc),
        )
        oracle = CompletionOracle(db_session, user_context)

        assert await oracle.is_completed_on_date(sample_plan["id"], date(2024, 1, 6))
        assert not await oracle.is_completed_on_date(sample_plan["id"], date(2024, 1, 7))

    async def test_accepts_date_strings(
        self,
        db_session: AsyncSession,
        user_context: UserContext,
        sample_plan: dict[str, Any],
    ):
        await add_session(
            db_session, user_context.user_id, sample_plan["id"],
            datetime(2024, 1, 6, 9, 30, tzinfo=timezone.utc),
        )
        oracle = CompletionOracle(db_session, user_context)

        assert await oracle.is_completed_on_date(sample_plan["id"], "2024-01-06")
        with pytest.raises(InvalidInput):
            await oracle.is_completed_on_date(sample_plan["id"], "06/01/2024")

    async def test_in_progress_and_aborted_do_not_count(
        self,
        db_session: AsyncSession,
        user_context: UserContext,
        sample_plan: dict[str, Any],
    ):
        started = datetime(2024, 1, 6, 9, 30, tzinfo=timezone.utc)
        await add_session(db_session, user_context.user_id, sample_plan["id"], started, SessionStatus.ABORTED)
        await add_session(db_session, user_context.user_id, sample_plan["id"], started, SessionStatus.IN_PROGRESS)
        oracle = CompletionOracle(db_session, user_context)

        assert not await oracle.is_completed_on_date(sample_plan["id"], date(2024, 1, 6))

    async def test_any_completed_session_that_day_counts(
        self,
        db_session: AsyncSession,
        user_context: UserContext,
        sample_plan: dict[str, Any],
    ):
        """A later aborted attempt does not hide an earlier completion."""
        await add_session(
            db_session, user_context.user_id, sample_plan["id"],
            datetime(2024, 1, 6, 8, 0, tzinfo=timezone.utc),
        )
        await add_session(
            db_session, user_context.user_id, sample_plan["id"],
            datetime(2024, 1, 6, 18, 0, tzinfo=timezone.utc),
            SessionStatus.ABORTED,
        )
        oracle = CompletionOracle(db_session, user_context)

        assert await oracle.is_completed_on_date(sample_plan["id"], date(2024, 1, 6))

    async def test_other_users_sessions_ignored(
        self,
        db_session: AsyncSession,
        user_context: UserContext,
        sample_admin: dict[str, Any],
        sample_plan: dict[str, Any],
    ):
        await add_session(
            db_session, sample_admin["id"], sample_plan["id"],
            datetime(2024, 1, 6, 9, 30, tzinfo=timezone.utc),
        )
        oracle = CompletionOracle(db_session, user_context)

        assert not await oracle.is_completed_on_date(sample_plan["id"], date(2024, 1, 6))

    async def test_day_bounds_follow_user_timezone(
        self,
        db_session: AsyncSession,
        sample_user: dict[str, Any],
        sample_plan: dict[str, Any],
    ):
        """01:00 UTC on the 7th is the evening of the 6th in Sao Paulo."""
        ctx = UserContext(user_id=sample_user["id"], tz=ZoneInfo("America/Sao_Paulo"))
        await add_session(
            db_session, ctx.user_id, sample_plan["id"],
            datetime(2024, 1, 7, 1, 0, tzinfo=timezone.utc),
        )
        oracle = CompletionOracle(db_session, ctx)

        assert await oracle.is_completed_on_date(sample_plan["id"], date(2024, 1, 6))
        assert not await oracle.is_completed_on_date(sample_plan["id"], date(2024, 1, 7))

    async def test_repeated_lookups_agree(
        self,
        db_session: AsyncSession,
        user_context: UserContext,
        sample_plan: dict[str, Any],
    ):
        await add_session(
            db_session, user_context.user_id, sample_plan["id"],
            datetime(2024, 1, 6, 9, 30, tzinfo=timezone.utc),
        )
        oracle = CompletionOracle(db_session, user_context)

        results = [await oracle.is_completed_on_date(sample_plan["id"], date(2024, 1, 6)) for _ in range(3)]

        assert results == [True, True, True]

    async def test_requires_context(self, db_session: AsyncSession):
        with pytest.raises(NotAuthenticated):
            CompletionOracle(db_session, None)


class TestCompletionStatus:
    async def test_labels(
        self,
        db_session: AsyncSession,
        user_context: UserContext,
        sample_plan: dict[str, Any],
    ):
        await add_session(
            db_session, user_context.user_id, sample_plan["id"],
            datetime(2024, 1, 6, 9, 30, tzinfo=timezone.utc),
        )
        oracle = CompletionOracle(db_session, user_context)
        today = date(2024, 1, 8)

        assert await oracle.completion_status(sample_plan["id"], date(2024, 1, 6), today) == CompletionStatus.COMPLETED
        assert await oracle.completion_status(sample_plan["id"], date(2024, 1, 7), today) == CompletionStatus.INCOMPLETE
        assert await oracle.completion_status(sample_plan["id"], date(2024, 1, 9), today) == CompletionStatus.UPCOMING
