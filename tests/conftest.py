"""Test configuration and fixtures for TrainDay API."""

import uuid
from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.config.database import Base, get_db
from src.core.context import UserContext
from src.main import create_app

# Test database URL - use SQLite in-memory for tests
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio backend for tests."""
    return "asyncio"


@pytest.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Import all models to register them
    from src.domains import models  # noqa: F401

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture(scope="function")
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    async with async_session() as session:
        yield session


@pytest.fixture(scope="function")
async def client(test_engine, db_session) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with database session override."""
    app = create_app()

    # Override the database dependency
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
async def authenticated_client(
    client: AsyncClient,
    sample_user: dict[str, Any],
) -> AsyncClient:
    """Client sending the gateway identity header of ``sample_user``."""
    client.headers["X-User-ID"] = str(sample_user["id"])
    client.headers["X-Timezone"] = "UTC"
    return client


# =============================================================================
# Test Data Fixtures
# =============================================================================


async def _create_user(db_session: AsyncSession, name: str, role: str = "user", is_active: bool = True) -> dict[str, Any]:
    from src.domains.users.models import User, UserRole

    user_id = uuid.uuid4()
    user = User(
        id=user_id,
        email=f"{name.lower().replace(' ', '-')}-{user_id}@example.com",
        name=name,
        role=UserRole(role),
        is_active=is_active,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)

    return {
        "id": user_id,
        "email": user.email,
        "name": user.name,
        "role": user.role.value,
    }


@pytest.fixture
async def sample_user(db_session: AsyncSession) -> dict[str, Any]:
    """Create a regular user in the database."""
    return await _create_user(db_session, "Test User")


@pytest.fixture
async def sample_admin(db_session: AsyncSession) -> dict[str, Any]:
    """Create an admin who owns templates and assigns them."""
    return await _create_user(db_session, "Test Admin", role="admin")


@pytest.fixture
async def inactive_user(db_session: AsyncSession) -> dict[str, Any]:
    """Create an inactive user in the database."""
    return await _create_user(db_session, "Inactive User", is_active=False)


@pytest.fixture
async def sample_plan(
    db_session: AsyncSession,
    sample_admin: dict[str, Any],
) -> dict[str, Any]:
    """Published template with two exercises.

    - Bench Press: per-set details for 2 sets (the second without a weight)
    - Squat: 3 x 10 @ 50 with no per-set details
    """
    from src.domains.workouts.models import PlanExercise, PlanStatus, TrainingPlan

    plan = TrainingPlan(
        user_id=sample_admin["id"],
        name="Push Day",
        description="Upper body push",
        status=PlanStatus.PUBLISHED,
    )
    db_session.add(plan)
    await db_session.flush()

    bench = PlanExercise(
        plan_id=plan.id,
        position=1,
        name="Bench Press",
        sets=2,
        reps=8,
        weight=60.0,
        rest_seconds=90,
        set_details=[{"reps": 12, "weight": 40.0}, {"reps": 10}],
    )
    squat = PlanExercise(
        plan_id=plan.id,
        position=2,
        name="Squat",
        sets=3,
        reps=10,
        weight=50.0,
        rest_seconds=120,
    )
    db_session.add_all([bench, squat])
    await db_session.commit()

    return {
        "id": plan.id,
        "name": plan.name,
        "owner_id": sample_admin["id"],
        "exercise_ids": [bench.id, squat.id],
    }


@pytest.fixture
def user_context(sample_user: dict[str, Any]) -> UserContext:
    """Context of the regular user, on UTC."""
    return UserContext(user_id=sample_user["id"])


@pytest.fixture
def admin_context(sample_admin: dict[str, Any]) -> UserContext:
    return UserContext(user_id=sample_admin["id"], is_admin=True)


class FakeClock:
    """Manually advanced UTC clock for service tests."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def fake_clock() -> FakeClock:
    """Clock fixed at Saturday 2024-01-06 10:00 UTC."""
    return FakeClock(datetime(2024, 1, 6, 10, 0, tzinfo=timezone.utc))
