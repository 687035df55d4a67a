"""Async engine, session factory and declarative base for the workout store."""
from typing import Any, AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from src.config.settings import settings


def async_database_url(url: str) -> str:
    """Point plain ``postgresql://`` URLs at the asyncpg driver."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def engine_options(url: str) -> dict[str, Any]:
    """SQLite gets a single-file connection; Postgres gets a checked pool."""
    if url.startswith("sqlite"):
        return {"echo": settings.DB_ECHO, "connect_args": {"check_same_thread": False}}
    return {
        "echo": settings.DB_ECHO,
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_pre_ping": True,
    }


_database_url = async_database_url(settings.DATABASE_URL)
engine = create_async_engine(_database_url, **engine_options(_database_url))

# Rows stay loaded after commit
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    """Base class for plans, assignments, sessions and users."""


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """One session per request."""
    async with AsyncSessionLocal() as session:
        yield session


async def init_db() -> None:
    """Create missing tables for every registered model."""
    from src.domains import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
