"""Shared plumbing for the workout service mixins."""
import logging
from datetime import datetime
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.context import UserContext
from src.core.exceptions import NotAuthenticated, PersistenceFailure

logger = logging.getLogger(__name__)


class ServiceContextMixin:
    """Database session, caller context and clock, plus error wrapping."""

    db: AsyncSession
    ctx: UserContext | None
    clock: Callable[[], datetime]

    def _require_ctx(self) -> UserContext:
        if self.ctx is None:
            raise NotAuthenticated()
        return self.ctx

    async def _execute(self, operation: str, statement):
        try:
            return await self.db.execute(statement)
        except SQLAlchemyError as e:
            logger.error(f"[WORKOUTS] {operation} failed: {e}")
            raise PersistenceFailure(operation) from e

    async def _commit(self, operation: str) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"[WORKOUTS] {operation} failed: {e}")
            raise PersistenceFailure(operation) from e

    async def _get(self, operation: str, model, ident):
        try:
            return await self.db.get(model, ident)
        except SQLAlchemyError as e:
            logger.error(f"[WORKOUTS] {operation} failed: {e}")
            raise PersistenceFailure(operation) from e

    async def _refresh(self, operation: str, instance) -> None:
        try:
            await self.db.refresh(instance)
        except SQLAlchemyError as e:
            logger.error(f"[WORKOUTS] {operation} failed: {e}")
            raise PersistenceFailure(operation) from e
