"""Request identity.

Authentication happens upstream; the gateway forwards the verified user id in
``X-User-ID``. These dependencies only load that user and build the explicit
context passed into the workout engine.
"""
import uuid
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import get_db
from src.core.context import UserContext, load_timezone
from src.core.observability import set_user_context
from src.domains.users.models import User


async def get_current_user(
    db: Annotated[AsyncSession, Depends(get_db)],
    x_user_id: Annotated[str | None, Header(alias="X-User-ID")] = None,
) -> User:
    """Load the active user named by the gateway header."""
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    try:
        user_id = uuid.UUID(x_user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user id",
        )

    user = await db.get(User, user_id)
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive",
        )

    set_user_context(str(user.id), user.role.value)
    return user


async def get_current_context(
    user: Annotated[User, Depends(get_current_user)],
    x_timezone: Annotated[str | None, Header(alias="X-Timezone")] = None,
) -> UserContext:
    """Per-request context: user id, admin flag and the user's timezone."""
    return UserContext(
        user_id=user.id,
        is_admin=user.is_admin,
        tz=load_timezone(x_timezone),
    )


CurrentContext = Annotated[UserContext, Depends(get_current_context)]
