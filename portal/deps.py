"""
FastAPI dependencies for authentication and database sessions.
"""

from typing import Annotated

from fastapi import Cookie, Depends, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from portal.db import get_db
from portal.errors import Unauthenticated
from portal.models.user import User
from portal.models.user_session import UserSession

# Type alias for database dependency
DBSession = Annotated[AsyncSession, Depends(get_db)]


async def get_current_user_optional(
    request: Request,
    db: DBSession,
    session_token: str | None = Cookie(default=None),
) -> User | None:
    """Get current user from session cookie (returns None if not authenticated).

    Sessions slide: a session used with less than half its lifetime left is
    extended. The refresh is committed straight away so later rollbacks in
    the request cannot undo it.
    """
    if not session_token:
        return None

    result = await db.execute(
        select(UserSession)
        .where(UserSession.session_token == session_token)
        .options(selectinload(UserSession.user))
    )
    session = result.scalar_one_or_none()

    if not session or not session.user or not session.is_valid():
        return None

    user = session.user
    if not user.is_active:
        return None

    session.refresh()
    user.update_last_seen()
    await db.commit()

    request.state.user = user
    return user


async def get_current_user(
    user: Annotated[User | None, Depends(get_current_user_optional)],
) -> User:
    """Get current user from session cookie (raises 401 if not authenticated)."""
    if not user:
        raise Unauthenticated()
    return user


# Type alias for authenticated user dependency
CurrentUser = Annotated[User, Depends(get_current_user)]
