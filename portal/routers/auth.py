"""
Authentication router for local email/password sessions.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Cookie, Form, HTTPException, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy import delete, select

from portal.deps import CurrentUser, DBSession
from portal.models.user import User, normalize_email
from portal.models.user_session import UserSession, get_client_ip
from portal.services.password import hash_password, validate_password, verify_password
from portal.services.permissions import user_capabilities
from portal.services.rate_limiter import auth_rate_limiter
from portal.settings import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _set_session_cookie(response: JSONResponse, token: str) -> None:
    response.set_cookie(
        key="session_token",
        value=token,
        httponly=True,
        secure=not settings.debug,
        samesite="lax",
        max_age=settings.session_expire_hours * 3600,
        path="/",
    )


@router.post("/login")
async def login(
    request: Request,
    db: DBSession,
    email: Annotated[str, Form()],
    password: Annotated[str, Form()],
):
    """Handle local login and start a cookie session."""
    client_ip = get_client_ip(request) or "unknown"

    if not auth_rate_limiter.is_allowed(f"login:{client_ip}"):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many login attempts",
        )

    result = await db.execute(select(User).where(User.email == normalize_email(email)))
    user = result.scalar_one_or_none()

    if not user or not user.hashed_password or not verify_password(password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is disabled",
        )

    session = UserSession.create_session(user_id=user.id, request=request)
    db.add(session)
    user.update_last_seen()
    await db.commit()
    logger.info(f"User {user.id} logged in")

    response = JSONResponse({
        "ok": True,
        "user": user.to_dict(),
        "must_change_password": user.must_change_password,
    })
    _set_session_cookie(response, session.session_token)
    return response


@router.post("/logout")
async def logout(
    db: DBSession,
    session_token: str | None = Cookie(default=None),
):
    """End the current session."""
    if session_token:
        await db.execute(delete(UserSession).where(UserSession.session_token == session_token))
        await db.commit()

    response = JSONResponse({"ok": True})
    response.delete_cookie(key="session_token", path="/")
    return response


@router.get("/me")
async def me(user: CurrentUser):
    """Current account with its resolved capabilities."""
    return {
        "ok": True,
        "user": user.to_dict(),
        "capabilities": sorted(user_capabilities(user)),
    }


@router.post("/change-password")
async def change_password(
    user: CurrentUser,
    db: DBSession,
    current_password: Annotated[str, Form()],
    new_password: Annotated[str, Form()],
    confirm_password: Annotated[str, Form()],
):
    """Replace the password, typically the temporary one from the welcome email."""
    if not user.hashed_password or not verify_password(current_password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Current password is incorrect",
        )

    if new_password != confirm_password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Passwords do not match",
        )

    is_valid, error = validate_password(new_password, settings.password_min_length)
    if not is_valid:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)

    user.hashed_password = hash_password(new_password)
    user.must_change_password = False
    await db.commit()

    return {"ok": True, "message": "Password updated"}
