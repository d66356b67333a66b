"""
FastAPI dependencies: database session, auth guards and attendance policy.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Optional

from fastapi import Cookie, Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from geoattend.core.config import settings
from geoattend.core.exceptions import Forbidden, Unauthenticated
from geoattend.core.security import decode_access_token
from geoattend.db.session import async_session_factory
from geoattend.models.user import ROLE_MANAGER, User
from geoattend.services.attendance import AttendancePolicy

# auto_error=False so we can fall back to the HttpOnly cookie
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_PREFIX}/auth/login", auto_error=False
)


# ── Database session ────────────────────────────────────────────────
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


# ── Attendance policy ───────────────────────────────────────────────
def get_attendance_policy() -> AttendancePolicy:
    """Office geofence and presence rules, read from settings per request."""
    return AttendancePolicy.from_settings(settings)


# ── Auth dependencies ───────────────────────────────────────────────
def _strip_bearer(value: str) -> str:
    return value[len("Bearer "):] if value.startswith("Bearer ") else value


async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    access_token: Optional[str] = Cookie(default=None),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Decode JWT from Header OR Cookie, look up user."""
    credentials_exc = Unauthenticated()

    # Priority: Header > Cookie
    final_token = token or (_strip_bearer(access_token) if access_token else None)
    if not final_token:
        raise credentials_exc

    payload = decode_access_token(final_token)
    if payload is None:
        raise credentials_exc

    user_id = payload.get("sub")
    if user_id is None or not str(user_id).isdigit():
        raise credentials_exc

    result = await db.execute(select(User).where(User.id == int(user_id)))
    user = result.scalar_one_or_none()
    if user is None:
        raise credentials_exc
    return user


async def get_current_active_user(
    current_user: User = Depends(get_current_user),
) -> User:
    """Reject inactive accounts."""
    if not current_user.is_active:
        raise HTTPException(status_code=400, detail="Inactive user account")
    return current_user


async def require_manager(
    current_user: User = Depends(get_current_active_user),
) -> User:
    """Only allow the manager role to proceed."""
    if current_user.role != ROLE_MANAGER:
        raise Forbidden("Access denied. Manager rights required.")
    return current_user
