"""
Directory endpoints: manager lookup for registration and team views.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from geoattend.api.v1.deps import get_db, require_manager
from geoattend.core.exceptions import NotFound
from geoattend.models.attendance import Attendance
from geoattend.models.user import ROLE_MANAGER, User
from geoattend.schemas.attendance import AttendanceRead
from geoattend.schemas.common import MAX_ID
from geoattend.schemas.user import UserBrief, UserRead
from geoattend.services import attendance as attendance_service

router = APIRouter(tags=["users"])


@router.get("/managers", response_model=list[UserBrief])
async def list_managers(db: AsyncSession = Depends(get_db)) -> list[User]:
    """Public: feeds the manager picker on the registration form."""
    result = await db.execute(
        select(User)
        .where(User.role == ROLE_MANAGER, User.is_active.is_(True))
        .order_by(User.name)
    )
    return list(result.scalars().all())


@router.get("/manager/employees", response_model=list[UserRead])
async def list_my_employees(
    db: AsyncSession = Depends(get_db),
    manager: User = Depends(require_manager),
) -> list[User]:
    result = await db.execute(
        select(User).where(User.manager_id == manager.id).order_by(User.name)
    )
    return list(result.scalars().all())


@router.get("/manager/attendance/{employee_id}", response_model=list[AttendanceRead])
async def employee_attendance(
    employee_id: int = Path(ge=1, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
    manager: User = Depends(require_manager),
) -> list[Attendance]:
    """Attendance history of one of the manager's own employees."""
    result = await db.execute(
        select(User.id).where(User.id == employee_id, User.manager_id == manager.id)
    )
    if result.scalar_one_or_none() is None:
        raise NotFound("Employee not found")
    return await attendance_service.list_history(db, employee_id)
