"""
Attendance endpoints: geofenced entry / exit marks and history.

Coordinates are optional in the body: they are only required when the
caller has no Approved WFH request for today.
"""

from __future__ import annotations

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from geoattend.api.v1.deps import (
    get_attendance_policy,
    get_current_active_user,
    get_db,
)
from geoattend.models.attendance import Attendance
from geoattend.models.user import User
from geoattend.schemas.attendance import (
    AttendanceMarkResponse,
    AttendanceRead,
    AttendanceTodayResponse,
    LocationPayload,
)
from geoattend.services import attendance as attendance_service
from geoattend.services.attendance import AttendancePolicy, MarkResult

router = APIRouter(prefix="/attendance", tags=["attendance"])


def _mark_response(kind: str, result: MarkResult) -> AttendanceMarkResponse:
    suffix = " (WFH)" if result.via_wfh else ""
    return AttendanceMarkResponse(
        message=f"{kind} time recorded successfully{suffix}",
        attendance=AttendanceRead.model_validate(result.attendance),
    )


@router.post("/entry", response_model=AttendanceMarkResponse)
async def mark_entry(
    body: LocationPayload | None = Body(default=None),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    policy: AttendancePolicy = Depends(get_attendance_policy),
) -> AttendanceMarkResponse:
    coords = body.to_coordinates() if body else None
    result = await attendance_service.mark_entry(db, current_user, coords, policy)
    return _mark_response("Entry", result)


@router.post("/exit", response_model=AttendanceMarkResponse)
async def mark_exit(
    body: LocationPayload | None = Body(default=None),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    policy: AttendancePolicy = Depends(get_attendance_policy),
) -> AttendanceMarkResponse:
    coords = body.to_coordinates() if body else None
    result = await attendance_service.mark_exit(db, current_user, coords, policy)
    return _mark_response("Exit", result)


@router.get("/today", response_model=AttendanceTodayResponse)
async def today_status(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    policy: AttendancePolicy = Depends(get_attendance_policy),
) -> AttendanceTodayResponse:
    """Dashboard status: today's record (if any) and WFH approval."""
    day, record, wfh_approved = await attendance_service.get_today(db, current_user, policy)
    return AttendanceTodayResponse(
        date=day,
        wfh_approved=wfh_approved,
        attendance=AttendanceRead.model_validate(record) if record else None,
    )


@router.get("/history", response_model=list[AttendanceRead])
async def attendance_history(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[Attendance]:
    return await attendance_service.list_history(db, current_user.id)
