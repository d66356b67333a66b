"""
Work-from-home request endpoints.

- Any authenticated user submits and lists requests.
- Only the request's own manager may respond.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from geoattend.api.v1.deps import (
    get_current_active_user,
    get_db,
    require_manager,
)
from geoattend.models.user import User
from geoattend.schemas.common import MAX_ID
from geoattend.schemas.wfh import (
    WFHRequestCreate,
    WFHRequestRead,
    WFHRequestResponse,
    WFHRespond,
)
from geoattend.services import wfh as wfh_service

router = APIRouter(prefix="/wfh", tags=["wfh"])


@router.post("/request", response_model=WFHRequestResponse, status_code=201)
async def submit_wfh_request(
    body: WFHRequestCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> WFHRequestResponse:
    request = await wfh_service.submit_request(db, current_user, body.date, body.reason)
    return WFHRequestResponse(
        message="WFH request submitted successfully",
        request=WFHRequestRead.model_validate(request),
    )


@router.get("/requests", response_model=list[WFHRequestRead])
async def list_wfh_requests(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[WFHRequestRead]:
    rows = await wfh_service.list_requests(db, current_user)
    return [
        WFHRequestRead.model_validate(req).model_copy(update={"employee_name": name})
        for req, name in rows
    ]


@router.post("/respond/{request_id}", response_model=WFHRequestResponse)
async def respond_wfh_request(
    body: WFHRespond,
    request_id: int = Path(ge=1, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
    manager: User = Depends(require_manager),
) -> WFHRequestResponse:
    request = await wfh_service.respond(db, manager, request_id, body.status)
    return WFHRequestResponse(
        message=f"WFH request {request.status.lower()}",
        request=WFHRequestRead.model_validate(request),
    )
