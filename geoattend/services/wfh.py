"""
Work-from-home approval workflow.

Pending -> Approved | Rejected, exactly once per request. An Approved request
for today lifts the geofence requirement on attendance marks.
"""

from __future__ import annotations

import logging
from datetime import date, datetime

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from geoattend.core.exceptions import (
    AlreadyProcessed,
    DuplicateRequest,
    Forbidden,
    InvalidDecision,
    NoManagerAssigned,
    NotFound,
)
from geoattend.core.timeutils import utcnow
from geoattend.models.user import User
from geoattend.models.wfh_request import (
    WFH_APPROVED,
    WFH_DECISIONS,
    WFH_PENDING,
    WFHRequest,
)

logger = logging.getLogger(__name__)


async def has_approved_wfh(db: AsyncSession, user_id: int, day: str) -> bool:
    result = await db.execute(
        select(WFHRequest.id)
        .where(
            WFHRequest.user_id == user_id,
            WFHRequest.date == day,
            WFHRequest.status == WFH_APPROVED,
        )
        .limit(1)
    )
    return result.scalar_one_or_none() is not None


async def submit_request(
    db: AsyncSession, user: User, day: date, reason: str
) -> WFHRequest:
    """Create a Pending request routed to the user's manager.

    The (user, date) unique constraint decides duplicates, so two concurrent
    submissions cannot both land.
    """
    user_id = user.id
    if user.manager_id is None:
        raise NoManagerAssigned()

    request = WFHRequest(
        user_id=user_id,
        manager_id=user.manager_id,
        date=day.isoformat(),
        reason=reason,
        status=WFH_PENDING,
    )
    db.add(request)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.info("Duplicate WFH request from user %d for %s", user_id, day)
        raise DuplicateRequest() from None

    await db.refresh(request)
    logger.info("WFH request %d submitted by user %d for %s", request.id, user_id, day)
    return request


async def respond(
    db: AsyncSession,
    manager: User,
    request_id: int,
    decision: str,
    *,
    now: datetime | None = None,
) -> WFHRequest:
    if decision not in WFH_DECISIONS:
        raise InvalidDecision()

    request = await db.get(WFHRequest, request_id)
    if request is None:
        raise NotFound("Request not found")
    if request.manager_id != manager.id:
        raise Forbidden("Not authorized to respond to this request")
    if request.status != WFH_PENDING:
        raise AlreadyProcessed()

    result = await db.execute(
        update(WFHRequest)
        .where(WFHRequest.id == request_id, WFHRequest.status == WFH_PENDING)
        .values(status=decision, responded_at=now or utcnow())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        # Another response landed between the read and the write
        await db.rollback()
        raise AlreadyProcessed()

    await db.commit()
    await db.refresh(request)
    logger.info(
        "WFH request %d %s by manager %d", request.id, decision.lower(), manager.id
    )
    return request


async def list_requests(
    db: AsyncSession, user: User
) -> list[tuple[WFHRequest, str | None]]:
    """Managers get requests addressed to them; employees get their own."""
    if user.is_manager:
        result = await db.execute(
            select(WFHRequest, User.name)
            .join(User, User.id == WFHRequest.user_id)
            .where(WFHRequest.manager_id == user.id)
            .order_by(WFHRequest.date.desc(), WFHRequest.id.desc())
        )
        return [(req, name) for req, name in result.all()]

    result = await db.execute(
        select(WFHRequest)
        .where(WFHRequest.user_id == user.id)
        .order_by(WFHRequest.date.desc(), WFHRequest.id.desc())
    )
    return [(req, user.name) for req in result.scalars().all()]
