"""
Attendance state machine.

    no record --mark_entry--> partial --mark_exit--> present | partial

One record per (user, office-local day). Both marks are gated by the office
geofence unless the user has an Approved WFH request for the day. Writes are
single conditional statements so that concurrent marks cannot both succeed.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from geoattend.core.config import Settings
from geoattend.core.exceptions import (
    AlreadyMarked,
    MissingLocation,
    NoEntryFound,
    OutsideGeofence,
)
from geoattend.core.geofence import NO_LOCATION, Coordinates, Geofence
from geoattend.core.timeutils import ensure_utc, local_day, parse_offset, utcnow
from geoattend.models.attendance import (
    STATUS_PARTIAL,
    STATUS_PRESENT,
    Attendance,
)
from geoattend.models.user import User
from geoattend.services.wfh import has_approved_wfh

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttendancePolicy:
    geofence: Geofence
    minimum_presence_seconds: float
    office_tz: timezone

    @classmethod
    def from_settings(cls, settings: Settings) -> AttendancePolicy:
        return cls(
            geofence=Geofence.from_settings(settings),
            minimum_presence_seconds=settings.MINIMUM_PRESENCE_SECONDS,
            office_tz=parse_offset(settings.TIMEZONE_OFFSET),
        )

    def today(self, now: datetime) -> str:
        return local_day(now, self.office_tz)


@dataclass(frozen=True)
class MarkResult:
    attendance: Attendance
    via_wfh: bool


def duration_minutes(elapsed_seconds: float) -> int:
    """Whole minutes, halves rounded up."""
    return math.floor(elapsed_seconds / 60 + 0.5)


def presence_status(elapsed_seconds: float, minimum_seconds: float) -> str:
    return STATUS_PRESENT if elapsed_seconds >= minimum_seconds else STATUS_PARTIAL


async def _check_location(
    db: AsyncSession,
    user_id: int,
    day: str,
    coords: Coordinates | None,
    policy: AttendancePolicy,
) -> bool:
    """Return True when WFH approval waives the geofence, else enforce it."""
    if await has_approved_wfh(db, user_id, day):
        return True
    if coords is None:
        raise MissingLocation()
    if not policy.geofence.within_office(coords):
        logger.info(
            "User %d rejected: %.0f m from office",
            user_id,
            policy.geofence.distance_to(coords),
        )
        raise OutsideGeofence()
    return False


async def _get_record(db: AsyncSession, user_id: int, day: str) -> Attendance | None:
    result = await db.execute(
        select(Attendance)
        .where(Attendance.user_id == user_id, Attendance.date == day)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def mark_entry(
    db: AsyncSession,
    user: User,
    coords: Coordinates | None,
    policy: AttendancePolicy,
    *,
    now: datetime | None = None,
) -> MarkResult:
    user_id = user.id
    now = now or utcnow()
    day = policy.today(now)
    via_wfh = await _check_location(db, user_id, day, coords, policy)
    location = coords or NO_LOCATION

    entry_values = {
        "entry_time": now,
        "entry_latitude": location.latitude,
        "entry_longitude": location.longitude,
        "is_wfh": via_wfh,
        "status": STATUS_PARTIAL,
    }
    db.add(Attendance(user_id=user_id, date=day, **entry_values))
    try:
        await db.commit()
    except IntegrityError:
        # Today's record exists; only one without an entry may be reused.
        await db.rollback()
        result = await db.execute(
            update(Attendance)
            .where(
                Attendance.user_id == user_id,
                Attendance.date == day,
                Attendance.entry_time.is_(None),
            )
            .values(**entry_values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await db.rollback()
            logger.info("Duplicate entry for user %d on %s", user_id, day)
            raise AlreadyMarked("Entry time already recorded for today") from None
        await db.commit()

    record = await _get_record(db, user_id, day)
    logger.info("Entry recorded for user %d on %s (wfh=%s)", user_id, day, via_wfh)
    return MarkResult(attendance=record, via_wfh=via_wfh)  # type: ignore[arg-type]


async def mark_exit(
    db: AsyncSession,
    user: User,
    coords: Coordinates | None,
    policy: AttendancePolicy,
    *,
    now: datetime | None = None,
) -> MarkResult:
    user_id = user.id
    now = now or utcnow()
    day = policy.today(now)
    via_wfh = await _check_location(db, user_id, day, coords, policy)

    record = await _get_record(db, user_id, day)
    if record is None or record.entry_time is None:
        raise NoEntryFound()
    if record.exit_time is not None:
        raise AlreadyMarked("Exit time already recorded for today")

    entry_time = ensure_utc(record.entry_time)
    exit_time = max(now, entry_time)
    elapsed = (exit_time - entry_time).total_seconds()
    location = coords or NO_LOCATION

    result = await db.execute(
        update(Attendance)
        .where(Attendance.id == record.id, Attendance.exit_time.is_(None))
        .values(
            exit_time=exit_time,
            exit_latitude=location.latitude,
            exit_longitude=location.longitude,
            total_duration_minutes=duration_minutes(elapsed),
            status=presence_status(elapsed, policy.minimum_presence_seconds),
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db.rollback()
        raise AlreadyMarked("Exit time already recorded for today")
    await db.commit()

    record = await _get_record(db, user_id, day)
    logger.info(
        "Exit recorded for user %d on %s: %d min, %s",
        user_id,
        day,
        record.total_duration_minutes,  # type: ignore[union-attr]
        record.status,  # type: ignore[union-attr]
    )
    return MarkResult(attendance=record, via_wfh=via_wfh)  # type: ignore[arg-type]


async def get_today(
    db: AsyncSession,
    user: User,
    policy: AttendancePolicy,
    *,
    now: datetime | None = None,
) -> tuple[str, Attendance | None, bool]:
    """Today's day key, record (if any) and whether WFH is approved."""
    day = policy.today(now or utcnow())
    record = await _get_record(db, user.id, day)
    return day, record, await has_approved_wfh(db, user.id, day)


async def list_history(db: AsyncSession, user_id: int) -> list[Attendance]:
    result = await db.execute(
        select(Attendance)
        .where(Attendance.user_id == user_id)
        .order_by(Attendance.date.desc())
    )
    return list(result.scalars().all())
