"""Pydantic schemas for attendance marking and history."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from geoattend.core.geofence import Coordinates


class LocationPayload(BaseModel):
    """Client-reported position. Either field may be omitted for WFH marks."""

    latitude: float | None = Field(default=None, ge=-90, le=90, allow_inf_nan=False)
    longitude: float | None = Field(default=None, ge=-180, le=180, allow_inf_nan=False)

    def to_coordinates(self) -> Coordinates | None:
        if self.latitude is None or self.longitude is None:
            return None
        return Coordinates(self.latitude, self.longitude)


class AttendanceRead(BaseModel):
    id: int
    user_id: int
    date: str
    entry_time: datetime | None
    exit_time: datetime | None
    entry_latitude: float
    entry_longitude: float
    exit_latitude: float
    exit_longitude: float
    total_duration_minutes: int
    status: str
    is_wfh: bool
    auto_entry: bool
    auto_exit: bool

    model_config = {"from_attributes": True}


class AttendanceMarkResponse(BaseModel):
    success: bool = True
    message: str
    attendance: AttendanceRead


class AttendanceTodayResponse(BaseModel):
    date: str
    wfh_approved: bool
    attendance: AttendanceRead | None = None
