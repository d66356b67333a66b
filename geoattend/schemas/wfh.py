"""Pydantic schemas for work-from-home requests."""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, field_validator


class WFHRequestCreate(BaseModel):
    date: dt.date
    reason: str

    @field_validator("reason")
    @classmethod
    def _reason(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Reason must not be empty")
        if len(v) > 500:
            raise ValueError("Reason must not exceed 500 characters")
        return v


class WFHRespond(BaseModel):
    # Validated by the workflow so an unknown value maps to InvalidDecision.
    status: str


class WFHRequestRead(BaseModel):
    id: int
    user_id: int
    manager_id: int
    date: str
    reason: str
    status: str
    responded_at: dt.datetime | None
    created_at: dt.datetime | None
    employee_name: str | None = None

    model_config = {"from_attributes": True}


class WFHRequestResponse(BaseModel):
    success: bool = True
    message: str
    request: WFHRequestRead
