"""Pydantic schemas for tasks and task assignments."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from geoattend.schemas.common import MAX_ID
from geoattend.schemas.user import UserBrief


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = None


class TaskRead(BaseModel):
    id: int
    title: str
    description: str | None
    created_by: int
    created_at: datetime | None

    model_config = {"from_attributes": True}


class TaskAssign(BaseModel):
    task_id: int = Field(..., ge=1, le=MAX_ID)
    employee_id: int = Field(..., ge=1, le=MAX_ID)


class TaskAssignmentRead(BaseModel):
    id: int
    task_id: int
    employee_id: int
    assigned_by: int
    status: str
    assigned_at: datetime | None
    completed_date: datetime | None
    approved_date: datetime | None
    task: TaskRead | None = None
    employee: UserBrief | None = None

    model_config = {"from_attributes": True}


class TaskAssignmentResponse(BaseModel):
    message: str
    assignment: TaskAssignmentRead
