"""
Task endpoints.

- Managers create tasks, assign them and approve completed work.
- Employees see their own and their team's assignments and mark them complete.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from geoattend.api.v1.deps import (
    get_current_active_user,
    get_db,
    require_manager,
)
from geoattend.models.task import Task, TaskAssignment
from geoattend.models.user import User
from geoattend.schemas.common import MAX_ID
from geoattend.schemas.task import (
    TaskAssign,
    TaskAssignmentRead,
    TaskAssignmentResponse,
    TaskCreate,
    TaskRead,
)
from geoattend.services import tasks as task_service

router = APIRouter(tags=["tasks"])


# ── Tasks ───────────────────────────────────────────────────────────
@router.post("/tasks", response_model=TaskRead, status_code=201)
async def create_task(
    body: TaskCreate,
    db: AsyncSession = Depends(get_db),
    manager: User = Depends(require_manager),
) -> Task:
    return await task_service.create_task(db, manager, body.title, body.description)


@router.get("/tasks", response_model=list[TaskRead])
async def list_tasks(
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> list[Task]:
    return await task_service.list_tasks(db)


# ── Assignments (manager) ───────────────────────────────────────────
@router.post("/tasks/assign", response_model=TaskAssignmentResponse, status_code=201)
async def assign_task(
    body: TaskAssign,
    db: AsyncSession = Depends(get_db),
    manager: User = Depends(require_manager),
) -> TaskAssignmentResponse:
    assignment = await task_service.assign_task(db, manager, body.task_id, body.employee_id)
    return TaskAssignmentResponse(
        message="Task assigned successfully",
        assignment=TaskAssignmentRead.model_validate(assignment),
    )


@router.get("/tasks/assigned", response_model=list[TaskAssignmentRead])
async def list_assigned_tasks(
    db: AsyncSession = Depends(get_db),
    _manager: User = Depends(require_manager),
) -> list[TaskAssignment]:
    return await task_service.list_all(db)


@router.get("/tasks/review/{task_id}", response_model=TaskAssignmentRead)
async def get_task_for_review(
    task_id: int = Path(ge=1, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
    _manager: User = Depends(require_manager),
) -> TaskAssignment:
    return await task_service.get_for_review(db, task_id)


@router.post("/tasks/approve/{task_id}", response_model=TaskAssignmentResponse)
async def approve_task(
    task_id: int = Path(ge=1, le=MAX_ID),
    employee_id: int | None = Query(default=None, ge=1, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
    manager: User = Depends(require_manager),
) -> TaskAssignmentResponse:
    assignment = await task_service.approve_task(db, manager, task_id, employee_id)
    return TaskAssignmentResponse(
        message="Task approved successfully",
        assignment=TaskAssignmentRead.model_validate(assignment),
    )


# ── Assignments (employee) ──────────────────────────────────────────
@router.post("/tasks/complete/{task_id}", response_model=TaskAssignmentResponse)
async def complete_task(
    task_id: int = Path(ge=1, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> TaskAssignmentResponse:
    assignment = await task_service.complete_task(db, current_user, task_id)
    return TaskAssignmentResponse(
        message="Task marked as completed and pending review",
        assignment=TaskAssignmentRead.model_validate(assignment),
    )


@router.get("/employee/tasks", response_model=list[TaskAssignmentRead])
async def my_tasks(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[TaskAssignment]:
    return await task_service.list_for_employee(db, current_user.id)


@router.get("/employee/team-tasks", response_model=list[TaskAssignmentRead])
async def team_tasks(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[TaskAssignment]:
    return await task_service.list_team(db, current_user)
