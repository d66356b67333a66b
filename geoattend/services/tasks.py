"""
Task assignment workflow: pending -> pending_review -> approved.
"""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import case, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from geoattend.core.exceptions import (
    AlreadyAssigned,
    Forbidden,
    InvalidEmployee,
    NoManagerAssigned,
    NotFound,
    NotPendingReview,
    TaskNotPending,
)
from geoattend.core.timeutils import utcnow
from geoattend.models.task import (
    TASK_APPROVED,
    TASK_PENDING,
    TASK_PENDING_REVIEW,
    Task,
    TaskAssignment,
)
from geoattend.models.user import ROLE_EMPLOYEE, User

logger = logging.getLogger(__name__)


async def _load_assignment(db: AsyncSession, assignment_id: int) -> TaskAssignment:
    result = await db.execute(
        select(TaskAssignment)
        .where(TaskAssignment.id == assignment_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def _find_for_review(
    db: AsyncSession, task_id: int, employee_id: int | None = None
) -> TaskAssignment | None:
    """Pick the assignment a reviewer acts on.

    With an explicit employee the pair decides; otherwise prefer the task's
    assignment awaiting review, falling back to its oldest one.
    """
    query = select(TaskAssignment).where(TaskAssignment.task_id == task_id)
    if employee_id is not None:
        query = query.where(TaskAssignment.employee_id == employee_id)
    query = query.order_by(
        case((TaskAssignment.status == TASK_PENDING_REVIEW, 0), else_=1),
        TaskAssignment.id,
    ).limit(1)
    result = await db.execute(query)
    return result.scalar_one_or_none()


# ── Tasks ───────────────────────────────────────────────────────────
async def create_task(
    db: AsyncSession, manager: User, title: str, description: str | None
) -> Task:
    task = Task(title=title.strip(), description=description, created_by=manager.id)
    db.add(task)
    await db.commit()
    await db.refresh(task)
    logger.info("Task %d created by manager %d", task.id, manager.id)
    return task


async def list_tasks(db: AsyncSession) -> list[Task]:
    result = await db.execute(select(Task).order_by(Task.created_at.desc(), Task.id.desc()))
    return list(result.scalars().all())


# ── Assignments ─────────────────────────────────────────────────────
async def assign_task(
    db: AsyncSession, manager: User, task_id: int, employee_id: int
) -> TaskAssignment:
    manager_id = manager.id
    task = await db.get(Task, task_id)
    if task is None:
        raise NotFound("Task not found")

    employee = await db.get(User, employee_id)
    if employee is None or employee.role != ROLE_EMPLOYEE or not employee.is_active:
        raise InvalidEmployee()

    assignment = TaskAssignment(
        task_id=task_id,
        employee_id=employee_id,
        assigned_by=manager_id,
        status=TASK_PENDING,
    )
    db.add(assignment)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise AlreadyAssigned() from None

    logger.info("Task %d assigned to user %d by %d", task_id, employee_id, manager_id)
    return await _load_assignment(db, assignment.id)


async def complete_task(
    db: AsyncSession,
    employee: User,
    task_id: int,
    *,
    now: datetime | None = None,
) -> TaskAssignment:
    employee_id = employee.id
    result = await db.execute(
        select(TaskAssignment).where(
            TaskAssignment.task_id == task_id,
            TaskAssignment.employee_id == employee_id,
        )
    )
    assignment = result.scalar_one_or_none()
    if assignment is None:
        raise NotFound("Task assignment not found")
    if assignment.status != TASK_PENDING:
        raise TaskNotPending()

    updated = await db.execute(
        update(TaskAssignment)
        .where(TaskAssignment.id == assignment.id, TaskAssignment.status == TASK_PENDING)
        .values(status=TASK_PENDING_REVIEW, completed_date=now or utcnow())
        .execution_options(synchronize_session=False)
    )
    if updated.rowcount == 0:
        await db.rollback()
        raise TaskNotPending()
    await db.commit()

    logger.info("Task %d completed by user %d, pending review", task_id, employee_id)
    return await _load_assignment(db, assignment.id)


async def approve_task(
    db: AsyncSession,
    manager: User,
    task_id: int,
    employee_id: int | None = None,
    *,
    now: datetime | None = None,
) -> TaskAssignment:
    manager_id = manager.id
    assignment = await _find_for_review(db, task_id, employee_id)
    if assignment is None:
        raise NotFound("Task not found")
    if assignment.employee_id == manager_id:
        raise Forbidden("Reviewer must not be the assignee")
    if assignment.status != TASK_PENDING_REVIEW:
        raise NotPendingReview()

    assignment_id = assignment.id
    updated = await db.execute(
        update(TaskAssignment)
        .where(
            TaskAssignment.id == assignment_id,
            TaskAssignment.status == TASK_PENDING_REVIEW,
        )
        .values(status=TASK_APPROVED, approved_date=now or utcnow())
        .execution_options(synchronize_session=False)
    )
    if updated.rowcount == 0:
        await db.rollback()
        raise NotPendingReview()
    await db.commit()

    logger.info("Task %d approved by manager %d", task_id, manager_id)
    return await _load_assignment(db, assignment_id)


async def get_for_review(db: AsyncSession, task_id: int) -> TaskAssignment:
    assignment = await _find_for_review(db, task_id)
    if assignment is None:
        raise NotFound("Task not found")
    return assignment


async def list_for_employee(db: AsyncSession, employee_id: int) -> list[TaskAssignment]:
    result = await db.execute(
        select(TaskAssignment)
        .where(TaskAssignment.employee_id == employee_id)
        .order_by(TaskAssignment.assigned_at.desc(), TaskAssignment.id.desc())
    )
    return list(result.scalars().all())


async def list_all(db: AsyncSession) -> list[TaskAssignment]:
    result = await db.execute(
        select(TaskAssignment).order_by(TaskAssignment.assigned_at.desc(), TaskAssignment.id.desc())
    )
    return list(result.scalars().all())


async def list_team(db: AsyncSession, user: User) -> list[TaskAssignment]:
    """Assignments of everyone sharing the caller's manager, caller excluded."""
    if user.manager_id is None:
        raise NoManagerAssigned()

    teammates = select(User.id).where(
        User.manager_id == user.manager_id, User.id != user.id
    )
    result = await db.execute(
        select(TaskAssignment)
        .where(TaskAssignment.employee_id.in_(teammates))
        .order_by(TaskAssignment.assigned_at.desc(), TaskAssignment.id.desc())
    )
    return list(result.scalars().all())
