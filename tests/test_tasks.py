"""Tests for task creation, assignment, completion and approval."""

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from conftest import auth_headers
from geoattend.core.exceptions import (
    AlreadyAssigned,
    Forbidden,
    InvalidEmployee,
    NoManagerAssigned,
    NotFound,
    NotPendingReview,
    TaskNotPending,
)
from geoattend.models.task import TaskAssignment
from geoattend.models.user import ROLE_MANAGER
from geoattend.services import tasks as task_service


# ── Service ─────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_assignment_lifecycle(db_session, manager, employee):
    task = await task_service.create_task(db_session, manager, "  Quarterly report ", "Q2 numbers")
    assert task.title == "Quarterly report"
    assert task.created_by == manager.id

    assignment = await task_service.assign_task(db_session, manager, task.id, employee.id)
    assert assignment.status == "pending"
    assert assignment.assigned_by == manager.id
    assert assignment.completed_date is None
    assert assignment.task.title == "Quarterly report"
    assert assignment.employee.name == "Eli Employee"

    completed = await task_service.complete_task(db_session, employee, task.id)
    assert completed.status == "pending_review"
    assert completed.completed_date is not None
    assert completed.approved_date is None

    approved = await task_service.approve_task(db_session, manager, task.id)
    assert approved.status == "approved"
    assert approved.approved_date is not None


@pytest.mark.asyncio
async def test_assign_unknown_task(db_session, manager, employee):
    with pytest.raises(NotFound):
        await task_service.assign_task(db_session, manager, 404, employee.id)


@pytest.mark.asyncio
async def test_assign_to_non_employee(db_session, make_user, manager):
    task = await task_service.create_task(db_session, manager, "Audit", None)
    other_manager = await make_user(ROLE_MANAGER)

    with pytest.raises(InvalidEmployee):
        await task_service.assign_task(db_session, manager, task.id, other_manager.id)
    with pytest.raises(InvalidEmployee):
        await task_service.assign_task(db_session, manager, task.id, 9999)


@pytest.mark.asyncio
async def test_assign_twice_is_conflict(db_session, manager, employee):
    employee_id = employee.id
    task = await task_service.create_task(db_session, manager, "Audit", None)
    task_id = task.id
    await task_service.assign_task(db_session, manager, task_id, employee_id)

    with pytest.raises(AlreadyAssigned):
        await task_service.assign_task(db_session, manager, task_id, employee_id)

    count = await db_session.scalar(
        select(func.count()).select_from(TaskAssignment).where(TaskAssignment.task_id == task_id)
    )
    assert count == 1


@pytest.mark.asyncio
async def test_complete_requires_pending(db_session, manager, employee):
    task = await task_service.create_task(db_session, manager, "Audit", None)
    await task_service.assign_task(db_session, manager, task.id, employee.id)
    await task_service.complete_task(db_session, employee, task.id)

    with pytest.raises(TaskNotPending):
        await task_service.complete_task(db_session, employee, task.id)


@pytest.mark.asyncio
async def test_complete_unassigned_task(db_session, make_user, manager, employee):
    task = await task_service.create_task(db_session, manager, "Audit", None)
    await task_service.assign_task(db_session, manager, task.id, employee.id)
    colleague = await make_user(manager=manager)

    with pytest.raises(NotFound):
        await task_service.complete_task(db_session, colleague, task.id)


@pytest.mark.asyncio
async def test_approve_requires_pending_review(db_session, manager, employee):
    task = await task_service.create_task(db_session, manager, "Audit", None)
    await task_service.assign_task(db_session, manager, task.id, employee.id)

    with pytest.raises(NotPendingReview):
        await task_service.approve_task(db_session, manager, task.id)

    await task_service.complete_task(db_session, employee, task.id)
    await task_service.approve_task(db_session, manager, task.id)

    with pytest.raises(NotPendingReview):
        await task_service.approve_task(db_session, manager, task.id)


@pytest.mark.asyncio
async def test_approve_unknown_task(db_session, manager):
    with pytest.raises(NotFound):
        await task_service.approve_task(db_session, manager, 12345)


@pytest.mark.asyncio
async def test_reviewer_cannot_approve_own_assignment(db_session, make_user, manager):
    lead = await make_user(ROLE_MANAGER)
    task = await task_service.create_task(db_session, lead, "Self review", None)
    db_session.add(
        TaskAssignment(
            task_id=task.id,
            employee_id=manager.id,
            assigned_by=lead.id,
            status="pending_review",
        )
    )
    await db_session.commit()

    with pytest.raises(Forbidden):
        await task_service.approve_task(db_session, manager, task.id)


@pytest.mark.asyncio
async def test_approve_targets_assignment_awaiting_review(db_session, make_user, manager, employee):
    colleague = await make_user(manager=manager)
    task = await task_service.create_task(db_session, manager, "Shared", None)
    await task_service.assign_task(db_session, manager, task.id, employee.id)
    await task_service.assign_task(db_session, manager, task.id, colleague.id)
    await task_service.complete_task(db_session, colleague, task.id)

    review = await task_service.get_for_review(db_session, task.id)
    assert review.employee_id == colleague.id

    approved = await task_service.approve_task(db_session, manager, task.id)
    assert approved.employee_id == colleague.id

    with pytest.raises(NotPendingReview):
        await task_service.approve_task(db_session, manager, task.id, employee.id)


@pytest.mark.asyncio
async def test_team_listing(db_session, make_user, manager, employee):
    colleague = await make_user(manager=manager)
    task = await task_service.create_task(db_session, manager, "Shared", None)
    await task_service.assign_task(db_session, manager, task.id, employee.id)
    await task_service.assign_task(db_session, manager, task.id, colleague.id)

    team = await task_service.list_team(db_session, employee)
    assert [a.employee_id for a in team] == [colleague.id]

    mine = await task_service.list_for_employee(db_session, employee.id)
    assert [a.employee_id for a in mine] == [employee.id]

    with pytest.raises(NoManagerAssigned):
        await task_service.list_team(db_session, manager)


# ── API ─────────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_employee_cannot_create_or_assign(async_client: AsyncClient, employee):
    headers = auth_headers(employee)
    resp = await async_client.post("/api/v1/tasks", json={"title": "Nope"}, headers=headers)
    assert resp.status_code == 403

    resp = await async_client.post(
        "/api/v1/tasks/assign", json={"task_id": 1, "employee_id": employee.id}, headers=headers
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_task_flow_over_http(async_client: AsyncClient, manager, employee):
    mgr = auth_headers(manager)
    emp = auth_headers(employee)

    created = await async_client.post(
        "/api/v1/tasks", json={"title": "Inventory", "description": "Count chairs"}, headers=mgr
    )
    assert created.status_code == 201
    task_id = created.json()["id"]

    listed = await async_client.get("/api/v1/tasks", headers=emp)
    assert [t["id"] for t in listed.json()] == [task_id]

    assigned = await async_client.post(
        "/api/v1/tasks/assign", json={"task_id": task_id, "employee_id": employee.id}, headers=mgr
    )
    assert assigned.status_code == 201
    assert assigned.json()["message"] == "Task assigned successfully"
    assert assigned.json()["assignment"]["employee"]["name"] == "Eli Employee"

    again = await async_client.post(
        "/api/v1/tasks/assign", json={"task_id": task_id, "employee_id": employee.id}, headers=mgr
    )
    assert again.status_code == 409
    assert again.json()["code"] == "already_assigned"

    mine = await async_client.get("/api/v1/employee/tasks", headers=emp)
    assert mine.json()[0]["task"]["title"] == "Inventory"
    assert mine.json()[0]["status"] == "pending"

    early = await async_client.post(f"/api/v1/tasks/approve/{task_id}", headers=mgr)
    assert early.status_code == 409
    assert early.json()["code"] == "not_pending_review"

    done = await async_client.post(f"/api/v1/tasks/complete/{task_id}", headers=emp)
    assert done.status_code == 200
    assert done.json()["message"] == "Task marked as completed and pending review"
    assert done.json()["assignment"]["status"] == "pending_review"

    twice = await async_client.post(f"/api/v1/tasks/complete/{task_id}", headers=emp)
    assert twice.status_code == 409
    assert twice.json()["code"] == "task_not_pending"

    review = await async_client.get(f"/api/v1/tasks/review/{task_id}", headers=mgr)
    assert review.status_code == 200
    assert review.json()["status"] == "pending_review"

    approved = await async_client.post(
        f"/api/v1/tasks/approve/{task_id}",
        params={"employee_id": employee.id},
        headers=mgr,
    )
    assert approved.status_code == 200
    assert approved.json()["message"] == "Task approved successfully"
    assert approved.json()["assignment"]["status"] == "approved"

    overview = await async_client.get("/api/v1/tasks/assigned", headers=mgr)
    assert [a["status"] for a in overview.json()] == ["approved"]


@pytest.mark.asyncio
async def test_task_errors_over_http(async_client: AsyncClient, make_user, manager, employee):
    mgr = auth_headers(manager)

    resp = await async_client.post(
        "/api/v1/tasks/assign", json={"task_id": 777, "employee_id": employee.id}, headers=mgr
    )
    assert resp.status_code == 404

    created = await async_client.post("/api/v1/tasks", json={"title": "Audit"}, headers=mgr)
    task_id = created.json()["id"]
    resp = await async_client.post(
        "/api/v1/tasks/assign", json={"task_id": task_id, "employee_id": manager.id}, headers=mgr
    )
    assert resp.status_code == 400
    assert resp.json()["code"] == "invalid_employee"

    resp = await async_client.get("/api/v1/tasks/review/777", headers=mgr)
    assert resp.status_code == 404

    resp = await async_client.post("/api/v1/tasks/complete/777", headers=auth_headers(employee))
    assert resp.status_code == 404

    resp = await async_client.post("/api/v1/tasks", json={"title": ""}, headers=mgr)
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_team_tasks_over_http(async_client: AsyncClient, make_user, manager, employee):
    colleague = await make_user(manager=manager, name="Cora Colleague")
    mgr = auth_headers(manager)

    created = await async_client.post("/api/v1/tasks", json={"title": "Shared"}, headers=mgr)
    task_id = created.json()["id"]
    for assignee in (employee.id, colleague.id):
        await async_client.post(
            "/api/v1/tasks/assign", json={"task_id": task_id, "employee_id": assignee}, headers=mgr
        )

    team = await async_client.get("/api/v1/employee/team-tasks", headers=auth_headers(employee))
    assert team.status_code == 200
    assert [a["employee"]["name"] for a in team.json()] == ["Cora Colleague"]

    resp = await async_client.get("/api/v1/employee/team-tasks", headers=mgr)
    assert resp.status_code == 400
    assert resp.json()["code"] == "no_manager_assigned"
