"""
Task & TaskAssignment models.

A task is created by a manager and assigned to any number of employees;
each (task, employee) assignment moves forward only:
pending -> pending_review -> approved.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from geoattend.db.base import Base

TASK_PENDING = "pending"
TASK_PENDING_REVIEW = "pending_review"
TASK_APPROVED = "approved"


class Task(Base):
    __tablename__ = "tasks"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    title: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    description: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    created_by: int = Column(Integer, ForeignKey("users.id"), nullable=False)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    assignments = relationship(
        "TaskAssignment",
        back_populates="task",
        cascade="all, delete-orphan",
    )


class TaskAssignment(Base):
    __tablename__ = "task_assignments"
    __table_args__ = (
        UniqueConstraint("task_id", "employee_id", name="uq_assignment_task_employee"),
    )

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    task_id: int = Column(Integer, ForeignKey("tasks.id"), nullable=False, index=True)  # type: ignore[assignment]
    employee_id: int = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)  # type: ignore[assignment]
    assigned_by: int = Column(Integer, ForeignKey("users.id"), nullable=False)  # type: ignore[assignment]
    status: str = Column(  # type: ignore[assignment]
        String(20),
        nullable=False,
        default=TASK_PENDING,
        server_default=TASK_PENDING,
    )  # pending | pending_review | approved
    assigned_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    completed_date: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    approved_date: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]

    task = relationship("Task", back_populates="assignments", lazy="selectin")
    employee = relationship("User", foreign_keys=[employee_id], lazy="selectin")
