"""
User model: authentication, role-based access and reporting lines.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String

from geoattend.db.base import Base

ROLE_EMPLOYEE = "employee"
ROLE_MANAGER = "manager"


class User(Base):
    __tablename__ = "users"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    name: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    email: str = Column(String(320), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    hashed_password: str = Column(String(128), nullable=False)  # type: ignore[assignment]
    role: str = Column(  # type: ignore[assignment]
        String(20),
        nullable=False,
        default=ROLE_EMPLOYEE,
        server_default=ROLE_EMPLOYEE,
    )  # employee | manager
    # Required for employees; always points at a manager.
    manager_id: int | None = Column(  # type: ignore[assignment]
        Integer, ForeignKey("users.id"), nullable=True, index=True
    )
    is_active: bool = Column(Boolean, default=True, server_default="true")  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    @property
    def is_manager(self) -> bool:
        return self.role == ROLE_MANAGER
