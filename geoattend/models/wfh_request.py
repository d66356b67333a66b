"""
WFHRequest model: one work-from-home request per user per day.

Pending is the only non-terminal status; Approved / Rejected are final.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)

from geoattend.db.base import Base

WFH_PENDING = "Pending"
WFH_APPROVED = "Approved"
WFH_REJECTED = "Rejected"
WFH_DECISIONS = (WFH_APPROVED, WFH_REJECTED)


class WFHRequest(Base):
    __tablename__ = "wfh_requests"
    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_wfh_user_date"),
        Index("ix_wfh_manager_status", "manager_id", "status"),
    )

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    user_id: int = Column(Integer, ForeignKey("users.id"), nullable=False)  # type: ignore[assignment]
    manager_id: int = Column(Integer, ForeignKey("users.id"), nullable=False)  # type: ignore[assignment]
    date: str = Column(String(10), nullable=False)  # type: ignore[assignment]  # YYYY-MM-DD
    reason: str = Column(String(500), nullable=False)  # type: ignore[assignment]
    status: str = Column(  # type: ignore[assignment]
        String(10),
        nullable=False,
        default=WFH_PENDING,
        server_default=WFH_PENDING,
    )
    responded_at: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
