"""
Attendance model: one record per user per office-local day.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)

from geoattend.db.base import Base

STATUS_ABSENT = "absent"
STATUS_PARTIAL = "partial"
STATUS_PRESENT = "present"


class Attendance(Base):
    __tablename__ = "attendance"
    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_attendance_user_date"),
    )

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    user_id: int = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)  # type: ignore[assignment]
    date: str = Column(String(10), nullable=False, index=True)  # type: ignore[assignment]  # YYYY-MM-DD
    entry_time: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    exit_time: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    # (0, 0) when the mark was accepted without coordinates
    entry_latitude: float = Column(Float, nullable=False, default=0.0)  # type: ignore[assignment]
    entry_longitude: float = Column(Float, nullable=False, default=0.0)  # type: ignore[assignment]
    exit_latitude: float = Column(Float, nullable=False, default=0.0)  # type: ignore[assignment]
    exit_longitude: float = Column(Float, nullable=False, default=0.0)  # type: ignore[assignment]
    total_duration_minutes: int = Column(Integer, nullable=False, default=0)  # type: ignore[assignment]
    status: str = Column(  # type: ignore[assignment]
        String(10),
        nullable=False,
        default=STATUS_ABSENT,
        server_default=STATUS_ABSENT,
    )  # absent | partial | present
    is_wfh: bool = Column(Boolean, nullable=False, default=False)  # type: ignore[assignment]
    auto_entry: bool = Column(Boolean, nullable=False, default=False)  # type: ignore[assignment]
    auto_exit: bool = Column(Boolean, nullable=False, default=False)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
