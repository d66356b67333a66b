"""
Clock helpers: UTC timestamps and office-local calendar days.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Normalise a potentially-naive timestamp (SQLite drops tzinfo) to UTC-aware."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def parse_offset(tz_offset: str) -> timezone:
    """Turn ``"+05:30"`` / ``"-04"`` into a fixed-offset timezone."""
    sign = 1 if tz_offset[0] == "+" else -1
    parts = tz_offset[1:].split(":")
    if tz_offset[0] not in "+-" or len(parts) > 2 or not all(p.isdigit() for p in parts):
        raise ValueError(f"Malformed UTC offset: {tz_offset!r}")
    hours = int(parts[0])
    minutes = int(parts[1]) if len(parts) > 1 else 0
    if minutes >= 60:
        raise ValueError(f"Malformed UTC offset: {tz_offset!r}")
    return timezone(sign * timedelta(hours=hours, minutes=minutes))


def local_day(instant: datetime, tz: timezone) -> str:
    """Calendar day (YYYY-MM-DD) of *instant* in the office timezone."""
    return ensure_utc(instant).astimezone(tz).strftime("%Y-%m-%d")
