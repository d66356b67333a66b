"""Generic response schemas."""

from __future__ import annotations

from pydantic import BaseModel

# Largest value a 32-bit INTEGER primary key column can hold
MAX_ID = 2_147_483_647


class HealthResponse(BaseModel):
    status: str
    db: bool
    version: str


class LogoutResponse(BaseModel):
    message: str
