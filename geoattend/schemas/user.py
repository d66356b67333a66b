"""Pydantic schemas for registration and user profiles."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from geoattend.models.user import ROLE_EMPLOYEE, ROLE_MANAGER
from geoattend.schemas.common import MAX_ID

_VALID_ROLES = {ROLE_EMPLOYEE, ROLE_MANAGER}


class UserRegister(BaseModel):
    name: str
    email: str
    password: str
    role: str = ROLE_EMPLOYEE
    manager_id: int | None = Field(default=None, ge=1, le=MAX_ID)

    @field_validator("role")
    @classmethod
    def _validate_role(cls, v: str) -> str:
        if v not in _VALID_ROLES:
            raise ValueError(f"Role must be one of: {sorted(_VALID_ROLES)}")
        return v

    @field_validator("email")
    @classmethod
    def _normalise_email(cls, v: str) -> str:
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("Invalid email address")
        return v

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name must not be empty")
        if len(v) > 200:
            raise ValueError("Name must not exceed 200 characters")
        return v

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        if len(v.encode("utf-8")) > 72:
            raise ValueError("Password must not exceed 72 bytes")
        return v

    @model_validator(mode="after")
    def _manager_required_for_employees(self) -> UserRegister:
        if self.role == ROLE_EMPLOYEE and self.manager_id is None:
            raise ValueError("Manager ID is required for employees")
        if self.role == ROLE_MANAGER:
            self.manager_id = None
        return self


class UserRead(BaseModel):
    id: int
    name: str
    email: str
    role: str
    manager_id: int | None
    is_active: bool
    created_at: datetime | None

    model_config = {"from_attributes": True}


class UserBrief(BaseModel):
    id: int
    name: str
    email: str

    model_config = {"from_attributes": True}