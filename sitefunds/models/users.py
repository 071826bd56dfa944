from pydantic import BaseModel, field_validator
from datetime import datetime
from typing import Literal
from sitefunds.auth.permissions import normalize_role
from sitefunds.domain.ledger import UserStatus


RoleInput = Literal["console_manager", "admin", "team_leader", "viewer", "manager", "user"]


class UserRoleUpdate(BaseModel):
    role: RoleInput

    @field_validator("role", mode="after")
    @classmethod
    def _normalize_role(cls, value: str) -> str:
        return normalize_role(value)


class UserStatusUpdate(BaseModel):
    status: UserStatus


class PasswordResetResponse(BaseModel):
    user_id: str
    temporary_password: str
    must_change_password: bool = True


class UserResponse(BaseModel):
    id: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    role: str
    status: str = "active"
    manager_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("role", mode="before")
    @classmethod
    def _normalize_role(cls, value: str | None) -> str:
        return normalize_role(value)
