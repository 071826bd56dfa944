from pydantic import BaseModel, EmailStr, Field
from datetime import datetime


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    must_change_password: bool = False


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(min_length=8)


class SessionUserResponse(BaseModel):
    """Payload of the session endpoint the dashboard polls once per session."""
    id: str
    tenant_id: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    role: str | None  # as stored, legacy aliases included
    normalized_role: str
    status: str
    must_change_password: bool = False
    permissions: list[str]
    capabilities: dict[str, bool]
    created_at: datetime | None = None
