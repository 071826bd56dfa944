import secrets
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, HTTPException, status
from passlib.hash import bcrypt
from sitefunds.audit import record_audit
from sitefunds.auth import AuthContext, require_permission
from sitefunds.auth.permissions import (
    PASSWORD_RESET,
    TEAM_MANAGEMENT,
    USER_MANAGEMENT,
    USER_ROLE_UPDATE,
    USER_STATUS_UPDATE,
    VIEW_DASHBOARD,
)
from sitefunds.config import settings
from sitefunds.db import supabase
from sitefunds.models.users import (
    PasswordResetResponse,
    UserResponse,
    UserRoleUpdate,
    UserStatusUpdate,
)

router = APIRouter(prefix="/api/users", tags=["users"])

_USER_FIELDS = "id, email, first_name, last_name, role, status, manager_id, created_at, updated_at"


def _update_tenant_user(user_id: str, tenant_id: str, update_data: dict) -> dict:
    update_data["updated_at"] = datetime.now(timezone.utc).isoformat()
    result = supabase.table("users").update(update_data).eq(
        "id", user_id
    ).eq("tenant_id", tenant_id).is_("deleted_at", "null").execute()

    if not result.data:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return result.data[0]


@router.get("/", response_model=list[UserResponse])
async def list_users(auth: AuthContext = Depends(require_permission(USER_MANAGEMENT))):
    """List users in the tenant."""
    result = supabase.table("users").select(_USER_FIELDS).eq(
        "tenant_id", auth.tenant_id
    ).is_("deleted_at", "null").execute()
    return result.data


@router.get("/subordinates", response_model=list[UserResponse])
async def list_subordinates(auth: AuthContext = Depends(require_permission(VIEW_DASHBOARD))):
    """Users who report to the caller."""
    result = supabase.table("users").select(_USER_FIELDS).eq(
        "tenant_id", auth.tenant_id
    ).eq("manager_id", auth.user_id).is_("deleted_at", "null").execute()
    return result.data


@router.get("/team-leaders", response_model=list[UserResponse])
async def list_team_leaders(auth: AuthContext = Depends(require_permission(TEAM_MANAGEMENT))):
    result = supabase.table("users").select(_USER_FIELDS).eq(
        "tenant_id", auth.tenant_id
    ).eq("role", "team_leader").is_("deleted_at", "null").execute()
    return result.data


@router.patch("/{user_id}/role", response_model=UserResponse)
async def update_user_role(
    user_id: str,
    data: UserRoleUpdate,
    auth: AuthContext = Depends(require_permission(USER_ROLE_UPDATE)),
):
    """Change a user's role. Legacy role names are stored in their current form."""
    if user_id == auth.user_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot change your own role")
    if data.role == "console_manager":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="console_manager cannot be assigned within a tenant",
        )

    user = _update_tenant_user(user_id, auth.tenant_id, {"role": data.role})
    record_audit(
        tenant_id=auth.tenant_id,
        user_id=auth.user_id,
        action="user_role_updated",
        entity_type="user",
        entity_id=user_id,
        details={"role": data.role},
    )
    return user


@router.patch("/{user_id}/status", response_model=UserResponse)
async def update_user_status(
    user_id: str,
    data: UserStatusUpdate,
    auth: AuthContext = Depends(require_permission(USER_STATUS_UPDATE)),
):
    if user_id == auth.user_id and data.status != "active":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot deactivate your own account")

    user = _update_tenant_user(user_id, auth.tenant_id, {"status": data.status})
    record_audit(
        tenant_id=auth.tenant_id,
        user_id=auth.user_id,
        action="user_status_updated",
        entity_type="user",
        entity_id=user_id,
        details={"status": data.status},
    )
    return user


@router.post("/{user_id}/reset-password", response_model=PasswordResetResponse)
async def reset_user_password(user_id: str, auth: AuthContext = Depends(require_permission(PASSWORD_RESET))):
    """Issue a temporary password. The user must change it at next login."""
    temporary_password = secrets.token_urlsafe(settings.temporary_password_length)[: settings.temporary_password_length]
    _update_tenant_user(user_id, auth.tenant_id, {
        "password_hash": bcrypt.hash(temporary_password),
        "must_change_password": True,
        "failed_login_count": 0,
        "locked_until": None,
    })
    record_audit(
        tenant_id=auth.tenant_id,
        user_id=auth.user_id,
        action="user_updated",
        entity_type="user",
        entity_id=user_id,
        details={"password_reset": True},
    )
    return PasswordResetResponse(user_id=user_id, temporary_password=temporary_password)
