import logging
from datetime import datetime, timedelta, timezone
from fastapi import APIRouter, Depends, HTTPException, status
from passlib.hash import bcrypt
from sitefunds.audit import record_audit
from sitefunds.auth import AuthContext, get_current_auth
from sitefunds.auth.jwt import create_access_token
from sitefunds.auth.permissions import capabilities_for_role, normalize_role, permissions_for_role
from sitefunds.config import settings
from sitefunds.db import supabase
from sitefunds.models.auth import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    SessionUserResponse,
)
from sitefunds.observability import incr_metric, log_event

router = APIRouter(prefix="/api/auth", tags=["auth"])

_INVALID_CREDENTIALS = "Invalid email or password"


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _login_failed(user: dict | None, action: str, detail: str, email: str) -> HTTPException:
    incr_metric("auth_login_failed", reason=action)
    log_event("auth_login_failed", level=logging.WARNING, reason=action, email=email)
    record_audit(
        tenant_id=user["tenant_id"] if user else None,
        user_id=user["id"] if user else None,
        action=action,
        entity_type="user",
        entity_id=user["id"] if user else email,
        details={"email": email},
    )
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def _register_failed_attempt(user: dict) -> None:
    failed = int(user.get("failed_login_count") or 0) + 1
    update_data: dict = {"failed_login_count": failed}
    if failed >= settings.login_max_failed_attempts:
        locked_until = datetime.now(timezone.utc) + timedelta(minutes=settings.login_lockout_minutes)
        update_data["locked_until"] = locked_until.isoformat()
    supabase.table("users").update(update_data).eq("id", user["id"]).eq(
        "tenant_id", user["tenant_id"]
    ).execute()


@router.post("/login", response_model=LoginResponse)
async def login(data: LoginRequest):
    """Login with email and password, returns JWT."""
    result = supabase.table("users").select(
        "id, tenant_id, email, password_hash, status, failed_login_count, locked_until, must_change_password"
    ).eq("email", data.email).is_("deleted_at", "null").execute()

    if not result.data:
        raise _login_failed(None, "login_failed_user_not_found", _INVALID_CREDENTIALS, data.email)

    user = result.data[0]

    locked_until = _parse_timestamp(user.get("locked_until"))
    if locked_until and locked_until > datetime.now(timezone.utc):
        raise _login_failed(user, "login_failed_account_locked", "Account is temporarily locked", data.email)

    if user.get("status", "active") != "active":
        raise _login_failed(user, "login_failed_account_inactive", "Account is not active", data.email)

    if not user.get("password_hash") or not bcrypt.verify(data.password, user["password_hash"]):
        _register_failed_attempt(user)
        raise _login_failed(user, "login_failed_invalid_password", _INVALID_CREDENTIALS, data.email)

    supabase.table("users").update({
        "failed_login_count": 0,
        "locked_until": None,
    }).eq("id", user["id"]).eq("tenant_id", user["tenant_id"]).execute()

    record_audit(
        tenant_id=user["tenant_id"],
        user_id=user["id"],
        action="login_successful",
        entity_type="user",
        entity_id=user["id"],
    )

    token = create_access_token(user_id=user["id"], tenant_id=user["tenant_id"])
    return LoginResponse(
        access_token=token,
        must_change_password=bool(user.get("must_change_password")),
    )


@router.get("/user", response_model=SessionUserResponse)
async def get_session_user(auth: AuthContext = Depends(get_current_auth)):
    """Current user record, with the role normalized and its capabilities resolved."""
    result = supabase.table("users").select(
        "id, tenant_id, email, first_name, last_name, role, status, must_change_password, created_at"
    ).eq("id", auth.user_id).eq("tenant_id", auth.tenant_id).is_("deleted_at", "null").execute()

    if not result.data:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired session")

    user = result.data[0]
    normalized = normalize_role(user.get("role"))
    return SessionUserResponse(
        id=user["id"],
        tenant_id=user["tenant_id"],
        email=user["email"],
        first_name=user.get("first_name"),
        last_name=user.get("last_name"),
        role=user.get("role"),
        normalized_role=normalized,
        status=user.get("status", "active"),
        must_change_password=bool(user.get("must_change_password")),
        permissions=sorted(permissions_for_role(normalized)),
        capabilities=capabilities_for_role(normalized),
        created_at=user.get("created_at"),
    )


@router.post("/change-password", status_code=status.HTTP_204_NO_CONTENT)
async def change_password(data: ChangePasswordRequest, auth: AuthContext = Depends(get_current_auth)):
    """Change the caller's password and clear the forced-change flag."""
    result = supabase.table("users").select("id, password_hash").eq(
        "id", auth.user_id
    ).eq("tenant_id", auth.tenant_id).is_("deleted_at", "null").execute()

    if not result.data:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    user = result.data[0]
    if not user.get("password_hash") or not bcrypt.verify(data.current_password, user["password_hash"]):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Current password is incorrect")

    supabase.table("users").update({
        "password_hash": bcrypt.hash(data.new_password),
        "must_change_password": False,
        "failed_login_count": 0,
        "locked_until": None,
        "updated_at": datetime.now(timezone.utc).isoformat(),
    }).eq("id", auth.user_id).eq("tenant_id", auth.tenant_id).execute()

    record_audit(
        tenant_id=auth.tenant_id,
        user_id=auth.user_id,
        action="password_changed",
        entity_type="user",
        entity_id=auth.user_id,
    )
    return None
