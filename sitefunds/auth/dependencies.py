from fastapi import Depends, Header, HTTPException, status
from sitefunds.auth.context import AuthContext
from sitefunds.auth.jwt import decode_access_token
from sitefunds.auth.permissions import has_permission as role_has_permission, is_at_least_role
from sitefunds.db import supabase
from sitefunds.observability import incr_metric, log_event


def _extract_bearer_token(authorization: str | None) -> str | None:
    """Extract token from 'Bearer <token>' header."""
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1]


def _get_active_user(user_id: str, tenant_id: str) -> dict | None:
    """Load an active, non-deleted user within the tenant."""
    user_result = supabase.table("users").select(
        "id, tenant_id, email, role, status"
    ).eq("id", user_id).eq("tenant_id", tenant_id).is_("deleted_at", "null").execute()
    if not user_result.data:
        return None
    user = user_result.data[0]
    if user.get("status", "active") != "active":
        return None
    return user


async def _validate_jwt(token: str) -> AuthContext | None:
    """Validate JWT session token. Returns AuthContext or None."""
    payload = decode_access_token(token)
    if not payload:
        return None

    user = _get_active_user(payload["sub"], payload["tenant_id"])
    if not user:
        return None

    return AuthContext(
        tenant_id=user["tenant_id"],
        user_id=user["id"],
        role=user.get("role"),
        email=user.get("email"),
        auth_method="session",
    )


async def get_current_auth(authorization: str | None = Header(None)) -> AuthContext:
    """Session auth for user-facing endpoints. Fails closed on any lookup problem."""
    token = _extract_bearer_token(authorization)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authorization header",
        )

    auth = await _validate_jwt(token)
    if not auth:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired session",
        )

    return auth


def _deny(auth: AuthContext, *, gate: str, detail: str) -> HTTPException:
    incr_metric("authz_denied", gate=gate, role=auth.role)
    log_event(
        "authz_denied",
        user_id=auth.user_id,
        tenant_id=auth.tenant_id,
        role=auth.role,
        gate=gate,
    )
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


def has_permission(auth: AuthContext, permission_key: str) -> bool:
    if permission_key in auth.permissions:
        return True
    return role_has_permission(auth.role, permission_key)


def ensure_permission(auth: AuthContext, permission_key: str) -> None:
    """Inline variant of require_permission for handlers whose gate depends on the payload."""
    if not has_permission(auth, permission_key):
        raise _deny(auth, gate=permission_key, detail=f"Permission required: {permission_key}")


def require_permission(permission_key: str):
    async def _require(auth: AuthContext = Depends(get_current_auth)) -> AuthContext:
        ensure_permission(auth, permission_key)
        return auth

    return _require


def require_min_role(minimum_role: str):
    async def _require(auth: AuthContext = Depends(get_current_auth)) -> AuthContext:
        if not is_at_least_role(auth.role, minimum_role):
            raise _deny(auth, gate=f"role>={minimum_role}", detail=f"Role at least {minimum_role} required")
        return auth

    return _require
