from sitefunds.auth.context import AuthContext
from sitefunds.auth.dependencies import (
    ensure_permission,
    get_current_auth,
    has_permission,
    require_min_role,
    require_permission,
)
from sitefunds.auth.jwt import create_access_token

__all__ = [
    "AuthContext",
    "ensure_permission",
    "get_current_auth",
    "has_permission",
    "require_min_role",
    "require_permission",
    "create_access_token",
]
