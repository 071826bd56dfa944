from fastapi import APIRouter, Depends
from sitefunds.auth import AuthContext, require_permission
from sitefunds.auth.permissions import CAPABILITY_PREDICATES, PERMISSION_MANAGEMENT, ROLE_HIERARCHY, permission_matrix

router = APIRouter(prefix="/api/permissions", tags=["permissions"])


@router.get("/")
async def get_permission_matrix(auth: AuthContext = Depends(require_permission(PERMISSION_MANAGEMENT))):
    """Role -> permission matrix shown on the permissions page."""
    return {
        "roles": list(ROLE_HIERARCHY),
        "matrix": permission_matrix(),
        "capabilities": dict(CAPABILITY_PREDICATES),
    }
