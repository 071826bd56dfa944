from fastapi import APIRouter, Depends, Query
from sitefunds.auth import AuthContext, require_permission
from sitefunds.auth.permissions import VIEW_AUDIT_LOGS
from sitefunds.db import supabase
from sitefunds.models.ledger import AuditLogResponse

router = APIRouter(prefix="/api/audit-logs", tags=["audit-logs"])


@router.get("/", response_model=list[AuditLogResponse])
async def list_audit_logs(
    project_id: str | None = Query(None),
    limit: int = Query(100, ge=1, le=500),
    auth: AuthContext = Depends(require_permission(VIEW_AUDIT_LOGS)),
):
    """Tenant audit trail, newest first."""
    query = supabase.table("audit_logs").select("*").eq("tenant_id", auth.tenant_id)
    if project_id:
        query = query.eq("project_id", project_id)
    result = query.order("created_at", desc=True).limit(limit).execute()
    return result.data
