from fastapi import APIRouter, Depends, HTTPException, status
from sitefunds.audit import record_audit
from sitefunds.auth import AuthContext, require_permission
from sitefunds.auth.permissions import FUND_ALLOCATION, VIEW_ALLOCATIONS
from sitefunds.db import supabase
from sitefunds.domain.budget import budget_alert_message, calc_budget_impact
from sitefunds.domain.ledger import to_amount
from sitefunds.models.ledger import FundAllocationCreate, FundAllocationResponse
from sitefunds.observability import log_event
from sitefunds.routers.projects import get_tenant_project

router = APIRouter(prefix="/api/fund-allocations", tags=["fund-allocations"])


def ensure_tenant_user(user_id: str, tenant_id: str) -> None:
    result = supabase.table("users").select("id").eq(
        "id", user_id
    ).eq("tenant_id", tenant_id).is_("deleted_at", "null").execute()
    if not result.data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Recipient not found")


@router.get("/", response_model=list[FundAllocationResponse])
async def list_fund_allocations(auth: AuthContext = Depends(require_permission(VIEW_ALLOCATIONS))):
    """List fund allocations in the tenant, newest first."""
    result = supabase.table("fund_allocations").select("*").eq(
        "tenant_id", auth.tenant_id
    ).order("created_at", desc=True).execute()
    return result.data


@router.post("/", response_model=FundAllocationResponse, status_code=status.HTTP_201_CREATED)
async def create_fund_allocation(
    data: FundAllocationCreate,
    auth: AuthContext = Depends(require_permission(FUND_ALLOCATION)),
):
    """Allocate project funds to a user.

    The allocation is mirrored as an ``allocation`` transaction and added to the
    project's consumed amount.
    """
    project = get_tenant_project(data.project_id, auth.tenant_id)
    if not project:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Project not found")
    ensure_tenant_user(data.to_user_id, auth.tenant_id)

    insert_data = data.model_dump(mode="json")
    insert_data.update({
        "from_user_id": auth.user_id,
        "tenant_id": auth.tenant_id,
        "status": "approved",
    })
    result = supabase.table("fund_allocations").insert(insert_data).execute()
    allocation = result.data[0]

    supabase.table("transactions").insert({
        "project_id": allocation["project_id"],
        "user_id": allocation["to_user_id"],
        "type": "allocation",
        "amount": allocation["amount"],
        "category": allocation["category"],
        "description": allocation.get("description") or "Fund allocation",
        "allocation_id": allocation["id"],
        "tenant_id": auth.tenant_id,
        "status": "completed",
    }).execute()

    increment = supabase.rpc("increment_project_consumed", {
        "p_project_id": project["id"],
        "p_tenant_id": auth.tenant_id,
        "p_amount": str(data.amount),
    }).execute()
    consumed = to_amount(increment.data)

    impact = calc_budget_impact(consumed - data.amount, data.amount, project.get("budget"))
    if impact.will_exceed_warning:
        log_event(
            "budget_threshold_reached",
            tenant_id=auth.tenant_id,
            project_id=project["id"],
            status=impact.variance.status,
            message=budget_alert_message(project.get("title", project["id"]), impact.variance),
        )

    record_audit(
        tenant_id=auth.tenant_id,
        user_id=auth.user_id,
        action="fund_allocated",
        entity_type="fund_allocation",
        entity_id=allocation["id"],
        project_id=allocation["project_id"],
        amount=data.amount,
        details={"category": allocation["category"], "to_user": allocation["to_user_id"]},
    )
    return allocation
