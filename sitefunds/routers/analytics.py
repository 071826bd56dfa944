from fastapi import APIRouter, Depends, HTTPException, status
from sitefunds.auth import AuthContext, require_permission
from sitefunds.auth.permissions import VIEW_ANALYTICS
from sitefunds.db import supabase
from sitefunds.domain.budget import budget_alert_message, calc_budget_variance
from sitefunds.domain.ledger import summarize_project, summarize_tenant
from sitefunds.models.analytics import BudgetVarianceResponse, ProjectStatsResponse, TenantStatsResponse
from sitefunds.routers.projects import get_tenant_project

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


@router.get("/tenant", response_model=TenantStatsResponse)
async def get_tenant_stats(auth: AuthContext = Depends(require_permission(VIEW_ANALYTICS))):
    """Budget, spend and revenue totals for the caller's tenant."""
    projects = supabase.table("projects").select("id, budget, status").eq(
        "tenant_id", auth.tenant_id
    ).is_("deleted_at", "null").execute()
    transactions = supabase.table("transactions").select("project_id, type, amount").eq(
        "tenant_id", auth.tenant_id
    ).execute()

    return summarize_tenant(projects.data or [], transactions.data or [])


@router.get("/project/{project_id}", response_model=ProjectStatsResponse)
async def get_project_stats(project_id: str, auth: AuthContext = Depends(require_permission(VIEW_ANALYTICS))):
    """Totals and budget variance for a single project."""
    project = get_tenant_project(project_id, auth.tenant_id)
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")

    transactions = supabase.table("transactions").select("project_id, type, amount").eq(
        "tenant_id", auth.tenant_id
    ).eq("project_id", project_id).execute()

    stats = summarize_project(project, transactions.data or [])
    variance = calc_budget_variance(stats["total_budget"], stats["total_spent"])
    return ProjectStatsResponse(
        project_id=project_id,
        budget=BudgetVarianceResponse(
            spent_percentage=variance.spent_percentage,
            remaining_budget=variance.remaining_budget,
            status=variance.status,
            is_over_budget=variance.is_over_budget,
            variance=variance.variance,
            message=budget_alert_message(project.get("title", project_id), variance),
        ),
        **stats,
    )
