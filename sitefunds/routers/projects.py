from datetime import datetime, timezone
from fastapi import APIRouter, Depends, HTTPException, status
from sitefunds.audit import record_audit
from sitefunds.auth import AuthContext, require_permission
from sitefunds.auth.permissions import (
    PROJECT_CREATION,
    PROJECT_DELETION,
    PROJECT_EDITING,
    VIEW_PROJECTS,
)
from sitefunds.db import supabase
from sitefunds.models.projects import ProjectCreate, ProjectResponse, ProjectUpdate

router = APIRouter(prefix="/api/projects", tags=["projects"])


def get_tenant_project(project_id: str, tenant_id: str) -> dict | None:
    result = supabase.table("projects").select("*").eq(
        "id", project_id
    ).eq("tenant_id", tenant_id).is_("deleted_at", "null").execute()
    if not result.data:
        return None
    return result.data[0]


@router.get("/", response_model=list[ProjectResponse])
async def list_projects(auth: AuthContext = Depends(require_permission(VIEW_PROJECTS))):
    """List the tenant's projects."""
    result = supabase.table("projects").select("*").eq(
        "tenant_id", auth.tenant_id
    ).is_("deleted_at", "null").order("created_at", desc=True).execute()

    return result.data


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(project_id: str, auth: AuthContext = Depends(require_permission(VIEW_PROJECTS))):
    """Get a project by ID."""
    project = get_tenant_project(project_id, auth.tenant_id)
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return project


@router.post("/", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(data: ProjectCreate, auth: AuthContext = Depends(require_permission(PROJECT_CREATION))):
    """Create a project managed by the caller."""
    insert_data = data.model_dump(mode="json")
    insert_data.update({
        "manager_id": auth.user_id,
        "tenant_id": auth.tenant_id,
        "consumed_amount": "0",
        "status": "active",
    })

    result = supabase.table("projects").insert(insert_data).execute()
    project = result.data[0]

    record_audit(
        tenant_id=auth.tenant_id,
        user_id=auth.user_id,
        action="project_created",
        entity_type="project",
        entity_id=project["id"],
        project_id=project["id"],
        amount=data.budget,
        details={"title": project["title"]},
    )
    return project


@router.put("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: str,
    data: ProjectUpdate,
    auth: AuthContext = Depends(require_permission(PROJECT_EDITING)),
):
    """Update a project, including its budget."""
    update_data = data.model_dump(mode="json", exclude_unset=True)
    if not update_data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")

    update_data["updated_at"] = datetime.now(timezone.utc).isoformat()

    result = supabase.table("projects").update(update_data).eq(
        "id", project_id
    ).eq("tenant_id", auth.tenant_id).is_("deleted_at", "null").execute()

    if not result.data:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")

    project = result.data[0]
    record_audit(
        tenant_id=auth.tenant_id,
        user_id=auth.user_id,
        action="project_updated",
        entity_type="project",
        entity_id=project_id,
        project_id=project_id,
        amount=update_data.get("budget"),
        details={"fields": sorted(k for k in update_data if k != "updated_at")},
    )
    return project


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(project_id: str, auth: AuthContext = Depends(require_permission(PROJECT_DELETION))):
    """Soft delete a project."""
    result = supabase.table("projects").update({
        "deleted_at": datetime.now(timezone.utc).isoformat()
    }).eq("id", project_id).eq("tenant_id", auth.tenant_id).is_("deleted_at", "null").execute()

    if not result.data:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")

    record_audit(
        tenant_id=auth.tenant_id,
        user_id=auth.user_id,
        action="project_updated",
        entity_type="project",
        entity_id=project_id,
        project_id=project_id,
        details={"deleted": True},
    )
    return None
