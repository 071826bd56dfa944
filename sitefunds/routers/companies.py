from datetime import datetime, timezone
from fastapi import APIRouter, Depends, HTTPException, status
from sitefunds.audit import record_audit
from sitefunds.auth import AuthContext, require_permission
from sitefunds.auth.permissions import COMPANY_MANAGEMENT
from sitefunds.db import supabase
from sitefunds.models.companies import CompanyCreate, CompanyResponse, CompanyUpdate

router = APIRouter(prefix="/api/companies", tags=["companies"])


@router.get("/", response_model=list[CompanyResponse])
async def list_companies(auth: AuthContext = Depends(require_permission(COMPANY_MANAGEMENT))):
    """List every tenant company. Console managers operate above the tenant layer."""
    result = supabase.table("companies").select("*").order("created_at", desc=True).execute()
    return result.data


@router.post("/", response_model=CompanyResponse, status_code=status.HTTP_201_CREATED)
async def create_company(data: CompanyCreate, auth: AuthContext = Depends(require_permission(COMPANY_MANAGEMENT))):
    """Create a new tenant company."""
    insert_data = data.model_dump()
    insert_data.update({
        "status": "active",
        "created_by": auth.user_id,
    })

    result = supabase.table("companies").insert(insert_data).execute()
    company = result.data[0]

    record_audit(
        tenant_id=company["id"],
        user_id=auth.user_id,
        action="company_created",
        entity_type="company",
        entity_id=company["id"],
        details={"name": company["name"]},
    )
    return company


@router.put("/{company_id}", response_model=CompanyResponse)
async def update_company(
    company_id: str,
    data: CompanyUpdate,
    auth: AuthContext = Depends(require_permission(COMPANY_MANAGEMENT)),
):
    """Update a company."""
    update_data = data.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")

    update_data["updated_at"] = datetime.now(timezone.utc).isoformat()

    result = supabase.table("companies").update(update_data).eq("id", company_id).execute()

    if not result.data:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Company not found")

    record_audit(
        tenant_id=company_id,
        user_id=auth.user_id,
        action="company_updated",
        entity_type="company",
        entity_id=company_id,
        details={"fields": sorted(k for k in update_data if k != "updated_at")},
    )
    return result.data[0]
