from fastapi import APIRouter, Depends, HTTPException, status
from sitefunds.audit import record_audit
from sitefunds.auth import AuthContext, require_permission
from sitefunds.auth.permissions import FUND_TRANSFERS, VIEW_TRANSACTIONS
from sitefunds.db import supabase
from sitefunds.models.ledger import FundTransferCreate, FundTransferResponse
from sitefunds.routers.fund_allocations import ensure_tenant_user
from sitefunds.routers.projects import get_tenant_project

router = APIRouter(prefix="/api/fund-transfers", tags=["fund-transfers"])


@router.get("/", response_model=list[FundTransferResponse])
async def list_fund_transfers(auth: AuthContext = Depends(require_permission(VIEW_TRANSACTIONS))):
    result = supabase.table("fund_transfers").select("*").eq(
        "tenant_id", auth.tenant_id
    ).order("created_at", desc=True).execute()
    return result.data


@router.post("/", response_model=FundTransferResponse, status_code=status.HTTP_201_CREATED)
async def create_fund_transfer(
    data: FundTransferCreate,
    auth: AuthContext = Depends(require_permission(FUND_TRANSFERS)),
):
    """Transfer funds from the caller to another user on the same project."""
    if data.to_user_id == auth.user_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot transfer funds to yourself")
    if not get_tenant_project(data.project_id, auth.tenant_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Project not found")
    ensure_tenant_user(data.to_user_id, auth.tenant_id)

    insert_data = data.model_dump(mode="json")
    insert_data.update({
        "from_user_id": auth.user_id,
        "tenant_id": auth.tenant_id,
        "status": "completed",
    })
    result = supabase.table("fund_transfers").insert(insert_data).execute()
    transfer = result.data[0]

    record_audit(
        tenant_id=auth.tenant_id,
        user_id=auth.user_id,
        action="fund_transferred",
        entity_type="fund_transfer",
        entity_id=transfer["id"],
        project_id=transfer["project_id"],
        amount=data.amount,
        details={"from_user": auth.user_id, "to_user": transfer["to_user_id"]},
    )
    return transfer
