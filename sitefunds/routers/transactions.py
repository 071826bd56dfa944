from fastapi import APIRouter, Depends, HTTPException, status
from sitefunds.audit import record_audit
from sitefunds.auth import AuthContext, ensure_permission, get_current_auth, require_permission
from sitefunds.auth.permissions import REVENUE_ENTRY, TRANSACTION_CREATION, VIEW_TRANSACTIONS
from sitefunds.db import supabase
from sitefunds.models.ledger import TransactionCreate, TransactionResponse
from sitefunds.routers.projects import get_tenant_project

router = APIRouter(prefix="/api/transactions", tags=["transactions"])


@router.get("/", response_model=list[TransactionResponse])
async def list_transactions(auth: AuthContext = Depends(require_permission(VIEW_TRANSACTIONS))):
    """List transactions in the tenant, newest first."""
    result = supabase.table("transactions").select("*").eq(
        "tenant_id", auth.tenant_id
    ).order("created_at", desc=True).execute()
    return result.data


@router.post("/", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
async def create_transaction(data: TransactionCreate, auth: AuthContext = Depends(get_current_auth)):
    """Record an expense, transfer or revenue entry against a project."""
    is_revenue = data.type == "revenue"
    ensure_permission(auth, REVENUE_ENTRY if is_revenue else TRANSACTION_CREATION)

    if not get_tenant_project(data.project_id, auth.tenant_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Project not found")

    insert_data = data.model_dump(mode="json")
    insert_data.update({
        "user_id": auth.user_id,
        "tenant_id": auth.tenant_id,
        "status": "completed",
    })
    result = supabase.table("transactions").insert(insert_data).execute()
    transaction = result.data[0]

    record_audit(
        tenant_id=auth.tenant_id,
        user_id=auth.user_id,
        action="revenue_added" if is_revenue else "expense_submitted",
        entity_type="transaction",
        entity_id=transaction["id"],
        project_id=transaction["project_id"],
        amount=data.amount,
        details={"type": data.type, "category": data.category},
    )
    return transaction
