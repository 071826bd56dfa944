from pydantic import BaseModel, Field
from datetime import datetime
from decimal import Decimal
from sitefunds.domain.ledger import LineItemCategory, TransactionType


class FundAllocationCreate(BaseModel):
    project_id: str
    to_user_id: str
    amount: Decimal = Field(gt=0, max_digits=15, decimal_places=2)
    category: LineItemCategory
    description: str | None = None


class FundAllocationResponse(BaseModel):
    id: str
    project_id: str
    from_user_id: str
    to_user_id: str
    amount: Decimal
    category: str
    description: str | None = None
    status: str | None = "approved"
    created_at: datetime | None = None


class TransactionCreate(BaseModel):
    project_id: str
    type: TransactionType
    amount: Decimal = Field(gt=0, max_digits=15, decimal_places=2)
    category: LineItemCategory
    description: str | None = None
    receipt_url: str | None = None


class TransactionResponse(BaseModel):
    id: str
    project_id: str
    user_id: str
    type: str
    amount: Decimal
    category: str
    description: str | None = None
    receipt_url: str | None = None
    allocation_id: str | None = None
    status: str | None = "completed"
    created_at: datetime | None = None


class FundTransferCreate(BaseModel):
    project_id: str
    to_user_id: str
    amount: Decimal = Field(gt=0, max_digits=15, decimal_places=2)
    category: LineItemCategory
    purpose: str | None = None


class FundTransferResponse(BaseModel):
    id: str
    project_id: str
    from_user_id: str
    to_user_id: str
    amount: Decimal
    category: str
    purpose: str | None = None
    status: str | None = "completed"
    created_at: datetime | None = None


class AuditLogResponse(BaseModel):
    id: str
    user_id: str | None = None
    action: str
    entity_type: str
    entity_id: str
    project_id: str | None = None
    amount: Decimal | None = None
    details: dict | None = None
    created_at: datetime | None = None
