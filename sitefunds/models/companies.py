from pydantic import BaseModel, EmailStr
from datetime import datetime


class CompanyCreate(BaseModel):
    name: str
    email: EmailStr
    phone: str | None = None
    address: str | None = None
    industry: str | None = None
    subscription_plan: str = "basic"


class CompanyUpdate(BaseModel):
    name: str | None = None
    email: EmailStr | None = None
    phone: str | None = None
    address: str | None = None
    industry: str | None = None
    subscription_plan: str | None = None
    status: str | None = None


class CompanyResponse(BaseModel):
    id: str
    name: str
    email: str
    phone: str | None = None
    address: str | None = None
    industry: str | None = None
    subscription_plan: str | None = None
    status: str | None = None
    created_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
