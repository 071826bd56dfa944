from pydantic import BaseModel, Field, model_validator
from datetime import datetime
from decimal import Decimal


class ProjectCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    start_date: datetime
    end_date: datetime
    budget: Decimal = Field(ge=0, max_digits=15, decimal_places=2)

    @model_validator(mode="after")
    def _check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class ProjectUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    budget: Decimal | None = Field(default=None, ge=0, max_digits=15, decimal_places=2)
    status: str | None = None


class ProjectResponse(BaseModel):
    id: str
    title: str
    description: str | None = None
    start_date: datetime
    end_date: datetime
    budget: Decimal
    consumed_amount: Decimal = Decimal("0")
    revenue: Decimal | None = None
    manager_id: str
    status: str | None = "active"
    created_at: datetime | None = None
    updated_at: datetime | None = None
