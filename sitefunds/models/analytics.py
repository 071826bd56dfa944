from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel


class TenantStatsResponse(BaseModel):
    total_budget: Decimal
    total_spent: Decimal
    total_revenue: Decimal
    net_profit: Decimal
    active_projects: int


class BudgetVarianceResponse(BaseModel):
    spent_percentage: Decimal
    remaining_budget: Decimal
    status: str
    is_over_budget: bool
    variance: Decimal
    message: str


class ProjectStatsResponse(BaseModel):
    project_id: str
    total_budget: Decimal
    total_spent: Decimal
    total_revenue: Decimal
    net_profit: Decimal
    transaction_count: int
    budget: BudgetVarianceResponse
