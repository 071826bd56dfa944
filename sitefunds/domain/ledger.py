from __future__ import annotations

from decimal import Decimal
from typing import Any, Final, Iterable, Literal


TransactionType = Literal["allocation", "expense", "transfer", "revenue"]
UserStatus = Literal["active", "inactive", "pending"]
LineItemCategory = Literal[
    "development_resources",
    "design_tools",
    "testing_qa",
    "infrastructure",
    "marketing",
    "operations",
    "miscellaneous",
    "land_purchase",
    "site_preparation",
    "foundation",
    "structural",
    "roofing",
    "electrical",
    "plumbing",
    "finishing",
    "external_works",
]

# Transaction types that count against a budget.
SPENDING_TYPES: Final[frozenset[str]] = frozenset({"expense", "allocation"})
REVENUE_TYPES: Final[frozenset[str]] = frozenset({"revenue"})


def to_amount(value: Any) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    return Decimal(str(value))


def _sum_by_type(transactions: Iterable[dict], types: frozenset[str]) -> tuple[Decimal, int]:
    total = Decimal("0")
    count = 0
    for row in transactions:
        if row.get("type") in types:
            total += to_amount(row.get("amount"))
            count += 1
    return total, count


def summarize_tenant(projects: Iterable[dict], transactions: Iterable[dict]) -> dict[str, Any]:
    """Budget/spend/revenue roll-up across a tenant. Budget counts active projects only."""
    active = [p for p in projects if (p.get("status") or "active") == "active"]
    rows = list(transactions)
    total_budget = sum((to_amount(p.get("budget")) for p in active), Decimal("0"))
    total_spent, _ = _sum_by_type(rows, SPENDING_TYPES)
    total_revenue, _ = _sum_by_type(rows, REVENUE_TYPES)
    return {
        "total_budget": total_budget,
        "total_spent": total_spent,
        "total_revenue": total_revenue,
        "net_profit": total_revenue - total_spent,
        "active_projects": len(active),
    }


def summarize_project(project: dict, transactions: Iterable[dict]) -> dict[str, Any]:
    rows = [row for row in transactions if row.get("project_id") == project.get("id")]
    total_spent, spent_count = _sum_by_type(rows, SPENDING_TYPES)
    total_revenue, _ = _sum_by_type(rows, REVENUE_TYPES)
    return {
        "total_budget": to_amount(project.get("budget")),
        "total_spent": total_spent,
        "total_revenue": total_revenue,
        "net_profit": total_revenue - total_spent,
        "transaction_count": spent_count,
    }
