from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Final, Literal


BudgetStatus = Literal["healthy", "warning", "critical"]

WARNING_THRESHOLD: Final[Decimal] = Decimal("80")
CRITICAL_THRESHOLD: Final[Decimal] = Decimal("95")

_CENT = Decimal("0.01")


def _to_decimal(value: Decimal | int | float | str | None) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    return Decimal(str(value))


@dataclass(frozen=True)
class BudgetVariance:
    spent_percentage: Decimal
    remaining_budget: Decimal
    status: BudgetStatus
    is_over_budget: bool
    variance: Decimal  # positive when over budget


@dataclass(frozen=True)
class BudgetImpact:
    variance: BudgetVariance
    will_exceed_warning: bool
    will_exceed_critical: bool
    requires_approval: bool


def calc_budget_variance(total_budget, total_spent) -> BudgetVariance:
    budget = _to_decimal(total_budget)
    spent = _to_decimal(total_spent)
    raw_percentage = spent / budget * 100 if budget > 0 else Decimal("0")

    # Thresholds apply to the unrounded percentage.
    status: BudgetStatus = "healthy"
    if raw_percentage >= CRITICAL_THRESHOLD:
        status = "critical"
    elif raw_percentage >= WARNING_THRESHOLD:
        status = "warning"

    return BudgetVariance(
        spent_percentage=raw_percentage.quantize(_CENT, rounding=ROUND_HALF_UP),
        remaining_budget=budget - spent,
        status=status,
        is_over_budget=spent > budget,
        variance=spent - budget,
    )


def calc_budget_impact(current_spent, proposed_cost, total_budget) -> BudgetImpact:
    variance = calc_budget_variance(total_budget, _to_decimal(current_spent) + _to_decimal(proposed_cost))
    return BudgetImpact(
        variance=variance,
        will_exceed_warning=variance.status != "healthy",
        will_exceed_critical=variance.status == "critical",
        requires_approval=variance.status != "healthy",
    )


def calc_remaining_budget(total_budget, consumed_amount) -> Decimal:
    return _to_decimal(total_budget) - _to_decimal(consumed_amount)


def exceeds_budget(total_cost, remaining_budget) -> bool:
    return _to_decimal(total_cost) > _to_decimal(remaining_budget)


def budget_alert_message(project_title: str, variance: BudgetVariance) -> str:
    pct = f"{variance.spent_percentage:.1f}%"
    if variance.status == "critical":
        if variance.is_over_budget:
            return (
                f'CRITICAL: Project "{project_title}" is over budget by '
                f"{abs(variance.variance):,.2f} ({pct} spent)"
            )
        return (
            f'CRITICAL: Project "{project_title}" budget critically low - {pct} spent, '
            f"only {variance.remaining_budget:,.2f} remaining"
        )
    if variance.status == "warning":
        return (
            f'WARNING: Project "{project_title}" approaching budget limit - {pct} spent, '
            f"{variance.remaining_budget:,.2f} remaining"
        )
    return f'Project "{project_title}" budget healthy - {pct} spent'
