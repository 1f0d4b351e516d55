"""
Budget Tool Handlers

Tools:
- set_budget: Create or replace a category budget for a period window
- check_budget_status: Spending progress of one or all budgets
"""

from typing import List

from app.config import BUDGET_WARNING_PERCENT
from tools.finance.categories import map_category_name
from tools.finance.services import Budget, BudgetStatus, FinanceServices
from tools.responses import tool_failure, tool_response
from tools.schemas import BudgetStatusInput, SetBudgetInput, ToolError
from tools.time.dates import period_window


def make_set_budget(services: FinanceServices):

    def set_budget(data: SetBudgetInput, caller_id: str):
        category = services.categories.find_or_create(caller_id, data.category, "EXPENSE")
        start_date, end_date = period_window(data.period)

        budget = services.budgets.set_budget(caller_id, {
            "category_id": category.id,
            "amount": data.amount,
            "period": data.period,
            "start_date": start_date,
            "end_date": end_date,
        })

        return tool_response(
            success=True,
            data=budget,
            message=f"Budget set for {category.name} ({data.period.lower()})",
            meta={
                "transaction_id": budget.id,
                "category_name": category.name,
            }
        )

    return set_budget


# ═══════════════════════════════════════════════════════════════════════════════
# BUDGET STATUS
# ═══════════════════════════════════════════════════════════════════════════════

def _status_of(services: FinanceServices, caller_id: str, budget: Budget) -> BudgetStatus:
    start, end = period_window(budget.period)
    spent = services.expenses.total_for_category(caller_id, budget.category_id, start, end)
    percentage = round(spent / budget.amount * 100, 1)

    if spent > budget.amount:
        status = "OVER_BUDGET"
    elif percentage >= BUDGET_WARNING_PERCENT:
        status = "WARNING"
    else:
        status = "UNDER_BUDGET"

    category = services.categories.get(budget.category_id)
    return BudgetStatus(
        budget_id=budget.id,
        category_id=budget.category_id,
        category_name=category.name if category else budget.category_id,
        period=budget.period,
        budget_amount=budget.amount,
        spent_amount=spent,
        remaining_amount=max(0.0, budget.amount - spent),
        percentage=percentage,
        status=status
    )


def _matches(status: BudgetStatus, needle: str) -> bool:
    return (
        needle in status.category_name.lower()
        or status.category_id == map_category_name(needle)
    )


def make_check_budget_status(services: FinanceServices):

    def check_budget_status(data: BudgetStatusInput, caller_id: str):
        statuses: List[BudgetStatus] = [
            _status_of(services, caller_id, budget)
            for budget in services.budgets.get_user_budgets(caller_id)
        ]

        if data.category:
            needle = data.category.strip().lower()
            statuses = [s for s in statuses if _matches(s, needle)]
            if not statuses:
                return tool_failure(
                    ToolError.BUDGET_NOT_FOUND,
                    f"No budget found for category '{data.category}'",
                    meta={"category_searched": data.category}
                )

        alerts = [s for s in statuses if s.status != "UNDER_BUDGET"]
        return tool_response(
            success=True,
            data=statuses,
            message=f"{len(statuses)} budget(s) checked",
            meta={
                "total_budgets": len(statuses),
                "alert_count": len(alerts),
                "over_budget_count": sum(1 for s in statuses if s.status == "OVER_BUDGET"),
                "warning_count": sum(1 for s in statuses if s.status == "WARNING"),
                "has_alerts": bool(alerts),
            }
        )

    return check_budget_status
