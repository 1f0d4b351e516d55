"""
Expense Tool Handlers

Tools:
- create_expense: Record an expense, recomputing the amount from a
  calculation expression when one is given
- edit_expense: Modify an expense (the most recent one by default)
"""

import math

from infra.logger import logger_tool
from tools.finance.categories import guess_expense_category
from tools.finance.services import FinanceServices, RecordNotFoundError
from tools.math.calculate import ParseError, calculate
from tools.responses import tool_failure, tool_response
from tools.schemas import CreateExpenseInput, EditExpenseInput, ToolError


def _items_from_calculation(calculation, fallback_name: str) -> list:
    return [
        {
            "name": item.description or fallback_name,
            "quantity": float(item.quantity),
            "unit_price": float(item.unit_price),
        }
        for item in calculation.items
    ]


def make_create_expense(services: FinanceServices):

    def create_expense(data: CreateExpenseInput, caller_id: str):
        amount = data.amount
        expression = data.calculation_expression
        items = [item.model_dump() for item in data.items or []]

        # The expression is the source of truth for the amount when it parses
        if expression:
            try:
                calculation = calculate(expression)
            except ParseError as e:
                logger_tool.warning(
                    f"EXPRESSION_IGNORED | tool=create_expense | error={str(e)[:100]}"
                )
            else:
                total = float(calculation.total)
                if total > 0 and math.isfinite(total):
                    amount = total
                    items = _items_from_calculation(calculation, data.description)

        category_auto = data.category is None
        category_name = data.category or guess_expense_category(data.description)
        category = services.categories.find_or_create(caller_id, category_name, "EXPENSE")

        expense = services.expenses.create_expense(caller_id, {
            "amount": amount,
            "description": data.description,
            "category_id": category.id,
            "calculation_expression": expression,
            "items": items,
            "date": data.date,
        })

        return tool_response(
            success=True,
            data=expense,
            message=f"Expense created: {data.description}",
            meta={
                "transaction_id": expense.id,
                "category_name": category.name,
                "category_auto": category_auto,
                "calculation_expression": expression,
            }
        )

    return create_expense


def make_edit_expense(services: FinanceServices):

    def edit_expense(data: EditExpenseInput, caller_id: str):
        expense_id = data.expense_id

        if not expense_id:
            recent = services.expenses.get_user_expenses(caller_id, limit=1)
            if not recent:
                return tool_failure(ToolError.NO_EXPENSES_FOUND, "No expenses found to edit")
            expense_id = recent[0].id

        updates = {}
        if data.amount is not None:
            updates["amount"] = data.amount
        if data.description is not None:
            updates["description"] = data.description
        if data.category is not None:
            category = services.categories.find_or_create(caller_id, data.category, "EXPENSE")
            updates["category_id"] = category.id

        if not updates:
            return tool_failure(ToolError.NOTHING_TO_UPDATE, "No fields to update")

        try:
            expense = services.expenses.update_expense(expense_id, caller_id, updates)
        except RecordNotFoundError:
            return tool_failure(ToolError.EXPENSE_NOT_FOUND, f"Expense {expense_id} not found")

        return tool_response(
            success=True,
            data=expense,
            message=f"Expense updated: {expense.description}",
            meta={
                "transaction_id": expense.id,
                "updated_fields": sorted(updates),
            }
        )

    return edit_expense
