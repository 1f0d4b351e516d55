"""
Expense Pattern Matcher

Detects spending messages without using LLM.

    "beli kopi 25rb"          → amount=25000, description="beli kopi"
    "beli 2 nasi @ 15rb"      → amount=30000, calculation_expression + items
"""

import re
from typing import Optional

from app.config import MAX_EXPRESSION_LENGTH
from core.routing.amounts import extract_amount, extract_calculation, extract_description
from tools.finance.categories import guess_expense_category


DESCRIPTION_KEYWORDS = ["beli", "bayar", "byr", "belanja", "makan", "minum"]

_EXPENSE_KEYWORD = re.compile(r"\b(?:beli|bayar|byr|belanja|makan|minum|transport\w*)\b")


def is_expense_pattern(query: str) -> bool:
    return bool(_EXPENSE_KEYWORD.search(query))


def extract_expense_data(query: str) -> Optional[dict]:
    calculation = extract_calculation(query)
    amount = float(calculation.total) if calculation else extract_amount(query)
    if not amount:
        return None

    description = extract_description(query, DESCRIPTION_KEYWORDS) or query
    data = {
        "amount": amount,
        "description": description,
        "category": guess_expense_category(query),
    }

    if calculation and len(query) <= MAX_EXPRESSION_LENGTH:
        data["calculation_expression"] = query
        data["items"] = [
            {
                "name": item.description or description,
                "quantity": float(item.quantity),
                "unit_price": float(item.unit_price),
            }
            for item in calculation.items
        ]

    return data
