"""
Budget Pattern Matcher

    "budget makanan 1 juta"               → makanan-minuman, 1000000, MONTHLY
    "anggaran hiburan 500rb per minggu"   → hiburan, 500000, WEEKLY
"""

import re
from typing import Optional

from app.config import DEFAULT_BUDGET_PERIOD
from core.routing.amounts import extract_amount
from tools.finance.categories import DEFAULT_EXPENSE_CATEGORY, map_category_name


_BUDGET_KEYWORD = re.compile(r"\b(?:budget|anggaran)\b")

_BUDGET_CATEGORY = re.compile(r"\b(?:budget|anggaran)\s+(?:untuk\s+|buat\s+)?([a-z]+)")

PERIOD_PATTERNS = [
    ("DAILY", re.compile(r"\b(?:harian|per\s*hari|sehari|daily)\b")),
    ("WEEKLY", re.compile(r"\b(?:mingguan|per\s*minggu|seminggu|weekly)\b")),
    ("YEARLY", re.compile(r"\b(?:tahunan|per\s*tahun|setahun|yearly)\b")),
    ("MONTHLY", re.compile(r"\b(?:bulanan|per\s*bulan|sebulan|monthly)\b")),
]


def is_budget_pattern(query: str) -> bool:
    return bool(_BUDGET_KEYWORD.search(query))


def detect_period(query: str) -> str:
    for period, pattern in PERIOD_PATTERNS:
        if pattern.search(query):
            return period
    return DEFAULT_BUDGET_PERIOD


def extract_budget_data(query: str) -> Optional[dict]:
    amount = extract_amount(query)
    if not amount:
        return None

    category_match = _BUDGET_CATEGORY.search(query)
    category = (
        map_category_name(category_match.group(1))
        if category_match
        else DEFAULT_EXPENSE_CATEGORY
    )

    return {
        "category": category,
        "amount": amount,
        "period": detect_period(query),
    }
