"""
Income Pattern Matcher

    "gaji bulan ini 5 juta"  → amount=5000000, category="gaji"
    "dapat bonus 500rb"      → amount=500000, category="bonus"
"""

import re
from typing import Optional

from core.routing.amounts import extract_amount, extract_description
from tools.finance.categories import guess_income_category


INCOME_KEYWORDS = ["gaji", "bonus", "dapat", "terima", "freelance", "jual"]

_INCOME_KEYWORD = re.compile(r"\b(?:" + "|".join(INCOME_KEYWORDS) + r")\b")


def is_income_pattern(query: str) -> bool:
    return bool(_INCOME_KEYWORD.search(query))


def extract_income_data(query: str) -> Optional[dict]:
    amount = extract_amount(query)
    if not amount:
        return None

    return {
        "amount": amount,
        "description": extract_description(query, INCOME_KEYWORDS) or query,
        "category": guess_income_category(query),
    }
