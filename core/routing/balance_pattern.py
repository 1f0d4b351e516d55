"""
Balance Top-up Pattern Matcher

    "tambah saldo 50rb" / "isi saldo 25rb" / "top up 100000"
"""

import re
from typing import Optional

from core.routing.amounts import extract_amount


_TAMBAH = re.compile(r"\btambah\b")
_SALDO = re.compile(r"\bsaldo\b")
_TOP_UP = re.compile(r"\b(?:isi\s+saldo|top\s*up)\b")


def is_balance_pattern(query: str) -> bool:
    if _TOP_UP.search(query):
        return True
    return bool(_TAMBAH.search(query) and _SALDO.search(query))


def extract_balance_data(query: str) -> Optional[dict]:
    amount = extract_amount(query)
    if not amount:
        return None
    return {"amount": amount}
