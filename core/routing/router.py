"""
Pattern Router

Deterministic intent matching used when AI interpretation is unavailable
or inconclusive. Families are tried in priority order; the first family
whose keyword test passes AND whose extraction succeeds wins.

Confidence is the fixed FALLBACK_CONFIDENCE tier marker, not a score.
"""

import re
from typing import Callable, List, Optional, Tuple

from app.config import FALLBACK_CONFIDENCE
from core.routing.balance_pattern import extract_balance_data, is_balance_pattern
from core.routing.budget_pattern import extract_budget_data, is_budget_pattern
from core.routing.expense_pattern import extract_expense_data, is_expense_pattern
from core.routing.income_pattern import extract_income_data, is_income_pattern
from infra.logger import log_pattern_match, logger_pattern
from tools.schemas import Intent, PatternMatch


PatternMatcher = Tuple[Intent, Callable[[str], bool], Callable[[str], Optional[dict]]]

# Ordered by priority: (intent, keyword test, extractor)
PATTERN_MATCHERS: List[PatternMatcher] = [
    (Intent.CREATE_EXPENSE, is_expense_pattern, extract_expense_data),
    (Intent.CREATE_INCOME, is_income_pattern, extract_income_data),
    (Intent.SET_BUDGET, is_budget_pattern, extract_budget_data),
    (Intent.ADD_BALANCE, is_balance_pattern, extract_balance_data),
]

# Intent → tool dispatched on the fallback path
INTENT_TOOLS = {
    Intent.CREATE_EXPENSE: "create_expense",
    Intent.CREATE_INCOME: "create_income",
    Intent.SET_BUDGET: "set_budget",
    Intent.ADD_BALANCE: "add_balance",
}


def _clean(text: str) -> str:
    return " ".join(text.lower().split())


def match_pattern(query: str) -> Optional[PatternMatch]:
    """
    Try all pattern matchers in priority order.

    Args:
        query: User input string

    Returns:
        PatternMatch if a family matched, otherwise None
    """
    cleaned = _clean(query)
    if not cleaned:
        return None

    for intent, is_candidate, extract in PATTERN_MATCHERS:
        if not is_candidate(cleaned):
            continue

        data = extract(cleaned)
        if data is None:
            # Keyword hit without an amount: let the next family try
            logger_pattern.debug(f"PATTERN_NO_AMOUNT | intent={intent.value}")
            continue

        log_pattern_match(intent.value, is_candidate.__name__)
        return PatternMatch(
            intent=intent,
            confidence=FALLBACK_CONFIDENCE,
            extracted_data=data
        )

    return None


# ═══════════════════════════════════════════════════════════════════════════
# HELP TOPICS
# ═══════════════════════════════════════════════════════════════════════════

TOPIC_KEYWORDS = [
    ("category", re.compile(r"\bkategori\b")),
    ("voucher", re.compile(r"\b(?:voucher|vocer|kode)\b")),
    ("expense", re.compile(r"\b(?:beli|bayar|byr|belanja|pengeluaran)\b")),
    ("income", re.compile(r"\b(?:gaji|bonus|dapat|pemasukan)\b")),
    ("budget", re.compile(r"\b(?:budget|anggaran)\b")),
    ("report", re.compile(r"\b(?:laporan|ringkasan)\b")),
    ("balance", re.compile(r"\b(?:saldo|koin)\b")),
]

TOPIC_SUGGESTIONS = {
    "expense": ["beli kopi 25rb", "bayar listrik 150000", "belanja 5kg ayam @ 12rb"],
    "income": ["gaji bulan ini 5 juta", "dapat bonus 500rb", "freelance project 2 juta"],
    "budget": ["budget makanan 1 juta", "budget transportasi 500rb", "status budget"],
    "report": ["laporan bulan ini", "ringkasan minggu ini", "laporan tahun ini"],
    "balance": ["tambah saldo 50rb", "isi saldo 25rb", "top up 100000"],
    "voucher": ["pakai voucher WELCOME", "redeem kode BONUS50"],
    "category": ["lihat semua kategori", "buat kategori investasi", "hapus kategori hiburan"],
}

GENERAL_SUGGESTIONS = ["beli kopi 25rb", "gaji 5 juta", "budget makanan 1 juta"]


def detect_topic(query: str) -> Optional[str]:
    """Coarse subject of an uninterpretable message, for targeted help"""
    cleaned = _clean(query)
    for topic, pattern in TOPIC_KEYWORDS:
        if pattern.search(cleaned):
            return topic
    return None


def suggestions_for(topic: Optional[str]) -> List[str]:
    return list(TOPIC_SUGGESTIONS.get(topic, GENERAL_SUGGESTIONS))
