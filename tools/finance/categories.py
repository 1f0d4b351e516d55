"""
Default Categories & Keyword Tables

Shared by the fallback pattern matcher (category guesses for extracted
data) and by the tool handlers (auto-categorization when the AI leaves
the category out).
"""

import re
from typing import Dict, List, Tuple


# ═══════════════════════════════════════════════════════════════════════════════
# DEFAULT CATEGORIES
# ═══════════════════════════════════════════════════════════════════════════════

DEFAULT_EXPENSE_CATEGORY = "lainnya"
DEFAULT_INCOME_CATEGORY = "lainnya-income"

EXPENSE_CATEGORIES: Dict[str, str] = {
    "makanan-minuman": "Makanan & Minuman",
    "transportasi": "Transportasi",
    "tagihan": "Tagihan & Utilitas",
    "hiburan": "Hiburan",
    "belanja": "Belanja",
    "kesehatan": "Kesehatan",
    "pendidikan": "Pendidikan",
    "lainnya": "Lainnya",
}

INCOME_CATEGORIES: Dict[str, str] = {
    "gaji": "Gaji",
    "bonus": "Bonus",
    "freelance": "Freelance",
    "investasi": "Investasi",
    "bisnis": "Bisnis",
    "hadiah": "Hadiah",
    "lainnya-income": "Lainnya",
}


# ═══════════════════════════════════════════════════════════════════════════════
# KEYWORD TABLES (first hit wins)
# ═══════════════════════════════════════════════════════════════════════════════

EXPENSE_KEYWORDS: List[Tuple[str, List[str]]] = [
    ("makanan-minuman", ["makan", "minum", "kopi", "nasi", "jajan", "snack"]),
    ("transportasi", ["transport", "ojek", "ojol", "bus", "bensin", "parkir", "grab", "gojek", "taksi"]),
    ("tagihan", ["listrik", "air", "tagihan", "pulsa", "internet", "wifi"]),
    ("hiburan", ["nonton", "bioskop", "game", "netflix", "spotify"]),
    ("kesehatan", ["obat", "dokter", "apotek", "vitamin"]),
    ("pendidikan", ["buku", "kursus", "sekolah", "kuliah"]),
    ("belanja", ["belanja", "beli"]),
]

INCOME_KEYWORDS: List[Tuple[str, List[str]]] = [
    ("gaji", ["gaji", "salary"]),
    ("bonus", ["bonus", "thr"]),
    ("freelance", ["freelance", "proyek", "project"]),
    ("investasi", ["dividen", "bunga", "saham"]),
    ("bisnis", ["jual", "penjualan", "usaha"]),
    ("hadiah", ["hadiah", "kado", "angpao"]),
]

# Budget category words → category id
CATEGORY_NAME_MAP: Dict[str, str] = {
    "makanan": "makanan-minuman",
    "makan": "makanan-minuman",
    "minum": "makanan-minuman",
    "minuman": "makanan-minuman",
    "transport": "transportasi",
    "transportasi": "transportasi",
    "tagihan": "tagihan",
    "listrik": "tagihan",
    "hiburan": "hiburan",
    "belanja": "belanja",
    "kesehatan": "kesehatan",
    "pendidikan": "pendidikan",
}


def _keyword_regex(keywords: List[str]) -> re.Pattern:
    # Word-start match: "kopi" hits "kopinya" but "air" never hits "pair"
    return re.compile(r"\b(?:" + "|".join(map(re.escape, keywords)) + ")")


_EXPENSE_RULES = [(cid, _keyword_regex(kws)) for cid, kws in EXPENSE_KEYWORDS]
_INCOME_RULES = [(cid, _keyword_regex(kws)) for cid, kws in INCOME_KEYWORDS]


def guess_expense_category(text: str) -> str:
    lowered = text.lower()
    for category_id, rule in _EXPENSE_RULES:
        if rule.search(lowered):
            return category_id
    return DEFAULT_EXPENSE_CATEGORY


def guess_income_category(text: str) -> str:
    lowered = text.lower()
    for category_id, rule in _INCOME_RULES:
        if rule.search(lowered):
            return category_id
    return DEFAULT_INCOME_CATEGORY


def map_category_name(name: str) -> str:
    """Map a free-form category word to an expense category id"""
    key = name.strip().lower()
    if key in EXPENSE_CATEGORIES:
        return key
    return CATEGORY_NAME_MAP.get(key, DEFAULT_EXPENSE_CATEGORY)
