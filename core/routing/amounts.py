"""
Amount & Description Extraction

Shared by every intent family. Amounts follow the calculator's suffix
rules, in priority order:

1. A quantity * price expression, evaluated by the calculator
2. The first number carrying a magnitude suffix ("25rb", "1,5 jt")
3. The first plain number
"""

import math
import re
from decimal import Decimal
from typing import List, Optional

from tools.math.calculate import ParseError, calculate, has_product
from tools.math.normalize import first_magnitude, normalize_separators
from tools.schemas import CalculationResult


_PLAIN_NUMBER = re.compile(r"\d+(?:\.\d+)?")

# Operator left dangling at the end of a description ("beli 2 nasi @")
_TRAILING_OPERATOR = re.compile(r"\s*(?:[@*×]|\bx|\bkali|\bper)$")


def extract_calculation(text: str) -> Optional[CalculationResult]:
    """Calculator result when text holds a positive quantity * price shape"""
    if not has_product(text):
        return None
    try:
        result = calculate(text)
    except ParseError:
        return None
    if result.total <= 0 or not _fits_float(result.total):
        return None
    if not all(_fits_float(item.quantity) and _fits_float(item.unit_price) for item in result.items):
        return None
    return result


def _fits_float(value: Decimal) -> bool:
    # Decimal has no upper bound; tool arguments are floats
    return math.isfinite(float(value))


def extract_amount(text: str) -> Optional[float]:
    calculation = extract_calculation(text)
    if calculation:
        return float(calculation.total)

    value = first_magnitude(text)
    if value is None:
        plain = _PLAIN_NUMBER.search(normalize_separators(text))
        value = Decimal(plain.group(0)) if plain else None

    if value is None or value <= 0 or not _fits_float(value):
        return None
    return float(value)


def extract_description(text: str, keywords: List[str]) -> Optional[str]:
    """
    Keyword-anchored description up to the next number.

    "beli kopi 25rb" → "beli kopi"
    """
    for keyword in keywords:
        match = re.search(rf"\b{keyword}\s+([^\d\s].*?)(?:\s+\d|$)", text)
        if match:
            tail = _TRAILING_OPERATOR.sub("", match.group(1).strip())
            return f"{keyword} {tail}".strip()
    return None
