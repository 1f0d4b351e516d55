"""
Expression Calculator

Evaluates normalized shopping expressions into quantity × unit-price line
items and an exact Decimal total.

    "5kg @ 10rb"           → 5 × 10000 = 50000
    "2 @ 5000 + 3 @ 3000"  → 10000 + 9000 = 19000
"""

import math
import re
from decimal import Decimal
from typing import Iterable, List, Optional

from app.config import MAX_EXPRESSION_LENGTH
from infra.logger import logger_calc
from tools.math.normalize import (
    MAGNITUDE_PATTERN,
    UNITS,
    expand_magnitudes,
    normalize,
    normalize_separators,
)
from tools.responses import tool_failure, tool_response
from tools.schemas import (
    CalculationResult,
    CalculatorInput,
    LineItem,
    ParsedTerm,
    ToolError,
    ToolResult,
)


class ParseError(ValueError):
    """No numeric term could be resolved from the expression"""
    code = ToolError.PARSE_ERROR


# ═══════════════════════════════════════════════════════════════════════════
# PATTERNS (applied to normalized text)
# ═══════════════════════════════════════════════════════════════════════════

_NUMBER = re.compile(r"\d+(?:\.\d+)?")

# "+"/"-" between terms; a dash inside a word ("nasi-goreng") is not an operator
_TERM_SPLIT = re.compile(r"\s*(?<![a-z])([+-])(?![a-z])\s*")

# Chain of factors, an item label may sit before an operator: "5 ayam * 10000"
_PRODUCT = re.compile(r"\d+(?:\.\d+)?(?:\s*(?:[a-z][a-z\s]*?\s*)?\*\s*\d+(?:\.\d+)?)+")

_DESCRIPTION_NOISE = re.compile(r"\d+(?:\.\d+)?|\*")

_UNIT_ITEM_PRICE = re.compile(
    rf"(\d+(?:\.\d+)?)\s*(?:({'|'.join(UNITS)})(?![a-z]))?\s*([a-z][a-z\s]*?)?\s*\*\s*(\d+(?:\.\d+)?)"
)

_OPERATOR_HINT = re.compile(
    r"[*+\-@×]|(?:(?<=\d)|\b)(?:perkilo|perkg|per|kali|x)(?:(?=\d)|\b)"
)


# ═══════════════════════════════════════════════════════════════════════════
# TERM PARSING
# ═══════════════════════════════════════════════════════════════════════════

def _describe(segment: str) -> Optional[str]:
    description = " ".join(_DESCRIPTION_NOISE.sub(" ", segment).split())
    return description or None


def _parse_segment(segment: str, operator: str) -> Optional[ParsedTerm]:
    product = _PRODUCT.search(segment)
    if product:
        factors = [Decimal(n) for n in _NUMBER.findall(product.group(0))]
        quantity = math.prod(factors[:-1])
        unit_price = factors[-1]
    else:
        number = _NUMBER.search(segment)
        if not number:
            return None
        quantity = Decimal(1)
        unit_price = Decimal(number.group(0))

    if quantity <= 0 or unit_price <= 0:
        logger_calc.debug(f"TERM_SKIPPED | segment={segment!r} | reason=non_positive")
        return None

    return ParsedTerm(
        quantity=quantity,
        unit_price=unit_price,
        description=_describe(segment),
        operator=operator
    )


def parse_terms(normalized: str) -> List[ParsedTerm]:
    """
    Split a normalized expression into signed terms, in input order.

    The first term is a plain "multiply" term; later terms carry the
    operator that joined them ("add" / "subtract").
    """
    parts = _TERM_SPLIT.split(normalized)
    signs = ["+"] + parts[1::2]
    terms = []

    for index, (sign, segment) in enumerate(zip(signs, parts[0::2])):
        if not segment.strip():
            continue
        if sign == "-":
            operator = "subtract"
        elif index == 0:
            operator = "multiply"
        else:
            operator = "add"
        term = _parse_segment(segment, operator)
        if term is not None:
            terms.append(term)

    return terms


# ═══════════════════════════════════════════════════════════════════════════
# CALCULATION
# ═══════════════════════════════════════════════════════════════════════════

def calculate(expression: str) -> CalculationResult:
    """
    Evaluate an expression.

    Raises:
        ParseError: when no numeric term can be resolved
    """
    normalized = normalize(expression)
    terms = parse_terms(normalized)
    if not terms:
        raise ParseError(f"No numeric term in expression: {expression!r}")

    items = []
    for term in terms:
        subtotal = term.quantity * term.unit_price
        if term.operator == "subtract":
            subtotal = -subtotal
        items.append(LineItem(
            quantity=term.quantity,
            unit_price=term.unit_price,
            total=subtotal,
            description=term.description,
            operator=term.operator
        ))

    total = sum((item.total for item in items), Decimal(0))

    breakdown = [
        {
            "description": item.description,
            "quantity": item.quantity,
            "unit_price": item.unit_price,
            "subtotal": item.total,
            "operator": item.operator,
        }
        for item in items
    ]

    return CalculationResult(
        expression=expression,
        normalized=normalized,
        total=total,
        items=items,
        breakdown=breakdown
    )


def calculate_expression(text: str) -> CalculationResult:
    """Standalone entry point (e.g. the /calc command)"""
    expression = text.strip()
    if not expression:
        raise ParseError("Expression cannot be empty")
    if len(expression) > MAX_EXPRESSION_LENGTH:
        raise ParseError(f"Expression too long (max {MAX_EXPRESSION_LENGTH} characters)")

    try:
        result = calculate(expression)
    except ParseError as e:
        logger_calc.info(f"CALC_FAIL | error={str(e)[:100]}")
        raise

    logger_calc.info(
        f"CALC_SUCCESS | items={len(result.items)} | total={result.total}"
    )
    return result


def is_valid_expression(text: str) -> bool:
    """True iff text has a digit and an operator token or magnitude suffix"""
    lowered = text.lower()
    if not re.search(r"\d", lowered):
        return False
    return bool(_OPERATOR_HINT.search(lowered) or MAGNITUDE_PATTERN.search(lowered))


def has_product(text: str) -> bool:
    """Whether the normalized text contains a quantity * price shape"""
    return bool(_PRODUCT.search(normalize(text)))


# ═══════════════════════════════════════════════════════════════════════════
# SECONDARY EXTRACTION
# ═══════════════════════════════════════════════════════════════════════════

def parse_quantity_and_price(text: str) -> Optional[dict]:
    """
    Best-effort extraction of quantity, unit, item label and unit price.

    "5 kg ayam @ 25rb" → {quantity: 5, unit: "kg", item: "ayam",
    unit_price: 25000, total_price: 125000}. Returns None when no
    quantity-operator-price shape is present.
    """
    match = _UNIT_ITEM_PRICE.search(normalize(text, keep_units=True))
    if not match:
        return None

    quantity = Decimal(match.group(1))
    unit_price = Decimal(match.group(4))
    if quantity <= 0 or unit_price <= 0:
        return None

    item = (match.group(3) or "").strip()
    return {
        "quantity": quantity,
        "unit_price": unit_price,
        "unit": match.group(2),
        "item": item or None,
        "total_price": quantity * unit_price,
    }


def extract_numbers(text: str) -> List[Decimal]:
    """All numbers in text, magnitude suffixes applied"""
    expanded = normalize_separators(expand_magnitudes(text.lower()))
    return [Decimal(n) for n in _NUMBER.findall(expanded)]


def calculate_total(numbers: Iterable) -> Decimal:
    return sum((Decimal(str(n)) for n in numbers), Decimal(0))


# ═══════════════════════════════════════════════════════════════════════════
# TOOL HANDLER
# ═══════════════════════════════════════════════════════════════════════════

def calculator_tool(data: CalculatorInput, caller_id: str) -> ToolResult:
    try:
        result = calculate_expression(data.expression)
    except ParseError as e:
        return tool_failure(ToolError.PARSE_ERROR, str(e))

    return tool_response(
        success=True,
        data=result,
        message=f"{data.expression} = {result.total}",
        meta={"item_count": len(result.items), "normalized": result.normalized}
    )
