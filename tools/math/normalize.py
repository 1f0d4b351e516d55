"""
Expression Normalizer

Rewrites Indonesian shopping notation into a canonical arithmetic form:

    "5kg @ 10rb"       → "5 * 10000"
    "2 x 1,5jt"        → "2 * 1500000"
    "10 kali 2.500"    → "10 * 2500"

Steps run in a fixed order (magnitude suffixes, separators, operators,
units) and the whole pipeline is repeated until the text is stable, so
normalize(normalize(x)) == normalize(x).
"""

import re
from decimal import Context, Decimal, ROUND_HALF_UP
from typing import Optional


# ═══════════════════════════════════════════════════════════════════════════
# VOCABULARY
# ═══════════════════════════════════════════════════════════════════════════

THOUSAND = Decimal(1000)
MILLION = Decimal(1000000)

MAGNITUDES = {
    "ribu": THOUSAND,
    "rb": THOUSAND,
    "k": THOUSAND,
    "juta": MILLION,
    "jt": MILLION,
}

UNITS = (
    "kilogram", "kilo", "kg", "gram", "gr", "ons",
    "liter", "ltr", "ml",
    "pieces", "pcs", "buah", "biji", "bungkus", "bks", "botol", "pack", "porsi",
)

# Number as typed by users: thousand groups, then an optional decimal part
NUMBER_TOKEN = r"\d+(?:[.,]\d{3})*(?:[.,]\d+)?"

MAGNITUDE_PATTERN = re.compile(
    rf"(?<![\d.,])({NUMBER_TOKEN})\s*(ribu|rb|juta|jt|k)(?![a-z])"
)

_DECIMAL_COMMA = re.compile(r"(?<=\d),(?=\d)")
_THOUSAND_DOT = re.compile(r"(\d)\.(\d{3})(?!\d)")

_MULTIPLY_SYMBOL = re.compile(r"\s*[@×*]\s*")
_MULTIPLY_WORD = re.compile(r"(?:(?<=\d)|\b)(?:perkilo|perkg|per|kali|x)(?:(?=\d)|\b)")

_UNIT_AFTER_NUMBER = re.compile(rf"(\d)\s*(?:{'|'.join(UNITS)})(?![a-z])")

_WHITESPACE = re.compile(r"\s+")

MAX_PASSES = 8

TWO_PLACES = Decimal("0.01")


# ═══════════════════════════════════════════════════════════════════════════
# NUMBER HELPERS
# ═══════════════════════════════════════════════════════════════════════════

def normalize_separators(text: str) -> str:
    """
    Decimal comma → point, then drop thousand-separator dots.

    A dot is a thousand separator only when followed by exactly three
    digits: "25.000" → "25000", "1.234.567" → "1234567", "2.5" kept.
    """
    text = _DECIMAL_COMMA.sub(".", text)
    while True:
        stripped = _THOUSAND_DOT.sub(r"\1\2", text)
        if stripped == text:
            return text
        text = stripped


def parse_number(token: str) -> Decimal:
    """Parse a user-typed number token ("1,5", "25.000") as Decimal"""
    return Decimal(normalize_separators(token))


def format_number(value: Decimal) -> str:
    """Render a Decimal without exponent or trailing zeros, two places max"""
    # Every integer digit plus two places must fit the context precision
    context = Context(prec=max(28, value.adjusted() + 3))
    value = value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP, context=context)
    if value == value.to_integral_value():
        return str(int(value))
    return format(value.normalize(context), "f")


def magnitude_value(number: str, suffix: str) -> Decimal:
    value = parse_number(number)
    # Exact product, whatever the number of digits typed
    context = Context(prec=max(28, len(value.as_tuple().digits) + 7))
    return context.multiply(value, MAGNITUDES[suffix])


def expand_magnitudes(text: str) -> str:
    """Replace "<n> rb|ribu|k|jt|juta" with its numeric value"""
    return MAGNITUDE_PATTERN.sub(
        lambda m: format_number(magnitude_value(m.group(1), m.group(2))),
        text
    )


def first_magnitude(text: str) -> Optional[Decimal]:
    """Value of the first suffixed number in text, if any"""
    match = MAGNITUDE_PATTERN.search(text.lower())
    if not match:
        return None
    return magnitude_value(match.group(1), match.group(2))


# ═══════════════════════════════════════════════════════════════════════════
# PIPELINE
# ═══════════════════════════════════════════════════════════════════════════

def canonicalize_operators(text: str) -> str:
    text = _MULTIPLY_SYMBOL.sub(" * ", text)
    return _MULTIPLY_WORD.sub(" * ", text)


def strip_units(text: str) -> str:
    return _UNIT_AFTER_NUMBER.sub(r"\1 ", text)


def _collapse(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def _single_pass(text: str, keep_units: bool) -> str:
    text = expand_magnitudes(text)
    text = normalize_separators(text)
    text = canonicalize_operators(text)
    if not keep_units:
        text = strip_units(text)
    return _collapse(text)


def normalize(text: str, keep_units: bool = False) -> str:
    """
    Canonicalize a vernacular expression.

    Args:
        text: Raw expression ("5kg @ 10rb")
        keep_units: Leave unit tokens in place (used for item extraction)

    Returns:
        Normalized expression ("5 * 10000")
    """
    current = _collapse(text.lower())
    # Removing a unit can expose a suffix ("5 kg k"); iterate to a fixed point
    for _ in range(MAX_PASSES):
        updated = _single_pass(current, keep_units)
        if updated == current:
            break
        current = updated
    return current
