"""
Transaction Date Helpers

Resolves the optional `date` argument of transaction tools and computes
budget period windows.

Tools don't call this directly; the argument models run
parse_transaction_date in a field validator, so a date that cannot be
understood becomes a VALIDATION_ERROR before any handler runs.
"""

import re
from datetime import date, datetime, timedelta
from typing import Optional, Tuple

import dateparser

from app.config import DATE_LANGUAGES


# ═══════════════════════════════════════════════════════════════════════════════
# CONSTANTS
# ═══════════════════════════════════════════════════════════════════════════════

DATE_FMT = "%Y-%m-%d"

RELATIVE_DAYS = {
    "hari ini": 0,
    "sekarang": 0,
    "today": 0,
    "kemarin": 1,
    "kmrn": 1,
    "yesterday": 1,
    "kemarin lusa": 2,
}

_DAYS_AGO = re.compile(r"^(\d+)\s*(?:hari|hr|days?)\s*(?:yang\s+)?(?:lalu|ago)$")


# ═══════════════════════════════════════════════════════════════════════════════
# DATE PARSING
# ═══════════════════════════════════════════════════════════════════════════════

def parse_transaction_date(text: str, reference: Optional[datetime] = None) -> date:
    """
    Convert an ISO date or a natural language expression to a date.

    Examples:
        "2026-03-01"   → 2026-03-01
        "kemarin"      → reference - 1 day
        "3 hari lalu"  → reference - 3 days

    Raises:
        ValueError: when the text cannot be parsed
    """
    reference = reference or datetime.now()
    cleaned = " ".join(text.strip().lower().split())
    if not cleaned:
        raise ValueError("Date cannot be empty")

    parsed = _parse_iso(cleaned)

    if parsed is None:
        parsed = _parse_relative(cleaned, reference)

    # Fallback to general NLP parsing
    if parsed is None:
        try:
            parsed_dt = dateparser.parse(
                cleaned,
                languages=DATE_LANGUAGES,
                settings={
                    "RELATIVE_BASE": reference,
                    "PREFER_DATES_FROM": "past",
                }
            )
        except OverflowError as e:
            raise ValueError(f"Date out of range: '{text}'") from e
        parsed = parsed_dt.date() if parsed_dt else None

    if parsed is None:
        raise ValueError(f"Could not parse date from text: '{text}'")

    return parsed


def _parse_iso(text: str) -> Optional[date]:
    try:
        return datetime.strptime(text, DATE_FMT).date()
    except ValueError:
        return None


def _parse_relative(text: str, reference: datetime) -> Optional[date]:
    """Fast path for the relative expressions users type most"""
    if text in RELATIVE_DAYS:
        return (reference - timedelta(days=RELATIVE_DAYS[text])).date()

    match = _DAYS_AGO.match(text)
    if match:
        # timedelta caps at 999999999 days and datetime at year 1
        try:
            return (reference - timedelta(days=int(match.group(1)))).date()
        except OverflowError as e:
            raise ValueError(f"Date out of range: '{text}'") from e

    return None


# ═══════════════════════════════════════════════════════════════════════════════
# BUDGET PERIODS
# ═══════════════════════════════════════════════════════════════════════════════

def period_window(period: str, today: Optional[date] = None) -> Tuple[date, date]:
    """
    Half-open [start, end) window of the period containing `today`.

    Weeks start on Monday.
    """
    today = today or date.today()

    if period == "DAILY":
        return today, today + timedelta(days=1)

    if period == "WEEKLY":
        start = today - timedelta(days=today.weekday())
        return start, start + timedelta(days=7)

    if period == "YEARLY":
        return date(today.year, 1, 1), date(today.year + 1, 1, 1)

    # MONTHLY
    start = date(today.year, today.month, 1)
    if today.month == 12:
        return start, date(today.year + 1, 1, 1)
    return start, date(today.year, today.month + 1, 1)
