"""
Test suite for the fallback pattern matcher
"""

import sys
from pathlib import Path

# Add project root to path so we can import from core/
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from core.routing import INTENT_TOOLS, detect_topic, match_pattern, suggestions_for
from core.routing.amounts import extract_amount, extract_description
from core.routing.budget_pattern import detect_period
from core.routing.expense_pattern import extract_expense_data, is_expense_pattern
from tools.schemas import Intent


# ═══════════════════════════════════════════════════════════════════════════════
# AMOUNT EXTRACTION
# ═══════════════════════════════════════════════════════════════════════════════

def test_extract_amount():
    """Test amount extraction priority."""

    print("Testing extract_amount...")

    # Quantity * price beats any single number
    assert extract_amount("beli 5kg ayam @ 10rb") == 50000.0

    # Suffixed number beats an earlier plain number
    assert extract_amount("beli 2 kopi 25rb") == 25000.0

    # Plain number
    assert extract_amount("bayar listrik 150.000") == 150000.0

    assert extract_amount("beli kopi") is None

    print("✓ extract_amount tests passed")


def test_amount_beyond_float_range_is_rejected():
    huge = "9" * 400

    assert extract_amount(f"beli kopi {huge}") is None
    assert extract_amount(f"beli {huge} kopi @ {huge}") is None
    assert extract_amount(f"beli kopi {huge}rb") is None
    assert extract_expense_data(f"beli kopi {huge}") is None
    assert match_pattern(f"beli 2 kopi @ {huge}rb") is None
    assert match_pattern(f"beli kopi {huge}") is None
    assert match_pattern(f"tambah saldo {huge}") is None


def test_extract_description():
    assert extract_description("beli kopi 25rb", ["beli"]) == "beli kopi"
    assert extract_description("beli 2 nasi @ 15rb", ["beli"]) is None
    assert extract_description("dapat bonus 500rb", ["bonus", "dapat"]) == "dapat bonus"


# ═══════════════════════════════════════════════════════════════════════════════
# FAMILIES
# ═══════════════════════════════════════════════════════════════════════════════

def test_expense_match():
    """Test "beli kopi 25rb"."""

    print("Testing expense pattern...")

    match = match_pattern("beli kopi 25rb")

    assert match is not None
    assert match.intent == Intent.CREATE_EXPENSE
    assert match.confidence == 0.8
    assert match.extracted_data["amount"] == 25000.0
    assert match.extracted_data["description"] == "beli kopi"
    assert match.extracted_data["category"] == "makanan-minuman"
    assert "calculation_expression" not in match.extracted_data

    print("✓ expense pattern tests passed")


def test_expense_with_calculation():
    data = extract_expense_data("beli 5kg ayam @ 10rb")

    assert data["amount"] == 50000.0
    assert data["calculation_expression"] == "beli 5kg ayam @ 10rb"
    assert data["items"] == [{"name": "beli ayam", "quantity": 5.0, "unit_price": 10000.0}]


def test_expense_keywords():
    assert is_expense_pattern("bayar parkir 5rb") is True
    assert is_expense_pattern("makan siang 30rb") is True
    assert is_expense_pattern("makanan") is False


def test_income_match():
    match = match_pattern("gaji bulan ini 5 juta")

    assert match.intent == Intent.CREATE_INCOME
    assert match.extracted_data["amount"] == 5000000.0
    assert match.extracted_data["category"] == "gaji"

    bonus = match_pattern("dapat bonus 500rb")
    assert bonus.intent == Intent.CREATE_INCOME
    assert bonus.extracted_data["description"] == "dapat bonus"
    assert bonus.extracted_data["category"] == "bonus"


def test_budget_match():
    match = match_pattern("budget makanan 1 juta")

    assert match.intent == Intent.SET_BUDGET
    assert match.extracted_data == {
        "category": "makanan-minuman",
        "amount": 1000000.0,
        "period": "MONTHLY",
    }

    weekly = match_pattern("anggaran hiburan 500rb per minggu")
    assert weekly.extracted_data["category"] == "hiburan"
    assert weekly.extracted_data["period"] == "WEEKLY"


def test_detect_period():
    assert detect_period("budget makan 50rb per hari") == "DAILY"
    assert detect_period("budget hiburan 2jt tahunan") == "YEARLY"
    assert detect_period("budget makan 1jt") == "MONTHLY"


def test_balance_match():
    for query in ["tambah saldo 50rb", "isi saldo 50rb", "top up 50000", "topup 50rb"]:
        match = match_pattern(query)
        assert match is not None, query
        assert match.intent == Intent.ADD_BALANCE, query
        assert match.extracted_data == {"amount": 50000.0}, query


def test_priority_order():
    """Expense keywords win over income keywords."""

    match = match_pattern("beli hadiah pakai bonus 100rb")

    assert match.intent == Intent.CREATE_EXPENSE
    assert match.extracted_data["amount"] == 100000.0


def test_no_match():
    assert match_pattern("") is None
    assert match_pattern("halo apa kabar") is None

    # Keyword without an amount is not a match
    assert match_pattern("beli kopi") is None
    assert match_pattern("tambah saldo dong") is None


def test_case_and_whitespace_insensitive():
    match = match_pattern("  BELI   Kopi   25RB  ")

    assert match.intent == Intent.CREATE_EXPENSE
    assert match.extracted_data["amount"] == 25000.0


def test_every_intent_has_a_tool():
    for intent in Intent:
        if intent is Intent.NONE:
            continue
        assert intent in INTENT_TOOLS


# ═══════════════════════════════════════════════════════════════════════════════
# HELP TOPICS
# ═══════════════════════════════════════════════════════════════════════════════

def test_topics_and_suggestions():
    assert detect_topic("laporan dong") == "report"
    assert detect_topic("saldo aku berapa") == "balance"
    assert detect_topic("hapus kategori belanja") == "category"
    assert detect_topic("pakai voucher WELCOME") == "voucher"
    assert detect_topic("halo") is None

    assert "tambah saldo 50rb" in suggestions_for("balance")
    assert suggestions_for(None) == suggestions_for("unknown")


def run_all_tests():
    """Run all test functions."""
    print("\n" + "="*60)
    print("Running Pattern Matcher Tests")
    print("="*60 + "\n")

    try:
        test_extract_amount()
        test_amount_beyond_float_range_is_rejected()
        test_extract_description()
        test_expense_match()
        test_expense_with_calculation()
        test_expense_keywords()
        test_income_match()
        test_budget_match()
        test_detect_period()
        test_balance_match()
        test_priority_order()
        test_no_match()
        test_case_and_whitespace_insensitive()
        test_every_intent_has_a_tool()
        test_topics_and_suggestions()

        print("\n" + "="*60)
        print("✅ ALL TESTS PASSED!")
        print("="*60 + "\n")

    except AssertionError as e:
        print("\n" + "="*60)
        print("❌ TEST FAILED!")
        print("="*60)
        print(f"Error: {e}\n")
        raise


if __name__ == "__main__":
    run_all_tests()
