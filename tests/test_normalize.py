"""
Test suite for the expression normalizer
"""

import sys
from decimal import Decimal
from pathlib import Path

# Add project root to path so we can import from tools/
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from tools.math.normalize import (
    expand_magnitudes,
    first_magnitude,
    format_number,
    normalize,
    normalize_separators,
    parse_number,
)


def test_magnitude_suffixes():
    """Test rb/ribu/k and jt/juta expansion."""

    print("Testing magnitude suffixes...")

    assert expand_magnitudes("25rb") == "25000"
    assert expand_magnitudes("25 ribu") == "25000"
    assert expand_magnitudes("10k") == "10000"
    assert expand_magnitudes("2jt") == "2000000"
    assert expand_magnitudes("3 juta") == "3000000"
    assert expand_magnitudes("1,5jt") == "1500000"

    # Suffix glued to a longer word is not a magnitude
    assert expand_magnitudes("5kg") == "5kg"
    assert expand_magnitudes("2 kopi") == "2 kopi"

    print("✓ magnitude suffix tests passed")


def test_separators():
    """Test Indonesian thousand and decimal separators."""

    print("Testing separators...")

    assert normalize_separators("25.000") == "25000"
    assert normalize_separators("1.234.567") == "1234567"
    assert normalize_separators("2,5") == "2.5"
    assert normalize_separators("2.5") == "2.5"

    assert parse_number("1,5") == Decimal("1.5")
    assert parse_number("25.000") == Decimal("25000")

    print("✓ separator tests passed")


def test_format_number():
    """Test number rendering."""

    assert format_number(Decimal("25000")) == "25000"
    assert format_number(Decimal("25000.00")) == "25000"
    assert format_number(Decimal("2.50")) == "2.5"
    assert format_number(Decimal("0.125")) == "0.13"


def test_long_numbers_beyond_decimal_precision():
    huge = "9" * 40

    assert format_number(Decimal(huge + "000")) == huge + "000"
    assert normalize(f"2 @ {huge}rb") == f"2 * {huge}000"


def test_normalize_expressions():
    """Test full normalization of shopping notation."""

    print("Testing normalize...")

    assert normalize("5kg @ 10rb") == "5 * 10000"
    assert normalize("3x5000") == "3 * 5000"
    assert normalize("10 kali 2500") == "10 * 2500"
    assert normalize("2 x 1,5jt") == "2 * 1500000"
    assert normalize("2 @ 5000 + 3 @ 3000") == "2 * 5000 + 3 * 3000"
    assert normalize("  BELI   Kopi  25RB ") == "beli kopi 25000"

    print("✓ normalize tests passed")


def test_normalize_is_idempotent():
    """normalize(normalize(x)) == normalize(x)"""

    samples = [
        "5kg @ 10rb",
        "2 x 1,5jt",
        "10 kali 2.500",
        "beli 3 bungkus nasi @ 12rb + 2 botol teh @ 5rb",
        "1.234.567",
        "25 ribu",
        "hello world",
    ]

    for sample in samples:
        once = normalize(sample)
        assert normalize(once) == once, sample


def test_keep_units():
    """Units survive when requested."""

    assert normalize("5kg @ 10rb", keep_units=True) == "5kg * 10000"
    assert normalize("5kg @ 10rb") == "5 * 10000"


def test_first_magnitude():
    assert first_magnitude("beli kopi 25rb") == Decimal("25000")
    assert first_magnitude("gaji 5 juta bonus 1jt") == Decimal("5000000")
    assert first_magnitude("beli kopi 25000") is None


def run_all_tests():
    """Run all test functions."""
    print("\n" + "="*60)
    print("Running Normalizer Tests")
    print("="*60 + "\n")

    try:
        test_magnitude_suffixes()
        test_separators()
        test_format_number()
        test_long_numbers_beyond_decimal_precision()
        test_normalize_expressions()
        test_normalize_is_idempotent()
        test_keep_units()
        test_first_magnitude()

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
