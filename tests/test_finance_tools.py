"""
Test suite for the finance tool handlers (in-memory services)
"""

import sys
from datetime import date, datetime, timedelta
from pathlib import Path
from unittest.mock import MagicMock

# Add project root to path so we can import from tools/
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from tools.finance.categories import guess_expense_category, guess_income_category, map_category_name
from tools.finance.memory import in_memory_services
from tools.finance.report import report_window, savings_rate
from tools.finance.services import FinanceServices, Voucher
from tools.registry import build_registry
from tools.schemas import GenerateReportInput


def _setup(vouchers=None):
    services = in_memory_services(vouchers)
    return build_registry(services), services


# ═══════════════════════════════════════════════════════════════════════════════
# EXPENSES
# ═══════════════════════════════════════════════════════════════════════════════

def test_create_expense_auto_category():
    """Test create_expense without a category."""

    print("Testing create_expense...")

    registry, services = _setup()

    result = registry.dispatch("create_expense", {"amount": 25000, "description": "beli kopi"}, "user-1")

    assert result.success is True
    assert result.metadata["category_auto"] is True
    assert result.metadata["category_name"] == "Makanan & Minuman"
    assert result.data.category_id == "makanan-minuman"
    assert result.data.date == date.today()

    print("✓ create_expense tests passed")


def test_create_expense_expression_overrides_amount():
    registry, services = _setup()

    result = registry.dispatch("create_expense", {
        "amount": 1,
        "description": "belanja pasar",
        "calculation_expression": "2 @ 5000 + 3 @ 3000",
    }, "user-1")

    assert result.success is True
    assert result.data.amount == 19000.0
    assert [item.quantity for item in result.data.items] == [2.0, 3.0]


def test_create_expense_unparseable_expression_keeps_amount():
    registry, _ = _setup()

    result = registry.dispatch("create_expense", {
        "amount": 30000,
        "description": "makan siang",
        "calculation_expression": "lupa harganya",
    }, "user-1")

    assert result.success is True
    assert result.data.amount == 30000.0


def test_create_expense_relative_date():
    registry, _ = _setup()

    result = registry.dispatch("create_expense", {
        "amount": 15000,
        "description": "parkir",
        "date": "kemarin",
    }, "user-1")

    assert result.data.date == date.today() - timedelta(days=1)


def test_create_expense_bad_date_is_validation_error():
    registry, services = _setup()

    result = registry.dispatch("create_expense", {
        "amount": 15000,
        "description": "parkir",
        "date": "zzzz qqqq",
    }, "user-1")

    assert result.error == "VALIDATION_ERROR"
    assert services.expenses.get_user_expenses("user-1") == []


def test_create_expense_out_of_range_date_is_validation_error():
    registry, services = _setup()

    for text in ["99999999999 hari lalu", "999999 hari lalu"]:
        result = registry.dispatch("create_expense", {
            "amount": 15000,
            "description": "parkir",
            "date": text,
        }, "user-1")

        assert result.success is False, text
        assert result.error == "VALIDATION_ERROR", text

    assert services.expenses.get_user_expenses("user-1") == []


def test_non_finite_amounts_are_validation_errors():
    registry, services = _setup()

    bad_calls = [
        ("create_expense", {"amount": float("inf"), "description": "beli kopi"}),
        ("create_expense", {"amount": "nan", "description": "beli kopi"}),
        ("create_expense", {
            "amount": 1000,
            "description": "beli kopi",
            "items": [{"name": "kopi", "quantity": 1, "unit_price": float("inf")}],
        }),
        ("create_income", {"amount": float("inf"), "description": "gaji"}),
        ("set_budget", {"category": "makanan", "amount": float("inf")}),
        ("add_balance", {"amount": "Infinity"}),
    ]
    for name, arguments in bad_calls:
        result = registry.dispatch(name, arguments, "user-1")
        assert result.error == "VALIDATION_ERROR", (name, arguments)

    registry.dispatch("create_expense", {"amount": 25000, "description": "beli kopi"}, "user-1")
    assert registry.dispatch("edit_expense", {"amount": float("inf")}, "user-1").error == "VALIDATION_ERROR"

    assert services.expenses.get_user_expenses("user-1")[0].amount == 25000.0
    assert services.wallets.get_wallet("user-1").balance == 0.0


def test_edit_expense():
    registry, services = _setup()

    assert registry.dispatch("edit_expense", {"amount": 1000}, "user-1").error == "NO_EXPENSES_FOUND"

    registry.dispatch("create_expense", {"amount": 25000, "description": "beli kopi"}, "user-1")

    assert registry.dispatch("edit_expense", {}, "user-1").error == "NOTHING_TO_UPDATE"
    assert registry.dispatch(
        "edit_expense", {"expense_id": "missing", "amount": 1000}, "user-1"
    ).error == "EXPENSE_NOT_FOUND"

    result = registry.dispatch("edit_expense", {"amount": 30000}, "user-1")
    assert result.success is True
    assert result.data.amount == 30000.0
    assert result.metadata["updated_fields"] == ["amount"]


def test_expenses_are_scoped_per_caller():
    registry, _ = _setup()

    registry.dispatch("create_expense", {"amount": 25000, "description": "beli kopi"}, "user-1")

    assert registry.dispatch("edit_expense", {"amount": 1}, "user-2").error == "NO_EXPENSES_FOUND"


# ═══════════════════════════════════════════════════════════════════════════════
# INCOME
# ═══════════════════════════════════════════════════════════════════════════════

def test_create_income():
    registry, _ = _setup()

    result = registry.dispatch("create_income", {"amount": 5000000, "description": "gaji bulan ini"}, "user-1")

    assert result.success is True
    assert result.data.category_id == "gaji"
    assert result.metadata["category_auto"] is True


# ═══════════════════════════════════════════════════════════════════════════════
# BUDGETS
# ═══════════════════════════════════════════════════════════════════════════════

def test_set_budget_upserts():
    registry, services = _setup()

    first = registry.dispatch("set_budget", {"category": "makanan", "amount": 1000000}, "user-1")
    second = registry.dispatch("set_budget", {"category": "makanan", "amount": 1500000, "period": "monthly"}, "user-1")

    assert first.success and second.success
    assert first.data.id == second.data.id
    assert second.data.period == "MONTHLY"
    assert len(services.budgets.get_user_budgets("user-1")) == 1


def test_budget_status_levels():
    """Test UNDER_BUDGET / WARNING / OVER_BUDGET."""

    registry, _ = _setup()

    registry.dispatch("set_budget", {"category": "makanan", "amount": 100000}, "user-1")
    registry.dispatch("set_budget", {"category": "transportasi", "amount": 100000}, "user-1")
    registry.dispatch("set_budget", {"category": "hiburan", "amount": 100000}, "user-1")

    registry.dispatch("create_expense", {"amount": 85000, "description": "makan", "category": "makanan"}, "user-1")
    registry.dispatch("create_expense", {"amount": 120000, "description": "bensin", "category": "transportasi"}, "user-1")
    registry.dispatch("create_expense", {"amount": 10000, "description": "nonton", "category": "hiburan"}, "user-1")

    result = registry.dispatch("check_budget_status", {}, "user-1")
    statuses = {s.category_id: s.status for s in result.data}

    assert statuses == {
        "makanan-minuman": "WARNING",
        "transportasi": "OVER_BUDGET",
        "hiburan": "UNDER_BUDGET",
    }
    assert result.metadata["alert_count"] == 2
    assert result.metadata["over_budget_count"] == 1
    assert result.metadata["warning_count"] == 1
    assert result.metadata["has_alerts"] is True


def test_budget_status_filter():
    registry, _ = _setup()

    registry.dispatch("set_budget", {"category": "makanan", "amount": 100000}, "user-1")

    found = registry.dispatch("check_budget_status", {"category": "makanan"}, "user-1")
    assert found.success is True
    assert len(found.data) == 1

    missing = registry.dispatch("check_budget_status", {"category": "hiburan"}, "user-1")
    assert missing.success is False
    assert missing.error == "BUDGET_NOT_FOUND"


# ═══════════════════════════════════════════════════════════════════════════════
# WALLET
# ═══════════════════════════════════════════════════════════════════════════════

def test_add_balance_coins():
    registry, services = _setup()

    result = registry.dispatch("add_balance", {"amount": 2500}, "user-1")

    assert result.success is True
    assert result.metadata["coins_added"] == 2
    wallet = services.wallets.get_wallet("user-1")
    assert wallet.balance == 2500.0
    assert wallet.coins == 2


def test_service_failure_is_execution_error():
    services = in_memory_services()
    failing_wallets = MagicMock()
    failing_wallets.add_balance.side_effect = ConnectionError("wallet service unreachable")
    registry = build_registry(FinanceServices(
        expenses=services.expenses,
        incomes=services.incomes,
        categories=services.categories,
        budgets=services.budgets,
        wallets=failing_wallets,
        vouchers=services.vouchers,
        reports=services.reports,
    ))

    result = registry.dispatch("add_balance", {"amount": 50000}, "user-1")

    assert result.success is False
    assert result.error == "EXECUTION_ERROR"
    assert failing_wallets.add_balance.call_count == 1
    assert result.metadata["mutating"] is True


# ═══════════════════════════════════════════════════════════════════════════════
# VOUCHERS
# ═══════════════════════════════════════════════════════════════════════════════

VOUCHERS = [
    Voucher(id="v-1", code="WELCOME", type="COINS", value=50),
    Voucher(id="v-2", code="BONUS50", type="BALANCE", value=50000),
    Voucher(id="v-3", code="DISKON10", type="DISCOUNT", value=10),
    Voucher(id="v-4", code="LAMA", type="BALANCE", value=1000, expires_at=datetime(2020, 1, 1)),
]


def test_redeem_voucher_benefits():
    """Test COINS / BALANCE / DISCOUNT vouchers."""

    print("Testing redeem_voucher...")

    registry, services = _setup(VOUCHERS)

    coins = registry.dispatch("redeem_voucher", {"voucher_code": " welcome "}, "user-1")
    assert coins.success is True
    assert coins.metadata["voucher_type"] == "COINS"
    assert coins.metadata["transaction_id"] == "v-1"
    assert coins.metadata["mutating"] is True
    assert coins.data["wallet"].coins == 50

    balance = registry.dispatch("redeem_voucher", {"voucher_code": "BONUS50"}, "user-1")
    assert balance.success is True
    assert balance.data["wallet"].balance == 50000.0

    discount = registry.dispatch("redeem_voucher", {"voucher_code": "DISKON10"}, "user-1")
    assert discount.success is True
    assert discount.data["voucher"].is_used is True

    wallet = services.wallets.get_wallet("user-1")
    assert (wallet.balance, wallet.coins) == (50000.0, 50)

    print("✓ redeem_voucher tests passed")


def test_redeem_voucher_rejections():
    registry, services = _setup(VOUCHERS)

    assert registry.dispatch("redeem_voucher", {"voucher_code": "NOPE"}, "user-1").error == "VOUCHER_INVALID"
    assert registry.dispatch("redeem_voucher", {"voucher_code": "LAMA"}, "user-1").error == "VOUCHER_EXPIRED"
    assert registry.dispatch("redeem_voucher", {"voucher_code": "   "}, "user-1").error == "VALIDATION_ERROR"

    assert registry.dispatch("redeem_voucher", {"voucher_code": "WELCOME"}, "user-1").success is True
    second = registry.dispatch("redeem_voucher", {"voucher_code": "WELCOME"}, "user-2")
    assert second.error == "VOUCHER_ALREADY_USED"

    assert services.vouchers.get_voucher("LAMA").is_used is False
    assert services.vouchers.get_voucher("WELCOME").redeemed_by == "user-1"
    assert services.wallets.get_wallet("user-2").coins == 0


# ═══════════════════════════════════════════════════════════════════════════════
# CATEGORY MANAGEMENT
# ═══════════════════════════════════════════════════════════════════════════════

def test_manage_category_list():
    registry, _ = _setup()

    result = registry.dispatch("manage_category", {"action": "LIST"}, "user-1")

    assert result.success is True
    assert result.metadata["action"] == "listed"
    assert len(result.data["expense_categories"]) == 8
    assert len(result.data["income_categories"]) == 7
    assert result.data["total"] == 15
    assert all(c["is_default"] for c in result.data["expense_categories"])


def test_manage_category_lifecycle():
    """Test create → update → delete of a caller's own category."""

    registry, services = _setup()

    created = registry.dispatch("manage_category", {"action": "create", "category_name": "investasi"}, "user-1")
    assert created.success is True
    assert created.data.type == "EXPENSE"
    assert created.data.caller_id == "user-1"

    duplicate = registry.dispatch("manage_category", {"action": "create", "category_name": "Investasi"}, "user-1")
    assert duplicate.error == "CATEGORY_EXISTS"

    renamed = registry.dispatch("manage_category", {
        "action": "update",
        "category_name": "investasi",
        "new_category_name": "Investasi Saham",
    }, "user-1")
    assert renamed.success is True
    assert renamed.data.name == "Investasi Saham"
    assert renamed.data.id == created.data.id

    # Other callers never see it
    hidden = registry.dispatch("manage_category", {"action": "delete", "category_name": "investasi saham"}, "user-2")
    assert hidden.error == "CATEGORY_NOT_FOUND"

    deleted = registry.dispatch("manage_category", {"action": "delete", "category_name": "investasi saham"}, "user-1")
    assert deleted.success is True
    assert deleted.metadata["action"] == "deleted"
    assert services.categories.get(created.data.id) is None


def test_manage_category_rejections():
    registry, _ = _setup()

    cases = [
        ({"action": "create"}, "MISSING_PARAMETERS"),
        ({"action": "update", "category_name": "hiburan"}, "MISSING_PARAMETERS"),
        ({"action": "delete"}, "MISSING_PARAMETERS"),
        ({"action": "create", "category_name": "makanan"}, "CATEGORY_EXISTS"),
        ({"action": "delete", "category_name": "hiburan"}, "CANNOT_MODIFY_DEFAULT"),
        ({"action": "update", "category_name": "gaji", "new_category_name": "upah"}, "CANNOT_MODIFY_DEFAULT"),
        ({"action": "delete", "category_name": "tidak ada"}, "CATEGORY_NOT_FOUND"),
        ({"action": "archive", "category_name": "hiburan"}, "VALIDATION_ERROR"),
    ]
    for arguments, error in cases:
        assert registry.dispatch("manage_category", arguments, "user-1").error == error, arguments


def test_income_category_with_expense_name_can_be_created():
    registry, _ = _setup()

    result = registry.dispatch("manage_category", {
        "action": "create",
        "category_name": "belanja",
        "category_type": "income",
    }, "user-1")

    assert result.success is True
    assert result.data.type == "INCOME"


# ═══════════════════════════════════════════════════════════════════════════════
# REPORTS
# ═══════════════════════════════════════════════════════════════════════════════

def _seed_march_2025(registry):
    registry.dispatch("create_income", {"amount": 1000000, "description": "gaji", "date": "2025-03-01"}, "user-1")
    registry.dispatch("create_expense", {
        "amount": 100000, "description": "makan siang", "category": "makanan", "date": "2025-03-05"
    }, "user-1")
    registry.dispatch("create_expense", {
        "amount": 50000, "description": "bensin", "category": "transportasi", "date": "2025-03-10"
    }, "user-1")
    registry.dispatch("create_expense", {
        "amount": 20000, "description": "parkir", "category": "transportasi", "date": "2025-04-01"
    }, "user-1")


def test_monthly_report():
    print("Testing generate_report...")

    registry, _ = _setup()
    _seed_march_2025(registry)

    result = registry.dispatch("generate_report", {"report_type": "monthly", "year": 2025, "month": 3}, "user-1")

    assert result.success is True
    assert result.metadata["period"] == "2025-03"
    assert result.metadata["transaction_count"] == 3
    assert result.metadata["top_category"] == "Makanan & Minuman"
    assert result.metadata["savings_rate"] == 85.0
    assert result.metadata["mutating"] is False

    summary = result.data
    assert summary.total_expenses == 150000.0
    assert summary.total_income == 1000000.0
    assert summary.net_amount == 850000.0
    assert (summary.expense_count, summary.income_count) == (2, 1)
    assert [c.category_id for c in summary.expenses_by_category] == ["makanan-minuman", "transportasi"]
    assert [c.percentage for c in summary.expenses_by_category] == [66.7, 33.3]

    assert result.message == "Monthly report for 2025-03"

    print("✓ generate_report tests passed")


def test_weekly_and_yearly_reports():
    registry, _ = _setup()
    _seed_march_2025(registry)

    weekly = registry.dispatch("generate_report", {"report_type": "WEEKLY", "week_start_date": "2025-03-05"}, "user-1")
    assert weekly.data.total_expenses == 150000.0
    assert weekly.data.total_income == 0.0
    assert weekly.metadata["savings_rate"] == 0.0
    assert weekly.metadata["period"] == "2025-03-05"
    assert weekly.data.end_date == date(2025, 3, 12)

    yearly = registry.dispatch("generate_report", {"report_type": "YEARLY", "year": 2025}, "user-1")
    assert yearly.data.total_expenses == 170000.0
    assert yearly.metadata["period"] == "2025"

    # Reports are scoped per caller
    other = registry.dispatch("generate_report", {"report_type": "YEARLY", "year": 2025}, "user-2")
    assert other.data.expense_count == 0
    assert other.metadata["top_category"] is None

    assert registry.dispatch("generate_report", {"month": 13}, "user-1").error == "VALIDATION_ERROR"


def test_report_window_defaults():
    today = date(2026, 3, 18)

    assert report_window(GenerateReportInput(), today) == (date(2026, 3, 1), date(2026, 4, 1), "2026-03")
    assert report_window(GenerateReportInput(report_type="weekly"), today)[:2] == (
        date(2026, 3, 16), date(2026, 3, 23)
    )
    assert report_window(GenerateReportInput(report_type="YEARLY"), today)[:2] == (
        date(2026, 1, 1), date(2027, 1, 1)
    )
    assert report_window(GenerateReportInput(month=12), today)[:2] == (
        date(2026, 12, 1), date(2027, 1, 1)
    )


def test_savings_rate():
    services = in_memory_services()

    assert savings_rate(services.reports.summarize("nobody", date(2026, 1, 1), date(2026, 2, 1))) == 0.0

    registry = build_registry(services)
    registry.dispatch("create_income", {"amount": 200000, "description": "bonus", "date": "2026-01-10"}, "user-1")
    registry.dispatch("create_expense", {"amount": 250000, "description": "belanja", "date": "2026-01-11"}, "user-1")

    overspent = services.reports.summarize("user-1", date(2026, 1, 1), date(2026, 2, 1))
    assert overspent.net_amount == -50000.0
    assert savings_rate(overspent) == -25.0


# ═══════════════════════════════════════════════════════════════════════════════
# CATEGORIES
# ═══════════════════════════════════════════════════════════════════════════════

def test_category_guessing():
    assert guess_expense_category("beli kopi") == "makanan-minuman"
    assert guess_expense_category("isi bensin") == "transportasi"
    assert guess_expense_category("bayar listrik") == "tagihan"
    assert guess_expense_category("sesuatu") == "lainnya"
    assert guess_income_category("gaji bulan ini") == "gaji"
    assert guess_income_category("uang kaget") == "lainnya-income"
    assert map_category_name("Makanan") == "makanan-minuman"
    assert map_category_name("entah") == "lainnya"


def run_all_tests():
    """Run all test functions."""
    print("\n" + "="*60)
    print("Running Finance Tool Tests")
    print("="*60 + "\n")

    try:
        test_create_expense_auto_category()
        test_create_expense_expression_overrides_amount()
        test_create_expense_unparseable_expression_keeps_amount()
        test_create_expense_relative_date()
        test_create_expense_bad_date_is_validation_error()
        test_create_expense_out_of_range_date_is_validation_error()
        test_non_finite_amounts_are_validation_errors()
        test_edit_expense()
        test_expenses_are_scoped_per_caller()
        test_create_income()
        test_set_budget_upserts()
        test_budget_status_levels()
        test_budget_status_filter()
        test_add_balance_coins()
        test_service_failure_is_execution_error()
        test_redeem_voucher_benefits()
        test_redeem_voucher_rejections()
        test_manage_category_list()
        test_manage_category_lifecycle()
        test_manage_category_rejections()
        test_income_category_with_expense_name_can_be_created()
        test_monthly_report()
        test_weekly_and_yearly_reports()
        test_report_window_defaults()
        test_savings_rate()
        test_category_guessing()

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
