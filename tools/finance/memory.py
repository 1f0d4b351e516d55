"""
In-Memory Finance Services

Process-local implementations of the finance service interfaces. Used by
the CLI and the test-suite; nothing is persisted.
"""

import datetime as dt
import threading
import uuid
from typing import Any, Dict, List, Optional

from tools.finance.categories import (
    CATEGORY_NAME_MAP,
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
)
from tools.finance.services import (
    Budget,
    BudgetService,
    Category,
    CategoryService,
    CategoryTotal,
    CategoryType,
    Expense,
    ExpenseItem,
    ExpenseService,
    FinanceServices,
    Income,
    IncomeService,
    PeriodSummary,
    RecordNotFoundError,
    ReportService,
    Voucher,
    VoucherAlreadyUsedError,
    VoucherService,
    Wallet,
    WalletService,
)


def _new_id() -> str:
    return uuid.uuid4().hex[:12]


class InMemoryCategoryService(CategoryService):

    def __init__(self):
        self._categories: Dict[str, Category] = {}
        for category_id, name in EXPENSE_CATEGORIES.items():
            self._categories[category_id] = Category(id=category_id, name=name, type="EXPENSE")
        for category_id, name in INCOME_CATEGORIES.items():
            self._categories[category_id] = Category(id=category_id, name=name, type="INCOME")

    def get(self, category_id: str) -> Optional[Category]:
        return self._categories.get(category_id)

    def find_or_create(self, caller_id: str, name: str, type: CategoryType) -> Category:
        key = name.strip().lower()

        if type == "EXPENSE" and key in CATEGORY_NAME_MAP:
            key = CATEGORY_NAME_MAP[key]

        category = self._categories.get(key)
        if category and category.type == type and category.caller_id in (None, caller_id):
            return category

        for category in self._categories.values():
            if (
                category.type == type
                and category.caller_id in (None, caller_id)
                and category.name.lower() == key
            ):
                return category

        return self.create_category(caller_id, name, type)

    def list_categories(self, caller_id: str) -> List[Category]:
        return [c for c in self._categories.values() if c.caller_id in (None, caller_id)]

    def create_category(self, caller_id: str, name: str, type: CategoryType) -> Category:
        category = Category(id=_new_id(), name=name.strip(), type=type, caller_id=caller_id)
        self._categories[category.id] = category
        return category

    def rename_category(self, category_id: str, caller_id: str, name: str) -> Category:
        category = self._owned(category_id, caller_id).model_copy(update={"name": name.strip()})
        self._categories[category_id] = category
        return category

    def delete_category(self, category_id: str, caller_id: str) -> None:
        self._owned(category_id, caller_id)
        del self._categories[category_id]

    def _owned(self, category_id: str, caller_id: str) -> Category:
        category = self._categories.get(category_id)
        if category is None or category.caller_id != caller_id:
            raise RecordNotFoundError(f"Category {category_id} not found")
        return category


class InMemoryExpenseService(ExpenseService):

    def __init__(self):
        self._expenses: List[Expense] = []

    def create_expense(self, caller_id: str, data: Dict[str, Any]) -> Expense:
        items = [ExpenseItem(**item) for item in data.get("items") or []]
        expense = Expense(
            id=_new_id(),
            caller_id=caller_id,
            amount=data["amount"],
            description=data["description"],
            category_id=data["category_id"],
            calculation_expression=data.get("calculation_expression"),
            items=items,
            date=data.get("date") or dt.date.today()
        )
        self._expenses.append(expense)
        return expense

    def get_user_expenses(self, caller_id: str, limit: Optional[int] = None) -> List[Expense]:
        owned = [e for e in reversed(self._expenses) if e.caller_id == caller_id]
        return owned[:limit] if limit else owned

    def update_expense(self, expense_id: str, caller_id: str, updates: Dict[str, Any]) -> Expense:
        for index, expense in enumerate(self._expenses):
            if expense.id == expense_id and expense.caller_id == caller_id:
                updated = expense.model_copy(update=updates)
                self._expenses[index] = updated
                return updated
        raise RecordNotFoundError(f"Expense {expense_id} not found")

    def total_for_category(self, caller_id, category_id, start, end) -> float:
        return sum(
            e.amount for e in self._expenses
            if e.caller_id == caller_id
            and e.category_id == category_id
            and start <= e.date < end
        )


class InMemoryIncomeService(IncomeService):

    def __init__(self):
        self._incomes: List[Income] = []

    def create_income(self, caller_id: str, data: Dict[str, Any]) -> Income:
        income = Income(
            id=_new_id(),
            caller_id=caller_id,
            amount=data["amount"],
            description=data["description"],
            category_id=data["category_id"],
            date=data.get("date") or dt.date.today()
        )
        self._incomes.append(income)
        return income

    def get_user_incomes(self, caller_id: str, limit: Optional[int] = None) -> List[Income]:
        owned = [i for i in reversed(self._incomes) if i.caller_id == caller_id]
        return owned[:limit] if limit else owned


class InMemoryBudgetService(BudgetService):

    def __init__(self):
        self._budgets: Dict[tuple, Budget] = {}

    def set_budget(self, caller_id: str, data: Dict[str, Any]) -> Budget:
        key = (caller_id, data["category_id"], data["period"])
        existing = self._budgets.get(key)
        budget = Budget(
            id=existing.id if existing else _new_id(),
            caller_id=caller_id,
            **data
        )
        self._budgets[key] = budget
        return budget

    def get_user_budgets(self, caller_id: str) -> List[Budget]:
        return [b for b in self._budgets.values() if b.caller_id == caller_id]


class InMemoryWalletService(WalletService):
    """Wallet mutations are serialized per process"""

    def __init__(self):
        self._wallets: Dict[str, Wallet] = {}
        self._lock = threading.Lock()

    def get_wallet(self, caller_id: str) -> Wallet:
        with self._lock:
            return self._wallets.get(caller_id) or Wallet(caller_id=caller_id)

    def add_balance(self, caller_id: str, amount: float) -> Wallet:
        with self._lock:
            wallet = self._wallets.get(caller_id) or Wallet(caller_id=caller_id)
            wallet = wallet.model_copy(update={"balance": wallet.balance + amount})
            self._wallets[caller_id] = wallet
            return wallet

    def add_coins(self, caller_id: str, coins: int) -> Wallet:
        with self._lock:
            wallet = self._wallets.get(caller_id) or Wallet(caller_id=caller_id)
            wallet = wallet.model_copy(update={"coins": wallet.coins + coins})
            self._wallets[caller_id] = wallet
            return wallet


class InMemoryVoucherService(VoucherService):
    """Redemption is serialized per process so a code is used at most once"""

    def __init__(self, vouchers: Optional[List[Voucher]] = None):
        self._vouchers: Dict[str, Voucher] = {}
        self._lock = threading.Lock()
        for voucher in vouchers or []:
            self.issue(voucher)

    def issue(self, voucher: Voucher) -> Voucher:
        with self._lock:
            self._vouchers[voucher.code.upper()] = voucher
        return voucher

    def get_voucher(self, code: str) -> Optional[Voucher]:
        return self._vouchers.get(code.strip().upper())

    def redeem_voucher(self, code: str, caller_id: str) -> Voucher:
        key = code.strip().upper()
        with self._lock:
            voucher = self._vouchers.get(key)
            if voucher is None:
                raise RecordNotFoundError(f"Voucher {code} not found")
            if voucher.is_used:
                raise VoucherAlreadyUsedError(f"Voucher {code} has already been used")
            voucher = voucher.model_copy(update={"is_used": True, "redeemed_by": caller_id})
            self._vouchers[key] = voucher
            return voucher


class InMemoryReportService(ReportService):
    """Summaries computed from whatever the expense and income services hold"""

    def __init__(self, expenses: ExpenseService, incomes: IncomeService, categories: CategoryService):
        self._expenses = expenses
        self._incomes = incomes
        self._categories = categories

    def summarize(self, caller_id: str, start: dt.date, end: dt.date) -> PeriodSummary:
        expenses = [e for e in self._expenses.get_user_expenses(caller_id) if start <= e.date < end]
        incomes = [i for i in self._incomes.get_user_incomes(caller_id) if start <= i.date < end]

        total_expenses = sum(e.amount for e in expenses)
        total_income = sum(i.amount for i in incomes)

        per_category: Dict[str, float] = {}
        for expense in expenses:
            per_category[expense.category_id] = per_category.get(expense.category_id, 0.0) + expense.amount

        breakdown = []
        for category_id, amount in per_category.items():
            category = self._categories.get(category_id)
            breakdown.append(CategoryTotal(
                category_id=category_id,
                category_name=category.name if category else category_id,
                total_amount=amount,
                percentage=round(amount / total_expenses * 100, 1) if total_expenses else 0.0
            ))
        breakdown.sort(key=lambda total: total.total_amount, reverse=True)

        return PeriodSummary(
            start_date=start,
            end_date=end,
            total_expenses=total_expenses,
            total_income=total_income,
            net_amount=total_income - total_expenses,
            expense_count=len(expenses),
            income_count=len(incomes),
            expenses_by_category=breakdown
        )


def in_memory_services(vouchers: Optional[List[Voucher]] = None) -> FinanceServices:
    expenses = InMemoryExpenseService()
    incomes = InMemoryIncomeService()
    categories = InMemoryCategoryService()
    return FinanceServices(
        expenses=expenses,
        incomes=incomes,
        categories=categories,
        budgets=InMemoryBudgetService(),
        wallets=InMemoryWalletService(),
        vouchers=InMemoryVoucherService(vouchers),
        reports=InMemoryReportService(expenses, incomes, categories),
    )
