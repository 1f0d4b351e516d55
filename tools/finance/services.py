"""
Finance Service Interfaces

Storage collaborators the finance tools talk to. The command core only
depends on these abstract interfaces; persistence lives elsewhere
(tools/finance/memory.py ships in-memory implementations for the CLI and
the tests).
"""

import datetime as dt
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


CategoryType = Literal["EXPENSE", "INCOME"]


class RecordNotFoundError(LookupError):
    """Raised by a service when the requested record does not exist"""


class VoucherAlreadyUsedError(RuntimeError):
    """Raised when a voucher code is redeemed a second time"""


# ═══════════════════════════════════════════════════════════════════════════════
# RECORDS
# ═══════════════════════════════════════════════════════════════════════════════

class Category(BaseModel):
    id: str
    name: str
    type: CategoryType
    caller_id: Optional[str] = None

    @property
    def is_default(self) -> bool:
        return self.caller_id is None


class ExpenseItem(BaseModel):
    name: str
    quantity: float
    unit_price: float


class Expense(BaseModel):
    id: str
    caller_id: str
    amount: float
    description: str
    category_id: str
    calculation_expression: Optional[str] = None
    items: List[ExpenseItem] = Field(default_factory=list)
    date: dt.date
    created_at: dt.datetime = Field(default_factory=dt.datetime.now)


class Income(BaseModel):
    id: str
    caller_id: str
    amount: float
    description: str
    category_id: str
    date: dt.date
    created_at: dt.datetime = Field(default_factory=dt.datetime.now)


class Budget(BaseModel):
    id: str
    caller_id: str
    category_id: str
    amount: float
    period: Literal["DAILY", "WEEKLY", "MONTHLY", "YEARLY"]
    start_date: dt.date
    end_date: dt.date


class BudgetStatus(BaseModel):
    """Spending progress of one budget within its current window"""
    budget_id: str
    category_id: str
    category_name: str
    period: str
    budget_amount: float
    spent_amount: float
    remaining_amount: float
    percentage: float
    status: Literal["UNDER_BUDGET", "WARNING", "OVER_BUDGET"]


class Wallet(BaseModel):
    caller_id: str
    balance: float = 0.0
    coins: int = 0


class Voucher(BaseModel):
    id: str
    code: str
    type: Literal["COINS", "BALANCE", "DISCOUNT"]
    value: float
    is_used: bool = False
    expires_at: Optional[dt.datetime] = None
    redeemed_by: Optional[str] = None


class CategoryTotal(BaseModel):
    category_id: str
    category_name: str
    total_amount: float
    percentage: float


class PeriodSummary(BaseModel):
    """Income and spending of one caller within [start_date, end_date)"""
    start_date: dt.date
    end_date: dt.date
    total_expenses: float
    total_income: float
    net_amount: float
    expense_count: int
    income_count: int
    expenses_by_category: List[CategoryTotal] = Field(default_factory=list)


# ═══════════════════════════════════════════════════════════════════════════════
# SERVICE INTERFACES
# ═══════════════════════════════════════════════════════════════════════════════

class ExpenseService(ABC):

    @abstractmethod
    def create_expense(self, caller_id: str, data: Dict[str, Any]) -> Expense:
        ...

    @abstractmethod
    def get_user_expenses(self, caller_id: str, limit: Optional[int] = None) -> List[Expense]:
        """Expenses of a caller, most recent first"""

    @abstractmethod
    def update_expense(self, expense_id: str, caller_id: str, updates: Dict[str, Any]) -> Expense:
        """Raises RecordNotFoundError when the expense does not belong to caller"""

    @abstractmethod
    def total_for_category(
        self,
        caller_id: str,
        category_id: str,
        start: dt.date,
        end: dt.date
    ) -> float:
        """Sum of expenses in [start, end) for one category"""


class IncomeService(ABC):

    @abstractmethod
    def create_income(self, caller_id: str, data: Dict[str, Any]) -> Income:
        ...

    @abstractmethod
    def get_user_incomes(self, caller_id: str, limit: Optional[int] = None) -> List[Income]:
        ...


class CategoryService(ABC):

    @abstractmethod
    def find_or_create(self, caller_id: str, name: str, type: CategoryType) -> Category:
        """Resolve a category by id or name, creating a user category if needed"""

    @abstractmethod
    def get(self, category_id: str) -> Optional[Category]:
        ...

    @abstractmethod
    def list_categories(self, caller_id: str) -> List[Category]:
        """Default categories plus the caller's own"""

    @abstractmethod
    def create_category(self, caller_id: str, name: str, type: CategoryType) -> Category:
        ...

    @abstractmethod
    def rename_category(self, category_id: str, caller_id: str, name: str) -> Category:
        """Raises RecordNotFoundError unless the category belongs to caller"""

    @abstractmethod
    def delete_category(self, category_id: str, caller_id: str) -> None:
        """Raises RecordNotFoundError unless the category belongs to caller"""


class BudgetService(ABC):

    @abstractmethod
    def set_budget(self, caller_id: str, data: Dict[str, Any]) -> Budget:
        """Create the budget, or replace the caller's budget for the same category and period"""

    @abstractmethod
    def get_user_budgets(self, caller_id: str) -> List[Budget]:
        ...


class WalletService(ABC):

    @abstractmethod
    def get_wallet(self, caller_id: str) -> Wallet:
        ...

    @abstractmethod
    def add_balance(self, caller_id: str, amount: float) -> Wallet:
        ...

    @abstractmethod
    def add_coins(self, caller_id: str, coins: int) -> Wallet:
        ...


class VoucherService(ABC):

    @abstractmethod
    def get_voucher(self, code: str) -> Optional[Voucher]:
        ...

    @abstractmethod
    def redeem_voucher(self, code: str, caller_id: str) -> Voucher:
        """
        Mark a voucher as used by caller.

        Raises:
            RecordNotFoundError: unknown code
            VoucherAlreadyUsedError: the code was redeemed before
        """


class ReportService(ABC):

    @abstractmethod
    def summarize(self, caller_id: str, start: dt.date, end: dt.date) -> PeriodSummary:
        """Totals and per-category spending in [start, end)"""


@dataclass(frozen=True)
class FinanceServices:
    """Bundle of collaborators handed to build_registry"""
    expenses: ExpenseService
    incomes: IncomeService
    categories: CategoryService
    budgets: BudgetService
    wallets: WalletService
    vouchers: VoucherService
    reports: ReportService
