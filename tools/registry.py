"""
Tool Registry

Explicitly constructed registry owned by the composition root. Tools are
registered at start-up, then the registry is frozen and only read.
"""

from typing import Any, Callable, Dict, List, Optional

from app.config import is_tool_enabled
from app.runner import run_tool
from infra.logger import logger_tool
from tools.finance.budget import make_check_budget_status, make_set_budget
from tools.finance.category_manager import make_manage_category
from tools.finance.expense import make_create_expense, make_edit_expense
from tools.finance.income import make_create_income
from tools.finance.report import make_generate_report
from tools.finance.services import FinanceServices
from tools.finance.voucher import make_redeem_voucher
from tools.finance.wallet import make_add_balance
from tools.math.calculate import calculator_tool
from tools.responses import tool_failure
from tools.schemas import (
    AddBalanceInput,
    BudgetStatusInput,
    CalculatorInput,
    CreateExpenseInput,
    CreateIncomeInput,
    EditExpenseInput,
    GenerateReportInput,
    ManageCategoryInput,
    RedeemVoucherInput,
    SetBudgetInput,
    ToolEntry,
    ToolError,
    ToolResult,
    ToolSchema,
)


class RegistryFrozenError(RuntimeError):
    """Raised when registering after start-up"""


class ToolRegistry:

    def __init__(self):
        self._entries: Dict[str, ToolEntry] = {}
        self._frozen = False

    # ---------- REGISTRATION ----------

    def register(self, schema: ToolSchema, handler: Callable, mutating: bool = False):
        if self._frozen:
            raise RegistryFrozenError(f"Registry is frozen, cannot register '{schema.name}'")

        if schema.name in self._entries:
            logger_tool.warning(f"TOOL_OVERWRITTEN | tool={schema.name}")

        self._entries[schema.name] = {
            "schema": schema,
            "handler": handler,
            "mutating": mutating,
        }

    def freeze(self) -> "ToolRegistry":
        self._frozen = True
        logger_tool.info(f"REGISTRY_FROZEN | tools={len(self._entries)}")
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    # ---------- LOOKUP ----------

    def get(self, name: str) -> Optional[ToolSchema]:
        entry = self._entries.get(name)
        return entry["schema"] if entry else None

    def is_mutating(self, name: str) -> bool:
        """Whether the tool writes through a finance service"""
        entry = self._entries.get(name)
        return bool(entry and entry["mutating"])

    def names(self) -> List[str]:
        return list(self._entries)

    def schemas(self) -> List[ToolSchema]:
        return [entry["schema"] for entry in self._entries.values()]

    def openai_tools(self) -> List[dict]:
        """Function-calling definitions for every registered tool"""
        return [schema.to_openai_tool() for schema in self.schemas()]

    def __contains__(self, name) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    # ---------- DISPATCH ----------

    def dispatch(
        self,
        name: str,
        raw_arguments: Any,
        caller_id: str,
        context: Optional[dict] = None
    ) -> ToolResult:
        """
        Validate and execute a tool by name.

        Unknown names yield TOOL_NOT_FOUND, invalid arguments
        VALIDATION_ERROR, handler exceptions EXECUTION_ERROR.
        """
        entry = self._entries.get(name)
        if entry is None:
            logger_tool.error(f"TOOL_NOT_FOUND | tool={name}")
            return tool_failure(ToolError.TOOL_NOT_FOUND, f"Unknown tool: {name}")

        return run_tool(entry, raw_arguments, caller_id, context)


# ═══════════════════════════════════════════════════════════════════════════════
# COMPOSITION
# ═══════════════════════════════════════════════════════════════════════════════

def build_registry(services: FinanceServices) -> ToolRegistry:
    """Register every enabled tool against the given services and freeze"""
    tools = [

        # ---------- EXPENSES ----------

        (
            ToolSchema(
                name="create_expense",
                description=(
                    "Create a new expense record when the user mentions spending money, "
                    "buying or paying for something. Examples: \"beli kopi 25rb\", "
                    "\"bayar listrik 150000\", \"5kg ayam @ 10rb\""
                ),
                parameters=CreateExpenseInput,
            ),
            make_create_expense(services),
            True,
        ),
        (
            ToolSchema(
                name="edit_expense",
                description=(
                    "Edit an existing expense when the user wants to change a previous one. "
                    "Examples: \"ubah pembelian kopi tadi jadi 30rb\", "
                    "\"ganti pengeluaran terakhir jadi 50rb\""
                ),
                parameters=EditExpenseInput,
            ),
            make_edit_expense(services),
            True,
        ),

        # ---------- INCOME ----------

        (
            ToolSchema(
                name="create_income",
                description=(
                    "Record income when the user mentions receiving money. "
                    "Examples: \"gaji 5 juta\", \"dapat bonus 500rb\", \"jual barang 200rb\""
                ),
                parameters=CreateIncomeInput,
            ),
            make_create_income(services),
            True,
        ),

        # ---------- BUDGETS ----------

        (
            ToolSchema(
                name="set_budget",
                description=(
                    "Set or update a budget for a category. Examples: "
                    "\"budget makanan 1 juta\", \"budget transportasi 500rb per minggu\""
                ),
                parameters=SetBudgetInput,
            ),
            make_set_budget(services),
            True,
        ),
        (
            ToolSchema(
                name="check_budget_status",
                description=(
                    "Check budget usage and alerts. Examples: \"cek budget\", "
                    "\"status budget makanan\", \"sudah berapa persen budget bulan ini\""
                ),
                parameters=BudgetStatusInput,
            ),
            make_check_budget_status(services),
            False,
        ),

        # ---------- WALLET ----------

        (
            ToolSchema(
                name="add_balance",
                description=(
                    "Add balance to the user's wallet. Examples: \"tambah saldo 50rb\", "
                    "\"top up 100000\", \"isi saldo 25rb\""
                ),
                parameters=AddBalanceInput,
            ),
            make_add_balance(services),
            True,
        ),
        (
            ToolSchema(
                name="redeem_voucher",
                description=(
                    "Redeem a voucher code when the user mentions using or redeeming a voucher. "
                    "Examples: \"pakai voucher ABC123\", \"redeem kode BONUS50\", "
                    "\"gunakan voucher WELCOME\""
                ),
                parameters=RedeemVoucherInput,
            ),
            make_redeem_voucher(services),
            True,
        ),

        # ---------- CATEGORIES ----------

        (
            ToolSchema(
                name="manage_category",
                description=(
                    "Create, rename, delete or list categories. Examples: "
                    "\"buat kategori investasi\", \"hapus kategori hiburan\", "
                    "\"ubah nama kategori kopi jadi ngopi\", \"lihat semua kategori\""
                ),
                parameters=ManageCategoryInput,
            ),
            make_manage_category(services),
            True,
        ),

        # ---------- REPORTS ----------

        (
            ToolSchema(
                name="generate_report",
                description=(
                    "Generate an income and spending summary when the user asks for a report "
                    "or overview. Examples: \"laporan bulan ini\", \"ringkasan pengeluaran "
                    "minggu ini\", \"laporan keuangan tahun 2025\""
                ),
                parameters=GenerateReportInput,
            ),
            make_generate_report(services),
            False,
        ),

        # ---------- UTILITIES ----------

        (
            ToolSchema(
                name="calculate",
                description=(
                    "Calculate a shopping expression without recording anything. "
                    "Examples: \"5kg @ 10rb\", \"2 @ 5000 + 3 @ 3000\""
                ),
                parameters=CalculatorInput,
            ),
            calculator_tool,
            False,
        ),
    ]

    registry = ToolRegistry()
    for schema, handler, mutating in tools:
        if is_tool_enabled(schema.name):
            registry.register(schema, handler, mutating=mutating)

    return registry.freeze()
