"""
Tool Schemas and Type Definitions

Defines Pydantic schemas for all available tools and the core routing types.
Each tool has its own input model; the registry validates raw arguments into
that model before a handler ever sees them.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, List, Literal, Optional, Type, TypedDict

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.config import MAX_EXPRESSION_LENGTH, DEFAULT_LANGUAGE, DEFAULT_TIMEZONE
from tools.time.dates import parse_transaction_date


# ═══════════════════════════════════════════════════════════════════════════════
# ERROR & INTENT TAGS
# ═══════════════════════════════════════════════════════════════════════════════

class ToolError(str, Enum):
    """
    Error tags carried by ToolResult.error.

    The first four are produced by the registry/runner; the rest are
    declared by individual tools.
    """
    PARSE_ERROR = "PARSE_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    TOOL_NOT_FOUND = "TOOL_NOT_FOUND"
    EXECUTION_ERROR = "EXECUTION_ERROR"

    NO_EXPENSES_FOUND = "NO_EXPENSES_FOUND"
    EXPENSE_NOT_FOUND = "EXPENSE_NOT_FOUND"
    NOTHING_TO_UPDATE = "NOTHING_TO_UPDATE"
    BUDGET_NOT_FOUND = "BUDGET_NOT_FOUND"
    MISSING_PARAMETERS = "MISSING_PARAMETERS"
    CATEGORY_NOT_FOUND = "CATEGORY_NOT_FOUND"
    CATEGORY_EXISTS = "CATEGORY_EXISTS"
    CANNOT_MODIFY_DEFAULT = "CANNOT_MODIFY_DEFAULT"
    VOUCHER_INVALID = "VOUCHER_INVALID"
    VOUCHER_ALREADY_USED = "VOUCHER_ALREADY_USED"
    VOUCHER_EXPIRED = "VOUCHER_EXPIRED"


class Intent(str, Enum):
    """Coarse intent produced by the fallback pattern matcher"""
    CREATE_EXPENSE = "create_expense"
    CREATE_INCOME = "create_income"
    SET_BUDGET = "set_budget"
    ADD_BALANCE = "add_balance"
    NONE = "none"


# ═══════════════════════════════════════════════════════════════════════════════
# TOOL REGISTRY TYPES
# ═══════════════════════════════════════════════════════════════════════════════

class ToolSchema(BaseModel):
    """
    Declarative contract of a tool.

    Attributes:
        name: Unique snake_case tool name
        description: What the tool does (shown to the completion service)
        parameters: Pydantic model describing the accepted arguments
    """
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., pattern=r"^[a-z][a-z0-9_]*$")
    description: str = Field(..., min_length=1)
    parameters: Type[BaseModel]

    def parameter_spec(self) -> Dict[str, Any]:
        """JSON schema of the parameter model"""
        spec = self.parameters.model_json_schema()
        spec.pop("title", None)
        return spec

    def to_openai_tool(self) -> Dict[str, Any]:
        """Function-calling definition for chat.completions"""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameter_spec(),
            },
        }


class ToolEntry(TypedDict):
    """
    Registry entry for a tool.

    Attributes:
        schema: Declarative tool contract
        handler: Callable(validated_args, caller_id) executing the tool
        mutating: Whether the tool writes through an external service
    """
    schema: ToolSchema
    handler: Callable[[BaseModel, str], Any]
    mutating: bool


# ═══════════════════════════════════════════════════════════════════════════════
# RESULT ENVELOPES
# ═══════════════════════════════════════════════════════════════════════════════

class ToolResult(BaseModel):
    """
    Uniform result of one tool invocation.

    Produced once per dispatch and never mutated afterwards; the router
    annotates routing details on a copy.
    """
    model_config = ConfigDict(frozen=True)

    success: bool
    message: str = ""
    data: Any = None
    error: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class ToolInvocation(BaseModel):
    """A resolved request to run one tool, alive for a single dispatch"""
    model_config = ConfigDict(frozen=True)

    tool_name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)
    caller_id: str
    source: Literal["ai", "fallback"]
    confidence: float = Field(..., ge=0.0, le=1.0)


class NoMatch(BaseModel):
    """
    Terminal router outcome when neither path could interpret the message.

    Not an error: callers use `topic` and `suggestions` to offer help.
    """
    model_config = ConfigDict(frozen=True)

    text: str
    reason: Literal["no_pattern", "empty_input", "input_too_long"]
    topic: Optional[str] = None
    suggestions: List[str] = Field(default_factory=list)


# ═══════════════════════════════════════════════════════════════════════════════
# PATTERN MATCHING
# ═══════════════════════════════════════════════════════════════════════════════

class PatternMatch(BaseModel):
    """Heuristic classification of a message (fallback tier, not verified)"""
    model_config = ConfigDict(frozen=True)

    intent: Intent
    confidence: float = Field(..., ge=0.0, le=1.0)
    extracted_data: Dict[str, Any] = Field(default_factory=dict)


# ═══════════════════════════════════════════════════════════════════════════════
# CALCULATION
# ═══════════════════════════════════════════════════════════════════════════════

class ParsedTerm(BaseModel):
    """One `quantity * unit_price` term of an expression"""
    model_config = ConfigDict(frozen=True)

    quantity: Decimal = Field(..., gt=0)
    unit_price: Decimal = Field(..., gt=0)
    description: Optional[str] = None
    operator: Literal["multiply", "add", "subtract"] = "multiply"


class LineItem(BaseModel):
    """Calculated line; `total` is negative for subtracted terms"""
    model_config = ConfigDict(frozen=True)

    quantity: Decimal
    unit_price: Decimal
    total: Decimal
    description: Optional[str] = None
    operator: Literal["multiply", "add", "subtract"] = "multiply"


class CalculationResult(BaseModel):
    """
    Result of evaluating a vernacular expression.

    Invariant: total == sum(item.total for item in items)
    """
    model_config = ConfigDict(frozen=True)

    expression: str
    normalized: str
    total: Decimal
    items: List[LineItem] = Field(default_factory=list)
    breakdown: List[Dict[str, Any]] = Field(default_factory=list)


# ═══════════════════════════════════════════════════════════════════════════════
# CONVERSATION & COMPLETION
# ═══════════════════════════════════════════════════════════════════════════════

class ConversationMessage(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: str
    timestamp: dt.datetime = Field(default_factory=dt.datetime.now)


class ConversationContext(BaseModel):
    """Conversation state handed to the router by the transport layer"""
    caller_id: str
    recent_messages: List[ConversationMessage] = Field(default_factory=list)
    language: str = DEFAULT_LANGUAGE
    timezone: str = DEFAULT_TIMEZONE


class ToolCall(BaseModel):
    """Function call proposed by the completion service"""
    id: Optional[str] = None
    name: str
    arguments: str = "{}"


class CompletionResponse(BaseModel):
    content: str = ""
    tool_calls: List[ToolCall] = Field(default_factory=list)
    usage: Dict[str, int] = Field(default_factory=dict)


# ═══════════════════════════════════════════════════════════════════════════════
# EXPENSE TOOLS
# ═══════════════════════════════════════════════════════════════════════════════

class ExpenseItemInput(BaseModel):
    name: str = Field(..., min_length=1, description="Name of the item")
    quantity: float = Field(..., gt=0, allow_inf_nan=False, description="Quantity of the item")
    unit_price: float = Field(..., gt=0, allow_inf_nan=False, description="Price per unit in Rupiah")


class CreateExpenseInput(BaseModel):
    """
    Record an expense the user spent money on.

    Examples:
        - "beli kopi 25rb" → amount=25000, description="beli kopi"
        - "5kg ayam @ 10rb" → amount=50000, calculation_expression="5kg ayam @ 10rb"
    """
    amount: float = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Amount of the expense in Indonesian Rupiah"
    )

    description: str = Field(
        ...,
        min_length=1,
        description="Description of the expense in Indonesian"
    )

    category: Optional[str] = Field(
        None,
        min_length=1,
        description="Category name or id (auto-categorized when omitted)",
        examples=["makanan-minuman", "transportasi", "belanja"]
    )

    calculation_expression: Optional[str] = Field(
        None,
        max_length=MAX_EXPRESSION_LENGTH,
        description="Expression the amount came from, e.g. '5kg @ 10rb'"
    )

    items: Optional[List[ExpenseItemInput]] = Field(
        None,
        description="Individual items if this is an itemized expense"
    )

    date: Optional[dt.date] = Field(
        None,
        description="Transaction date, ISO (YYYY-MM-DD) or natural language such as 'kemarin'"
    )

    @field_validator("date", mode="before")
    @classmethod
    def _resolve_date(cls, value):
        if value is None or isinstance(value, dt.date):
            return value
        return parse_transaction_date(str(value))


class EditExpenseInput(BaseModel):
    """
    Edit an existing expense. Without expense_id the most recent expense
    is edited.

    Examples:
        - "ubah pembelian kopi tadi jadi 30rb"
        - "ganti pengeluaran terakhir jadi 50rb"
    """
    expense_id: Optional[str] = Field(None, description="ID of the expense to edit")
    amount: Optional[float] = Field(None, gt=0, allow_inf_nan=False, description="New amount for the expense")
    description: Optional[str] = Field(None, min_length=1, description="New description")
    category: Optional[str] = Field(None, min_length=1, description="New category")


# ═══════════════════════════════════════════════════════════════════════════════
# INCOME TOOLS
# ═══════════════════════════════════════════════════════════════════════════════

class CreateIncomeInput(BaseModel):
    """
    Record money the user received.

    Examples:
        - "gaji bulan ini 5 juta"
        - "dapat bonus 500rb"
    """
    amount: float = Field(..., gt=0, allow_inf_nan=False, description="Amount of the income in Indonesian Rupiah")
    description: str = Field(..., min_length=1, description="Description of the income")
    category: Optional[str] = Field(
        None,
        min_length=1,
        description="Category name or id (auto-categorized when omitted)",
        examples=["gaji", "bonus", "freelance"]
    )
    date: Optional[dt.date] = Field(
        None,
        description="Transaction date, ISO (YYYY-MM-DD) or natural language"
    )

    @field_validator("date", mode="before")
    @classmethod
    def _resolve_date(cls, value):
        if value is None or isinstance(value, dt.date):
            return value
        return parse_transaction_date(str(value))


# ═══════════════════════════════════════════════════════════════════════════════
# BUDGET TOOLS
# ═══════════════════════════════════════════════════════════════════════════════

class SetBudgetInput(BaseModel):
    """
    Set or update a budget for a category.

    Examples:
        - "budget makanan 1 juta"
        - "budget transportasi 500rb per minggu"
    """
    category: str = Field(..., min_length=1, description="Category to set the budget for")
    amount: float = Field(..., gt=0, allow_inf_nan=False, description="Budget amount in Indonesian Rupiah")
    period: Literal["DAILY", "WEEKLY", "MONTHLY", "YEARLY"] = Field(
        "MONTHLY",
        description="Budget period"
    )

    @field_validator("period", mode="before")
    @classmethod
    def _upper_period(cls, value):
        return value.upper() if isinstance(value, str) else value


class BudgetStatusInput(BaseModel):
    """
    Check budget usage. Without a category every budget is reported.

    Examples:
        - "cek budget"
        - "status budget makanan"
    """
    category: Optional[str] = Field(None, min_length=1, description="Category to check")


# ═══════════════════════════════════════════════════════════════════════════════
# WALLET TOOLS
# ═══════════════════════════════════════════════════════════════════════════════

class AddBalanceInput(BaseModel):
    """
    Top up the wallet balance.

    Examples:
        - "tambah saldo 50rb"
        - "top up 100000"
    """
    amount: float = Field(..., gt=0, allow_inf_nan=False, description="Amount to add in Indonesian Rupiah")


class RedeemVoucherInput(BaseModel):
    """
    Redeem a voucher code.

    Examples:
        - "pakai voucher WELCOME"
        - "redeem kode BONUS50"
    """
    voucher_code: str = Field(..., min_length=1, max_length=64, description="Voucher code to redeem")

    @field_validator("voucher_code", mode="before")
    @classmethod
    def _normalize_code(cls, value):
        return value.strip().upper() if isinstance(value, str) else value


# ═══════════════════════════════════════════════════════════════════════════════
# CATEGORY TOOLS
# ═══════════════════════════════════════════════════════════════════════════════

class ManageCategoryInput(BaseModel):
    """
    Create, rename, delete or list categories.

    Examples:
        - "buat kategori investasi"       → action="create", category_name="investasi"
        - "ubah kategori kopi jadi ngopi" → action="update"
        - "lihat semua kategori"          → action="list"
    """
    action: Literal["create", "update", "delete", "list"] = Field(
        ...,
        description="Action to perform on categories"
    )
    category_name: Optional[str] = Field(
        None,
        min_length=1,
        description="Name of the category (required for create, update, delete)"
    )
    new_category_name: Optional[str] = Field(
        None,
        min_length=1,
        description="New name for the category (update only)"
    )
    category_type: Literal["EXPENSE", "INCOME"] = Field(
        "EXPENSE",
        description="Type of a created category"
    )

    @field_validator("action", mode="before")
    @classmethod
    def _lower_action(cls, value):
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("category_type", mode="before")
    @classmethod
    def _upper_type(cls, value):
        return value.strip().upper() if isinstance(value, str) else value


# ═══════════════════════════════════════════════════════════════════════════════
# REPORT TOOLS
# ═══════════════════════════════════════════════════════════════════════════════

class GenerateReportInput(BaseModel):
    """
    Income and spending summary for a week, month or year.

    Missing year/month default to the current ones; a weekly report
    without week_start_date covers the current Monday-based week.

    Examples:
        - "laporan bulan ini"        → report_type="MONTHLY"
        - "ringkasan minggu ini"     → report_type="WEEKLY"
        - "laporan keuangan 2025"    → report_type="YEARLY", year=2025
    """
    report_type: Literal["WEEKLY", "MONTHLY", "YEARLY"] = Field(
        "MONTHLY",
        description="Type of report to generate"
    )
    year: Optional[int] = Field(None, ge=2000, le=2100, description="Year of a monthly or yearly report")
    month: Optional[int] = Field(None, ge=1, le=12, description="Month of a monthly report (1-12)")
    week_start_date: Optional[dt.date] = Field(
        None,
        description="First day of a weekly report, ISO (YYYY-MM-DD) or natural language"
    )

    @field_validator("report_type", mode="before")
    @classmethod
    def _upper_report_type(cls, value):
        return value.strip().upper() if isinstance(value, str) else value

    @field_validator("week_start_date", mode="before")
    @classmethod
    def _resolve_date(cls, value):
        if value is None or isinstance(value, dt.date):
            return value
        return parse_transaction_date(str(value))


# ═══════════════════════════════════════════════════════════════════════════════
# UTILITY TOOLS
# ═══════════════════════════════════════════════════════════════════════════════

class CalculatorInput(BaseModel):
    """
    Evaluate a shopping expression in Indonesian notation.

    Supports rb/ribu/k and jt/juta suffixes, '@', 'x', 'kali' and 'per'
    as multiplication, and '+'/'-' between terms.
    """
    expression: str = Field(
        ...,
        min_length=1,
        max_length=MAX_EXPRESSION_LENGTH,
        description="Expression to evaluate",
        examples=["5kg @ 10rb", "2 @ 5000 + 3 @ 3000", "10 kali 2500"]
    )
