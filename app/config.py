"""
Router Configuration

Centralized configuration for the command-interpretation core.
Environment variables and secrets are loaded separately (infra/env.py).
"""

from typing import Set, Literal


# ═══════════════════════════════════════════════════════════════════════════════
# LLM CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════

# Models known to support function calling on the configured endpoint
AVAILABLE_MODELS = [
    "gpt-4o-mini",
    "gpt-4o",
    "gpt-4.1-mini",
]

# Default model for tool selection (OPENAI_MODEL overrides it)
MODEL_NAME: str = "gpt-4o-mini"

# Default OpenAI-compatible endpoint (OPENAI_BASE_URL overrides it)
BASE_URL: str = "https://api.openai.com/v1"

# Sampling settings for the tool-selection call
TEMPERATURE: float = 0.2
MAX_COMPLETION_TOKENS: int = 1000


# ═══════════════════════════════════════════════════════════════════════════════
# AI ATTEMPT LIMITS
# ═══════════════════════════════════════════════════════════════════════════════

# Timeout for a single HTTP request to the completion service (seconds)
AI_REQUEST_TIMEOUT_SECONDS: float = 8.0

# Attempts per AI interpretation (first call + retries on transient failures)
AI_MAX_ATTEMPTS: int = 3

# Linear backoff unit between attempts: 0.5s, 1.0s, ...
AI_BACKOFF_SECONDS: float = 0.5

# Hard ceiling for the whole AI attempt as seen by the router (seconds).
# Past this the router moves to the fallback path regardless.
AI_ROUTE_TIMEOUT_SECONDS: float = 20.0

# Recent conversation messages forwarded to the completion service
MAX_CONTEXT_MESSAGES: int = 10


# ═══════════════════════════════════════════════════════════════════════════════
# ROUTING & FALLBACK
# ═══════════════════════════════════════════════════════════════════════════════

# Confidence attached to every heuristic match. Placeholder tier marker,
# not derived from any signal: do not threshold on it.
FALLBACK_CONFIDENCE: float = 0.8

# Confidence attached to a validated AI tool call
AI_CONFIDENCE: float = 0.9

# Default locale for conversation context
DEFAULT_LANGUAGE: str = "id"
DEFAULT_TIMEZONE: str = "Asia/Jakarta"


# ═══════════════════════════════════════════════════════════════════════════════
# TOOL CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════

# Tools that are currently disabled (maintenance, bugs, etc.)
DISABLED_TOOLS: Set[str] = set()

# Rupiah per wallet coin when topping up balance
RUPIAH_PER_COIN: int = 1000

# Spending share at which a budget is reported as WARNING
BUDGET_WARNING_PERCENT: float = 80.0

# Budget periods accepted by set_budget
BudgetPeriod = Literal["DAILY", "WEEKLY", "MONTHLY", "YEARLY"]
DEFAULT_BUDGET_PERIOD: BudgetPeriod = "MONTHLY"

# Languages handed to dateparser for transaction dates
DATE_LANGUAGES = ["id", "en"]


# ═══════════════════════════════════════════════════════════════════════════════
# LOGGING CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════

# Log level for the application
LOG_LEVEL: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL

# Enable file logging
ENABLE_FILE_LOGGING: bool = False

# Log file path
LOG_FILE_PATH: str = "runtime/logs/router.log"

# Log LLM requests and responses (for debugging)
LOG_LLM_CALLS: bool = False  # Set to True in development only


# ═══════════════════════════════════════════════════════════════════════════════
# VALIDATION & SAFETY
# ═══════════════════════════════════════════════════════════════════════════════

# Maximum message length (characters)
MAX_QUERY_LENGTH: int = 2000

# Maximum expression length accepted by the calculator (characters)
MAX_EXPRESSION_LENGTH: int = 500


# ═══════════════════════════════════════════════════════════════════════════════
# HELPER FUNCTIONS
# ═══════════════════════════════════════════════════════════════════════════════

def is_tool_enabled(tool_name: str) -> bool:
    """Check if a tool is enabled"""
    return tool_name not in DISABLED_TOOLS


def get_backoff(attempt: int) -> float:
    """Backoff before the attempt following `attempt` (1-based)"""
    return AI_BACKOFF_SECONDS * attempt


def validate_config():
    """Validate configuration on startup"""
    assert MODEL_NAME in AVAILABLE_MODELS, f"Invalid MODEL_NAME: {MODEL_NAME}"
    assert AI_MAX_ATTEMPTS >= 1, "AI_MAX_ATTEMPTS must be at least 1"
    assert AI_REQUEST_TIMEOUT_SECONDS > 0, "AI_REQUEST_TIMEOUT_SECONDS must be positive"
    assert AI_ROUTE_TIMEOUT_SECONDS >= AI_REQUEST_TIMEOUT_SECONDS, \
        "AI_ROUTE_TIMEOUT_SECONDS must cover at least one request"
    assert 0.0 <= FALLBACK_CONFIDENCE <= 1.0, "FALLBACK_CONFIDENCE must be in [0, 1]"
    assert 0.0 <= AI_CONFIDENCE <= 1.0, "AI_CONFIDENCE must be in [0, 1]"
    assert RUPIAH_PER_COIN > 0, "RUPIAH_PER_COIN must be positive"
    assert MAX_QUERY_LENGTH > 0, "Invalid query length limit"


# Validate on import
validate_config()
