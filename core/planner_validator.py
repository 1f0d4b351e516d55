import json
import re
from typing import Any, Dict, Tuple

from tools.schemas import CompletionResponse


# =========================
# Exception
# =========================

class PlannerValidationError(Exception):

    @property
    def error(self) -> Dict[str, Any]:
        return self.args[0]

    @property
    def category(self) -> str:
        return self.error["category"]


# =========================
# Failure Helper
# =========================

def _fail(category: str, message: str, tool_name=None):
    error = {
        "category": category,
        "message": message,
        "tool_name": tool_name,
    }
    raise PlannerValidationError(error)


# =========================
# Public Entry
# =========================

def validate_tool_call(response: CompletionResponse, registry, user_query: str) -> Tuple[str, Dict[str, Any]]:
    """
    Accept a completion response only if it names exactly one registered
    tool with a JSON-object argument payload.

    Returns:
        (tool_name, arguments)

    Raises:
        PlannerValidationError: with a category the router logs as the
        fallback reason
    """
    call = _validate_single_call(response)
    _validate_registered(call.name, registry)
    arguments = _parse_arguments(call.name, call.arguments)
    _validate_amount_guard(call.name, arguments, user_query)

    return call.name, arguments


# =========================
# Shape Validation
# =========================

def _validate_single_call(response: CompletionResponse):
    if not response.tool_calls:
        _fail("NO_TOOL_CALL", "Completion did not name a tool")

    if len(response.tool_calls) > 1:
        names = ", ".join(call.name for call in response.tool_calls)
        _fail("MULTIPLE_TOOL_CALLS", f"Completion named several tools: {names}")

    return response.tool_calls[0]


def _validate_registered(tool_name: str, registry):
    if tool_name not in registry:
        _fail("UNKNOWN_TOOL", f"Tool '{tool_name}' is not registered", tool_name)


def _parse_arguments(tool_name: str, raw_arguments: str) -> Dict[str, Any]:
    try:
        arguments = json.loads(raw_arguments or "{}")
    except json.JSONDecodeError as e:
        _fail("MALFORMED_ARGUMENTS", f"Arguments are not valid JSON: {e}", tool_name)

    if not isinstance(arguments, dict):
        _fail("MALFORMED_ARGUMENTS", "Arguments must be a JSON object", tool_name)

    return arguments


# =========================
# Semantic Guards
# =========================

# Digits or a currency / magnitude word anywhere in the message
_NUMERIC_HINT = re.compile(r"\d|\b(?:rp|idr|rb|ribu|jt|juta|k)\b", re.IGNORECASE)


def _is_positive_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


def _validate_amount_guard(tool_name: str, arguments: Dict[str, Any], user_query: str):
    """Refuse expenses the user never gave an amount for"""
    if tool_name != "create_expense":
        return

    if _is_positive_number(arguments.get("amount")):
        return

    if not _NUMERIC_HINT.search(user_query):
        _fail(
            "MISSING_AMOUNT",
            "create_expense proposed without an amount for a message with no number",
            tool_name
        )
