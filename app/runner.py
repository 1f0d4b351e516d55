"""
Tool Execution Runner

Executes one registered tool with:
- Input validation (the handler never sees invalid arguments)
- Exception capture (handler errors become EXECUTION_ERROR results)
- Result wrapping (plain domain values become success results)
- Comprehensive logging
"""

import time
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ValidationError

from infra.logger import logger_tool, LogContext, log_validation_error
from tools.responses import tool_failure, with_metadata, wrap_result
from tools.schemas import ToolEntry, ToolError, ToolResult


# ═══════════════════════════════════════════════════════════════════════════════
# MAIN TOOL RUNNER
# ═══════════════════════════════════════════════════════════════════════════════

def run_tool(
    tool_entry: ToolEntry,
    tool_args: Any,
    caller_id: str,
    context: Optional[dict] = None
) -> ToolResult:
    """
    Validate arguments and execute a tool.

    Args:
        tool_entry: Registry entry (schema, handler and mutating flag)
        tool_args: Raw arguments, expected to be a mapping
        caller_id: Opaque identifier of the requesting user
        context: Optional context (request_id, route, ...)

    Returns:
        ToolResult; never raises
    """
    context = context or {}
    tool_name = tool_entry["schema"].name
    request_id = context.get("request_id")

    _log_tool_start(tool_name, caller_id, request_id)

    # Validate input (no handler call on failure)
    validated, error_msg = _validate_input(
        tool_name, tool_entry["schema"].parameters, tool_args
    )
    if validated is None:
        return tool_failure(
            ToolError.VALIDATION_ERROR,
            error_msg,
            meta={"tool": tool_name, "mutating": tool_entry["mutating"]}
        )

    return _execute(tool_name, tool_entry, validated, caller_id, request_id)


# ═══════════════════════════════════════════════════════════════════════════════
# INPUT VALIDATION
# ═══════════════════════════════════════════════════════════════════════════════

def _validate_input(tool_name: str, model, tool_args) -> Tuple[Optional[BaseModel], str]:
    """
    Validate tool input against its parameter model.

    Returns:
        (validated model, "") or (None, error message)
    """
    if not isinstance(tool_args, dict):
        message = f"Arguments must be an object, got {type(tool_args).__name__}"
        log_validation_error(tool_name, message)
        return None, message

    try:
        logger_tool.debug(f"VALIDATE_INPUT | tool={tool_name}")
        validated = model.model_validate(tool_args)
        logger_tool.debug(f"VALIDATE_SUCCESS | tool={tool_name}")
        return validated, ""

    except ValidationError as e:
        message = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'arguments'}: {err['msg']}"
            for err in e.errors()
        )
        log_validation_error(tool_name, message)
        return None, message


# ═══════════════════════════════════════════════════════════════════════════════
# EXECUTION
# ═══════════════════════════════════════════════════════════════════════════════

def _execute(
    tool_name: str,
    tool_entry: ToolEntry,
    validated_input: BaseModel,
    caller_id: str,
    request_id: Optional[str] = None
) -> ToolResult:
    """
    Run the handler once. Mutating tools write through external services,
    so a failed call is reported, not retried; the `mutating` metadata key
    tells the caller whether the failure may have left a partial write.
    """
    start_time = time.perf_counter()

    try:
        raw_result = tool_entry["handler"](validated_input, caller_id)

    except Exception as e:
        duration_ms = (time.perf_counter() - start_time) * 1000
        _log_execution_failed(tool_name, str(e), duration_ms, request_id)
        return tool_failure(
            ToolError.EXECUTION_ERROR,
            str(e),
            meta={
                "tool": tool_name,
                "mutating": tool_entry["mutating"],
                "duration_ms": round(duration_ms, 2),
            }
        )

    duration_ms = (time.perf_counter() - start_time) * 1000
    result = wrap_result(raw_result)

    _log_execution_complete(tool_name, result, duration_ms, request_id)

    return with_metadata(result, tool=tool_name, mutating=tool_entry["mutating"])


# ═══════════════════════════════════════════════════════════════════════════════
# LOGGING HELPERS
# ═══════════════════════════════════════════════════════════════════════════════

def _log_tool_start(tool_name: str, caller_id: str, request_id: str = None):
    """Log tool execution start"""
    context = {"tool": tool_name, "caller": caller_id}
    if request_id:
        context["request_id"] = request_id
    logger_tool.debug(f"TOOL_START | {LogContext.format_dict(context)}")


def _log_execution_complete(
    tool_name: str,
    result: ToolResult,
    duration_ms: float,
    request_id: str = None
):
    """Log handler completion (tool-declared failures included)"""
    context = {
        "tool": tool_name,
        "success": result.success,
        "duration_ms": f"{duration_ms:.2f}"
    }
    if result.error:
        context["error"] = result.error
    if request_id:
        context["request_id"] = request_id

    log_level = logger_tool.info if result.success else logger_tool.warning
    status = "SUCCESS" if result.success else "DECLARED_FAIL"
    log_level(f"TOOL_{status} | {LogContext.format_dict(context)}")


def _log_execution_failed(
    tool_name: str,
    error: str,
    duration_ms: float,
    request_id: str = None
):
    """Log handler exception"""
    context = {
        "tool": tool_name,
        "duration_ms": f"{duration_ms:.2f}",
        "error": error[:100]  # Truncate long errors
    }
    if request_id:
        context["request_id"] = request_id
    logger_tool.error(f"TOOL_EXCEPTION | {LogContext.format_dict(context)}")
