from typing import Any, Optional

from tools.schemas import ToolError, ToolResult


def tool_response(*, success, message="", data=None, error=None, meta=None) -> ToolResult:
    if isinstance(error, ToolError):
        error = error.value
    return ToolResult(
        success=success,
        message=message,
        data=data,
        error=error,
        metadata=meta or {}
    )


def tool_failure(error, message: str = "", meta: Optional[dict] = None) -> ToolResult:
    return tool_response(success=False, message=message, error=error, meta=meta)


def wrap_result(value: Any) -> ToolResult:
    """Pass a ToolResult through, wrap any other domain value as a success"""
    if isinstance(value, ToolResult):
        return value
    return tool_response(success=True, data=value)


def with_metadata(result: ToolResult, **extra) -> ToolResult:
    """Copy of `result` with extra metadata keys; the original is untouched"""
    return result.model_copy(update={"metadata": {**result.metadata, **extra}})
