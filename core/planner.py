"""
Tool Selection Module

Asks the completion service to pick a tool for one message. Builds the
system prompt and conversation history, then hands the raw response to
core/planner_validator.py.
"""

import time
from datetime import datetime
from typing import Dict, List, Optional

from app.config import MAX_CONTEXT_MESSAGES
from infra.logger import logger_planner, LogContext
from prompts.planner_prompt import CONTEXT_TEMPLATE, PLANNER_PROMPT
from tools.schemas import CompletionResponse, ConversationContext


# ═══════════════════════════════════════════════════════════════════════════════
# PUBLIC API
# ═══════════════════════════════════════════════════════════════════════════════

def plan_tool_call(
    text: str,
    context: ConversationContext,
    completion,
    available_tools: List[dict],
    request_id: Optional[str] = None
) -> CompletionResponse:
    """
    Request a tool selection for `text`.

    Args:
        text: User message
        context: Conversation context (recent messages, locale)
        completion: Object exposing complete(system_prompt, history, tools)
        available_tools: Function-calling definitions of registered tools
        request_id: Optional request ID for tracking

    Returns:
        Raw CompletionResponse (validated by the caller)

    Raises:
        CompletionError: propagated from the completion service
    """
    _log_plan_start(text, context, request_id)
    start_time = time.perf_counter()

    system_prompt = build_system_prompt(context)
    history = build_history(text, context)

    try:
        response = completion.complete(system_prompt, history, available_tools)
    except Exception as e:
        duration_ms = (time.perf_counter() - start_time) * 1000
        logger_planner.error(
            f"PLAN_FAILED | duration_ms={duration_ms:.2f} | error={str(e)[:200]}"
        )
        raise

    duration_ms = (time.perf_counter() - start_time) * 1000
    _log_plan_complete(response, duration_ms, request_id)
    return response


# ═══════════════════════════════════════════════════════════════════════════════
# PROMPT PREPARATION
# ═══════════════════════════════════════════════════════════════════════════════

def build_system_prompt(context: ConversationContext) -> str:
    return PLANNER_PROMPT + CONTEXT_TEMPLATE.format(
        timezone=context.timezone,
        language=context.language,
        timestamp=datetime.now().isoformat(timespec="seconds")
    )


def build_history(text: str, context: ConversationContext) -> List[Dict[str, str]]:
    """Last MAX_CONTEXT_MESSAGES messages followed by the current one"""
    recent = context.recent_messages[-MAX_CONTEXT_MESSAGES:] if MAX_CONTEXT_MESSAGES else []
    history = [
        {"role": message.role, "content": message.content}
        for message in recent
        if message.role != "system"
    ]
    history.append({"role": "user", "content": text})
    return history


# ═══════════════════════════════════════════════════════════════════════════════
# LOGGING HELPERS
# ═══════════════════════════════════════════════════════════════════════════════

def _log_plan_start(text: str, context: ConversationContext, request_id: Optional[str]):
    """Log tool selection start"""
    log_data = {
        "query_length": len(text),
        "history": len(context.recent_messages)
    }
    if request_id:
        log_data["request_id"] = request_id
    logger_planner.info(f"PLAN_START | {LogContext.format_dict(log_data)}")


def _log_plan_complete(response: CompletionResponse, duration_ms: float, request_id: Optional[str]):
    """Log tool selection completion"""
    log_data = {
        "tool_calls": len(response.tool_calls),
        "tools": ",".join(call.name for call in response.tool_calls) or "-",
        "duration_ms": f"{duration_ms:.2f}",
        "tokens": response.usage.get("total_tokens", 0)
    }
    if request_id:
        log_data["request_id"] = request_id
    logger_planner.info(f"PLAN_COMPLETE | {LogContext.format_dict(log_data)}")
