"""
Completion Service

Thin adapter over chat.completions with function calling. Owns the retry
policy of a single AI interpretation: TRANSIENT failures are retried with
linear backoff, anything else gives up at once. Giving up always raises
CompletionError, which the router turns into the fallback path.
"""

import time
from typing import Any, Dict, List, Optional

from app.config import (
    AI_MAX_ATTEMPTS,
    LOG_LLM_CALLS,
    MAX_COMPLETION_TOKENS,
    TEMPERATURE,
    get_backoff,
)
from core.failure_classifier import FailureType, classify_failure
from infra.env import OPENAI_MODEL
from infra.logger import logger_llm, LogContext
from tools.llm.client import get_client
from tools.schemas import CompletionResponse, ToolCall


class CompletionError(Exception):
    """The completion service could not produce a usable response"""

    def __init__(self, message: str, code: str = "AI_UNAVAILABLE", failure: Optional[FailureType] = None):
        super().__init__(message)
        self.code = code
        self.failure = failure


class CompletionService:

    def __init__(self, client=None, model: Optional[str] = None, max_attempts: int = AI_MAX_ATTEMPTS):
        self._client = client
        self.model = model or OPENAI_MODEL
        self.max_attempts = max_attempts

    @property
    def client(self):
        if self._client is None:
            self._client = get_client()
        return self._client

    def complete(
        self,
        system_prompt: str,
        conversation_history: List[Dict[str, str]],
        available_tools: List[Dict[str, Any]]
    ) -> CompletionResponse:
        """
        Ask the model to answer or pick a tool.

        Args:
            system_prompt: System message
            conversation_history: Prior messages plus the current user message
            available_tools: Function-calling definitions

        Raises:
            CompletionError: after a non-transient failure or exhausted attempts
        """
        messages = [{"role": "system", "content": system_prompt}, *conversation_history]

        request = {
            "model": self.model,
            "messages": messages,
            "temperature": TEMPERATURE,
            "max_tokens": MAX_COMPLETION_TOKENS,
        }
        if available_tools:
            request["tools"] = available_tools
            request["tool_choice"] = "auto"

        if LOG_LLM_CALLS:
            logger_llm.debug(
                f"LLM_REQUEST | messages={len(messages)} | tools={len(available_tools)}"
            )

        for attempt in range(1, self.max_attempts + 1):
            start_time = time.perf_counter()
            try:
                response = self.client.chat.completions.create(**request)

            except Exception as e:
                failure = classify_failure(e)
                _log_attempt_failed(attempt, failure, e, time.perf_counter() - start_time)

                if failure is not FailureType.TRANSIENT:
                    raise CompletionError(str(e), failure=failure) from e

                if attempt >= self.max_attempts:
                    raise CompletionError(
                        f"Completion failed after {attempt} attempts: {e}",
                        failure=failure
                    ) from e

                _apply_backoff(attempt)
                continue

            result = _to_completion_response(response)
            context = {
                "attempt": attempt,
                "tool_calls": len(result.tool_calls),
                "tokens": result.usage.get("total_tokens", 0),
                "duration": LogContext.format_timing(time.perf_counter() - start_time)
            }
            logger_llm.info(f"LLM_SUCCESS | {LogContext.format_dict(context)}")
            return result

        # max_attempts < 1
        raise CompletionError("No completion attempts allowed")


# ═══════════════════════════════════════════════════════════════════════════════
# RESPONSE PARSING
# ═══════════════════════════════════════════════════════════════════════════════

def _to_completion_response(response) -> CompletionResponse:
    message = response.choices[0].message

    tool_calls = [
        ToolCall(
            id=call.id,
            name=call.function.name,
            arguments=call.function.arguments or "{}"
        )
        for call in (message.tool_calls or [])
    ]

    return CompletionResponse(
        content=message.content or "",
        tool_calls=tool_calls,
        usage=_extract_usage(getattr(response, "usage", None))
    )


def _extract_usage(usage_obj) -> Dict[str, int]:
    """
    Extract usage information from API response.

    Args:
        usage_obj: Usage object from API response

    Returns:
        Dictionary with usage statistics
    """
    if not usage_obj:
        return {
            "prompt_tokens": 0,
            "completion_tokens": 0,
            "total_tokens": 0
        }

    return {
        "prompt_tokens": getattr(usage_obj, "prompt_tokens", 0) or 0,
        "completion_tokens": getattr(usage_obj, "completion_tokens", 0) or 0,
        "total_tokens": getattr(usage_obj, "total_tokens", 0) or 0
    }


# ═══════════════════════════════════════════════════════════════════════════════
# HELPERS
# ═══════════════════════════════════════════════════════════════════════════════

def _apply_backoff(attempt: int):
    """Linear backoff before the next attempt"""
    backoff = get_backoff(attempt)  # 0.5s, 1.0s, 1.5s, etc.
    logger_llm.info(f"RETRY_BACKOFF | attempt={attempt} | backoff={backoff}s")
    time.sleep(backoff)


def _log_attempt_failed(attempt: int, failure: FailureType, error: Exception, duration: float):
    context = {
        "attempt": attempt,
        "failure": failure.value,
        "duration": LogContext.format_timing(duration),
        "error": str(error)[:100]
    }
    logger_llm.warning(f"LLM_ATTEMPT_FAILED | {LogContext.format_dict(context)}")
