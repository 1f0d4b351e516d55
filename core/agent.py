"""
Router Module - Main Orchestrator

Turns one message into one result through an explicit state machine:

    AI_ATTEMPT ──tool selected──▶ DISPATCH
        │
        └─error / timeout / no tool / unknown tool──▶ FALLBACK
                                                        │
                      pattern matched ──▶ DISPATCH ◀────┤
                                                        │
                      nothing matched ──▶ NO_MATCH ◀────┘

Only ToolResult and NoMatch leave route(); every failure on the way is
logged and converted.
"""

import time
import uuid
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from enum import Enum
from typing import Optional, Tuple, Union

from app.config import AI_CONFIDENCE, AI_ROUTE_TIMEOUT_SECONDS, MAX_QUERY_LENGTH
from core.planner import plan_tool_call
from core.planner_validator import PlannerValidationError, validate_tool_call
from core.routing import INTENT_TOOLS, detect_topic, match_pattern, suggestions_for
from infra.logger import (
    logger_router,
    log_route_complete,
    log_route_start,
    log_state_transition,
)
from tools.llm.completion import CompletionError
from tools.responses import with_metadata
from tools.schemas import ConversationContext, Intent, NoMatch, ToolInvocation, ToolResult


class RouteState(str, Enum):
    AI_ATTEMPT = "AI_ATTEMPT"
    FALLBACK = "FALLBACK"
    DISPATCH = "DISPATCH"
    NO_MATCH = "NO_MATCH"


RouteOutcome = Union[ToolResult, NoMatch]


# ═══════════════════════════════════════════════════════════════════════════════
# ROUTER
# ═══════════════════════════════════════════════════════════════════════════════

class Router:
    """
    Two-path command router.

    Args:
        registry: Frozen ToolRegistry
        completion: Completion service, or None to always use the fallback path
        ai_timeout: Ceiling in seconds for the whole AI attempt
    """

    def __init__(self, registry, completion=None, ai_timeout: float = AI_ROUTE_TIMEOUT_SECONDS):
        self.registry = registry
        self.completion = completion
        self.ai_timeout = ai_timeout

    def route(
        self,
        text: str,
        caller_id: str,
        context: Optional[ConversationContext] = None,
        request_id: Optional[str] = None
    ) -> RouteOutcome:
        """
        Interpret a message and dispatch at most one tool.

        Returns:
            ToolResult (metadata carries route and confidence) or NoMatch
        """
        request_id = request_id or str(uuid.uuid4())[:8]
        context = context or ConversationContext(caller_id=caller_id)
        query = (text or "").strip()

        log_route_start(query, caller_id, request_id)
        start_time = time.perf_counter()

        if not query:
            return self._finish(self._no_match(text or "", "empty_input"), start_time, request_id)

        if len(query) > MAX_QUERY_LENGTH:
            return self._finish(self._no_match(query, "input_too_long"), start_time, request_id)

        state = RouteState.AI_ATTEMPT if self.completion is not None else RouteState.FALLBACK
        invocation: Optional[ToolInvocation] = None

        while True:

            if state is RouteState.AI_ATTEMPT:
                invocation, reason = self._attempt_ai(query, caller_id, context, request_id)
                state = self._transition(
                    state,
                    RouteState.DISPATCH if invocation else RouteState.FALLBACK,
                    reason,
                    request_id
                )

            elif state is RouteState.FALLBACK:
                invocation, reason = self._attempt_fallback(query, caller_id)
                state = self._transition(
                    state,
                    RouteState.DISPATCH if invocation else RouteState.NO_MATCH,
                    reason,
                    request_id
                )

            elif state is RouteState.DISPATCH:
                return self._finish(self._dispatch(invocation, request_id), start_time, request_id)

            else:
                return self._finish(self._no_match(query, "no_pattern"), start_time, request_id)

    # ---------- AI_ATTEMPT ----------

    def _attempt_ai(
        self,
        query: str,
        caller_id: str,
        context: ConversationContext,
        request_id: str
    ) -> Tuple[Optional[ToolInvocation], str]:
        """
        One bounded AI interpretation. Retries happen inside the
        completion service; the router never retries.
        """
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="ai-route")
        try:
            future = executor.submit(
                plan_tool_call,
                query,
                context,
                self.completion,
                self.registry.openai_tools(),
                request_id
            )
            response = future.result(timeout=self.ai_timeout)

        except FutureTimeoutError:
            logger_router.warning(
                f"AI_TIMEOUT | request_id={request_id} | timeout={self.ai_timeout}s"
            )
            return None, "ai_timeout"

        except CompletionError as e:
            logger_router.warning(
                f"AI_UNAVAILABLE | request_id={request_id} | code={e.code} | error={str(e)[:100]}"
            )
            return None, "ai_unavailable"

        except Exception as e:
            logger_router.error(
                f"AI_ERROR | request_id={request_id} | error={str(e)[:200]}"
            )
            return None, "ai_error"

        finally:
            # A request still blocked in the SDK is abandoned, its result discarded
            executor.shutdown(wait=False, cancel_futures=True)

        try:
            tool_name, arguments = validate_tool_call(response, self.registry, query)
        except PlannerValidationError as e:
            logger_router.info(
                f"AI_DECLINED | request_id={request_id} | category={e.category} | "
                f"message={e.error['message'][:100]}"
            )
            return None, e.category.lower()

        invocation = ToolInvocation(
            tool_name=tool_name,
            arguments=arguments,
            caller_id=caller_id,
            source="ai",
            confidence=AI_CONFIDENCE
        )
        return invocation, "ai_tool_selected"

    # ---------- FALLBACK ----------

    def _attempt_fallback(self, query: str, caller_id: str) -> Tuple[Optional[ToolInvocation], str]:
        match = match_pattern(query)
        if match is None or match.intent is Intent.NONE:
            return None, "no_pattern"

        invocation = ToolInvocation(
            tool_name=INTENT_TOOLS[match.intent],
            arguments=match.extracted_data,
            caller_id=caller_id,
            source="fallback",
            confidence=match.confidence
        )
        return invocation, f"pattern_{match.intent.value}"

    # ---------- DISPATCH ----------

    def _dispatch(self, invocation: ToolInvocation, request_id: str) -> ToolResult:
        result = self.registry.dispatch(
            invocation.tool_name,
            invocation.arguments,
            invocation.caller_id,
            context={"request_id": request_id, "route": invocation.source}
        )
        return with_metadata(
            result,
            route=invocation.source,
            confidence=invocation.confidence
        )

    # ---------- NO_MATCH ----------

    @staticmethod
    def _no_match(text: str, reason: str) -> NoMatch:
        topic = detect_topic(text) if text else None
        return NoMatch(
            text=text,
            reason=reason,
            topic=topic,
            suggestions=suggestions_for(topic)
        )

    # ---------- HELPERS ----------

    @staticmethod
    def _transition(previous: RouteState, current: RouteState, reason: str, request_id: str) -> RouteState:
        log_state_transition(previous.value, current.value, reason, request_id)
        return current

    @staticmethod
    def _finish(outcome: RouteOutcome, start_time: float, request_id: str) -> RouteOutcome:
        if isinstance(outcome, NoMatch):
            label, path = f"no_match:{outcome.reason}", "-"
        else:
            label = "success" if outcome.success else f"failure:{outcome.error}"
            path = outcome.metadata.get("route", "-")
        log_route_complete(label, path, time.perf_counter() - start_time, request_id)
        return outcome
