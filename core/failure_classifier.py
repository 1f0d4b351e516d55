"""
Failure Classification

Classifies completion-service failures to decide whether another attempt
is worth making.
"""

from enum import Enum
from typing import Union

import openai

from infra.logger import logger_llm


# ═══════════════════════════════════════════════════════════════════════════════
# FAILURE CLASSIFICATION
# ═══════════════════════════════════════════════════════════════════════════════

class FailureType(Enum):
    """
    Types of failures and their recovery strategies.

    TRANSIENT: Temporary issues (network, timeouts, rate limits) → Retry
    STRUCTURAL: Request/response issues (bad request, malformed output) → Fallback
    TERMINAL: Permanent issues (auth, permission) → Fallback, never retry
    """
    TRANSIENT = "transient"
    STRUCTURAL = "structural"
    TERMINAL = "terminal"


# Checked in order; APITimeoutError subclasses APIConnectionError
_TRANSIENT_TYPES = (
    openai.APITimeoutError,
    openai.APIConnectionError,
    openai.RateLimitError,
    openai.InternalServerError,
    TimeoutError,
    ConnectionError,
)

_TERMINAL_TYPES = (
    openai.AuthenticationError,
    openai.PermissionDeniedError,
)

_STRUCTURAL_TYPES = (
    openai.BadRequestError,
    openai.NotFoundError,
    openai.UnprocessableEntityError,
)


def classify_failure(error: Union[BaseException, str]) -> FailureType:
    """
    Classify a completion failure.

    Exception types from the openai SDK decide first; the message is
    inspected only for anything else.

    Examples:
        >>> classify_failure("Request timed out")
        <FailureType.TRANSIENT: 'transient'>

        >>> classify_failure("401 Unauthorized")
        <FailureType.TERMINAL: 'terminal'>
    """
    if isinstance(error, BaseException):
        if isinstance(error, _TRANSIENT_TYPES):
            return FailureType.TRANSIENT
        if isinstance(error, _TERMINAL_TYPES):
            return FailureType.TERMINAL
        if isinstance(error, _STRUCTURAL_TYPES):
            return FailureType.STRUCTURAL
        if isinstance(error, openai.APIStatusError) and error.status_code >= 500:
            return FailureType.TRANSIENT
        message = str(error)
    else:
        message = error

    if not message:
        logger_llm.warning("CLASSIFY_FAILURE | empty error, defaulting to STRUCTURAL")
        return FailureType.STRUCTURAL

    e = message.lower()

    transient_indicators = (
        "timeout", "timed out", "connection error", "network error",
        "rate limit", "temporarily unavailable", "service unavailable",
        "502", "503", "504", "connection reset", "connection refused"
    )

    if any(indicator in e for indicator in transient_indicators):
        logger_llm.debug(f"CLASSIFY_FAILURE | TRANSIENT | error={message[:50]}")
        return FailureType.TRANSIENT

    terminal_indicators = (
        "401", "403", "authentication", "unauthorized", "forbidden",
        "permission denied", "access denied", "invalid api key"
    )

    if any(indicator in e for indicator in terminal_indicators):
        logger_llm.debug(f"CLASSIFY_FAILURE | TERMINAL | error={message[:50]}")
        return FailureType.TERMINAL

    # Default: STRUCTURAL (a retry would send the same request again)
    logger_llm.debug(f"CLASSIFY_FAILURE | STRUCTURAL | error={message[:50]}")
    return FailureType.STRUCTURAL
