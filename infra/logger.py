"""
Centralized Logging Configuration

Provides structured logging for the command router with:
- Component-specific loggers
- Consistent formatting
- Routing and dispatch event helpers
"""

import logging
import sys
from pathlib import Path
from typing import Optional


# ═══════════════════════════════════════════════════════════════════════════════
# LOGGER CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

CONSOLE_FORMAT = "%(asctime)s | %(name)-16s | %(levelname)-8s | %(message)s"
FILE_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(filename)s:%(lineno)d | %(message)s"

# Third-party loggers kept at WARNING (request bodies, connection pools)
QUIET_LOGGERS = ("openai", "httpx", "httpcore", "urllib3")


def _handler(handler: logging.Handler, fmt: str, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=fmt, datefmt=DATE_FORMAT))
    return handler


def setup_logging(level: str = "INFO", log_file: Optional[str] = None):
    """
    Configure logging for the entire application.

    Call once from the composition root (main.py). Library modules only
    fetch their component loggers. Console output goes to stderr so the
    CLI's JSON results on stdout stay clean.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path to write logs to
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()

    # Calling setup_logging() twice must not duplicate output
    for existing in list(root_logger.handlers):
        root_logger.removeHandler(existing)

    root_logger.setLevel(log_level)
    root_logger.addHandler(_handler(logging.StreamHandler(sys.stderr), CONSOLE_FORMAT, log_level))

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        root_logger.addHandler(_handler(logging.FileHandler(log_file), FILE_FORMAT, log_level))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


# ═══════════════════════════════════════════════════════════════════════════════
# COMPONENT LOGGERS
# ═══════════════════════════════════════════════════════════════════════════════

logger_router = logging.getLogger("finchat.router")
logger_planner = logging.getLogger("finchat.planner")
logger_validator = logging.getLogger("finchat.validator")
logger_tool = logging.getLogger("finchat.tool")
logger_pattern = logging.getLogger("finchat.pattern")
logger_calc = logging.getLogger("finchat.calc")
logger_llm = logging.getLogger("finchat.llm")


# ═══════════════════════════════════════════════════════════════════════════════
# STRUCTURED LOGGING HELPERS
# ═══════════════════════════════════════════════════════════════════════════════

class LogContext:
    """Helper for consistent structured logging"""

    @staticmethod
    def format_dict(data: dict) -> str:
        """Format dictionary for logging"""
        return " | ".join(f"{k}={v}" for k, v in data.items())

    @staticmethod
    def format_timing(duration_seconds: float) -> str:
        """Format timing information"""
        return f"{duration_seconds * 1000:.2f}ms"


# ═══════════════════════════════════════════════════════════════════════════════
# LOGGING UTILITIES
# ═══════════════════════════════════════════════════════════════════════════════

def log_route_start(text: str, caller_id: str, request_id: Optional[str] = None):
    """Log the start of a routing run"""
    context = {"caller": caller_id, "query_length": len(text)}
    if request_id:
        context["request_id"] = request_id
    logger_router.info(f"ROUTE_START | {LogContext.format_dict(context)}")


def log_state_transition(previous: str, current: str, reason: str, request_id: Optional[str] = None):
    """Log a router state transition"""
    context = {"from": previous, "to": current, "reason": reason}
    if request_id:
        context["request_id"] = request_id
    logger_router.debug(f"ROUTE_TRANSITION | {LogContext.format_dict(context)}")


def log_route_complete(outcome: str, path: str, duration_seconds: float, request_id: Optional[str] = None):
    """Log routing completion"""
    context = {
        "outcome": outcome,
        "path": path,
        "duration": LogContext.format_timing(duration_seconds)
    }
    if request_id:
        context["request_id"] = request_id
    logger_router.info(f"ROUTE_COMPLETE | {LogContext.format_dict(context)}")


def log_validation_error(tool_name: str, message: str):
    """Log argument validation failure"""
    context = {"tool": tool_name, "message": message[:200]}
    logger_validator.error(f"VALIDATION_ERROR | {LogContext.format_dict(context)}")


def log_pattern_match(intent: str, family: str):
    """Log a heuristic match"""
    logger_pattern.info(f"PATTERN_MATCH | intent={intent} | family={family}")
