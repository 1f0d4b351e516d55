"""
Routing Layer

Exposes deterministic pattern routing used as the fallback path when the
completion service cannot interpret a message.
"""

from .router import INTENT_TOOLS, detect_topic, match_pattern, suggestions_for

__all__ = ["INTENT_TOOLS", "detect_topic", "match_pattern", "suggestions_for"]
