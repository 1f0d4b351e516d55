from collections import defaultdict, deque
from datetime import datetime
from typing import Deque, Dict, List

from app.config import DEFAULT_LANGUAGE, DEFAULT_TIMEZONE, MAX_CONTEXT_MESSAGES
from tools.schemas import ConversationContext, ConversationMessage


# ═══════════════════════════════════════════════════════════════════════════════
# CONVERSATION MEMORY
# ═══════════════════════════════════════════════════════════════════════════════

class ConversationMemory:
    """
    In-process conversation history, per caller.

    - Keeps only the last `max_messages` messages of each caller
    - Builds the ConversationContext handed to the router
    - Nothing is persisted; the transport layer owns real history
    """

    def __init__(self, max_messages: int = MAX_CONTEXT_MESSAGES):
        self.max_messages = max_messages
        self._messages: Dict[str, Deque[ConversationMessage]] = defaultdict(
            lambda: deque(maxlen=self.max_messages)
        )
        self._started_at = datetime.now()
        self._turns = 0

    def add(self, caller_id: str, role: str, content: str):
        self._messages[caller_id].append(ConversationMessage(role=role, content=content))
        if role == "user":
            self._turns += 1

    def recent(self, caller_id: str) -> List[ConversationMessage]:
        return list(self._messages.get(caller_id, ()))

    def context_for(
        self,
        caller_id: str,
        language: str = DEFAULT_LANGUAGE,
        timezone: str = DEFAULT_TIMEZONE
    ) -> ConversationContext:
        return ConversationContext(
            caller_id=caller_id,
            recent_messages=self.recent(caller_id),
            language=language,
            timezone=timezone
        )

    def clear(self, caller_id: str):
        self._messages.pop(caller_id, None)

    def get_session_summary(self) -> dict:
        """Counts for the CLI's exit summary"""
        return {
            "started_at": self._started_at.isoformat(timespec="seconds"),
            "callers": len(self._messages),
            "user_turns": self._turns,
        }
