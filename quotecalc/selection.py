"""
Selection state for one form session, plus the in-memory session store.

State is never persisted: it lives from session start until the form is
discarded or left idle.
"""

import logging
import time
import uuid
from collections import OrderedDict

from .config import settings
from .pricing import compute_total

logger = logging.getLogger(__name__)


class SelectionState:
    """The user's current choices for one running form."""

    def __init__(self):
        self.chosen_values: dict[str, float] = {}
        self.chosen_flags: dict[tuple[str, str], bool] = {}
        self.labels: dict[str, str] = {}
        self.raw_values: dict[str, str] = {}

    def select(self, alias: str, amount: float, label: str, raw_value: str = "") -> None:
        """Replace the dropdown choice for an alias. Never accumulates."""
        self.chosen_values[alias] = amount
        self.labels[alias] = label
        self.raw_values[alias] = raw_value

    def set_flag(self, alias: str, option_text: str, checked: bool) -> None:
        self.chosen_flags[(alias, option_text)] = bool(checked)

    def is_checked(self, alias: str, option_text: str) -> bool:
        return bool(self.chosen_flags.get((alias, option_text)))

    def clear(self) -> None:
        self.chosen_values.clear()
        self.chosen_flags.clear()
        self.labels.clear()
        self.raw_values.clear()

    def total(self, schema) -> float:
        return compute_total(schema, self.chosen_values, self.chosen_flags)


class SessionStore:
    """
    Form sessions keyed by id. In memory only.

    Sessions idle for longer than max_idle_seconds are dropped when a new one
    is created, and the least recently used go first once max_sessions is hit.
    """

    def __init__(self, max_sessions: int = 1000, max_idle_seconds: float = 3600.0,
                 clock=time.monotonic):
        self.max_sessions = max_sessions
        self.max_idle_seconds = max_idle_seconds
        self._clock = clock
        self._sessions: "OrderedDict[str, SelectionState]" = OrderedDict()
        self._last_seen: dict[str, float] = {}

    def create(self) -> tuple[str, SelectionState]:
        self._expire()
        while self._sessions and len(self._sessions) >= self.max_sessions:
            oldest_id = next(iter(self._sessions))
            self.discard(oldest_id)
            logger.info("Session store full, dropped session %s", oldest_id)

        session_id = str(uuid.uuid4())
        state = SelectionState()
        self._sessions[session_id] = state
        self._last_seen[session_id] = self._clock()
        return session_id, state

    def get(self, session_id: str) -> SelectionState:
        """Raises KeyError for unknown, expired or discarded sessions."""
        if self._is_idle(session_id):
            self.discard(session_id)
        state = self._sessions[session_id]
        self._sessions.move_to_end(session_id)
        self._last_seen[session_id] = self._clock()
        return state

    def discard(self, session_id: str) -> bool:
        self._last_seen.pop(session_id, None)
        return self._sessions.pop(session_id, None) is not None

    def _is_idle(self, session_id: str) -> bool:
        last_seen = self._last_seen.get(session_id)
        return last_seen is not None and self._clock() - last_seen > self.max_idle_seconds

    def _expire(self) -> None:
        expired = [sid for sid in self._sessions if self._is_idle(sid)]
        for session_id in expired:
            self.discard(session_id)
        if expired:
            logger.info("Expired %d idle sessions", len(expired))

    def __len__(self):
        return len(self._sessions)


store = SessionStore(
    max_sessions=settings.MAX_SESSIONS,
    max_idle_seconds=settings.SESSION_IDLE_MINUTES * 60,
)


def get_store() -> SessionStore:
    """FastAPI dependency — the process-wide session store."""
    return store
