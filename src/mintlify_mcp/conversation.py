"""
In-memory conversation history, one entry per project id.

History lives for the lifetime of the process and is only used to replay
prior turns to the assistant API.
"""

from __future__ import annotations

import asyncio
import logging
import weakref

from mintlify_mcp.config import LOGGER_NAME
from mintlify_mcp.types import ConversationState, Turn

logger = logging.getLogger(LOGGER_NAME)


class ConversationStore:
    """Maps project ids to their ConversationState.

    Callers that may run concurrently must hold ``lock(project_id)`` across
    ``get_or_create`` and ``append_exchange`` for the same request.
    """

    def __init__(self) -> None:
        self._states: dict[str, ConversationState] = {}
        # Locks live only while a request holds or waits on them
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    def __contains__(self, project_id: object) -> bool:
        return project_id in self._states

    def __len__(self) -> int:
        return len(self._states)

    def lock(self, project_id: str) -> asyncio.Lock:
        """Per-project lock guarding read-modify-write of the history."""
        lock = self._locks.get(project_id)
        if lock is None:
            lock = self._locks[project_id] = asyncio.Lock()
        return lock

    def get(self, project_id: str) -> ConversationState | None:
        return self._states.get(project_id)

    def project_ids(self) -> list[str]:
        return list(self._states)

    def get_or_create(self, project_id: str, reset: bool = False) -> ConversationState:
        """Return the project's state, installing a fresh one if missing or reset."""
        state = self._states.get(project_id)
        if state is None or reset:
            if state is not None:
                logger.debug("Resetting history for %s (%d turns)", project_id, len(state))
            state = self._states[project_id] = ConversationState()
        return state

    def append_exchange(self, project_id: str, question: str, answer: str) -> ConversationState:
        """Record a question and its answer as a user turn followed by an assistant turn."""
        state = self._states.setdefault(project_id, ConversationState())
        state.messages.append(Turn.create(len(state.messages) + 1, "user", question))
        state.messages.append(Turn.create(len(state.messages) + 1, "assistant", answer))
        return state

    def clear(self, project_id: str) -> None:
        """Forget a project's history. Unknown ids are ignored."""
        if self._states.pop(project_id, None) is not None:
            logger.debug("Cleared history for %s", project_id)
