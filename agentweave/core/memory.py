"""Bounded conversation memory and conversation-scoped state.

Messages are ``langchain_core`` chat messages. A ``MessageWindowMemory``
retains only the most recent messages, a ``ChatMemoryStore`` keys memories by
session id, and a ``ConversationState`` pairs a memory with a scratch map
that guard hooks use to keep routing decisions between calls.
"""

import logging
import threading
import uuid
from typing import Any

from langchain_core.messages import BaseMessage, SystemMessage


logger = logging.getLogger(__name__)

DEFAULT_MAX_MESSAGES = 10


class MessageWindowMemory:
    """Append-only message log that evicts its oldest messages.

    A system message at the head of the window is kept when older messages
    are evicted.
    """

    def __init__(self, memory_id: Any = None, max_messages: int = DEFAULT_MAX_MESSAGES):
        if max_messages < 1:
            raise ValueError("max_messages must be at least 1")
        self.id = memory_id if memory_id is not None else str(uuid.uuid4())
        self.max_messages = max_messages
        self._messages: list[BaseMessage] = []

    def add(self, message: BaseMessage) -> None:
        if isinstance(message, SystemMessage):
            # Only one system message is kept, always first.
            self._messages = [
                m for m in self._messages if not isinstance(m, SystemMessage)
            ]
            self._messages.insert(0, message)
        else:
            self._messages.append(message)
        self._evict()

    def messages(self) -> list[BaseMessage]:
        return list(self._messages)

    def clear(self) -> None:
        self._messages.clear()

    def _evict(self) -> None:
        while len(self._messages) > self.max_messages:
            index = 1 if isinstance(self._messages[0], SystemMessage) else 0
            evicted = self._messages.pop(index)
            logger.debug(f"Memory {self.id} evicted {evicted.type} message")

    def __len__(self) -> int:
        return len(self._messages)


class ChatMemoryStore:
    """Session-keyed window memories with explicit eviction."""

    def __init__(self, max_messages: int = DEFAULT_MAX_MESSAGES):
        self.max_messages = max_messages
        self._memories: dict[Any, MessageWindowMemory] = {}
        self._lock = threading.Lock()

    def get(self, session_id: Any) -> MessageWindowMemory:
        """Return the memory of a session, creating it on first use."""
        with self._lock:
            memory = self._memories.get(session_id)
            if memory is None:
                memory = MessageWindowMemory(session_id, self.max_messages)
                self._memories[session_id] = memory
            return memory

    def append(self, session_id: Any, message: BaseMessage) -> None:
        self.get(session_id).add(message)

    def messages(self, session_id: Any) -> list[BaseMessage]:
        with self._lock:
            memory = self._memories.get(session_id)
        return memory.messages() if memory is not None else []

    def clear(self, session_id: Any) -> None:
        with self._lock:
            memory = self._memories.get(session_id)
        if memory is not None:
            memory.clear()

    def evict(self, session_id: Any) -> bool:
        """Drop a session entirely.

        Returns:
            True if the session existed

        """
        with self._lock:
            removed = self._memories.pop(session_id, None)
        if removed is not None:
            logger.debug(f"Evicted chat memory for session {session_id}")
        return removed is not None

    def __contains__(self, session_id: Any) -> bool:
        with self._lock:
            return session_id in self._memories

    def __len__(self) -> int:
        with self._lock:
            return len(self._memories)


class ConversationState:
    """Message log plus scratch map for one logical conversation."""

    def __init__(
        self,
        memory: MessageWindowMemory | None = None,
        scratch: dict[str, Any] | None = None,
    ):
        self.memory = memory if memory is not None else MessageWindowMemory()
        self._scratch: dict[str, Any] = scratch if scratch is not None else {}

    @property
    def id(self) -> Any:
        return self.memory.id

    def add(self, message: BaseMessage) -> None:
        self.memory.add(message)

    def messages(self) -> list[BaseMessage]:
        return self.memory.messages()

    def clear(self) -> None:
        self.memory.clear()

    def write_state(self, key: str, value: Any) -> None:
        self._scratch[key] = value

    def has_state(self, key: str) -> bool:
        return key in self._scratch

    def read_state(self, key: str, default: Any = None) -> Any:
        return self._scratch.get(key, default)

    def __repr__(self) -> str:
        return (
            f"ConversationState(id={self.id!r}, messages={len(self.memory)}, "
            f"state={self._scratch!r})"
        )
