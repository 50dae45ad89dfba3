"""Conversation sessions and the session store."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Protocol

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage

from rag_router.types import ChatMessage, IntentMode


@dataclass(slots=True)
class ConversationSession:
    """One conversation thread: ordered history plus the routing mode."""

    session_id: str
    history: list[ChatMessage] = field(default_factory=list)
    mode: IntentMode = IntentMode.RULE

    def append_exchange(self, query: str, answer: str) -> None:
        self.history.append(ChatMessage(role="user", content=query))
        self.history.append(ChatMessage(role="assistant", content=answer))

    def to_langchain_messages(self) -> list[BaseMessage]:
        messages: list[BaseMessage] = []
        for message in self.history:
            if message.role == "user":
                messages.append(HumanMessage(content=message.content))
            else:
                messages.append(AIMessage(content=message.content))
        return messages


class SessionStore(Protocol):
    """Session storage injected into the agent."""

    def get(self, session_id: str) -> ConversationSession | None: ...

    def create(self, session_id: str, mode: IntentMode | None = None) -> ConversationSession: ...

    def get_or_create(self, session_id: str) -> ConversationSession: ...

    def clear(self, session_id: str) -> None: ...

    def delete(self, session_id: str) -> bool: ...

    def lock(self, session_id: str) -> asyncio.Lock: ...


class InMemorySessionStore:
    """Process-lifetime session map.

    Sessions are created lazily on first reference. Each session id has its
    own `asyncio.Lock` so one conversation is processed strictly in order
    while different conversations proceed independently.
    """

    def __init__(self, default_mode: IntentMode = IntentMode.RULE) -> None:
        self.default_mode = default_mode
        self._sessions: dict[str, ConversationSession] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def get(self, session_id: str) -> ConversationSession | None:
        return self._sessions.get(session_id)

    def create(self, session_id: str, mode: IntentMode | None = None) -> ConversationSession:
        session = ConversationSession(session_id=session_id, mode=mode or self.default_mode)
        self._sessions[session_id] = session
        return session

    def get_or_create(self, session_id: str) -> ConversationSession:
        session = self._sessions.get(session_id)
        if session is None:
            session = self.create(session_id)
        return session

    def clear(self, session_id: str) -> None:
        """Empty one session's history; its mode is kept."""
        session = self._sessions.get(session_id)
        if session is not None:
            session.history.clear()

    def delete(self, session_id: str) -> bool:
        self._locks.pop(session_id, None)
        return self._sessions.pop(session_id, None) is not None

    def lock(self, session_id: str) -> asyncio.Lock:
        lock = self._locks.get(session_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[session_id] = lock
        return lock

    def session_ids(self) -> list[str]:
        return list(self._sessions)
