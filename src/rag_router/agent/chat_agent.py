"""Session-serialised conversation agent and its factory."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from typing import Any

from rag_router.agent.dispatcher import ResponseDispatcher
from rag_router.chat.fallback import TemplateChatService
from rag_router.chat.models import create_chat_model, create_embedder
from rag_router.chat.service import ChatService, LangChainChatService
from rag_router.config import AppSettings
from rag_router.errors import StartupError, ToolExecutionError
from rag_router.obs.tracing import TraceStore
from rag_router.retrieval.retriever import KnowledgeRetriever
from rag_router.routing.llm_intent import LLMIntentClassifier
from rag_router.routing.orchestrator import IntentOrchestrator
from rag_router.routing.selector import ToolSelector
from rag_router.sessions import ConversationSession, InMemorySessionStore, SessionStore
from rag_router.tools.builtin import register_builtin_tools
from rag_router.tools.http_executor import HttpToolExecutor
from rag_router.tools.registry import ToolRegistry
from rag_router.types import IntentMode, RouteDecision, ToolTrace

logger = logging.getLogger(__name__)


class RoutedChatAgent:
    """Entry point for one process: routes queries and streams answers.

    Queries in the same session are processed strictly one after another
    (the session lock is held from routing until the last token); different
    sessions run concurrently.
    """

    def __init__(
        self,
        *,
        orchestrator: IntentOrchestrator,
        dispatcher: ResponseDispatcher,
        sessions: SessionStore,
        trace_store: TraceStore,
        llm_configured: bool = False,
        executor: HttpToolExecutor | None = None,
    ) -> None:
        self.orchestrator = orchestrator
        self.dispatcher = dispatcher
        self.sessions = sessions
        self.trace_store = trace_store
        self.llm_configured = llm_configured
        self._executor = executor

    async def respond(self, session_id: str, query: str) -> AsyncIterator[str]:
        query = query.strip()
        if not query:
            return

        async with self.sessions.lock(session_id):
            session = self.sessions.get_or_create(session_id)
            decision = await asyncio.to_thread(self.orchestrator.decide, query, session.mode)
            logger.info(
                "Session %s routed to %s (%s)", session_id, decision.kind.value, decision.reason
            )
            async for token in self.dispatcher.dispatch(decision, query, session):
                yield token

    async def route(self, session_id: str, query: str) -> RouteDecision:
        """Return the decision for `query` without answering it."""
        session = self.sessions.get_or_create(session_id)
        return await asyncio.to_thread(self.orchestrator.decide, query.strip(), session.mode)

    def session(self, session_id: str) -> ConversationSession:
        return self.sessions.get_or_create(session_id)

    async def reset(self, session_id: str) -> None:
        """Clear the history once any reply in progress for the session ends."""
        async with self.sessions.lock(session_id):
            self.sessions.clear(session_id)
        logger.info("Session %s history cleared", session_id)

    async def set_mode(self, session_id: str, mode: IntentMode) -> None:
        async with self.sessions.lock(session_id):
            self.sessions.get_or_create(session_id).mode = mode
        logger.info("Session %s switched to %s mode", session_id, mode.value)

    def close(self) -> None:
        if self._executor is not None:
            self._executor.close()


def build_agent(
    settings: AppSettings | None = None,
    *,
    executor: HttpToolExecutor | None = None,
    retriever: KnowledgeRetriever | None = None,
    chat: ChatService | None = None,
    intent_llm: Any | None = None,
    sessions: SessionStore | None = None,
    trace_store: TraceStore | None = None,
) -> RoutedChatAgent:
    """Wire the agent from settings; collaborators may be injected.

    Raises `StartupError` when the knowledge index cannot be loaded or, with
    `require_tool_backend`, when the tool backend does not answer `/health`.
    """

    settings = settings or AppSettings.from_env()

    executor = executor or HttpToolExecutor(settings.tool_backend)
    if settings.tool_backend.require_tool_backend:
        try:
            status = executor.health()
        except ToolExecutionError as exc:
            raise StartupError(
                f"Tool backend check failed: {exc}. Start the mock backend with "
                "`uvicorn rag_router.mock_api.server:app --port 3000`."
            ) from exc
        logger.info("Tool backend healthy: %s", status)

    registry = ToolRegistry()
    register_builtin_tools(registry, executor)
    registry.set_observer(_log_tool_trace)

    if retriever is None:
        retriever = KnowledgeRetriever(
            create_embedder(settings.retrieval, settings.llm),
            index_path=settings.retrieval.index_path,
        )
    retriever.initialize()

    llm_configured = chat is not None
    if chat is None:
        llm = create_chat_model(settings.llm)
        if llm is not None:
            chat = LangChainChatService(llm)
            llm_configured = True
        else:
            logger.warning("No chat model configured; using the offline template responder")
            chat = TemplateChatService()

    if intent_llm is None and llm_configured and isinstance(chat, LangChainChatService):
        intent_llm = create_chat_model(settings.llm, temperature=settings.llm.intent_temperature)
    llm_classifier = LLMIntentClassifier(intent_llm) if intent_llm is not None else None

    trace_store = trace_store or TraceStore()
    orchestrator = IntentOrchestrator(
        selector=ToolSelector(registry),
        llm_classifier=llm_classifier,
    )
    dispatcher = ResponseDispatcher(
        chat=chat,
        retriever=retriever,
        registry=registry,
        trace_store=trace_store,
        config=settings.router,
    )
    return RoutedChatAgent(
        orchestrator=orchestrator,
        dispatcher=dispatcher,
        sessions=sessions or InMemorySessionStore(settings.router.default_mode),
        trace_store=trace_store,
        llm_configured=llm_configured,
        executor=executor,
    )


def _log_tool_trace(trace: ToolTrace) -> None:
    logger.debug("Tool %s finished in %.1f ms", trace.name, trace.latency_ms)
