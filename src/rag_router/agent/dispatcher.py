"""Executes a route decision and streams the answer."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Sequence
from typing import Any

from langchain_core.messages import BaseMessage
from pydantic import ValidationError

from rag_router.chat.prompts import PromptVariant
from rag_router.chat.service import ChatService
from rag_router.config import RouterConfig
from rag_router.errors import ChatBackendError, RetrievalError, RouterError, ToolExecutionError
from rag_router.obs.tracing import Timer, TraceDraft, TraceStore
from rag_router.retrieval.retriever import KnowledgeRetriever
from rag_router.sessions import ConversationSession
from rag_router.tools.formatting import format_tool_result
from rag_router.tools.registry import ToolRegistry
from rag_router.types import RouteDecision, RouteKind, SearchResult, ToolResult

logger = logging.getLogger(__name__)

NO_KNOWLEDGE_TEXT = "（未检索到相关知识）"
RETRIEVAL_FAILURE_TEXT = "（知识库检索失败，将基于通用知识回答）"
TOOL_ERROR_PREFIX = "工具调用失败："
CHAT_ERROR_PREFIX = "AI响应错误："


def format_search_results(results: Sequence[SearchResult], max_chars: int = 150) -> str:
    """Render hits as numbered snippets separated by blank lines.

    Texts longer than `max_chars` are cut and marked with an ellipsis.
    """

    if not results:
        return NO_KNOWLEDGE_TEXT
    return "\n\n".join(
        f"【{index}】{_snippet(result.text, max_chars)}" for index, result in enumerate(results, start=1)
    )


def _snippet(text: str, max_chars: int) -> str:
    if len(text) <= max_chars:
        return text
    return f"{text[:max_chars]}..."


class ResponseDispatcher:
    """Runs exactly one response path per decision.

    Tokens are forwarded to the caller in arrival order while the full answer
    is accumulated for the session history. A chat backend failure ends the
    query with an error line and leaves the history untouched; tool and
    retrieval failures degrade to a message (and optionally a general answer)
    and are recorded like any other exchange.
    """

    def __init__(
        self,
        *,
        chat: ChatService,
        retriever: KnowledgeRetriever,
        registry: ToolRegistry,
        trace_store: TraceStore | None = None,
        config: RouterConfig | None = None,
    ) -> None:
        self.chat = chat
        self.retriever = retriever
        self.registry = registry
        self.trace_store = trace_store or TraceStore()
        self.config = config or RouterConfig()

    async def dispatch(
        self,
        decision: RouteDecision,
        query: str,
        session: ConversationSession,
    ) -> AsyncIterator[str]:
        draft = TraceDraft()
        history = session.to_langchain_messages()
        emitted: list[str] = []
        chat_failed = False

        with Timer() as timer:
            try:
                async for token in self._route(decision, query, history, draft):
                    emitted.append(token)
                    yield token
            except ChatBackendError as exc:
                logger.error("Chat backend failed for session %s: %s", session.session_id, exc)
                chat_failed = True
                draft.error = str(exc)
                message = f"{CHAT_ERROR_PREFIX}{exc}"
                emitted.append(message)
                yield message

        answer = "".join(emitted)
        if not chat_failed:
            session.append_exchange(query, answer)

        self.trace_store.create_record(
            session_id=session.session_id,
            query=query,
            route=decision.kind.value,
            mode=decision.mode.value,
            reason=decision.reason,
            tool_name=decision.tool.name if decision.tool is not None else None,
            tool_params=decision.params,
            draft=draft,
            answer=answer,
            latency_ms=timer.elapsed_ms,
        )

    async def _route(
        self,
        decision: RouteDecision,
        query: str,
        history: list[BaseMessage],
        draft: TraceDraft,
    ) -> AsyncIterator[str]:
        if decision.kind is RouteKind.TOOL:
            stream = self._tool_response(decision, query, history, draft)
        elif decision.kind is RouteKind.KNOWLEDGE:
            stream = self._knowledge_response(query, history, draft)
        else:
            stream = self._general_response(query, history)
        async for token in stream:
            yield token

    async def _tool_response(
        self,
        decision: RouteDecision,
        query: str,
        history: list[BaseMessage],
        draft: TraceDraft,
    ) -> AsyncIterator[str]:
        spec = decision.tool
        if spec is None:
            raise RouterError("TOOL decision carries no tool")
        result = await self._execute_tool(spec.name, decision.params, draft)

        if not result.success:
            logger.warning("Tool %s failed: %s", spec.name, result.error)
            draft.error = result.error
            yield f"{TOOL_ERROR_PREFIX}{result.error}"
            if self.config.fallback_on_tool_failure:
                yield "\n\n"
                async for token in self._general_response(query, history):
                    yield token
            return

        summary = format_tool_result(result)
        yield summary
        if self.config.summarize_tool_results:
            yield "\n\n"
            async for token in self.chat.stream(
                PromptVariant.TOOL,
                {"input": query, "tool_result": summary},
                history,
            ):
                yield token

    async def _execute_tool(
        self,
        name: str,
        params: dict[str, Any],
        draft: TraceDraft,
    ) -> ToolResult:
        try:
            return await asyncio.to_thread(
                self.registry.execute, name, params, observer=draft.tool_traces.append
            )
        except ValidationError as exc:
            details = "; ".join(str(error["msg"]) for error in exc.errors())
            return ToolResult(tool=name, success=False, error=f"参数校验失败：{details}")
        except ToolExecutionError as exc:
            return ToolResult(tool=name, success=False, error=str(exc))

    async def _knowledge_response(
        self,
        query: str,
        history: list[BaseMessage],
        draft: TraceDraft,
    ) -> AsyncIterator[str]:
        try:
            results = await asyncio.to_thread(
                self.retriever.search, query, top_k=self.config.top_k
            )
        except RetrievalError as exc:
            logger.warning("Knowledge retrieval failed, answering without it: %s", exc)
            draft.error = str(exc)
            yield RETRIEVAL_FAILURE_TEXT
            yield "\n\n"
            async for token in self._general_response(query, history):
                yield token
            return

        draft.sources.extend(result.source for result in results)
        docs = format_search_results(results, max_chars=self.config.snippet_chars)
        logger.debug("Retrieved %d snippets for %r", len(results), query)
        async for token in self.chat.stream(
            PromptVariant.RAG, {"input": query, "docs": docs}, history
        ):
            yield token

    async def _general_response(
        self, query: str, history: list[BaseMessage]
    ) -> AsyncIterator[str]:
        async for token in self.chat.stream(PromptVariant.GENERAL, {"input": query}, history):
            yield token
