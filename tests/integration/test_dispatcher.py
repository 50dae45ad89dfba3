import threading

import pytest

from rag_router.agent.dispatcher import (
    CHAT_ERROR_PREFIX,
    RETRIEVAL_FAILURE_TEXT,
    TOOL_ERROR_PREFIX,
    ResponseDispatcher,
)
from rag_router.chat.prompts import PromptVariant
from rag_router.config import RouterConfig
from rag_router.errors import ChatBackendError, RouterError
from rag_router.obs.tracing import TraceStore
from rag_router.retrieval.embedder import HashingEmbedder
from rag_router.retrieval.retriever import KnowledgeRetriever
from rag_router.routing.orchestrator import IntentOrchestrator
from rag_router.routing.selector import ToolSelector
from rag_router.sessions import ConversationSession
from rag_router.tools.registry import ToolRegistry
from rag_router.types import RouteDecision


class SpyRetriever(KnowledgeRetriever):
    def __init__(self, inner: KnowledgeRetriever) -> None:
        super().__init__(inner.embedder, vector_store=inner.vector_store)
        self.calls: list[tuple[str, int]] = []

    def search(self, query: str, top_k: int = 3):
        self.calls.append((query, top_k))
        return super().search(query, top_k=top_k)


@pytest.fixture
def spy_retriever(retriever: KnowledgeRetriever) -> SpyRetriever:
    return SpyRetriever(retriever)


@pytest.fixture
def tool_calls(registry: ToolRegistry) -> list[str]:
    calls: list[str] = []
    registry.set_observer(lambda trace: calls.append(trace.name))
    return calls


def _dispatcher(chat, retriever, registry, config: RouterConfig | None = None) -> ResponseDispatcher:
    return ResponseDispatcher(
        chat=chat,
        retriever=retriever,
        registry=registry,
        trace_store=TraceStore(),
        config=config,
    )


def test_arithmetic_query_runs_calculator_and_summarizes(
    chat, spy_retriever, registry, tool_calls, collect
) -> None:
    dispatcher = _dispatcher(chat, spy_retriever, registry)
    decision = IntentOrchestrator(selector=ToolSelector(registry)).decide("2+3*4")
    session = ConversationSession(session_id="s1")

    tokens = collect(dispatcher.dispatch(decision, "2+3*4", session))

    assert tokens[0] == "计算结果：2+3*4 = 14"
    assert tool_calls == ["calculate"]
    assert spy_retriever.calls == []
    assert chat.variants() == [PromptVariant.TOOL]
    assert chat.calls[0][1] == {"input": "2+3*4", "tool_result": "计算结果：2+3*4 = 14"}
    assert [message.role for message in session.history] == ["user", "assistant"]
    assert session.history[1].content == "".join(tokens)


def test_knowledge_query_retrieves_top_three_and_never_calls_tools(
    chat, spy_retriever, registry, tool_calls, collect
) -> None:
    dispatcher = _dispatcher(chat, spy_retriever, registry)
    decision = IntentOrchestrator(selector=ToolSelector(registry)).decide("代码规范是什么")

    collect(dispatcher.dispatch(decision, "代码规范是什么", ConversationSession(session_id="s2")))

    assert spy_retriever.calls == [("代码规范是什么", 3)]
    assert tool_calls == []
    assert chat.variants() == [PromptVariant.RAG]
    docs = chat.calls[0][1]["docs"]
    assert docs.startswith("【1】")
    assert "【3】" in docs and "【4】" not in docs

    record = dispatcher.trace_store.list_recent(limit=1)[0]
    assert record.route == "knowledge"
    assert len(record.sources) == 3


def test_greeting_uses_general_path_only(chat, spy_retriever, registry, tool_calls, collect) -> None:
    dispatcher = _dispatcher(chat, spy_retriever, registry)
    decision = IntentOrchestrator(selector=ToolSelector(registry)).decide("你好")

    tokens = collect(dispatcher.dispatch(decision, "你好", ConversationSession(session_id="s3")))

    assert "".join(tokens) == "好的"
    assert chat.variants() == [PromptVariant.GENERAL]
    assert spy_retriever.calls == []
    assert tool_calls == []


def test_tool_failure_is_surfaced_without_fallback(chat, spy_retriever, registry, collect) -> None:
    dispatcher = _dispatcher(chat, spy_retriever, registry)
    decision = RouteDecision.tool_call(registry.get("get_user_by_id"), {"id": 99}, reason="test")
    session = ConversationSession(session_id="s4")

    tokens = collect(dispatcher.dispatch(decision, "查询编号为99的用户", session))

    assert tokens == [f"{TOOL_ERROR_PREFIX}用户未找到"]
    assert chat.calls == []
    assert spy_retriever.calls == []
    assert len(session.history) == 2
    assert dispatcher.trace_store.summary()["errors"] == 1


def test_tool_failure_can_fall_back_to_general_chat(chat, spy_retriever, registry, collect) -> None:
    dispatcher = _dispatcher(
        chat, spy_retriever, registry, RouterConfig(fallback_on_tool_failure=True)
    )
    decision = RouteDecision.tool_call(registry.get("get_user_by_id"), {"id": 99}, reason="test")

    tokens = collect(dispatcher.dispatch(decision, "查询编号为99的用户", ConversationSession(session_id="s5")))

    assert tokens[0].startswith(TOOL_ERROR_PREFIX)
    assert chat.variants() == [PromptVariant.GENERAL]
    assert spy_retriever.calls == []


def test_invalid_tool_params_become_tool_failure(chat, spy_retriever, registry, collect) -> None:
    dispatcher = _dispatcher(chat, spy_retriever, registry)
    decision = RouteDecision.tool_call(registry.get("get_user_by_id"), {"id": 0}, reason="test")

    tokens = collect(dispatcher.dispatch(decision, "用户ID为0", ConversationSession(session_id="s6")))

    assert tokens[0].startswith(TOOL_ERROR_PREFIX)
    assert chat.calls == []


def test_tool_summary_can_be_disabled(chat, spy_retriever, registry, collect) -> None:
    dispatcher = _dispatcher(chat, spy_retriever, registry, RouterConfig(summarize_tool_results=False))
    decision = RouteDecision.tool_call(registry.get("get_company_info"), {}, reason="test")

    tokens = collect(dispatcher.dispatch(decision, "公司信息", ConversationSession(session_id="s7")))

    assert tokens == ["公司信息：创新科技公司\n成立时间：2018年\n员工数：150\n部门：技术部, 产品部, 设计部, 市场部, 行政部"]
    assert chat.calls == []


def test_uninitialized_retriever_falls_back_to_general(chat, registry, collect, tmp_path) -> None:
    retriever = KnowledgeRetriever(HashingEmbedder(), index_path=tmp_path / "index.jsonl")
    dispatcher = _dispatcher(chat, retriever, registry)

    tokens = collect(
        dispatcher.dispatch(
            RouteDecision.knowledge("test"), "代码规范是什么", ConversationSession(session_id="s8")
        )
    )

    assert tokens[0] == RETRIEVAL_FAILURE_TEXT
    assert chat.variants() == [PromptVariant.GENERAL]


def test_chat_backend_failure_ends_query_without_recording(
    chat, spy_retriever, registry, collect
) -> None:
    chat.fail_with = ChatBackendError("model offline")
    dispatcher = _dispatcher(chat, spy_retriever, registry)
    session = ConversationSession(session_id="s9")

    tokens = collect(dispatcher.dispatch(RouteDecision.general("test"), "你好", session))

    assert tokens == [f"{CHAT_ERROR_PREFIX}model offline"]
    assert session.history == []
    assert dispatcher.trace_store.list_recent(limit=1)[0].error == "model offline"

    chat.fail_with = None
    collect(dispatcher.dispatch(RouteDecision.general("test"), "你好", session))
    assert len(session.history) == 2


def test_history_is_passed_to_later_turns(chat, spy_retriever, registry, collect) -> None:
    dispatcher = _dispatcher(chat, spy_retriever, registry)
    session = ConversationSession(session_id="s10")

    collect(dispatcher.dispatch(RouteDecision.general("test"), "你好", session))
    collect(dispatcher.dispatch(RouteDecision.general("test"), "你是谁", session))

    assert [call[2] for call in chat.calls] == [0, 2]


def test_knowledge_search_runs_off_the_event_loop_thread(chat, retriever, registry, collect) -> None:
    search_threads: list[int] = []

    class ThreadRecordingRetriever(SpyRetriever):
        def search(self, query: str, top_k: int = 3):
            search_threads.append(threading.get_ident())
            return super().search(query, top_k=top_k)

    dispatcher = _dispatcher(chat, ThreadRecordingRetriever(retriever), registry)

    collect(
        dispatcher.dispatch(
            RouteDecision.knowledge("test"), "代码规范是什么", ConversationSession(session_id="s11")
        )
    )

    assert len(search_threads) == 1
    assert search_threads[0] != threading.get_ident()
    assert chat.variants() == [PromptVariant.RAG]


def test_tool_decision_without_tool_is_rejected(chat, spy_retriever, registry, collect) -> None:
    dispatcher = _dispatcher(chat, spy_retriever, registry)
    decision = RouteDecision.tool_call(registry.get("get_company_info"), {}, reason="test")
    object.__setattr__(decision, "tool", None)

    with pytest.raises(RouterError, match="no tool"):
        collect(dispatcher.dispatch(decision, "公司信息", ConversationSession(session_id="s12")))

    assert chat.calls == []
