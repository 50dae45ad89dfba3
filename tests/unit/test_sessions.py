from langchain_core.messages import AIMessage, HumanMessage

from rag_router.sessions import InMemorySessionStore
from rag_router.types import IntentMode


def test_sessions_are_created_lazily_with_default_mode() -> None:
    store = InMemorySessionStore(default_mode=IntentMode.LLM)

    assert store.get("a") is None
    session = store.get_or_create("a")

    assert session.mode is IntentMode.LLM
    assert store.get_or_create("a") is session


def test_reset_clears_only_the_target_session() -> None:
    store = InMemorySessionStore()
    first = store.get_or_create("first")
    second = store.get_or_create("second")
    first.append_exchange("你好", "你好！")
    second.append_exchange("代码规范是什么", "见文档")
    first.mode = IntentMode.LLM

    store.clear("first")

    assert first.history == []
    assert first.mode is IntentMode.LLM
    assert [message.content for message in second.history] == ["代码规范是什么", "见文档"]


def test_history_converts_to_langchain_messages() -> None:
    session = InMemorySessionStore().get_or_create("s")
    session.append_exchange("2+3", "5")

    messages = session.to_langchain_messages()

    assert isinstance(messages[0], HumanMessage)
    assert isinstance(messages[1], AIMessage)
    assert [message.content for message in messages] == ["2+3", "5"]


def test_lock_is_stable_per_session_and_distinct_across_sessions() -> None:
    store = InMemorySessionStore()

    assert store.lock("a") is store.lock("a")
    assert store.lock("a") is not store.lock("b")


def test_delete_removes_session() -> None:
    store = InMemorySessionStore()
    store.get_or_create("gone")

    assert store.delete("gone") is True
    assert store.delete("gone") is False
    assert store.session_ids() == []
