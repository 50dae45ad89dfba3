import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_core.runnables import RunnableLambda

from rag_router.errors import ClassificationError
from rag_router.routing.llm_intent import LLMIntentClassifier, parse_verdict


def test_parse_verdict_extracts_json_from_surrounding_text() -> None:
    verdict = parse_verdict('好的。\n{"needs_retrieval": true, "reason": "涉及开发规范"}\n以上。')

    assert verdict.needs_retrieval is True
    assert verdict.reason == "涉及开发规范"
    assert verdict.needs_tool is None
    assert verdict.confidence is None


@pytest.mark.parametrize(
    "content",
    [
        "我认为需要检索",
        '{"needs_retrieval": true}',
        '{"needs_retrieval": "yes", "reason": "x"}',
        '{"needs_retrieval": true, "reason": "x", "confidence": 1.5}',
        '{"needs_retrieval": true, "reason": ',
    ],
)
def test_parse_verdict_rejects_invalid_replies(content: str) -> None:
    with pytest.raises(ClassificationError):
        parse_verdict(content)


def test_classifier_reads_verdict_from_chat_model() -> None:
    llm = FakeListChatModel(responses=['{"needs_retrieval": false, "reason": "问候"}'])
    classifier = LLMIntentClassifier(llm)

    assert classifier.needs_retrieval("你好") is False


def test_classifier_wraps_model_errors() -> None:
    def _boom(_: object) -> str:
        raise RuntimeError("connection refused")

    classifier = LLMIntentClassifier(RunnableLambda(_boom))

    with pytest.raises(ClassificationError, match="connection refused"):
        classifier.classify("代码规范是什么")
