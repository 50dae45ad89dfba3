import json

import pytest

from rag_router.errors import RetrievalError, RetrieverNotInitializedError, StartupError
from rag_router.retrieval.embedder import HashingEmbedder
from rag_router.retrieval.retriever import KnowledgeRetriever


def test_search_before_initialize_fails_fast(tmp_path) -> None:
    retriever = KnowledgeRetriever(HashingEmbedder(), index_path=tmp_path / "index.jsonl")

    assert not retriever.ready
    with pytest.raises(RetrieverNotInitializedError):
        retriever.search("代码规范")


def test_missing_index_is_a_startup_error(tmp_path) -> None:
    retriever = KnowledgeRetriever(HashingEmbedder(), index_path=tmp_path / "missing.jsonl")

    with pytest.raises(StartupError, match="not found"):
        retriever.initialize()


def test_initialize_loads_jsonl_rows_with_and_without_vectors(tmp_path) -> None:
    embedder = HashingEmbedder(dimension=64)
    index = tmp_path / "index.jsonl"
    rows = [
        {"source": "standards.md", "text": "代码规范：函数命名使用小写加下划线。"},
        {
            "source": "holiday.md",
            "text": "年假需要提前两周申请。",
            "vector": embedder.embed_query("年假需要提前两周申请。"),
        },
        {"source": "deploy.md", "text": "发布流程需要经过代码审查。"},
    ]
    index.write_text(
        "\n".join(json.dumps(row, ensure_ascii=False) for row in rows) + "\n\n",
        encoding="utf-8",
    )

    retriever = KnowledgeRetriever(embedder, index_path=index)
    retriever.initialize()

    assert retriever.ready
    assert len(retriever.vector_store) == 3

    results = retriever.search("代码规范", top_k=2)
    assert len(results) == 2
    assert results[0].source == "standards.md"
    assert results[0].score >= results[1].score


def test_malformed_index_row_is_a_startup_error(tmp_path) -> None:
    index = tmp_path / "index.jsonl"
    index.write_text('{"source": "a.md"}\n', encoding="utf-8")

    with pytest.raises(StartupError):
        KnowledgeRetriever(HashingEmbedder(), index_path=index).initialize()


def test_prepopulated_store_is_ready(retriever: KnowledgeRetriever) -> None:
    assert retriever.ready
    assert len(retriever.search("测试覆盖率", top_k=3)) == 3


@pytest.mark.parametrize(
    "lines",
    [
        ['["not", "an", "object"]'],
        ['{"source": "a.md", "text": "代码规范", "vector": []}'],
        [
            '{"source": "a.md", "text": "代码规范", "vector": [0.1, 0.2]}',
            '{"source": "b.md", "text": "测试规范", "vector": [0.1, 0.2, 0.3]}',
        ],
    ],
)
def test_invalid_index_rows_are_startup_errors(tmp_path, lines: list[str]) -> None:
    index = tmp_path / "index.jsonl"
    index.write_text("\n".join(lines) + "\n", encoding="utf-8")

    with pytest.raises(StartupError, match="Failed to load"):
        KnowledgeRetriever(HashingEmbedder(dimension=2), index_path=index).initialize()


def test_index_built_with_another_embedder_is_rejected(tmp_path) -> None:
    index = tmp_path / "index.jsonl"
    row = {
        "source": "a.md",
        "text": "代码规范",
        "vector": HashingEmbedder(dimension=32).embed_query("代码规范"),
    }
    index.write_text(json.dumps(row, ensure_ascii=False) + "\n", encoding="utf-8")

    retriever = KnowledgeRetriever(HashingEmbedder(dimension=64), index_path=index)

    with pytest.raises(StartupError, match="32-dimensional"):
        retriever.initialize()
    assert not retriever.ready


def test_query_dimension_mismatch_is_a_retrieval_error(retriever: KnowledgeRetriever) -> None:
    mismatched = KnowledgeRetriever(HashingEmbedder(dimension=8), vector_store=retriever.vector_store)

    with pytest.raises(RetrievalError, match="dimension mismatch"):
        mismatched.search("代码规范")
