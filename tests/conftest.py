from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable
from typing import Any

import pytest
from fastapi.testclient import TestClient

from rag_router.chat.prompts import PromptVariant
from rag_router.mock_api.server import create_mock_app
from rag_router.retrieval.embedder import HashingEmbedder
from rag_router.retrieval.retriever import KnowledgeRetriever
from rag_router.retrieval.vector_store import InMemoryVectorStore
from rag_router.tools.builtin import register_builtin_tools
from rag_router.tools.http_executor import HttpToolExecutor
from rag_router.tools.registry import ToolRegistry

KNOWLEDGE_DOCS = [
    ("standards.md", "代码规范：函数命名使用小写加下划线，每个模块必须有文档说明。"),
    ("process.md", "开发流程：需求评审、编码、代码审查、测试、发布。"),
    ("testing.md", "测试规范：单元测试覆盖率不低于百分之八十。"),
    ("onboarding.md", "新员工入职需要完成账号申请和安全培训。"),
]


class RecordingChatService:
    """Chat collaborator double that records every prompt it receives."""

    def __init__(self, reply: str = "好的", fail_with: Exception | None = None) -> None:
        self.reply = reply
        self.fail_with = fail_with
        self.calls: list[tuple[PromptVariant, dict[str, str], int]] = []

    async def stream(
        self,
        variant: PromptVariant,
        variables: dict[str, str],
        history: list[Any],
    ) -> AsyncIterator[str]:
        self.calls.append((variant, dict(variables), len(history)))
        if self.fail_with is not None:
            raise self.fail_with
        for token in self.reply.split(" "):
            yield token

    async def invoke(
        self,
        variant: PromptVariant,
        variables: dict[str, str],
        history: list[Any],
    ) -> str:
        self.calls.append((variant, dict(variables), len(history)))
        if self.fail_with is not None:
            raise self.fail_with
        return self.reply

    def variants(self) -> list[PromptVariant]:
        return [call[0] for call in self.calls]


@pytest.fixture
def mock_backend() -> TestClient:
    return TestClient(create_mock_app())


@pytest.fixture
def executor(mock_backend: TestClient) -> HttpToolExecutor:
    return HttpToolExecutor(client=mock_backend)


@pytest.fixture
def registry(executor: HttpToolExecutor) -> ToolRegistry:
    tools = ToolRegistry()
    register_builtin_tools(tools, executor)
    return tools


@pytest.fixture
def retriever() -> KnowledgeRetriever:
    embedder = HashingEmbedder()
    store = InMemoryVectorStore()
    store.upsert(KNOWLEDGE_DOCS, embedder.embed_documents([text for _, text in KNOWLEDGE_DOCS]))
    return KnowledgeRetriever(embedder, vector_store=store)


@pytest.fixture
def chat() -> RecordingChatService:
    return RecordingChatService()


@pytest.fixture
def collect() -> Callable[[AsyncIterator[str]], list[str]]:
    def _collect(stream: AsyncIterator[str]) -> list[str]:
        async def _drain() -> list[str]:
            return [token async for token in stream]

        return asyncio.run(_drain())

    return _collect
