"""Deterministic chat responder when no chat model is configured."""

from __future__ import annotations

import re
from collections.abc import AsyncIterator

from langchain_core.messages import BaseMessage

from rag_router.chat.prompts import PromptVariant

_TOKEN_SPLIT = re.compile(r"\S+\s*|\s+")


class TemplateChatService:
    """Answers from the routed evidence without calling a model.

    This implementation keeps the same contract as `LangChainChatService` and
    is useful for local/offline environments where no LLM endpoint or key is
    configured: knowledge answers echo the retrieved snippets, tool answers
    echo the formatted tool result.
    """

    async def stream(
        self,
        variant: PromptVariant,
        variables: dict[str, str],
        history: list[BaseMessage],
    ) -> AsyncIterator[str]:
        for token in _TOKEN_SPLIT.findall(self.render(variant, variables, history)):
            yield token

    async def invoke(
        self,
        variant: PromptVariant,
        variables: dict[str, str],
        history: list[BaseMessage],
    ) -> str:
        return self.render(variant, variables, history)

    @staticmethod
    def render(
        variant: PromptVariant,
        variables: dict[str, str],
        history: list[BaseMessage],
    ) -> str:
        del history  # template answers do not depend on earlier turns.
        if variant is PromptVariant.RAG:
            return f"根据知识库检索结果：\n{variables.get('docs', '')}"
        if variant is PromptVariant.TOOL:
            return f"以上是工具返回的结果：{variables.get('tool_result', '')}"
        return f"（离线模式，未配置语言模型）已收到你的问题：{variables.get('input', '')}"
