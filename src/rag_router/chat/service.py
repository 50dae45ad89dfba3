"""Chat collaborator backed by a LangChain chat model."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import Any, Protocol

from langchain_core.messages import BaseMessage

from rag_router.chat.prompts import PromptVariant, build_prompt
from rag_router.errors import ChatBackendError

logger = logging.getLogger(__name__)


class ChatService(Protocol):
    """Text-completion contract used by the dispatcher."""

    def stream(
        self,
        variant: PromptVariant,
        variables: dict[str, str],
        history: list[BaseMessage],
    ) -> AsyncIterator[str]:
        """Yield answer tokens in arrival order."""

    async def invoke(
        self,
        variant: PromptVariant,
        variables: dict[str, str],
        history: list[BaseMessage],
    ) -> str:
        """Return the complete answer."""


class LangChainChatService:
    """Runs `prompt | llm` chains for each prompt variant.

    Any exception raised by the model is re-raised as `ChatBackendError` so
    the dispatcher can end the current query without losing the session.
    """

    def __init__(self, llm: Any) -> None:
        self.llm = llm
        self._chains = {variant: build_prompt(variant) | llm for variant in PromptVariant}

    async def stream(
        self,
        variant: PromptVariant,
        variables: dict[str, str],
        history: list[BaseMessage],
    ) -> AsyncIterator[str]:
        chain = self._chains[variant]
        try:
            async for chunk in chain.astream({**variables, "history": history}):
                text = _chunk_text(chunk)
                if text:
                    yield text
        except Exception as exc:
            logger.error("Chat model stream failed (%s): %s", variant.value, exc)
            raise ChatBackendError(str(exc)) from exc

    async def invoke(
        self,
        variant: PromptVariant,
        variables: dict[str, str],
        history: list[BaseMessage],
    ) -> str:
        try:
            response = await self._chains[variant].ainvoke({**variables, "history": history})
        except Exception as exc:
            logger.error("Chat model call failed (%s): %s", variant.value, exc)
            raise ChatBackendError(str(exc)) from exc
        return _chunk_text(response)


def _chunk_text(chunk: Any) -> str:
    content = getattr(chunk, "content", chunk)
    if isinstance(content, list):
        return "".join(
            str(item["text"]) if isinstance(item, dict) and "text" in item else str(item)
            for item in content
        )
    return str(content) if content is not None else ""
