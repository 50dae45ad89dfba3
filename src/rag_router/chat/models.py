"""Chat model and embedder factories."""

from __future__ import annotations

import logging
from typing import Any

from rag_router.config import LLMConfig, RetrievalConfig
from rag_router.retrieval.embedder import Embedder, HashingEmbedder, LangChainEmbedder

logger = logging.getLogger(__name__)

DEFAULT_MODELS = {
    "ollama": "llama3.1:8b",
    "openai": "gpt-4o-mini",
    "deepseek": "deepseek-chat",
}

DEFAULT_BASE_URLS = {
    "ollama": "http://localhost:11434/v1",
    "deepseek": "https://api.deepseek.com",
}


def create_chat_model(config: LLMConfig, *, temperature: float | None = None) -> Any | None:
    """Build a `ChatOpenAI` client for the configured provider.

    Ollama and DeepSeek are reached through their OpenAI-compatible
    endpoints. Returns None when a hosted provider has no API key, in which
    case callers switch to the offline template responder.
    """

    if config.provider != "ollama" and not config.api_key:
        logger.warning("No API key for LLM provider %s; chat model disabled", config.provider)
        return None

    from langchain_openai import ChatOpenAI

    return ChatOpenAI(
        model=config.model or DEFAULT_MODELS[config.provider],
        temperature=config.temperature if temperature is None else temperature,
        base_url=config.base_url or DEFAULT_BASE_URLS.get(config.provider),
        # Ollama ignores the key but the OpenAI client requires one.
        api_key=config.api_key or "ollama",
    )


def create_embedder(config: RetrievalConfig, llm_config: LLMConfig) -> Embedder:
    if config.embedding == "hashing":
        return HashingEmbedder(dimension=config.dimension)

    from langchain_openai import OpenAIEmbeddings

    return LangChainEmbedder(
        OpenAIEmbeddings(model=config.embedding_model, api_key=llm_config.api_key)
    )
