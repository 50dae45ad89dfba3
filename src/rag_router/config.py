"""Configuration models for the routed chat agent."""

from __future__ import annotations

import os
from typing import Literal

from pydantic import BaseModel, Field

from rag_router.types import IntentMode


class RouterConfig(BaseModel):
    """Configures routing defaults and dispatcher behavior."""

    default_mode: IntentMode = IntentMode.RULE
    top_k: int = Field(default=3, ge=1, le=20)
    snippet_chars: int = Field(default=150, ge=20)
    summarize_tool_results: bool = True
    fallback_on_tool_failure: bool = False


class ToolBackendConfig(BaseModel):
    """Configures the HTTP backend that executes tool calls."""

    base_url: str = "http://localhost:3000"
    timeout_seconds: float = Field(default=10.0, gt=0.0)
    require_tool_backend: bool = False


class LLMConfig(BaseModel):
    """Configures the chat model used for answers and intent analysis."""

    provider: Literal["ollama", "openai", "deepseek"] = "ollama"
    model: str | None = None
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    intent_temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    base_url: str | None = None
    api_key: str | None = None


class RetrievalConfig(BaseModel):
    """Configures the knowledge-base index loaded at startup."""

    index_path: str = "data/knowledge_index.jsonl"
    embedding: Literal["hashing", "openai"] = "hashing"
    embedding_model: str = "text-embedding-3-small"
    dimension: int = Field(default=256, ge=8)


class AppSettings(BaseModel):
    """Aggregated settings for the API, CLI and agent factory."""

    router: RouterConfig = Field(default_factory=RouterConfig)
    tool_backend: ToolBackendConfig = Field(default_factory=ToolBackendConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    retrieval: RetrievalConfig = Field(default_factory=RetrievalConfig)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "AppSettings":
        """Build settings from `RAG_ROUTER_*` and provider key variables."""

        provider = os.getenv("RAG_ROUTER_LLM_PROVIDER", "ollama")
        api_key = {
            "openai": os.getenv("OPENAI_API_KEY"),
            "deepseek": os.getenv("DEEPSEEK_API_KEY"),
        }.get(provider)

        return cls(
            router=RouterConfig(
                default_mode=IntentMode(os.getenv("RAG_ROUTER_MODE", "rule")),
                top_k=int(os.getenv("RAG_ROUTER_TOP_K", "3")),
                fallback_on_tool_failure=_env_flag("RAG_ROUTER_FALLBACK_ON_TOOL_FAILURE"),
                summarize_tool_results=_env_flag(
                    "RAG_ROUTER_SUMMARIZE_TOOL_RESULTS", default=True
                ),
            ),
            tool_backend=ToolBackendConfig(
                base_url=os.getenv("RAG_ROUTER_TOOL_BACKEND_URL", "http://localhost:3000"),
                require_tool_backend=_env_flag("RAG_ROUTER_REQUIRE_TOOL_BACKEND"),
            ),
            llm=LLMConfig(
                provider=provider,  # type: ignore[arg-type]
                model=os.getenv("RAG_ROUTER_LLM_MODEL"),
                base_url=os.getenv("RAG_ROUTER_LLM_BASE_URL"),
                api_key=api_key,
            ),
            retrieval=RetrievalConfig(
                index_path=os.getenv("RAG_ROUTER_INDEX_PATH", "data/knowledge_index.jsonl"),
                embedding=os.getenv("RAG_ROUTER_EMBEDDING", "hashing"),  # type: ignore[arg-type]
            ),
            log_level=os.getenv("RAG_ROUTER_LOG_LEVEL", "INFO"),
        )


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}
