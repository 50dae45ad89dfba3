"""Shared domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from rag_router.tools.registry import ToolSpec

RULE_CONFIDENCE = 0.7
LLM_CONFIDENCE = 0.9


class IntentMode(str, Enum):
    """Which classifier decides between knowledge retrieval and general chat."""

    RULE = "rule"
    LLM = "llm"


class RouteKind(str, Enum):
    GENERAL = "general"
    KNOWLEDGE = "knowledge"
    TOOL = "tool"


class ToolCategory(str, Enum):
    CALCULATION = "calculation"
    CONVERSION = "conversion"
    DATA_QUERY = "data_query"
    SYSTEM = "system"


@dataclass(slots=True)
class ChatMessage:
    """One turn of a conversation history."""

    role: Literal["user", "assistant"]
    content: str


@dataclass(slots=True, frozen=True)
class SearchResult:
    """A knowledge-base hit returned by the retrieval collaborator."""

    source: str
    text: str
    score: float


@dataclass(slots=True)
class ToolResult:
    """Outcome of one tool execution against the HTTP backend."""

    tool: str
    success: bool
    data: Any = None
    error: str | None = None
    raw: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class ToolTrace:
    """Trace record for an executed tool call."""

    name: str
    input_payload: dict[str, Any]
    output_preview: str
    latency_ms: float


@dataclass(slots=True, frozen=True)
class RouteDecision:
    """The routing verdict for one query.

    A TOOL decision always carries the selected tool and its extracted
    parameters; GENERAL and KNOWLEDGE decisions carry neither. Use the
    `general`, `knowledge` and `tool_call` constructors rather than building the
    dataclass by hand.
    """

    kind: RouteKind
    confidence: float
    reason: str
    tool: ToolSpec | None = None
    params: dict[str, Any] = field(default_factory=dict)
    mode: IntentMode = IntentMode.RULE

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence out of range: {self.confidence}")
        if self.kind is RouteKind.TOOL:
            if self.tool is None:
                raise ValueError("TOOL decisions require a selected tool")
        elif self.tool is not None or self.params:
            raise ValueError(f"{self.kind.value} decisions cannot carry a tool")

    @classmethod
    def general(
        cls,
        reason: str,
        *,
        confidence: float = RULE_CONFIDENCE,
        mode: IntentMode = IntentMode.RULE,
    ) -> "RouteDecision":
        return cls(kind=RouteKind.GENERAL, confidence=confidence, reason=reason, mode=mode)

    @classmethod
    def knowledge(
        cls,
        reason: str,
        *,
        confidence: float = RULE_CONFIDENCE,
        mode: IntentMode = IntentMode.RULE,
    ) -> "RouteDecision":
        return cls(kind=RouteKind.KNOWLEDGE, confidence=confidence, reason=reason, mode=mode)

    @classmethod
    def tool_call(
        cls,
        tool: ToolSpec,
        params: dict[str, Any],
        reason: str,
        *,
        confidence: float = RULE_CONFIDENCE,
    ) -> "RouteDecision":
        return cls(
            kind=RouteKind.TOOL,
            confidence=confidence,
            reason=reason,
            tool=tool,
            params=dict(params),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "confidence": self.confidence,
            "reason": self.reason,
            "tool": self.tool.name if self.tool is not None else None,
            "params": dict(self.params),
            "mode": self.mode.value,
        }
