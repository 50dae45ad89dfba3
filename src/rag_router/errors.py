"""Error taxonomy for routing, dispatch and startup."""

from __future__ import annotations


class RouterError(Exception):
    """Base class for all errors raised by the routed chat agent."""


class ClassificationError(RouterError):
    """The LLM intent response could not be obtained or parsed."""


class ToolSelectionError(RouterError):
    """No registered tool matched a query that passed the tool gate."""


class ParameterExtractionError(RouterError):
    """Required tool parameters could not be extracted from the query."""

    def __init__(self, tool_name: str, missing: list[str] | None = None, message: str | None = None) -> None:
        self.tool_name = tool_name
        self.missing = list(missing or [])
        super().__init__(message or f"Missing required parameters for {tool_name}: {', '.join(self.missing)}")


class ToolExecutionError(RouterError):
    """The tool backend failed or returned a non-success payload."""


class RetrievalError(RouterError):
    """The knowledge-base search failed."""


class RetrieverNotInitializedError(RetrievalError):
    """Search was attempted before the index was loaded."""


class ChatBackendError(RouterError):
    """The chat completion call failed."""


class StartupError(RouterError):
    """A required dependency could not be provisioned at startup."""
