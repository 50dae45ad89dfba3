"""Tool registry built on Pydantic v2 models."""

from __future__ import annotations

from collections.abc import Callable
from time import perf_counter
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from rag_router.types import ToolCategory, ToolResult, ToolTrace


class ParamSpec(BaseModel):
    """Declared shape of one tool parameter."""

    type: str
    required: bool
    description: str = ""


class ToolSpec(BaseModel):
    """Declarative tool descriptor for registration and validation.

    `args_schema` is the source of truth for parameters: `parameters()` derives
    the name -> ParamSpec mapping from its fields, and `invoke()` validates the
    payload against it before calling the handler.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    name: str
    category: ToolCategory
    description: str
    args_schema: type[BaseModel]
    endpoint: str
    handler: Callable[..., ToolResult]
    tags: list[str] = Field(default_factory=list)

    def parameters(self) -> dict[str, ParamSpec]:
        params: dict[str, ParamSpec] = {}
        for field_name, info in self.args_schema.model_fields.items():
            annotation = info.annotation
            type_name = getattr(annotation, "__name__", None) or str(annotation)
            params[info.alias or field_name] = ParamSpec(
                type=type_name,
                required=info.is_required(),
                description=info.description or "",
            )
        return params

    def required_parameters(self) -> list[str]:
        return [name for name, spec in self.parameters().items() if spec.required]

    def invoke(self, payload: dict[str, Any]) -> ToolResult:
        data = self.args_schema.model_validate(payload)
        return self.handler(self, data)


class ToolRegistry:
    """Stores tool specs in registration order and executes them by name."""

    def __init__(self) -> None:
        self._tools: dict[str, ToolSpec] = {}
        self._observer: Callable[[ToolTrace], None] | None = None

    def register(self, spec: ToolSpec) -> None:
        if spec.name in self._tools:
            raise ValueError(f"Tool already registered: {spec.name}")
        self._tools[spec.name] = spec

    def set_observer(self, observer: Callable[[ToolTrace], None] | None) -> None:
        """Set an optional callback invoked after each tool execution."""
        self._observer = observer

    def get(self, name: str) -> ToolSpec:
        spec = self._tools.get(name)
        if spec is None:
            raise KeyError(f"Unknown tool: {name}")
        return spec

    def execute(
        self,
        name: str,
        payload: dict[str, Any],
        *,
        observer: Callable[[ToolTrace], None] | None = None,
    ) -> ToolResult:
        """Validate `payload` and run the named tool.

        `observer` receives the trace of this call only, in addition to the
        registry-wide observer.
        """
        return self._execute_spec(self.get(name), payload, observer)

    def specs(self) -> list[ToolSpec]:
        return list(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def _execute_spec(
        self,
        spec: ToolSpec,
        payload: dict[str, Any],
        observer: Callable[[ToolTrace], None] | None = None,
    ) -> ToolResult:
        start = perf_counter()
        result = spec.invoke(payload)
        latency_ms = (perf_counter() - start) * 1000.0

        observers = [callback for callback in (self._observer, observer) if callback is not None]
        if observers:
            preview = str(result.data if result.success else result.error)
            trace = ToolTrace(
                name=spec.name,
                input_payload=payload,
                output_preview=preview[:320],
                latency_ms=latency_ms,
            )
            for callback in observers:
                callback(trace)
        return result
