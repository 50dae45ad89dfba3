from pydantic import BaseModel

from rag_router.tools.registry import ToolRegistry, ToolSpec
from rag_router.types import ToolCategory, ToolResult


class EchoInput(BaseModel):
    text: str


def _registry() -> ToolRegistry:
    registry = ToolRegistry()

    def _handler(spec: ToolSpec, data: EchoInput) -> ToolResult:
        return ToolResult(tool=spec.name, success=True, data=data.text.upper())

    registry.register(
        ToolSpec(
            name="echo",
            category=ToolCategory.SYSTEM,
            description="uppercase",
            args_schema=EchoInput,
            endpoint="/api/echo",
            handler=_handler,
        )
    )
    return registry


def test_tool_observer_captures_latency_and_payload() -> None:
    registry = _registry()

    observed = []
    registry.set_observer(observed.append)
    result = registry.execute("echo", {"text": "hello"})
    registry.set_observer(None)

    assert result.data == "HELLO"
    assert len(observed) == 1
    assert observed[0].name == "echo"
    assert observed[0].input_payload == {"text": "hello"}
    assert observed[0].output_preview == "HELLO"
    assert observed[0].latency_ms >= 0.0


def test_per_call_observer_sees_only_its_own_call() -> None:
    registry = _registry()
    shared = []
    first = []
    registry.set_observer(shared.append)

    registry.execute("echo", {"text": "a"}, observer=first.append)
    registry.execute("echo", {"text": "b"})

    assert [trace.input_payload["text"] for trace in first] == ["a"]
    assert [trace.input_payload["text"] for trace in shared] == ["a", "b"]
