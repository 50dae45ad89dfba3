import pytest

from rag_router.agent.commands import CommandKind, parse_command
from rag_router.types import IntentMode


@pytest.mark.parametrize("text", ["exit", "QUIT", "退出", "bye", " 再见 "])
def test_exit_commands(text: str) -> None:
    command = parse_command(text)

    assert command is not None
    assert command.kind is CommandKind.EXIT


@pytest.mark.parametrize("text", ["clear", "Reset", "重置"])
def test_reset_commands(text: str) -> None:
    command = parse_command(text)

    assert command is not None
    assert command.kind is CommandKind.RESET


@pytest.mark.parametrize(("text", "mode"), [("mode llm", IntentMode.LLM), ("MODE  rule", IntentMode.RULE)])
def test_mode_commands(text: str, mode: IntentMode) -> None:
    command = parse_command(text)

    assert command is not None
    assert command.kind is CommandKind.MODE
    assert command.mode is mode


@pytest.mark.parametrize("text", ["mode turbo", "你好", "clear my history please", "2+3"])
def test_ordinary_input_is_not_a_command(text: str) -> None:
    assert parse_command(text) is None
