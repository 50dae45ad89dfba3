"""Interactive chat commands."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from rag_router.types import IntentMode

EXIT_WORDS = frozenset({"exit", "quit", "退出", "bye", "再见"})
RESET_WORDS = frozenset({"clear", "reset", "重置"})


class CommandKind(str, Enum):
    EXIT = "exit"
    RESET = "reset"
    MODE = "mode"


@dataclass(slots=True, frozen=True)
class Command:
    kind: CommandKind
    mode: IntentMode | None = None


def parse_command(text: str) -> Command | None:
    """Return the command named by `text`, or None for an ordinary query."""

    normalized = " ".join(text.strip().lower().split())
    if normalized in EXIT_WORDS:
        return Command(CommandKind.EXIT)
    if normalized in RESET_WORDS:
        return Command(CommandKind.RESET)
    if normalized.startswith("mode "):
        try:
            return Command(CommandKind.MODE, IntentMode(normalized[len("mode ") :]))
        except ValueError:
            return None
    return None
