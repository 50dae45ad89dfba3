"""Terminal chat over the routed agent."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from rag_router.agent.chat_agent import RoutedChatAgent, build_agent
from rag_router.agent.commands import CommandKind, parse_command
from rag_router.config import AppSettings
from rag_router.errors import RouterError, StartupError
from rag_router.obs.logging import configure_logging
from rag_router.types import IntentMode

logger = logging.getLogger(__name__)

WELCOME = """智能助手已启动（知识库检索 + 工具调用）
命令：
  mode llm / mode rule   切换意图识别模式
  clear / reset / 重置    清空当前会话历史
  exit / quit / 退出      退出
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rag-router-chat", description=__doc__)
    parser.add_argument("--session", default="terminal", help="conversation session id")
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in IntentMode],
        default=None,
        help="initial intent mode (defaults to RAG_ROUTER_MODE or rule)",
    )
    parser.add_argument("--log-level", default=None, help="logging level, e.g. DEBUG")
    return parser


async def chat_loop(agent: RoutedChatAgent, session_id: str) -> None:
    print(WELCOME)
    while True:
        try:
            line = await asyncio.to_thread(input, "你: ")
        except EOFError:
            print()
            return

        query = line.strip()
        if not query:
            continue

        command = parse_command(query)
        if command is not None:
            if command.kind is CommandKind.EXIT:
                print("再见！")
                return
            if command.kind is CommandKind.RESET:
                await agent.reset(session_id)
                print("会话历史已清空。\n")
                continue
            if command.mode is None:
                raise RouterError(f"Mode command without a mode: {query!r}")
            await agent.set_mode(session_id, command.mode)
            print(f"已切换到 {command.mode.value} 模式。\n")
            continue

        print("助手: ", end="", flush=True)
        async for token in agent.respond(session_id, query):
            print(token, end="", flush=True)
        print("\n")


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = AppSettings.from_env()
    if args.log_level:
        settings.log_level = args.log_level
    if args.mode:
        settings.router.default_mode = IntentMode(args.mode)
    configure_logging(settings.log_level)

    try:
        agent = build_agent(settings)
    except StartupError as exc:
        logger.error("Startup failed: %s", exc)
        print(f"启动失败：{exc}", file=sys.stderr)
        return 1

    try:
        asyncio.run(chat_loop(agent, args.session))
    except KeyboardInterrupt:
        print("\n再见！")
    finally:
        agent.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
