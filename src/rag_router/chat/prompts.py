"""Prompt templates for the three response paths."""

from __future__ import annotations

from enum import Enum

from langchain_core.prompts import ChatPromptTemplate, MessagesPlaceholder


class PromptVariant(str, Enum):
    GENERAL = "general"
    RAG = "rag"
    TOOL = "tool"


GENERAL_SYSTEM_PROMPT = "你是一个友好的AI助手，回答通用问题。"

RAG_SYSTEM_PROMPT = "你是一个AI助手，会根据知识库内容进行回答。"

TOOL_SYSTEM_PROMPT = """
你是一个AI助手，会根据工具调用结果回答用户问题。

Rules:
1) 只使用工具调用结果中的数据，不要编造数字或记录。
2) 先直接回答问题，再做简短总结。
""".strip()

RAG_HUMAN_TEMPLATE = """用户问题：{input}
检索到的知识：
{docs}

请结合知识库内容回答用户问题。如果知识库中没有相关信息，请基于你的知识回答。"""

TOOL_HUMAN_TEMPLATE = """用户问题：{input}
工具调用结果：{tool_result}

请基于以上工具调用结果，对用户的问题进行回答或总结。"""

_VARIANTS: dict[PromptVariant, tuple[str, str]] = {
    PromptVariant.GENERAL: (GENERAL_SYSTEM_PROMPT, "{input}"),
    PromptVariant.RAG: (RAG_SYSTEM_PROMPT, RAG_HUMAN_TEMPLATE),
    PromptVariant.TOOL: (TOOL_SYSTEM_PROMPT, TOOL_HUMAN_TEMPLATE),
}


def build_prompt(variant: PromptVariant) -> ChatPromptTemplate:
    system_prompt, human_template = _VARIANTS[variant]
    return ChatPromptTemplate.from_messages(
        [
            ("system", system_prompt),
            MessagesPlaceholder(variable_name="history", optional=True),
            ("human", human_template),
        ]
    )
