"""LLM-backed knowledge-retrieval classifier."""

from __future__ import annotations

import logging
import re
from typing import Any

from langchain_core.prompts import ChatPromptTemplate
from pydantic import BaseModel, Field, StrictBool, ValidationError

from rag_router.errors import ClassificationError

logger = logging.getLogger(__name__)

INTENT_SYSTEM_PROMPT = """
你是一个意图分类器。请分析用户问题是否需要检索知识库来回答，或者是否需要调用工具。

知识库内容：公司开发规范、代码示例、技术文档等。
可用工具：计算器、单位转换、用户查询、项目查询、任务查询、公司信息查询等。

请严格按照以下JSON格式回答，不要添加任何额外文字：
{{"needs_retrieval": true, "reason": "原因说明"}}
或者
{{"needs_retrieval": false, "reason": "原因说明"}}
""".strip()

_JSON_BLOCK = re.compile(r"\{[\s\S]*\}")


class IntentVerdict(BaseModel):
    """Schema the classifier's JSON reply must satisfy."""

    needs_retrieval: StrictBool
    reason: str
    needs_tool: StrictBool | None = None
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)


class LLMIntentClassifier:
    """Asks a chat model whether a query needs the knowledge base.

    Any failure (model error, no JSON in the reply, schema mismatch) raises
    `ClassificationError`; callers are expected to fall back to rules.
    """

    def __init__(self, llm: Any) -> None:
        self.llm = llm
        self.prompt = ChatPromptTemplate.from_messages(
            [
                ("system", INTENT_SYSTEM_PROMPT),
                ("human", "用户问题：{query}"),
            ]
        )
        self._chain = self.prompt | self.llm

    def classify(self, query: str) -> IntentVerdict:
        try:
            response = self._chain.invoke({"query": query})
        except Exception as exc:
            raise ClassificationError(f"Intent model call failed: {exc}") from exc

        content = _message_text(response)
        logger.debug("Raw intent response: %s", content)
        return parse_verdict(content)

    def needs_retrieval(self, query: str) -> bool:
        return self.classify(query).needs_retrieval


def parse_verdict(content: str) -> IntentVerdict:
    match = _JSON_BLOCK.search(content)
    if not match:
        raise ClassificationError("No JSON object found in intent response")
    try:
        return IntentVerdict.model_validate_json(match.group(0))
    except ValidationError as exc:
        raise ClassificationError(f"Intent response failed validation: {exc}") from exc


def _message_text(response: Any) -> str:
    content = getattr(response, "content", response)
    if isinstance(content, list):
        parts: list[str] = []
        for item in content:
            if isinstance(item, dict) and "text" in item:
                parts.append(str(item["text"]))
            else:
                parts.append(str(item))
        return " ".join(parts).strip()
    return str(content)
