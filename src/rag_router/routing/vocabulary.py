"""Keyword and phrase tables shared by the classifier, gate and selector.

All entry points read routing vocabulary from here so that the tables are
declared once. Table order is significant: the classifier scans
`PHRASE_TABLES` top to bottom and stops at the first hit.
"""

from __future__ import annotations

import re
from typing import Final

from rag_router.types import RouteKind, ToolCategory

GENERAL_PHRASES: Final[dict[str, tuple[str, ...]]] = {
    "greetings": ("你好", "hi", "hello", "嗨", "早上好", "下午好", "晚上好", "hey"),
    "farewells": ("再见", "拜拜", "bye", "goodbye", "see you"),
    "thanks": ("谢谢", "thanks", "thank you", "thx"),
    "smalltalk": ("你好吗", "how are you", "最近怎么样", "what's up"),
    "system": ("你是谁", "你是什么", "what are you", "who are you"),
    "capabilities": ("你能做什么", "what can you do", "你的功能", "你的能力"),
    "time": ("现在几点", "what time is it", "今天星期几", "几号"),
    "weather": ("天气", "weather", "下雨", "sunny"),
    "math": ("计算", "calculate", "算一下", "1+1", "数学"),
}

KNOWLEDGE_KEYWORDS: Final[tuple[str, ...]] = (
    "代码", "规范", "规则", "流程", "开发", "测试", "文档",
    "函数", "方法", "类", "模块", "系统", "架构",
    "如何", "怎样", "为什么", "原因", "解决方案", "建议",
    "公司", "项目", "产品", "服务", "技术",
    "定义", "说明", "解释", "介绍", "描述",
)

QUESTION_WORDS: Final[tuple[str, ...]] = (
    "什么", "怎么", "如何", "为什么", "何时", "哪里", "谁", "哪些",
)

# (category, route, phrases) in priority order.
PHRASE_TABLES: Final[tuple[tuple[str, RouteKind, tuple[str, ...]], ...]] = (
    *((name, RouteKind.GENERAL, phrases) for name, phrases in GENERAL_PHRASES.items()),
    ("knowledge", RouteKind.KNOWLEDGE, KNOWLEDGE_KEYWORDS),
)

SHORT_QUERY_MAX_TOKENS: Final = 3

TOOL_KEYWORDS: Final[dict[ToolCategory, tuple[str, ...]]] = {
    ToolCategory.CALCULATION: (
        "计算", "算", "等于", "加", "减", "乘", "除", "平方", "开方",
        "sin", "cos", "tan", "表达式",
    ),
    ToolCategory.CONVERSION: (
        "转换", "换算", "等于多少", "摄氏度", "华氏度", "米", "英尺",
        "公里", "英里", "美元", "人民币",
    ),
    ToolCategory.DATA_QUERY: (
        "用户", "员工", "项目", "任务", "公司", "部门", "信息", "列表",
        "查询", "查找", "搜索",
    ),
    ToolCategory.SYSTEM: ("状态", "运行", "健康", "内存", "性能", "系统"),
}

ARITHMETIC_PATTERN: Final = re.compile(r"\d+\s*[+\-*/]\s*\d+")

TOOL_GATE_PATTERNS: Final[tuple[re.Pattern[str], ...]] = (
    ARITHMETIC_PATTERN,
    re.compile(r"等于\s*\d+"),
    re.compile(r"calculate|calc"),
    re.compile(r"convert|换算|转换"),
)

# Anchor word in the query -> fragment of the tool name that earns the bonus.
DOMAIN_ANCHORS: Final[tuple[tuple[str, str], ...]] = (
    ("公司", "company"),
    ("用户", "user"),
    ("项目", "project"),
    ("任务", "task"),
    ("id", "by_id"),
    ("编号", "by_id"),
)

NAME_HIT_SCORE: Final = 5
DESCRIPTION_TOKEN_SCORE: Final = 1
CATEGORY_KEYWORD_SCORE: Final = 2
DOMAIN_ANCHOR_SCORE: Final = 3
ARITHMETIC_SCORE: Final = 5
