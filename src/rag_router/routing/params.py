"""Per-tool parameter parsers.

Each tool's argument shape needs bespoke parsing, so parsers are registered
by tool name and there is no generic fallback: a tool without a parser cannot
be called from free text.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from typing import Any, Final

from rag_router.errors import ParameterExtractionError
from rag_router.tools.registry import ToolSpec

logger = logging.getLogger(__name__)

ParamParser = Callable[[str], dict[str, Any]]

_PARSERS: dict[str, ParamParser] = {}


def parameter_parser(*tool_names: str) -> Callable[[ParamParser], ParamParser]:
    """Register the decorated function as the parser for `tool_names`."""

    def _register(func: ParamParser) -> ParamParser:
        for name in tool_names:
            if name in _PARSERS:
                raise ValueError(f"Parser already registered for tool: {name}")
            _PARSERS[name] = func
        return func

    return _register


# --- calculate -------------------------------------------------------------

_FUNCTION_CALL = re.compile(
    r"(?:计算|等于)?\s*(Math\.sin|Math\.cos|Math\.tan|Math\.sqrt|Math\.log|sin|cos|tan|sqrt|log)\(([^)]+)\)",
    re.IGNORECASE,
)
_EXPRESSION_WITH_KEYWORD = re.compile(
    r"(?:计算|等于|算)?\s*([\d+\-*/.\s()]+)\s*(?:等于|结果|是多少|$)"
)
_BARE_EXPRESSION = re.compile(r"([\d+\-*/.\s()]+)")
_NON_MATH_CHARS = re.compile(r"[^0-9a-zA-Z+\-*/().\s]")


@parameter_parser("calculate")
def parse_calculation(query: str) -> dict[str, Any]:
    match = _FUNCTION_CALL.search(query)
    if match:
        func = match.group(1).lower().split(".")[-1]
        return {"expression": f"{func}({match.group(2).strip()})"}

    for pattern in (_EXPRESSION_WITH_KEYWORD, _BARE_EXPRESSION):
        match = pattern.search(query)
        if match and match.group(1).strip():
            return {"expression": match.group(1).strip()}

    math_only = _NON_MATH_CHARS.sub("", query).strip()
    return {"expression": math_only or query.strip()}


# --- convert ---------------------------------------------------------------

UNIT_ALIASES: Final[dict[str, str]] = {
    "摄氏度": "celsius", "celsius": "celsius", "°c": "celsius",
    "华氏度": "fahrenheit", "fahrenheit": "fahrenheit", "°f": "fahrenheit",
    "米": "meters", "meters": "meters", "m": "meters",
    "英尺": "feet", "feet": "feet", "ft": "feet",
    "公里": "kilometers", "kilometers": "kilometers", "km": "kilometers",
    "英里": "miles", "miles": "miles", "mi": "miles",
    "美元": "usd", "usd": "usd", "$": "usd",
    "人民币": "cny", "cny": "cny", "yuan": "cny", "￥": "cny",
}

# Each direction is configured on its own; the table is not assumed symmetric.
DEFAULT_TARGETS: Final[dict[str, str]] = {
    "celsius": "fahrenheit",
    "fahrenheit": "celsius",
    "meters": "feet",
    "feet": "meters",
    "kilometers": "miles",
    "miles": "kilometers",
    "usd": "cny",
    "cny": "usd",
}

_UNIT_WORDS = (
    "摄氏度|华氏度|英尺|英里|公里|米|美元|人民币|"
    "celsius|fahrenheit|meters|feet|kilometers|miles|usd|cny|yuan"
)
_VALUE_UNIT = re.compile(rf"(\d+(?:\.\d+)?)\s*({_UNIT_WORDS})", re.IGNORECASE)
_VALUE_UNIT_TO_UNIT = re.compile(
    r"(\d+(?:\.\d+)?)\s*([A-Za-z]+)\s*(?:到|转为|转换为|等于多少|to)\s*([A-Za-z]+)",
    re.IGNORECASE,
)
_VALUE_SYMBOL = re.compile(r"(\d+(?:\.\d+)?)(°C|°F|km|mi|ft|m|\$|￥)", re.IGNORECASE)
_EXPLICIT_TARGET = re.compile(
    rf"(?:到|转为|转换为|转成|换成|换算成|等于多少|是多少|into|to|in)\s*({_UNIT_WORDS}|°C|°F|km|mi|ft)",
    re.IGNORECASE,
)
_NUMBER = re.compile(r"(\d+(?:\.\d+)?)")


def canonical_unit(token: str) -> str:
    lowered = token.lower()
    return UNIT_ALIASES.get(lowered, lowered)


@parameter_parser("convert")
def parse_conversion(query: str) -> dict[str, Any]:
    params: dict[str, Any] = {}

    match = _VALUE_UNIT.search(query)
    if match:
        params["value"] = float(match.group(1))
        source = canonical_unit(match.group(2))
        params["from"] = source
        target = _EXPLICIT_TARGET.search(query, match.end())
        if target:
            params["to"] = canonical_unit(target.group(1))
        elif source in DEFAULT_TARGETS:
            params["to"] = DEFAULT_TARGETS[source]
        return params

    match = _VALUE_UNIT_TO_UNIT.search(query)
    if match:
        params["value"] = float(match.group(1))
        params["from"] = canonical_unit(match.group(2))
        params["to"] = canonical_unit(match.group(3))
        return params

    match = _VALUE_SYMBOL.search(query)
    if match:
        params["value"] = float(match.group(1))
        source = canonical_unit(match.group(2))
        params["from"] = source
        if source in DEFAULT_TARGETS:
            params["to"] = DEFAULT_TARGETS[source]
        return params

    number = _NUMBER.search(query)
    if number:
        params["value"] = float(number.group(1))
    return params


# --- data queries ----------------------------------------------------------

_NAME_CHARS = r"[A-Za-z0-9_\u4e00-\u9fff]"
_USER_NAME_MARKED = re.compile(
    rf"(?:用户|员工|同事)\s*(?:叫|名为|姓名是?|名字是?)\s*({_NAME_CHARS}+?)(?=的|吗|呢|\s|$|[，。？?！!])"
)
_USER_NAME_ASCII = re.compile(r"(?:用户|员工|同事)\s*([A-Za-z][A-Za-z0-9_.-]*)")
_USER_ID = re.compile(r"(?:(?<![a-z])id|编号|工号)\s*(?:为|是|=|:|：)?\s*(\d+)", re.IGNORECASE)
_USER_NUMBER = re.compile(r"(\d+)\s*号(?:用户|员工|同事)")

PROJECT_STATUSES: Final[tuple[str, ...]] = ("进行中", "已完成", "计划中")
_PRIORITY_MARKED = re.compile(r"(高|中|低)优先级|优先级(?:为|是)?\s*(高|中|低)")
_ASSIGNEE = re.compile(rf"(?:分配给|由)\s*({_NAME_CHARS}+?)\s*(?:负责|处理)")
_QUOTED_PROJECT = re.compile(r"项目\s*[「“\"]([^」”\"]+)[」”\"]")


@parameter_parser("get_users")
def parse_user_search(query: str) -> dict[str, Any]:
    text = query.strip()
    match = _USER_NAME_MARKED.search(text) or _USER_NAME_ASCII.search(text)
    if match:
        return {"name": match.group(1)}
    return {}


@parameter_parser("get_user_by_id")
def parse_user_id(query: str) -> dict[str, Any]:
    match = _USER_ID.search(query) or _USER_NUMBER.search(query)
    if match:
        return {"id": int(match.group(1))}
    return {}


@parameter_parser("get_projects")
def parse_project_filters(query: str) -> dict[str, Any]:
    for status in PROJECT_STATUSES:
        if status in query:
            return {"status": status}
    return {}


@parameter_parser("get_tasks")
def parse_task_filters(query: str) -> dict[str, Any]:
    params: dict[str, Any] = {}
    text = query.strip()

    priority = _PRIORITY_MARKED.search(text)
    if priority:
        params["priority"] = priority.group(1) or priority.group(2)

    assignee = _ASSIGNEE.search(text)
    if assignee:
        params["assignee"] = assignee.group(1)

    project = _QUOTED_PROJECT.search(text)
    if project:
        params["project"] = project.group(1).strip()
    return params


@parameter_parser("get_company_info", "get_company_metrics", "get_system_status")
def parse_no_arguments(query: str) -> dict[str, Any]:
    del query
    return {}


class ParameterExtractor:
    """Dispatches a query to the parser registered for the selected tool."""

    def __init__(self, parsers: Mapping[str, ParamParser] | None = None) -> None:
        self._parsers = dict(_PARSERS if parsers is None else parsers)

    def supports(self, tool_name: str) -> bool:
        return tool_name in self._parsers

    def extract(self, query: str, spec: ToolSpec) -> dict[str, Any]:
        parser = self._parsers.get(spec.name)
        if parser is None:
            raise ParameterExtractionError(spec.name, message=f"No parameter parser for tool: {spec.name}")
        params = parser(query)
        logger.debug("Extracted params for %s: %s", spec.name, params)
        return params

    @staticmethod
    def missing_required(params: Mapping[str, Any], spec: ToolSpec) -> list[str]:
        return [
            name
            for name in spec.required_parameters()
            if params.get(name) is None or params.get(name) == ""
        ]

    def extract_required(self, query: str, spec: ToolSpec) -> dict[str, Any]:
        """Extract params and fail if any required schema field is missing."""

        params = self.extract(query, spec)
        missing = self.missing_required(params, spec)
        if missing:
            raise ParameterExtractionError(spec.name, missing)
        return params
