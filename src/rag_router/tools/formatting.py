"""Human-readable summaries of tool results."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

from rag_router.types import ToolResult

TOOL_FAILURE_TEXT = "工具调用失败，无法获取结果"


def _dump(data: Any) -> str:
    return json.dumps(data, ensure_ascii=False, indent=2)


def _calculate(data: dict[str, Any]) -> str:
    return f"计算结果：{data['expression']} = {_number(data['result'])}"


def _convert(data: dict[str, Any]) -> str:
    return f"转换结果：{_number(data['value'])} {data['from']} = {data['result']:.2f} {data['to']}"


def _users(data: Any) -> str:
    if isinstance(data, list):
        lines = [f"  • {u['name']} ({u['role']}, {u['department']})" for u in data]
        return f"找到 {len(data)} 个用户：\n" + "\n".join(lines)
    return f"用户信息：{_dump(data)}"


def _user(data: dict[str, Any]) -> str:
    return f"用户信息：{data['name']}（{data['role']}，{data['department']}，{data['email']}）"


def _projects(data: Any) -> str:
    if isinstance(data, list):
        lines = [f"  • {p['name']} (状态: {p['status']}, 进度: {p['progress']}%)" for p in data]
        return f"找到 {len(data)} 个项目：\n" + "\n".join(lines)
    return f"项目信息：{_dump(data)}"


def _tasks(data: Any) -> str:
    if isinstance(data, list):
        lines = [f"  • {t['title']} (分配: {t['assignee']}, 优先级: {t['priority']})" for t in data]
        return f"找到 {len(data)} 个任务：\n" + "\n".join(lines)
    return f"任务信息：{_dump(data)}"


def _company(data: dict[str, Any]) -> str:
    return (
        f"公司信息：{data['name']}\n"
        f"成立时间：{data['founded']}\n"
        f"员工数：{data['employees']}\n"
        f"部门：{', '.join(data['departments'])}"
    )


def _metrics(data: dict[str, Any]) -> str:
    return (
        "公司指标：\n"
        f"月收入：{data['monthlyRevenue']:,}元\n"
        f"活跃项目：{data['activeProjects']}个\n"
        f"员工满意度：{data['employeeSatisfaction']}/5"
    )


def _system(data: dict[str, Any]) -> str:
    rss_mb = round(data["memory"]["maxRssKb"] / 1024)
    return (
        f"系统状态：{data['server']}\n"
        f"运行时间：{int(data['uptime'])}秒\n"
        f"内存使用：{rss_mb}MB"
    )


TOOL_FORMATTERS: dict[str, Callable[[Any], str]] = {
    "calculate": _calculate,
    "convert": _convert,
    "get_users": _users,
    "get_user_by_id": _user,
    "get_projects": _projects,
    "get_tasks": _tasks,
    "get_company_info": _company,
    "get_company_metrics": _metrics,
    "get_system_status": _system,
}


def format_tool_result(result: ToolResult | None) -> str:
    if result is None or not result.success:
        return TOOL_FAILURE_TEXT

    formatter = TOOL_FORMATTERS.get(result.tool)
    if formatter is None:
        return f"工具调用结果：{_dump(result.data)}"
    try:
        return formatter(result.data)
    except (KeyError, TypeError, ValueError):
        # Backend shape drifted from the template; show the raw payload.
        return f"工具调用结果：{_dump(result.data)}"


def _number(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
