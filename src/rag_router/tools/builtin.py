"""Built-in tool descriptors backed by the HTTP tool backend."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from rag_router.tools.http_executor import HttpToolExecutor
from rag_router.tools.registry import ToolRegistry, ToolSpec
from rag_router.types import ToolCategory, ToolResult


class CalculateInput(BaseModel):
    expression: str = Field(
        min_length=1,
        description="要计算的数学表达式，例如：'2+3*4', 'sqrt(16)', 'sin(30)'",
    )


class ConvertInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    value: float = Field(description="要转换的数值")
    from_unit: str = Field(alias="from", min_length=1, description="原始单位，例如：'celsius', 'meters', 'usd'")
    to_unit: str = Field(alias="to", min_length=1, description="目标单位，例如：'fahrenheit', 'feet', 'cny'")


class GetUsersInput(BaseModel):
    name: str | None = Field(default=None, description="可选的用户姓名搜索关键词")


class GetUserByIdInput(BaseModel):
    id: int = Field(ge=1, description="用户ID")


class GetProjectsInput(BaseModel):
    status: Literal["进行中", "已完成", "计划中"] | None = Field(
        default=None, description="项目状态：'进行中', '已完成', '计划中'"
    )


class GetTasksInput(BaseModel):
    assignee: str | None = Field(default=None, description="任务分配人姓名")
    priority: Literal["高", "中", "低"] | None = Field(default=None, description="任务优先级：'高', '中', '低'")
    project: str | None = Field(default=None, description="项目名称")


class NoArgsInput(BaseModel):
    pass


def register_builtin_tools(registry: ToolRegistry, executor: HttpToolExecutor) -> None:
    """Register the default tool set in its scoring priority order.

    Registration order breaks score ties in the selector, so the order below is
    part of the routing behavior:
    - `calculate`, `convert`: computation tools.
    - `get_users`, `get_user_by_id`, `get_projects`, `get_tasks`: data queries.
    - `get_company_info`, `get_company_metrics`: company data.
    - `get_system_status`: backend status.
    """

    def _call_backend(spec: ToolSpec, input_data: BaseModel) -> ToolResult:
        params = input_data.model_dump(by_alias=True, exclude_none=True)
        return executor.execute(spec.name, spec.endpoint, params)

    for name, category, description, schema, endpoint, tags in (
        ("calculate", ToolCategory.CALCULATION, "执行数学表达式计算，支持加减乘除、指数、函数等",
         CalculateInput, "/api/tools/calculate", ["math"]),
        ("convert", ToolCategory.CONVERSION, "单位转换工具，支持温度、长度、货币等单位的转换",
         ConvertInput, "/api/tools/convert", ["units"]),
        ("get_users", ToolCategory.DATA_QUERY, "获取用户列表，可以按名称搜索用户",
         GetUsersInput, "/api/users", ["users"]),
        ("get_user_by_id", ToolCategory.DATA_QUERY, "根据ID获取特定用户信息",
         GetUserByIdInput, "/api/users/{id}", ["users"]),
        ("get_projects", ToolCategory.DATA_QUERY, "获取项目列表，可以按状态过滤",
         GetProjectsInput, "/api/projects", ["projects"]),
        ("get_tasks", ToolCategory.DATA_QUERY, "获取任务列表，可以按分配人、优先级、项目过滤",
         GetTasksInput, "/api/tasks", ["tasks"]),
        ("get_company_info", ToolCategory.DATA_QUERY, "获取公司基本信息",
         NoArgsInput, "/api/company", ["company"]),
        ("get_company_metrics", ToolCategory.DATA_QUERY, "获取公司运营指标",
         NoArgsInput, "/api/company/metrics", ["company"]),
        ("get_system_status", ToolCategory.SYSTEM, "获取系统状态信息",
         NoArgsInput, "/api/system/status", ["system"]),
    ):
        registry.register(
            ToolSpec(
                name=name,
                category=category,
                description=description,
                args_schema=schema,
                endpoint=endpoint,
                handler=_call_backend,
                tags=tags,
            )
        )
