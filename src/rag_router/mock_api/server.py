"""FastAPI mock tool backend.

Run with `uvicorn rag_router.mock_api.server:app --port 3000`.
"""

from __future__ import annotations

import logging
import resource
import time
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Query
from fastapi.responses import JSONResponse

from rag_router.mock_api.calculator import convert_units, evaluate_expression, supported_conversions
from rag_router.mock_api.fixtures import COMPANY_INFO, COMPANY_METRICS, PROJECTS, TASKS, USERS

logger = logging.getLogger(__name__)

VERSION = "1.0.0"

ENDPOINTS = [
    "/api/users",
    "/api/projects",
    "/api/tasks",
    "/api/company",
    "/api/tools/calculate",
    "/api/tools/convert",
    "/api/system/status",
]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _failure(status_code: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message, **extra})


def _priority_stats(tasks: list[dict[str, Any]]) -> dict[str, int]:
    return {
        "highPriority": sum(1 for task in tasks if task["priority"] == "高"),
        "mediumPriority": sum(1 for task in tasks if task["priority"] == "中"),
        "lowPriority": sum(1 for task in tasks if task["priority"] == "低"),
    }


def create_mock_app() -> FastAPI:
    app = FastAPI(title="Mock Tool Backend", version=VERSION)
    started = time.monotonic()

    @app.get("/")
    def index() -> dict[str, Any]:
        return {
            "message": "Mock API server for the routed chat agent",
            "version": VERSION,
            "endpoints": {
                "users": ["GET /api/users", "GET /api/users/{id}", "GET /api/users/search/{name}"],
                "projects": ["GET /api/projects", "GET /api/projects/{id}"],
                "tasks": ["GET /api/tasks"],
                "company": ["GET /api/company", "GET /api/company/metrics"],
                "tools": ["GET /api/tools/calculate", "GET /api/tools/convert"],
                "system": ["GET /api/system/status", "GET /health"],
            },
        }

    @app.get("/health")
    def health() -> dict[str, Any]:
        return {"status": "healthy", "timestamp": _now(), "version": VERSION}

    @app.get("/api/users")
    def list_users(name: str | None = None) -> dict[str, Any]:
        users = USERS
        if name:
            users = [user for user in USERS if name.lower() in user["name"].lower()]
        return {"success": True, "data": users, "count": len(users), "timestamp": _now()}

    @app.get("/api/users/search/{name}")
    def search_users(name: str) -> dict[str, Any]:
        needle = name.lower()
        users = [
            user
            for user in USERS
            if needle in user["name"].lower() or needle in user["email"].lower()
        ]
        return {"success": True, "data": users, "count": len(users)}

    @app.get("/api/users/{user_id}", response_model=None)
    def get_user(user_id: int) -> dict[str, Any] | JSONResponse:
        for user in USERS:
            if user["id"] == user_id:
                return {"success": True, "data": user}
        return _failure(404, "用户未找到")

    @app.get("/api/projects")
    def list_projects(status: str | None = None) -> dict[str, Any]:
        projects = [project for project in PROJECTS if not status or project["status"] == status]
        return {
            "success": True,
            "data": projects,
            "count": len(projects),
            "stats": {
                "inProgress": sum(1 for p in PROJECTS if p["status"] == "进行中"),
                "completed": sum(1 for p in PROJECTS if p["status"] == "已完成"),
                "planned": sum(1 for p in PROJECTS if p["status"] == "计划中"),
            },
        }

    @app.get("/api/projects/{project_id}", response_model=None)
    def get_project(project_id: int) -> dict[str, Any] | JSONResponse:
        for project in PROJECTS:
            if project["id"] == project_id:
                tasks = [task for task in TASKS if task["project"] == project["name"]]
                return {"success": True, "data": {**project, "tasks": tasks}}
        return _failure(404, "项目未找到")

    @app.get("/api/tasks")
    def list_tasks(
        assignee: str | None = None,
        priority: str | None = None,
        project: str | None = None,
    ) -> dict[str, Any]:
        tasks = TASKS
        if assignee:
            tasks = [task for task in tasks if task["assignee"] == assignee]
        if priority:
            tasks = [task for task in tasks if task["priority"] == priority]
        if project:
            tasks = [task for task in tasks if task["project"] == project]
        return {"success": True, "data": tasks, "count": len(tasks), "stats": _priority_stats(tasks)}

    @app.get("/api/company")
    def company_info() -> dict[str, Any]:
        return {"success": True, "data": COMPANY_INFO}

    @app.get("/api/company/metrics")
    def company_metrics() -> dict[str, Any]:
        return {"success": True, "data": COMPANY_METRICS, "updatedAt": _now()}

    @app.get("/api/tools/calculate", response_model=None)
    def calculate(expression: str | None = None) -> dict[str, Any] | JSONResponse:
        if not expression:
            return _failure(400, "缺少表达式参数")
        try:
            result = evaluate_expression(expression)
        except ValueError as exc:
            logger.info("Rejected expression %r: %s", expression, exc)
            return _failure(400, "计算失败", error=str(exc))
        return {
            "success": True,
            "data": {"expression": expression, "result": result, "type": "number"},
        }

    @app.get("/api/tools/convert", response_model=None)
    def convert(
        value: str | None = None,
        from_unit: str | None = Query(default=None, alias="from"),
        to_unit: str | None = Query(default=None, alias="to"),
    ) -> dict[str, Any] | JSONResponse:
        if not value or not from_unit or not to_unit:
            return _failure(400, "缺少参数：value, from, to")
        try:
            number = float(value)
        except ValueError:
            return _failure(400, "value必须是数字")

        converted = convert_units(number, from_unit, to_unit)
        if converted is None:
            return _failure(
                400,
                f"不支持从 {from_unit} 到 {to_unit} 的转换",
                supportedConversions=supported_conversions(),
            )
        result, category = converted
        return {
            "success": True,
            "data": {
                "value": number,
                "from": from_unit,
                "to": to_unit,
                "result": result,
                "category": category,
            },
        }

    @app.get("/api/system/status")
    def system_status() -> dict[str, Any]:
        usage = resource.getrusage(resource.RUSAGE_SELF)
        return {
            "success": True,
            "data": {
                "server": "运行中",
                "uptime": time.monotonic() - started,
                "timestamp": _now(),
                "memory": {"maxRssKb": usage.ru_maxrss},
                "apiCount": 5,
                "endpoints": ENDPOINTS,
            },
        }

    return app


app = create_mock_app()
