"""Fixture data served by the mock tool backend."""

from __future__ import annotations

from typing import Any

USERS: list[dict[str, Any]] = [
    {"id": 1, "name": "张三", "role": "开发工程师", "department": "技术部", "email": "zhangsan@company.com"},
    {"id": 2, "name": "李四", "role": "测试工程师", "department": "质量部", "email": "lisi@company.com"},
    {"id": 3, "name": "王五", "role": "产品经理", "department": "产品部", "email": "wangwu@company.com"},
    {"id": 4, "name": "赵六", "role": "UI设计师", "department": "设计部", "email": "zhaoliu@company.com"},
]

PROJECTS: list[dict[str, Any]] = [
    {"id": 1, "name": "电商平台升级", "status": "进行中", "leader": "张三", "deadline": "2024-12-31", "progress": 65},
    {"id": 2, "name": "移动端App开发", "status": "已完成", "leader": "李四", "deadline": "2024-11-30", "progress": 100},
    {"id": 3, "name": "数据中台建设", "status": "进行中", "leader": "王五", "deadline": "2025-03-31", "progress": 30},
    {"id": 4, "name": "内部管理系统", "status": "计划中", "leader": "赵六", "deadline": "2025-06-30", "progress": 10},
]

TASKS: list[dict[str, Any]] = [
    {"id": 1, "title": "用户登录模块开发", "assignee": "张三", "project": "电商平台升级", "priority": "高", "dueDate": "2024-12-15"},
    {"id": 2, "title": "支付接口测试", "assignee": "李四", "project": "电商平台升级", "priority": "中", "dueDate": "2024-12-20"},
    {"id": 3, "title": "需求文档编写", "assignee": "王五", "project": "数据中台建设", "priority": "中", "dueDate": "2025-01-15"},
    {"id": 4, "title": "UI设计稿审核", "assignee": "赵六", "project": "内部管理系统", "priority": "低", "dueDate": "2025-02-28"},
]

COMPANY_INFO: dict[str, Any] = {
    "name": "创新科技公司",
    "founded": "2018年",
    "employees": 150,
    "departments": ["技术部", "产品部", "设计部", "市场部", "行政部"],
    "location": "北京市海淀区",
    "website": "www.innotech.com",
}

COMPANY_METRICS: dict[str, Any] = {
    "monthlyRevenue": 2500000,
    "activeProjects": 8,
    "completedProjects": 15,
    "employeeSatisfaction": 4.2,
    "customerSatisfaction": 4.5,
}
