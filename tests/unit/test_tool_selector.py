import pytest

from rag_router.routing.selector import ToolSelector
from rag_router.tools.registry import ToolRegistry


@pytest.fixture
def selector(registry: ToolRegistry) -> ToolSelector:
    return ToolSelector(registry)


@pytest.mark.parametrize("query", ["你好", "代码规范是什么", "今天天气怎么样"])
def test_gate_rejects_non_tool_queries(selector: ToolSelector, query: str) -> None:
    assert selector.should_use_tool(query) is False


@pytest.mark.parametrize(
    "query",
    ["2+3*4", "把100美元换算成人民币", "please calculate this", "结果等于 42 吗", "查询用户列表"],
)
def test_gate_accepts_tool_queries(selector: ToolSelector, query: str) -> None:
    assert selector.should_use_tool(query) is True


@pytest.mark.parametrize("query", ["2+3", "10*5+2", "2+3*4", "计算 7 - 2", "12 / 4 是多少", "3*3*3"])
def test_arithmetic_queries_select_calculate(selector: ToolSelector, query: str) -> None:
    assert selector.should_use_tool(query)
    spec = selector.select(query)
    assert spec is not None
    assert spec.name == "calculate"


@pytest.mark.parametrize("query", ["员工1-2的任务", "把3/4英里转换成公里", "用户1+1", "项目2*3"])
def test_arithmetic_wins_over_domain_keywords(selector: ToolSelector, query: str) -> None:
    ranked = selector.rank(query)
    assert any(match.spec.name == "calculate" for match in ranked)

    spec = selector.select(query)
    assert spec is not None
    assert spec.name == "calculate"


@pytest.mark.parametrize(
    ("query", "tool"),
    [
        ("20摄氏度等于多少华氏度", "convert"),
        ("项目列表", "get_projects"),
        ("任务列表", "get_tasks"),
        ("系统状态", "get_system_status"),
        ("用户ID为3", "get_user_by_id"),
    ],
)
def test_select_returns_highest_scoring_tool(selector: ToolSelector, query: str, tool: str) -> None:
    spec = selector.select(query)
    assert spec is not None
    assert spec.name == tool


def test_ties_go_to_earliest_registered_tool(selector: ToolSelector) -> None:
    ranked = selector.rank("有哪些用户")

    assert ranked[0].score == ranked[1].score
    assert [match.spec.name for match in ranked[:2]] == ["get_users", "get_user_by_id"]
    assert selector.select("有哪些用户").name == "get_users"


def test_select_returns_none_when_nothing_scores(selector: ToolSelector) -> None:
    assert selector.rank("calcium supplements and bone health") == []
    assert selector.select("calcium supplements and bone health") is None


def test_rank_is_sorted_and_excludes_zero_scores(selector: ToolSelector) -> None:
    ranked = selector.rank("公司信息")
    scores = [match.score for match in ranked]

    assert scores == sorted(scores, reverse=True)
    assert all(score > 0 for score in scores)
    assert ranked[0].spec.name == "get_company_info"
