from rag_router.agent.dispatcher import NO_KNOWLEDGE_TEXT, format_search_results
from rag_router.tools.formatting import TOOL_FAILURE_TEXT, format_tool_result
from rag_router.types import SearchResult, ToolResult


def test_calculation_result_template() -> None:
    result = ToolResult(tool="calculate", success=True, data={"expression": "2+3*4", "result": 14})

    assert format_tool_result(result) == "计算结果：2+3*4 = 14"


def test_conversion_result_template() -> None:
    result = ToolResult(
        tool="convert",
        success=True,
        data={"value": 20.0, "from": "celsius", "to": "fahrenheit", "result": 68.0},
    )

    assert format_tool_result(result) == "转换结果：20 celsius = 68.00 fahrenheit"


def test_user_list_template() -> None:
    result = ToolResult(
        tool="get_users",
        success=True,
        data=[{"name": "张三", "role": "开发工程师", "department": "技术部"}],
    )

    assert format_tool_result(result) == "找到 1 个用户：\n  • 张三 (开发工程师, 技术部)"


def test_failed_or_missing_result_uses_failure_text() -> None:
    assert format_tool_result(None) == TOOL_FAILURE_TEXT
    assert format_tool_result(ToolResult(tool="calculate", success=False, error="boom")) == TOOL_FAILURE_TEXT


def test_unexpected_shape_falls_back_to_json_dump() -> None:
    result = ToolResult(tool="calculate", success=True, data={"value": 1})

    assert format_tool_result(result).startswith("工具调用结果：")
    assert '"value": 1' in format_tool_result(result)


def test_search_results_are_numbered_and_only_long_texts_cut() -> None:
    results = [
        SearchResult(source="a.md", text="x" * 200, score=0.9),
        SearchResult(source="b.md", text="短文本", score=0.5),
        SearchResult(source="c.md", text="y" * 150, score=0.4),
    ]

    formatted = format_search_results(results)

    assert formatted == f"【1】{'x' * 150}...\n\n【2】短文本\n\n【3】{'y' * 150}"


def test_empty_search_results_use_placeholder() -> None:
    assert format_search_results([]) == NO_KNOWLEDGE_TEXT
