"""Unit tests for the invocation engine."""

import asyncio
from typing import Any

import pytest

from todo_mcp.exceptions import (
    InvalidParametersError,
    ToolExecutionFailedError,
    ToolNotFoundError,
)
from todo_mcp.tools.context import ToolContext
from todo_mcp.tools.engine import BatchCall, BatchResult, InvocationEngine
from todo_mcp.tools.registry import ToolRegistry
from todo_mcp.tools.schema import ToolInput


class AddInput(ToolInput):
    a: int
    b: int


@pytest.fixture
def calculator(registry: ToolRegistry, engine: InvocationEngine) -> InvocationEngine:
    """Engine with add, fail and raw tools registered."""

    @registry.tool("add", "Add two numbers", input_schema=AddInput)
    async def add(params: AddInput, ctx: ToolContext) -> int:
        return params.a + params.b

    @registry.tool("fail", "Always fails")
    async def fail(params: dict[str, Any], ctx: ToolContext) -> None:
        raise RuntimeError("boom")

    @registry.tool("raw", "Returns its raw parameters and request ID")
    async def raw(params: dict[str, Any], ctx: ToolContext) -> dict[str, Any]:
        return {
            "params": params,
            "requestId": ctx.request_id,
            "tool": ctx.tool,
            "startedAt": ctx.started_at,
        }

    return engine


class TestCall:
    """Tests for InvocationEngine.call."""

    def test_returns_handler_result(self, calculator: InvocationEngine) -> None:
        """Valid calls should return the handler's value unchanged."""
        assert asyncio.run(calculator.call("add", {"a": 2, "b": 3})) == 5

    def test_unknown_tool_lists_every_name(self, calculator: InvocationEngine) -> None:
        """The not-found message should name every registered tool."""
        with pytest.raises(ToolNotFoundError) as exc_info:
            asyncio.run(calculator.call("nope", {}))

        message = str(exc_info.value)
        assert message == 'Tool "nope" not found. Available tools: add, fail, raw'
        for name in calculator.registry.names():
            assert name in message

    def test_missing_required_field(self, calculator: InvocationEngine) -> None:
        """Missing fields should fail validation before the handler runs."""
        with pytest.raises(InvalidParametersError) as exc_info:
            asyncio.run(calculator.call("add", {"a": 1}))

        assert str(exc_info.value).startswith('Invalid parameters for tool "add": ')

    def test_handler_error_wrapped(self, calculator: InvocationEngine) -> None:
        """Handler exceptions should surface as ToolExecutionFailedError."""
        with pytest.raises(ToolExecutionFailedError) as exc_info:
            asyncio.run(calculator.call("fail"))

        assert str(exc_info.value) == 'Tool "fail" execution failed: boom'
        assert isinstance(exc_info.value.original, RuntimeError)
        assert exc_info.value.__cause__ is exc_info.value.original

    def test_schemaless_tool_gets_raw_dict(self, calculator: InvocationEngine) -> None:
        """Tools without an input schema receive the raw parameters."""
        result = asyncio.run(calculator.call("raw", {"x": 1}))

        assert result["params"] == {"x": 1}
        assert result["requestId"].startswith("call-")

    def test_fresh_context_per_call(self, calculator: InvocationEngine) -> None:
        """Each call should get its own request ID."""
        first = asyncio.run(calculator.call("raw"))
        second = asyncio.run(calculator.call("raw"))

        assert first["requestId"] != second["requestId"]

    def test_context_names_tool(self, calculator: InvocationEngine) -> None:
        """The engine should record the tool name and an aware start time."""
        result = asyncio.run(calculator.call("raw"))

        assert result["tool"] == "raw"
        assert result["startedAt"].tzinfo is not None

    def test_explicit_context(self, calculator: InvocationEngine) -> None:
        """A supplied context should be passed through."""
        ctx = ToolContext(request_id="fixed-id")

        result = asyncio.run(calculator.call("raw", {}, context=ctx))

        assert result["requestId"] == "fixed-id"
        assert ctx.cancelled is False


class TestCallBatch:
    """Tests for InvocationEngine.call_batch."""

    def test_failure_does_not_stop_batch(self, calculator: InvocationEngine) -> None:
        """A failing middle entry should not affect the others."""
        results = asyncio.run(
            calculator.call_batch(
                [
                    {"tool": "add", "parameters": {"a": 1, "b": 1}},
                    {"tool": "fail"},
                    {"tool": "add", "parameters": {"a": 2, "b": 2}},
                ]
            )
        )

        assert [r.success for r in results] == [True, False, True]
        assert results[0].result == 2
        assert results[1].error == 'Tool "fail" execution failed: boom'
        assert results[2].result == 4

    def test_results_in_submission_order(self, calculator: InvocationEngine) -> None:
        """Results should line up with the submitted entries."""
        calls = [BatchCall("add", {"a": i, "b": 0}) for i in range(5)]

        results = asyncio.run(calculator.call_batch(calls))

        assert [r.result for r in results] == [0, 1, 2, 3, 4]
        assert all(r.tool == "add" for r in results)

    def test_each_error_kind_captured(self, calculator: InvocationEngine) -> None:
        """Not-found, invalid and malformed entries should be recorded as failures."""
        results = asyncio.run(
            calculator.call_batch(
                [
                    {"tool": "missing"},
                    {"tool": "add", "parameters": {"a": "x", "b": 1}},
                    {"parameters": {}},
                ]
            )
        )

        assert not any(r.success for r in results)
        assert results[0].error.startswith('Tool "missing" not found')  # type: ignore[union-attr]
        assert results[1].error.startswith('Invalid parameters for tool "add"')  # type: ignore[union-attr]
        assert results[2].error == "Missing required field: tool"
        assert results[2].tool == ""

    def test_name_key_accepted(self, calculator: InvocationEngine) -> None:
        """Entries may use "name" instead of "tool"."""
        (result,) = asyncio.run(
            calculator.call_batch([{"name": "add", "parameters": {"a": 1, "b": 2}}])
        )

        assert result.success
        assert result.tool == "add"

    def test_empty_batch(self, calculator: InvocationEngine) -> None:
        """An empty batch should return no results."""
        assert asyncio.run(calculator.call_batch([])) == []


def test_batch_result_to_dict() -> None:
    """Failed results carry an error key; successful ones do not."""
    assert BatchResult("a", True, 1).to_dict() == {"tool": "a", "success": True, "result": 1}
    assert BatchResult("b", False, error="bad").to_dict() == {
        "tool": "b",
        "success": False,
        "result": None,
        "error": "bad",
    }
