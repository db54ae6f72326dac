"""Tests for the JSON-RPC protocol types."""

import pytest

from todo_mcp.exceptions import (
    InvalidParametersError,
    TaskNotFoundError,
    ToolExecutionFailedError,
    ToolNotFoundError,
)
from todo_mcp.transports.protocol import (
    ErrorCode,
    JsonRpcRequest,
    JsonRpcResponse,
    exception_to_error_code,
    exception_to_error_data,
)


class TestJsonRpcRequest:
    """Tests for request parsing."""

    def test_from_dict(self) -> None:
        """A valid body should parse with defaults filled in."""
        request = JsonRpcRequest.from_dict({"id": 3, "method": "ping"})

        assert request.jsonrpc == "2.0"
        assert request.id == 3
        assert request.method == "ping"

    @pytest.mark.parametrize(
        "body",
        [[], {"id": 1}, {"method": "tools/call", "params": [1, 2]}],
    )
    def test_invalid_bodies(self, body: object) -> None:
        """Non-objects, missing methods and array params are rejected."""
        with pytest.raises(ValueError):
            JsonRpcRequest.from_dict(body)


class TestErrorMapping:
    """Tests for exception to error code and data mapping."""

    def test_error_codes(self) -> None:
        """Tool errors map to their JSON-RPC codes; others are internal errors."""
        missing = ToolNotFoundError("nope", ["echo"])
        invalid = InvalidParametersError("echo", "message: bad")
        failed = ToolExecutionFailedError("echo", RuntimeError("boom"))

        assert exception_to_error_code(missing) == ErrorCode.METHOD_NOT_FOUND
        assert exception_to_error_code(invalid) == ErrorCode.INVALID_PARAMS
        assert exception_to_error_code(failed) == ErrorCode.SERVER_ERROR
        assert exception_to_error_code(RuntimeError("x")) == ErrorCode.INTERNAL_ERROR

    def test_error_data(self) -> None:
        """Tool errors carry structured data; other errors carry none."""
        missing = ToolNotFoundError("nope", ["echo", "math"])
        invalid = InvalidParametersError("math", "a: Field required")
        failed = ToolExecutionFailedError("completeTask", TaskNotFoundError(5))

        assert exception_to_error_data(missing) == {"tool": "nope", "available": ["echo", "math"]}
        assert exception_to_error_data(invalid) == {
            "tool": "math",
            "diagnostic": "a: Field required",
        }
        assert exception_to_error_data(failed) == {"tool": "completeTask"}
        assert exception_to_error_data(TaskNotFoundError(5)) is None

    def test_error_response_includes_data(self) -> None:
        """The data member is serialized only when present."""
        with_data = JsonRpcResponse.error_response(
            ErrorCode.METHOD_NOT_FOUND, "missing", data={"tool": "x"}, request_id=1
        ).to_dict()
        without_data = JsonRpcResponse.error_response(ErrorCode.PARSE_ERROR, "bad").to_dict()

        assert with_data["error"] == {
            "code": -32601,
            "message": "missing",
            "data": {"tool": "x"},
        }
        assert "data" not in without_data["error"]
        assert without_data["id"] is None
