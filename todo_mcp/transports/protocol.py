"""JSON-RPC 2.0 protocol types and error codes for the network transports."""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any

from pydantic import BaseModel

from todo_mcp.exceptions import InvalidParametersError, ToolError, ToolNotFoundError


class ErrorCode(IntEnum):
    """JSON-RPC 2.0 error codes.

    Standard codes (-32700 to -32600) plus the server error code -32000,
    used for tool execution failures and unsupported HTTP methods.
    """

    # Standard JSON-RPC 2.0 errors
    PARSE_ERROR = -32700  # Invalid JSON
    INVALID_REQUEST = -32600  # Not a valid request object
    METHOD_NOT_FOUND = -32601  # Method or tool does not exist
    INVALID_PARAMS = -32602  # Invalid method parameters
    INTERNAL_ERROR = -32603  # Internal JSON-RPC error

    # Server errors
    SERVER_ERROR = -32000


@dataclass
class JsonRpcError:
    """JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Any = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.data is not None:
            result["data"] = self.data
        return result


@dataclass
class JsonRpcRequest:
    """JSON-RPC 2.0 request object."""

    method: str
    jsonrpc: str = "2.0"
    id: int | str | None = None
    params: dict[str, Any] | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "JsonRpcRequest":
        """Parse a request from a dictionary.

        Args:
            data: Decoded request body.

        Returns:
            Parsed JsonRpcRequest.

        Raises:
            ValueError: If the body is not an object or required fields are missing.
        """
        if not isinstance(data, dict):
            raise ValueError("Request must be a JSON object")
        if "method" not in data:
            raise ValueError("Missing required field: method")

        params = data.get("params")
        if params is not None and not isinstance(params, dict):
            raise ValueError("Field 'params' must be an object")

        return cls(
            jsonrpc=data.get("jsonrpc", "2.0"),
            id=data.get("id"),
            method=data["method"],
            params=params,
        )


@dataclass
class JsonRpcResponse:
    """JSON-RPC 2.0 response object."""

    jsonrpc: str = "2.0"
    id: int | str | None = None
    result: Any = None
    error: JsonRpcError | None = None

    @classmethod
    def success(cls, result: Any, request_id: int | str | None = None) -> "JsonRpcResponse":
        """Create a success response."""
        return cls(id=request_id, result=result)

    @classmethod
    def error_response(
        cls,
        code: int | ErrorCode,
        message: str,
        data: Any = None,
        request_id: int | str | None = None,
    ) -> "JsonRpcResponse":
        """Create an error response.

        Args:
            code: Error code.
            message: Error message.
            data: Optional additional data.
            request_id: The request ID to echo back.

        Returns:
            Error response.
        """
        error = JsonRpcError(
            code=int(code),
            message=message,
            data=data,
        )
        return cls(id=request_id, error=error)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "jsonrpc": self.jsonrpc,
            "id": self.id,
        }
        if self.error is not None:
            result["error"] = self.error.to_dict()
        else:
            result["result"] = to_jsonable(self.result)
        return result


# Map exception types to error codes
EXCEPTION_TO_ERROR_CODE: dict[str, ErrorCode] = {
    "ToolNotFoundError": ErrorCode.METHOD_NOT_FOUND,
    "InvalidParametersError": ErrorCode.INVALID_PARAMS,
    "ToolExecutionFailedError": ErrorCode.SERVER_ERROR,
}


def exception_to_error_code(exc: Exception) -> ErrorCode:
    """Map an exception to its corresponding error code.

    Args:
        exc: The exception to map.

    Returns:
        The corresponding error code.
    """
    exc_type = type(exc).__name__
    return EXCEPTION_TO_ERROR_CODE.get(exc_type, ErrorCode.INTERNAL_ERROR)


def exception_to_error_data(exc: Exception) -> dict[str, Any] | None:
    """Structured error data for a tool error, carried in the JSON-RPC ``data`` member.

    Args:
        exc: The exception to describe.

    Returns:
        The tool name plus the available tools or the validation diagnostic
        where the error has one, or None for exceptions outside ToolError.
    """
    if isinstance(exc, ToolNotFoundError):
        return {"tool": exc.tool, "available": exc.available}
    if isinstance(exc, InvalidParametersError):
        return {"tool": exc.tool, "diagnostic": exc.diagnostic}
    if isinstance(exc, ToolError):
        return {"tool": exc.tool}
    return None


def to_jsonable(value: Any) -> Any:
    """Convert tool results (which may hold pydantic models) to plain JSON data."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value
