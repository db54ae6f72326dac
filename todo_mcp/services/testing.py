"""Testing service: predictable tools for exercising transports.

These tools need no store, so a transport can be started and checked
without a database.
"""

import json
from typing import Any, Literal

from mcp.types import TextContent
from pydantic import Field

from todo_mcp.tools.context import ToolContext
from todo_mcp.tools.registry import ToolRegistry
from todo_mcp.tools.schema import ToolInput
from todo_mcp.utils.dates import utcnow


class EchoInput(ToolInput):
    message: str = Field(default="Hello from testing service!", description="Message to echo back")
    metadata: dict[str, Any] | None = Field(
        default=None,
        description="Optional metadata object to include in response",
    )


class MathInput(ToolInput):
    operation: Literal["add", "subtract", "multiply", "divide"] = Field(
        description="Mathematical operation to perform"
    )
    a: float = Field(description="First number")
    b: float = Field(description="Second number")


class MathOutput(ToolInput):
    operation: str
    a: float
    b: float
    result: float


def load_testing_service(registry: ToolRegistry) -> None:
    """Register the echo and math tools."""

    @registry.tool(
        "echo",
        "Echo the input parameters back. Useful for testing parameter passing "
        "and JSON serialization.",
        input_schema=EchoInput,
    )
    async def echo(params: EchoInput, ctx: ToolContext) -> list[TextContent]:
        payload = {
            "echo": params.message,
            "timestamp": utcnow().isoformat(),
            "metadata": params.metadata,
            "requestId": ctx.request_id,
        }
        return [TextContent(type="text", text=json.dumps(payload))]

    @registry.tool(
        "math",
        "Perform basic arithmetic operations. Useful for testing parameter "
        "validation and error handling.",
        input_schema=MathInput,
        output_schema=MathOutput,
    )
    async def math(params: MathInput, ctx: ToolContext) -> list[TextContent]:
        a, b = params.a, params.b
        if params.operation == "add":
            result = a + b
        elif params.operation == "subtract":
            result = a - b
        elif params.operation == "multiply":
            result = a * b
        else:
            if b == 0:
                raise ZeroDivisionError("Division by zero is not allowed")
            result = a / b

        output = MathOutput(operation=params.operation, a=a, b=b, result=result)
        return [TextContent(type="text", text=output.model_dump_json())]
