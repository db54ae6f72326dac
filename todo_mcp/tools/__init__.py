"""Tool registration and invocation runtime."""

from todo_mcp.tools.context import ToolContext
from todo_mcp.tools.engine import BatchCall, BatchResult, InvocationEngine
from todo_mcp.tools.registry import ToolDescriptor, ToolRegistry
from todo_mcp.tools.schema import ToolInput, Validator

__all__ = [
    "ToolContext",
    "ToolDescriptor",
    "ToolRegistry",
    "InvocationEngine",
    "BatchCall",
    "BatchResult",
    "ToolInput",
    "Validator",
]
