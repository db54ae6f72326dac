"""Invocation engine.

The only path by which a transport executes a tool. Guarantees that every
call is validated the same way and fails with the same error shapes.
"""

import logging
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from todo_mcp.exceptions import ToolExecutionFailedError, ToolNotFoundError
from todo_mcp.tools.context import ToolContext
from todo_mcp.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


@dataclass
class BatchCall:
    """One entry of a batch submission."""

    tool: str
    parameters: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BatchCall":
        """Parse a batch entry from a dictionary.

        Accepts either "tool" or "name" for the tool name.

        Raises:
            ValueError: If no tool name is present.
        """
        tool = data.get("tool", data.get("name"))
        if not tool:
            raise ValueError("Missing required field: tool")
        return cls(tool=str(tool), parameters=dict(data.get("parameters") or {}))


@dataclass
class BatchResult:
    """Outcome of one batch entry."""

    tool: str
    success: bool
    result: Any = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data: dict[str, Any] = {
            "tool": self.tool,
            "success": self.success,
            "result": self.result,
        }
        if self.error is not None:
            data["error"] = self.error
        return data


class InvocationEngine:
    """Validates parameters and invokes tool handlers."""

    def __init__(self, registry: ToolRegistry) -> None:
        """Initialize the engine.

        Args:
            registry: The registry to resolve tools from.
        """
        self.registry = registry

    async def call(
        self,
        name: str,
        parameters: Mapping[str, Any] | None = None,
        context: ToolContext | None = None,
    ) -> Any:
        """Call a tool by name.

        Args:
            name: Registered tool name.
            parameters: Raw parameters. Validated when the tool has an input schema.
            context: Optional context; a fresh one is created per call otherwise.

        Returns:
            The handler's result, unmodified.

        Raises:
            ToolNotFoundError: If no tool has this name.
            InvalidParametersError: If the parameters fail validation.
            ToolExecutionFailedError: If the handler raises.
        """
        tool = self.registry.get(name)
        if tool is None:
            raise ToolNotFoundError(name, self.registry.names())

        validator = tool.validator
        if validator is not None:
            params: Any = validator.validate(parameters, tool=name)
        else:
            params = dict(parameters or {})

        ctx = context or ToolContext(tool=name)
        logger.debug("Calling tool %s (%s)", name, ctx.request_id)
        started = time.perf_counter()

        try:
            result = await tool.handler(params, ctx)
        except Exception as e:
            logger.warning("Tool %s failed (%s): %s", name, ctx.request_id, e)
            raise ToolExecutionFailedError(name, e) from e

        logger.debug(
            "Tool %s finished in %.1fms (%s)",
            name,
            (time.perf_counter() - started) * 1000,
            ctx.request_id,
        )
        return result

    async def call_batch(
        self,
        calls: Sequence[BatchCall | Mapping[str, Any]],
    ) -> list[BatchResult]:
        """Call several tools one after another.

        Entries run strictly in order and never concurrently. A failing
        entry is recorded and the remaining entries still run.

        Args:
            calls: Batch entries as BatchCall objects or dictionaries with
                "tool" (or "name") and optional "parameters".

        Returns:
            One result per entry, in submission order.
        """
        results: list[BatchResult] = []

        for entry in calls:
            tool_name = _entry_tool_name(entry)
            try:
                call = entry if isinstance(entry, BatchCall) else BatchCall.from_dict(entry)
                result = await self.call(call.tool, call.parameters)
            except Exception as e:
                results.append(BatchResult(tool=tool_name, success=False, error=str(e)))
            else:
                results.append(BatchResult(tool=tool_name, success=True, result=result))

        failed = sum(1 for r in results if not r.success)
        logger.info("Batch of %d call(s) finished, %d failed", len(results), failed)
        return results


def _entry_tool_name(entry: BatchCall | Mapping[str, Any]) -> str:
    """Best-effort tool name for reporting, even for malformed entries."""
    if isinstance(entry, BatchCall):
        return entry.tool
    if isinstance(entry, Mapping):
        return str(entry.get("tool", entry.get("name", "")))
    return ""
