"""Tool registry.

Single source of truth mapping tool names to their descriptors. Every
transport discovers tools through :meth:`ToolRegistry.list` and looks them
up with :meth:`ToolRegistry.get` before handing them to the engine.
"""

import logging
from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from todo_mcp.exceptions import ToolAlreadyRegisteredError, ToolNotFoundError
from todo_mcp.tools.context import ToolContext
from todo_mcp.tools.schema import Validator, json_schema_for

logger = logging.getLogger(__name__)

ToolHandler = Callable[[Any, ToolContext], Awaitable[Any]]


@dataclass(frozen=True)
class ToolDescriptor:
    """A registered tool. Immutable once registered."""

    name: str
    description: str
    handler: ToolHandler
    input_schema: type[BaseModel] | None = None
    output_schema: type[BaseModel] | None = None

    @property
    def validator(self) -> Validator[Any] | None:
        """Validator for the input schema, if any."""
        if self.input_schema is None:
            return None
        return Validator(self.input_schema)

    def metadata(self) -> dict[str, Any]:
        """Convert to a discovery dictionary for transports.

        Returns:
            Dictionary with name, description, JSON Schemas and enabled flag.
        """
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": json_schema_for(self.input_schema),
            "outputSchema": json_schema_for(self.output_schema),
            "enabled": True,
        }


class ToolRegistry:
    """In-memory registry of tools keyed by name.

    Populated during startup and treated as read-only afterwards. Iteration
    and :meth:`list` follow registration order.
    """

    def __init__(self) -> None:
        self._tools: dict[str, ToolDescriptor] = {}

    def register(
        self,
        name: str,
        description: str,
        handler: ToolHandler,
        input_schema: type[BaseModel] | None = None,
        output_schema: type[BaseModel] | None = None,
        *,
        replace: bool = False,
    ) -> ToolDescriptor:
        """Register a tool.

        Args:
            name: Unique tool name.
            description: Human-readable description used for discovery.
            handler: Async function taking (params, context).
            input_schema: Optional pydantic model for the parameters.
            output_schema: Optional pydantic model describing the result.
                Informational only; results are not checked against it.
            replace: Overwrite an existing registration instead of failing.

        Returns:
            The stored descriptor.

        Raises:
            ToolAlreadyRegisteredError: If the name is taken and replace is False.
        """
        if name in self._tools and not replace:
            raise ToolAlreadyRegisteredError(name)

        descriptor = ToolDescriptor(
            name=name,
            description=description,
            handler=handler,
            input_schema=input_schema,
            output_schema=output_schema,
        )
        self._tools[name] = descriptor
        logger.debug("Registered tool %s", name)
        return descriptor

    def tool(
        self,
        name: str,
        description: str,
        input_schema: type[BaseModel] | None = None,
        output_schema: type[BaseModel] | None = None,
    ) -> Callable[[ToolHandler], ToolHandler]:
        """Decorator form of :meth:`register`."""

        def decorator(handler: ToolHandler) -> ToolHandler:
            self.register(name, description, handler, input_schema, output_schema)
            return handler

        return decorator

    def get(self, name: str) -> ToolDescriptor | None:
        """Get a tool by name, or None if it is not registered."""
        return self._tools.get(name)

    def has(self, name: str) -> bool:
        """Check if a tool is registered."""
        return name in self._tools

    def names(self) -> list[str]:
        """Get registered tool names in registration order."""
        return list(self._tools)

    def info(self, name: str) -> ToolDescriptor:
        """Get a tool by name.

        Raises:
            ToolNotFoundError: If the tool is not registered.
        """
        tool = self._tools.get(name)
        if tool is None:
            raise ToolNotFoundError(name, self.names())
        return tool

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[ToolDescriptor]:
        return iter(list(self._tools.values()))

    # Defined last: the method name shadows the builtin inside the class body.
    def list(self) -> "list[dict[str, Any]]":
        """Get metadata for every tool in registration order."""
        return [tool.metadata() for tool in self._tools.values()]
