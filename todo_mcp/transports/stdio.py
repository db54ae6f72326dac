"""MCP stdio transport.

Exposes the tool registry to MCP clients (Claude, Cursor) over stdin and
stdout. stdout carries the protocol, so nothing else may write to it.
"""

import json
import logging
import sys
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from todo_mcp.config import AppConfig
from todo_mcp.exceptions import TodoMcpError
from todo_mcp.tools.engine import InvocationEngine
from todo_mcp.tools.schema import EMPTY_OBJECT_SCHEMA
from todo_mcp.transports.protocol import to_jsonable

logger = logging.getLogger(__name__)


def create_mcp_server(engine: InvocationEngine, config: AppConfig) -> Server:
    """Create an MCP server whose tools come from the engine's registry.

    Args:
        engine: Invocation engine used for every tool call.
        config: Application configuration (server name and version).

    Returns:
        A low-level MCP server with list_tools and call_tool handlers.
    """
    server: Server = Server(config.server.name, version=config.server.version)

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        """List available MCP tools."""
        # Output schemas stay out of the MCP listing: results are text content,
        # and the SDK rejects unstructured results for tools declaring one.
        return [
            Tool(
                name=meta["name"],
                description=meta["description"],
                inputSchema=meta["inputSchema"] or dict(EMPTY_OBJECT_SCHEMA),
            )
            for meta in engine.registry.list()
        ]

    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
        """Handle tool invocations."""
        try:
            result = await engine.call(name, arguments)
        except TodoMcpError as e:
            return [TextContent(type="text", text=f"Error: {e}")]
        return _as_content(result)

    return server


def _as_content(result: Any) -> list[TextContent]:
    """Wrap a handler result as MCP content. Content lists pass through."""
    if isinstance(result, list) and all(isinstance(item, TextContent) for item in result):
        return result
    if isinstance(result, str):
        return [TextContent(type="text", text=result)]

    return [
        TextContent(
            type="text",
            text=json.dumps(to_jsonable(result), indent=2, ensure_ascii=False),
        )
    ]


async def run_stdio(engine: InvocationEngine, config: AppConfig) -> None:
    """Run the MCP server over stdio until the client disconnects."""
    server = create_mcp_server(engine, config)

    # Print startup message to stderr (stdout is reserved for MCP protocol)
    print(f"{config.server.name} MCP server starting...", file=sys.stderr)
    logger.info("Serving %d tools over stdio", len(engine.registry))

    async with stdio_server() as (read_stream, write_stream):
        print(f"{config.server.name} MCP server ready", file=sys.stderr)
        await server.run(read_stream, write_stream, server.create_initialization_options())
