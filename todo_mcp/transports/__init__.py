"""Transports that expose the tool registry to clients."""

from todo_mcp.transports.http import HttpTransport
from todo_mcp.transports.openapi import OpenApiTransport
from todo_mcp.transports.stdio import create_mcp_server, run_stdio

__all__ = [
    "HttpTransport",
    "OpenApiTransport",
    "create_mcp_server",
    "run_stdio",
]
