"""todo-mcp - Task lists exposed as MCP tools over several transports."""

__version__ = "0.2.0"
