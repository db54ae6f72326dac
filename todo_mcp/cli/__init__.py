"""CLI commands for todo-mcp."""
