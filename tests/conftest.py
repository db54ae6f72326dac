"""Pytest fixtures for todo-mcp tests."""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from todo_mcp import config as config_module
from todo_mcp.services.store import MemoryTodoStore
from todo_mcp.services.todo import load_todo_service
from todo_mcp.tools.engine import InvocationEngine
from todo_mcp.tools.registry import ToolRegistry

CONFIG_ENV_VARS = [
    "PORT",
    "HOST",
    "DATABASE_PATH",
    "DB_REQUIRED",
    "MCP_TRANSPORT",
    "LOG_LEVEL",
    "TODO_MCP_CONFIG",
]


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the user's environment and ~/.todo-mcp out of every test."""
    for var in CONFIG_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr(config_module, "DEFAULT_CONFIG_FILE", tmp_path / "no-config.yaml")


@pytest.fixture
def now() -> datetime:
    """A fixed reference time for relative-time assertions."""
    return datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def store() -> MemoryTodoStore:
    """Create an empty in-memory store."""
    return MemoryTodoStore()


@pytest.fixture
def registry() -> ToolRegistry:
    """Create an empty tool registry."""
    return ToolRegistry()


@pytest.fixture
def engine(registry: ToolRegistry) -> InvocationEngine:
    """Create an engine over the (initially empty) registry fixture."""
    return InvocationEngine(registry)


@pytest.fixture
def todo_engine(store: MemoryTodoStore) -> InvocationEngine:
    """Create an engine with the todo tools registered on the memory store."""
    todo_registry = ToolRegistry()
    load_todo_service(todo_registry, store)
    return InvocationEngine(todo_registry)