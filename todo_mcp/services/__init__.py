"""Core business logic services."""

from todo_mcp.services.store import MemoryTodoStore, SqliteTodoStore, TodoStore, create_store
from todo_mcp.services.testing import load_testing_service
from todo_mcp.services.todo import TodoService, load_todo_service

__all__ = [
    "TodoStore",
    "MemoryTodoStore",
    "SqliteTodoStore",
    "create_store",
    "TodoService",
    "load_todo_service",
    "load_testing_service",
]
