"""Pydantic data models."""

from todo_mcp.models.task import Priority, Task, TaskCounts
from todo_mcp.models.todo_list import TodoList

__all__ = ["Priority", "Task", "TaskCounts", "TodoList"]
