"""Priority ordering for task listings.

The rank is only a sort key and never leaves this module's helpers.
"""

from collections.abc import Iterable

from todo_mcp.models.task import Priority, Task

_PRIORITY_RANK: dict[Priority, int] = {
    Priority.URGENT: 0,
    Priority.HIGH: 1,
    Priority.MEDIUM: 2,
    Priority.LOW: 3,
}

PRIORITY_GLYPHS: dict[Priority, str] = {
    Priority.URGENT: "🔥",
    Priority.HIGH: "🔴",
    Priority.MEDIUM: "🟡",
    Priority.LOW: "🟢",
}


def priority_rank(priority: Priority | str) -> int:
    """Get the sort rank of a priority (urgent sorts first).

    Args:
        priority: A Priority or its string value.

    Returns:
        Rank where lower sorts earlier.

    Raises:
        ValueError: If the value is not a known priority.
    """
    return _PRIORITY_RANK[Priority(priority)]


def task_sort_key(task: Task) -> tuple[int, float, int]:
    """Sort key: priority rank, then oldest first, then ID."""
    return (priority_rank(task.priority), task.created_at.timestamp(), task.id)


def sort_tasks(tasks: Iterable[Task]) -> list[Task]:
    """Return tasks ordered urgent, high, medium, low, oldest first within a priority."""
    return sorted(tasks, key=task_sort_key)


def priority_glyph(priority: Priority | str) -> str:
    """Get the display glyph for a priority."""
    return PRIORITY_GLYPHS[Priority(priority)]
