"""Utility functions."""

from todo_mcp.utils.dates import format_relative_time, utcnow
from todo_mcp.utils.priority import priority_glyph, priority_rank, sort_tasks

__all__ = [
    "format_relative_time",
    "utcnow",
    "priority_glyph",
    "priority_rank",
    "sort_tasks",
]
