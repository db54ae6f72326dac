"""Task model for todo-mcp."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

# Creation-time limits enforced by the task operations
TASK_NAME_MIN_LENGTH = 5
TASK_NAME_MAX_LENGTH = 120
TASK_DESCRIPTION_MAX_LENGTH = 500


class Priority(str, Enum):
    """Task priority levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class Task(BaseModel):
    """A task belonging to exactly one list."""

    id: int = Field(description="Store-assigned numeric ID")
    name: str
    description: str | None = None
    priority: Priority = Field(default=Priority.MEDIUM)
    list_id: int = Field(description="ID of the owning list")

    created_at: datetime
    completed_at: datetime | None = None
    archived_at: datetime | None = None

    @property
    def is_completed(self) -> bool:
        """Check if the task has been completed."""
        return self.completed_at is not None

    @property
    def is_archived(self) -> bool:
        """Check if the task has been archived."""
        return self.archived_at is not None

    @property
    def is_active(self) -> bool:
        """Check if the task is neither completed nor archived."""
        return not self.is_completed and not self.is_archived


class TaskCounts(BaseModel):
    """Task-count breakdown for a single list."""

    total: int = 0
    active: int = 0
    completed: int = 0
    archived: int = 0

    @classmethod
    def from_tasks(cls, tasks: list[Task]) -> "TaskCounts":
        """Compute counts by scanning a list's tasks.

        Completed-and-archived tasks count as archived only.
        """
        return cls(
            total=len(tasks),
            active=sum(1 for t in tasks if t.is_active),
            completed=sum(1 for t in tasks if t.is_completed and not t.is_archived),
            archived=sum(1 for t in tasks if t.is_archived),
        )
