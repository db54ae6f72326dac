"""Todo list model for todo-mcp."""

from datetime import datetime

from pydantic import BaseModel, Field

LIST_NAME_MAX_LENGTH = 255
LIST_DESCRIPTION_MAX_LENGTH = 500


class TodoList(BaseModel):
    """A named group of tasks."""

    id: int = Field(description="Store-assigned numeric ID")
    name: str
    description: str | None = None
    created_at: datetime
    archived_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        """A list is active until it is archived."""
        return self.archived_at is None
