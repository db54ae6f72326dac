"""Todo service: list and task operations exposed as tools.

:class:`TodoService` holds the business logic over a :class:`TodoStore`.
:func:`load_todo_service` registers the six tools that wrap it. Tool
handlers return MCP ``TextContent`` items so every transport can pass the
result through unchanged.
"""

import json
import logging
from datetime import datetime
from typing import Any

from mcp.types import TextContent
from pydantic import Field

from todo_mcp.exceptions import (
    AlreadyArchivedError,
    AlreadyCompletedError,
    ListNotFoundError,
    TaskNotFoundError,
    ValidationConstraintError,
)
from todo_mcp.models.task import (
    TASK_DESCRIPTION_MAX_LENGTH,
    TASK_NAME_MAX_LENGTH,
    TASK_NAME_MIN_LENGTH,
    Priority,
    Task,
)
from todo_mcp.models.todo_list import (
    LIST_DESCRIPTION_MAX_LENGTH,
    LIST_NAME_MAX_LENGTH,
    TodoList,
)
from todo_mcp.services.store import TodoStore
from todo_mcp.tools.context import ToolContext
from todo_mcp.tools.registry import ToolRegistry
from todo_mcp.tools.schema import ToolInput
from todo_mcp.utils.dates import format_iso_datetime, format_relative_or_none, format_relative_time
from todo_mcp.utils.priority import priority_glyph, sort_tasks

logger = logging.getLogger(__name__)


def list_to_dict(todo_list: TodoList, now: datetime | None = None) -> dict[str, Any]:
    """Convert a TodoList to a dictionary for JSON output."""
    return {
        "id": todo_list.id,
        "name": todo_list.name,
        "description": todo_list.description,
        "createdAt": format_iso_datetime(todo_list.created_at),
        "archivedAt": format_iso_datetime(todo_list.archived_at),
        "createdAtRelative": format_relative_time(todo_list.created_at, now),
    }


def task_to_dict(task: Task, now: datetime | None = None) -> dict[str, Any]:
    """Convert a Task to a dictionary for JSON output.

    Args:
        task: The task to convert.
        now: Reference time for the relative renderings.

    Returns:
        Dictionary with camelCase keys and relative-time strings, which
        are None for unset timestamps.
    """
    return {
        "id": task.id,
        "name": task.name,
        "description": task.description,
        "priority": Priority(task.priority).value,
        "listId": task.list_id,
        "createdAt": format_iso_datetime(task.created_at),
        "completedAt": format_iso_datetime(task.completed_at),
        "archivedAt": format_iso_datetime(task.archived_at),
        "createdAtRelative": format_relative_time(task.created_at, now),
        "completedAtRelative": format_relative_or_none(task.completed_at, now),
        "archivedAtRelative": format_relative_or_none(task.archived_at, now),
    }


class TodoService:
    """Business logic for lists and tasks."""

    def __init__(self, store: TodoStore) -> None:
        """Initialize the todo service.

        Args:
            store: Persistence backend.
        """
        self.store = store

    async def find_list(self, name: str) -> TodoList:
        """Find a list by case-insensitive exact name.

        Args:
            name: List name in any casing.

        Returns:
            The first list whose name matches.

        Raises:
            ListNotFoundError: If no list matches. Names every known list.
        """
        lists = await self.store.list_lists()
        wanted = name.lower()
        for todo_list in lists:
            if todo_list.name.lower() == wanted:
                return todo_list
        raise ListNotFoundError(name, [lst.name for lst in lists])

    async def get_lists(self, now: datetime | None = None) -> list[dict[str, Any]]:
        """Get every list with task counts and a relative creation time.

        Archived lists are included; filtering is left to the caller.
        """
        result = []
        for todo_list in await self.store.list_lists():
            counts = await self.store.task_counts(todo_list.id)
            item = list_to_dict(todo_list, now)
            item["taskCounts"] = counts.model_dump()
            result.append(item)
        return result

    async def create_list(self, name: str, description: str | None = None) -> TodoList:
        """Create a list.

        Raises:
            ValidationConstraintError: If name or description length is out of range.
        """
        if not name:
            raise ValidationConstraintError("List name is required")
        if len(name) > LIST_NAME_MAX_LENGTH:
            raise ValidationConstraintError("List name too long")
        if description is not None and len(description) > LIST_DESCRIPTION_MAX_LENGTH:
            raise ValidationConstraintError("Description too long")

        todo_list = await self.store.create_list(name, description)
        logger.info("Created list %s (%d)", todo_list.name, todo_list.id)
        return todo_list

    async def get_tasks(
        self,
        list_name: str,
        include_completed: bool = False,
        now: datetime | None = None,
    ) -> dict[str, Any]:
        """Get a list's tasks in priority order.

        Args:
            list_name: List name, matched case-insensitively.
            include_completed: Also return completed and archived tasks.
            now: Reference time for relative renderings.

        Returns:
            Dictionary with the list's stored name and its sorted tasks.

        Raises:
            ListNotFoundError: If the list does not exist.
        """
        todo_list = await self.find_list(list_name)
        tasks = await self.store.list_tasks(todo_list.id)
        if not include_completed:
            tasks = [t for t in tasks if t.is_active]

        return {
            "list": todo_list.name,
            "tasks": [task_to_dict(t, now) for t in sort_tasks(tasks)],
        }

    async def create_task(
        self,
        list_name: str,
        name: str,
        description: str | None = None,
        priority: Priority = Priority.MEDIUM,
    ) -> tuple[Task, TodoList]:
        """Create a task in a list.

        Returns:
            The created task and the list it was added to.

        Raises:
            ListNotFoundError: If the list does not exist.
            ValidationConstraintError: If name or description length is out of range.
        """
        todo_list = await self.find_list(list_name)

        if len(name) < TASK_NAME_MIN_LENGTH:
            raise ValidationConstraintError(
                "Task name too short - be specific about what needs to be done"
            )
        if len(name) > TASK_NAME_MAX_LENGTH:
            raise ValidationConstraintError(
                "Task name too long - consider breaking this into smaller, actionable tasks"
            )
        if description is not None and len(description) > TASK_DESCRIPTION_MAX_LENGTH:
            raise ValidationConstraintError(
                "Description too long - focus on the core requirement. "
                "Large tasks should be split into multiple smaller ones"
            )

        task = await self.store.create_task(todo_list.id, name, description, Priority(priority))
        logger.info("Created task %d in list %s", task.id, todo_list.name)
        return task, todo_list

    async def complete_task(self, task_id: int) -> Task:
        """Mark a task as completed.

        Raises:
            TaskNotFoundError: If the task does not exist.
            AlreadyCompletedError: If the task was completed before.
        """
        task = await self.store.get_task(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        if task.is_completed:
            raise AlreadyCompletedError(task.name)
        return await self.store.complete_task(task_id)

    async def archive_task(self, task_id: int) -> Task:
        """Archive a task.

        Raises:
            TaskNotFoundError: If the task does not exist.
            AlreadyArchivedError: If the task was archived before.
        """
        task = await self.store.get_task(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        if task.is_archived:
            raise AlreadyArchivedError(task.name)
        return await self.store.archive_task(task_id)


# ============================================================================
# Tool input schemas
# ============================================================================


class GetListsInput(ToolInput):
    """getLists takes no parameters."""


class CreateListInput(ToolInput):
    name: str = Field(
        min_length=1,
        max_length=LIST_NAME_MAX_LENGTH,
        description=(
            "A descriptive name for the list "
            "(e.g., 'Work Projects', 'Personal Tasks', 'Bug Fixes')"
        ),
    )
    description: str | None = Field(
        default=None,
        max_length=LIST_DESCRIPTION_MAX_LENGTH,
        description="Optional detailed description explaining the purpose or scope of this list",
    )


class GetTasksInput(ToolInput):
    list_name: str = Field(
        alias="list",
        min_length=1,
        description=(
            "Name of the list to get tasks from (case-insensitive). "
            "Use getLists first to see available lists."
        ),
    )
    include_completed: bool = Field(
        default=False,
        alias="includeCompleted",
        description=(
            "Whether to include completed and archived tasks in the results. "
            "Default is false (only active tasks)."
        ),
    )


class CreateTaskInput(ToolInput):
    list_name: str = Field(
        alias="list",
        min_length=1,
        description=(
            "Name of the list to add the task to (case-insensitive). "
            "The list must already exist."
        ),
    )
    name: str = Field(
        min_length=TASK_NAME_MIN_LENGTH,
        max_length=TASK_NAME_MAX_LENGTH,
        description="Clear, specific task name describing what needs to be done (5-120 characters)",
    )
    description: str | None = Field(
        default=None,
        max_length=TASK_DESCRIPTION_MAX_LENGTH,
        description="Optional detailed description with additional context, requirements, or notes",
    )
    priority: Priority = Field(
        default=Priority.MEDIUM,
        description=(
            "Task priority level: 'low', 'medium', 'high', or 'urgent'. Defaults to 'medium'. "
            "Use 'urgent' for critical issues, 'high' for important deadlines, "
            "'medium' for regular work, 'low' for nice-to-have items."
        ),
    )


class TaskIdInput(ToolInput):
    task_id: int = Field(
        alias="taskId",
        gt=0,
        description="The numeric ID of the task. Use getTasks to find task IDs.",
    )


# ============================================================================
# Tool registration
# ============================================================================


def _text(text: str) -> list[TextContent]:
    return [TextContent(type="text", text=text)]


def load_todo_service(registry: ToolRegistry, store: TodoStore) -> TodoService:
    """Register the todo tools.

    Args:
        registry: Registry to add the tools to.
        store: Persistence backend used by the handlers.

    Returns:
        The service instance the handlers are bound to.
    """
    service = TodoService(store)

    @registry.tool(
        "getLists",
        "Retrieve all todo lists with their details. Use this as a starting point to see "
        "what lists exist before working with tasks. Returns list names, IDs, descriptions, "
        "task counts, and creation timestamps.",
        input_schema=GetListsInput,
    )
    async def get_lists(params: GetListsInput, ctx: ToolContext) -> list[TextContent]:
        lists = await service.get_lists()
        return _text(json.dumps(lists, indent=2, ensure_ascii=False))

    @registry.tool(
        "createList",
        "Create a new todo list to organize tasks. Lists group related tasks together "
        "(e.g., 'Work Projects', 'Personal', 'Bug Fixes'). Use descriptive names that "
        "indicate the list's purpose.",
        input_schema=CreateListInput,
    )
    async def create_list(params: CreateListInput, ctx: ToolContext) -> list[TextContent]:
        todo_list = await service.create_list(params.name, params.description)
        return _text(f"✅ Created list: {todo_list.name} (ID: {todo_list.id})")

    @registry.tool(
        "getTasks",
        "Retrieve tasks from a specific list. Returns tasks sorted by priority "
        "(urgent → high → medium → low) then by creation date. Task IDs in the response "
        "can be used with completeTask and archiveTask.",
        input_schema=GetTasksInput,
    )
    async def get_tasks(params: GetTasksInput, ctx: ToolContext) -> list[TextContent]:
        result = await service.get_tasks(params.list_name, params.include_completed)
        return _text(json.dumps(result, indent=2, ensure_ascii=False))

    @registry.tool(
        "createTask",
        "Create a new task in a specific list. Tasks should be specific, actionable items. "
        "The task will be assigned an ID that can be used later to complete or archive it.",
        input_schema=CreateTaskInput,
    )
    async def create_task(params: CreateTaskInput, ctx: ToolContext) -> list[TextContent]:
        task, todo_list = await service.create_task(
            params.list_name, params.name, params.description, params.priority
        )
        glyph = priority_glyph(task.priority)
        return _text(
            f'✅ Created task: {task.name} {glyph} (ID: {task.id}) in list "{todo_list.name}"'
        )

    @registry.tool(
        "completeTask",
        "Mark a task as completed. The task keeps its completion time and stays in the "
        "system. Completed tasks appear in getTasks results when includeCompleted=true.",
        input_schema=TaskIdInput,
    )
    async def complete_task(params: TaskIdInput, ctx: ToolContext) -> list[TextContent]:
        task = await service.complete_task(params.task_id)
        return _text(f"✅ Completed task: {task.name} (ID: {task.id})")

    @registry.tool(
        "archiveTask",
        "Archive a task to hide it from regular task lists while keeping it for records. "
        "Archived tasks appear in getTasks results when includeCompleted=true.",
        input_schema=TaskIdInput,
    )
    async def archive_task(params: TaskIdInput, ctx: ToolContext) -> list[TextContent]:
        task = await service.archive_task(params.task_id)
        return _text(f"🗄️ Archived task: {task.name} (ID: {task.id})")

    return service
