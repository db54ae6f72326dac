"""Unit tests for TodoService business logic."""

import asyncio
from datetime import datetime, timedelta

import pytest

from todo_mcp.exceptions import (
    AlreadyArchivedError,
    AlreadyCompletedError,
    ListNotFoundError,
    TaskNotFoundError,
    ValidationConstraintError,
)
from todo_mcp.models.task import Priority
from todo_mcp.services.store import MemoryTodoStore
from todo_mcp.services.todo import TodoService, list_to_dict, task_to_dict


@pytest.fixture
def service(store: MemoryTodoStore) -> TodoService:
    """TodoService over the memory store."""
    return TodoService(store)


class TestFindList:
    """Tests for TodoService.find_list."""

    def test_case_insensitive(self, service: TodoService) -> None:
        """Lookups should ignore case but return the stored name."""
        asyncio.run(service.create_list("Groceries"))

        for query in ("groceries", "GROCERIES", "Groceries"):
            assert asyncio.run(service.find_list(query)).name == "Groceries"

    def test_exact_match_only(self, service: TodoService) -> None:
        """Partial names should not match."""
        asyncio.run(service.create_list("Groceries"))

        with pytest.raises(ListNotFoundError):
            asyncio.run(service.find_list("Grocer"))

    def test_not_found_names_available_lists(self, service: TodoService) -> None:
        """The error should list every known list."""
        asyncio.run(service.create_list("Work"))
        asyncio.run(service.create_list("Home"))

        with pytest.raises(ListNotFoundError) as exc_info:
            asyncio.run(service.find_list("Garden"))

        assert str(exc_info.value) == 'List "Garden" not found. Available lists: Work, Home'


class TestCreate:
    """Tests for list and task creation rules."""

    def test_create_list_name_too_long(self, service: TodoService) -> None:
        """List names over 255 characters should be rejected."""
        with pytest.raises(ValidationConstraintError):
            asyncio.run(service.create_list("x" * 256))

    def test_create_task(self, service: TodoService) -> None:
        """create_task should return the task and its list."""
        asyncio.run(service.create_list("Work"))

        task, todo_list = asyncio.run(
            service.create_task("work", "Write the report", priority=Priority.HIGH)
        )

        assert todo_list.name == "Work"
        assert task.list_id == todo_list.id
        assert task.priority == Priority.HIGH

    @pytest.mark.parametrize("name", ["abcd", "x" * 121])
    def test_task_name_length(self, service: TodoService, name: str) -> None:
        """Task names must be 5 to 120 characters."""
        asyncio.run(service.create_list("Work"))

        with pytest.raises(ValidationConstraintError):
            asyncio.run(service.create_task("Work", name))

    def test_task_name_bounds_inclusive(self, service: TodoService) -> None:
        """Exactly 5 and 120 characters should be accepted."""
        asyncio.run(service.create_list("Work"))

        asyncio.run(service.create_task("Work", "abcde"))
        asyncio.run(service.create_task("Work", "y" * 120))

    def test_task_in_missing_list(self, service: TodoService) -> None:
        """Creating a task in an unknown list should fail."""
        with pytest.raises(ListNotFoundError):
            asyncio.run(service.create_task("Nowhere", "Write the report"))


class TestLifecycle:
    """Tests for complete and archive guards."""

    def test_double_complete(self, service: TodoService, store: MemoryTodoStore) -> None:
        """Completing twice should fail and keep the first timestamp."""
        asyncio.run(service.create_list("Work"))
        task, _ = asyncio.run(service.create_task("Work", "Write the report"))

        first = asyncio.run(service.complete_task(task.id))
        with pytest.raises(AlreadyCompletedError, match='"Write the report" is already completed'):
            asyncio.run(service.complete_task(task.id))

        stored = asyncio.run(store.get_task(task.id))
        assert stored.completed_at == first.completed_at  # type: ignore[union-attr]

    def test_double_archive(self, service: TodoService) -> None:
        """Archiving twice should fail."""
        asyncio.run(service.create_list("Work"))
        task, _ = asyncio.run(service.create_task("Work", "Write the report"))

        asyncio.run(service.archive_task(task.id))
        with pytest.raises(AlreadyArchivedError):
            asyncio.run(service.archive_task(task.id))

    def test_archive_completed_task(self, service: TodoService) -> None:
        """A completed task can still be archived."""
        asyncio.run(service.create_list("Work"))
        task, _ = asyncio.run(service.create_task("Work", "Write the report"))

        asyncio.run(service.complete_task(task.id))
        archived = asyncio.run(service.archive_task(task.id))

        assert archived.is_completed and archived.is_archived

    def test_missing_task(self, service: TodoService) -> None:
        """Unknown task IDs should raise TaskNotFoundError."""
        with pytest.raises(TaskNotFoundError):
            asyncio.run(service.complete_task(99))
        with pytest.raises(TaskNotFoundError):
            asyncio.run(service.archive_task(99))


class TestQueries:
    """Tests for get_lists and get_tasks."""

    def test_get_tasks_sorted_and_filtered(self, service: TodoService) -> None:
        """Active tasks only by default, in priority order."""
        asyncio.run(service.create_list("Work"))
        low, _ = asyncio.run(service.create_task("Work", "Low priority", priority=Priority.LOW))
        asyncio.run(service.create_task("Work", "Urgent thing", priority=Priority.URGENT))
        asyncio.run(service.create_task("Work", "Medium thing"))
        asyncio.run(service.complete_task(low.id))

        active = asyncio.run(service.get_tasks("WORK"))
        everything = asyncio.run(service.get_tasks("Work", include_completed=True))

        assert active["list"] == "Work"
        assert [t["name"] for t in active["tasks"]] == ["Urgent thing", "Medium thing"]
        assert [t["priority"] for t in everything["tasks"]] == ["urgent", "medium", "low"]

    def test_get_lists_counts(self, service: TodoService) -> None:
        """get_lists should attach task counts to every list."""
        asyncio.run(service.create_list("Work"))
        asyncio.run(service.create_list("Home"))
        task, _ = asyncio.run(service.create_task("Work", "Write the report"))
        asyncio.run(service.create_task("Work", "Book the venue"))
        asyncio.run(service.complete_task(task.id))

        lists = asyncio.run(service.get_lists())

        assert [lst["name"] for lst in lists] == ["Work", "Home"]
        assert lists[0]["taskCounts"] == {"total": 2, "active": 1, "completed": 1, "archived": 0}
        assert lists[1]["taskCounts"]["total"] == 0


class TestSerialization:
    """Tests for the dictionary renderings."""

    def test_task_to_dict(self, store: MemoryTodoStore, now: datetime) -> None:
        """Tasks should render camelCase keys and relative times."""
        todo_list = asyncio.run(store.create_list("Work"))
        task = asyncio.run(store.create_task(todo_list.id, "Write the report"))
        task = task.model_copy(update={"created_at": now - timedelta(hours=2)})

        data = task_to_dict(task, now)

        assert data["listId"] == todo_list.id
        assert data["priority"] == "medium"
        assert data["createdAtRelative"] == "2 hours ago"
        assert data["completedAt"] is None
        assert data["completedAtRelative"] is None
        assert data["archivedAtRelative"] is None

    def test_list_to_dict(self, store: MemoryTodoStore, now: datetime) -> None:
        """Lists should render ISO and relative creation times."""
        todo_list = asyncio.run(store.create_list("Work"))
        todo_list = todo_list.model_copy(update={"created_at": now - timedelta(days=3)})

        data = list_to_dict(todo_list, now)

        assert data["createdAt"] == "2024-01-12T12:00:00+00:00"
        assert data["createdAtRelative"] == "3 days ago"
        assert data["archivedAt"] is None
