"""Persistent storage for lists and tasks.

The task operations only talk to the :class:`TodoStore` interface. Two
backends are provided: an in-memory store used by tests and throwaway
sessions, and a SQLite store for real use.
"""

import logging
import sqlite3
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any

from todo_mcp.exceptions import ListNotFoundError, TaskNotFoundError
from todo_mcp.models.task import Priority, Task, TaskCounts
from todo_mcp.models.todo_list import TodoList
from todo_mcp.utils.dates import ensure_utc, utcnow

logger = logging.getLogger(__name__)

MEMORY_DATABASE = ":memory:"


class TodoStore(ABC):
    """Interface for list and task persistence.

    Methods are coroutines so backends with real I/O can suspend; the
    bundled backends complete synchronously.
    """

    async def initialize(self) -> None:  # noqa: B027
        """Prepare the backend (create tables, open connections)."""

    async def close(self) -> None:  # noqa: B027
        """Release backend resources."""

    # List operations

    @abstractmethod
    async def create_list(self, name: str, description: str | None = None) -> TodoList:
        """Create a list and return it with its assigned ID."""

    @abstractmethod
    async def get_list(self, list_id: int) -> TodoList | None:
        """Get a list by ID, or None."""

    @abstractmethod
    async def list_lists(self) -> list[TodoList]:
        """Get every list, active and archived, oldest first."""

    # Task operations

    @abstractmethod
    async def create_task(
        self,
        list_id: int,
        name: str,
        description: str | None = None,
        priority: Priority = Priority.MEDIUM,
    ) -> Task:
        """Create a task in an existing list.

        Raises:
            ListNotFoundError: If the list does not exist.
        """

    @abstractmethod
    async def get_task(self, task_id: int) -> Task | None:
        """Get a task by ID, or None."""

    @abstractmethod
    async def list_tasks(self, list_id: int) -> list[Task]:
        """Get every task of a list in insertion order."""

    @abstractmethod
    async def complete_task(self, task_id: int, when: datetime | None = None) -> Task:
        """Set a task's completion timestamp.

        Raises:
            TaskNotFoundError: If the task does not exist.
        """

    @abstractmethod
    async def archive_task(self, task_id: int, when: datetime | None = None) -> Task:
        """Set a task's archive timestamp.

        Raises:
            TaskNotFoundError: If the task does not exist.
        """

    @abstractmethod
    async def delete_task(self, task_id: int) -> None:
        """Remove a task. Missing IDs are ignored."""

    async def task_counts(self, list_id: int) -> TaskCounts:
        """Count a list's tasks by state."""
        return TaskCounts.from_tasks(await self.list_tasks(list_id))


class MemoryTodoStore(TodoStore):
    """Dictionary-backed store. Data lives as long as the instance."""

    def __init__(self) -> None:
        self._lists: dict[int, TodoList] = {}
        self._tasks: dict[int, Task] = {}
        self._next_list_id = 1
        self._next_task_id = 1

    async def create_list(self, name: str, description: str | None = None) -> TodoList:
        todo_list = TodoList(
            id=self._next_list_id,
            name=name,
            description=description,
            created_at=utcnow(),
        )
        self._lists[todo_list.id] = todo_list
        self._next_list_id += 1
        return todo_list

    async def get_list(self, list_id: int) -> TodoList | None:
        return self._lists.get(list_id)

    async def list_lists(self) -> list[TodoList]:
        return list(self._lists.values())

    async def create_task(
        self,
        list_id: int,
        name: str,
        description: str | None = None,
        priority: Priority = Priority.MEDIUM,
    ) -> Task:
        if list_id not in self._lists:
            raise ListNotFoundError(list_id)

        task = Task(
            id=self._next_task_id,
            name=name,
            description=description,
            priority=priority,
            list_id=list_id,
            created_at=utcnow(),
        )
        self._tasks[task.id] = task
        self._next_task_id += 1
        return task

    async def get_task(self, task_id: int) -> Task | None:
        return self._tasks.get(task_id)

    async def list_tasks(self, list_id: int) -> list[Task]:
        return [t for t in self._tasks.values() if t.list_id == list_id]

    async def complete_task(self, task_id: int, when: datetime | None = None) -> Task:
        return self._update_task(task_id, completed_at=when or utcnow())

    async def archive_task(self, task_id: int, when: datetime | None = None) -> Task:
        return self._update_task(task_id, archived_at=when or utcnow())

    async def delete_task(self, task_id: int) -> None:
        self._tasks.pop(task_id, None)

    def _update_task(self, task_id: int, **changes: Any) -> Task:
        current = self._tasks.get(task_id)
        if current is None:
            raise TaskNotFoundError(task_id)
        updated = current.model_copy(update=changes)
        self._tasks[task_id] = updated
        return updated


# Column layout mirrors the relational schema: lists(id, name, description,
# createdAt, archivedAt) and tasks(..., priority, listId -> lists.id).
SCHEMA = """
CREATE TABLE IF NOT EXISTS lists (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name VARCHAR(255) NOT NULL,
    description VARCHAR(500),
    created_at TEXT NOT NULL,
    archived_at TEXT
);

CREATE TABLE IF NOT EXISTS tasks (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name VARCHAR(255) NOT NULL,
    description VARCHAR(1000),
    created_at TEXT NOT NULL,
    completed_at TEXT,
    archived_at TEXT,
    priority TEXT NOT NULL DEFAULT 'medium'
        CHECK (priority IN ('low', 'medium', 'high', 'urgent')),
    list_id INTEGER NOT NULL REFERENCES lists(id)
);

CREATE INDEX IF NOT EXISTS idx_tasks_list_id ON tasks(list_id);
"""


class SqliteTodoStore(TodoStore):
    """SQLite-backed store.

    Timestamps are stored as ISO 8601 strings in UTC. A single connection is
    opened by :meth:`initialize` and closed by :meth:`close`.
    """

    def __init__(self, path: Path | str = MEMORY_DATABASE) -> None:
        """Initialize the store.

        Args:
            path: Database file path, or ":memory:".
        """
        self._path = str(path)
        self._conn: sqlite3.Connection | None = None

    @property
    def path(self) -> str:
        """Get the database path."""
        return self._path

    @property
    def conn(self) -> sqlite3.Connection:
        """Get the open connection.

        Raises:
            RuntimeError: If initialize() has not been called.
        """
        if self._conn is None:
            raise RuntimeError("Store is not initialized")
        return self._conn

    async def initialize(self) -> None:
        if self._conn is not None:
            return

        target = self._path
        if target != MEMORY_DATABASE:
            db_file = Path(target).expanduser()
            db_file.parent.mkdir(parents=True, exist_ok=True)
            target = str(db_file)

        conn = sqlite3.connect(target)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        conn.executescript(SCHEMA)
        conn.commit()
        self._conn = conn
        logger.info("Opened database at %s", self._path)

    async def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.debug("Closed database at %s", self._path)

    async def create_list(self, name: str, description: str | None = None) -> TodoList:
        cursor = self.conn.execute(
            "INSERT INTO lists (name, description, created_at) VALUES (?, ?, ?)",
            (name, description, _to_db(utcnow())),
        )
        self.conn.commit()
        todo_list = await self.get_list(int(cursor.lastrowid or 0))
        assert todo_list is not None
        return todo_list

    async def get_list(self, list_id: int) -> TodoList | None:
        row = self.conn.execute("SELECT * FROM lists WHERE id = ?", (list_id,)).fetchone()
        return _row_to_list(row) if row else None

    async def list_lists(self) -> list[TodoList]:
        rows = self.conn.execute("SELECT * FROM lists ORDER BY id").fetchall()
        return [_row_to_list(row) for row in rows]

    async def create_task(
        self,
        list_id: int,
        name: str,
        description: str | None = None,
        priority: Priority = Priority.MEDIUM,
    ) -> Task:
        if await self.get_list(list_id) is None:
            raise ListNotFoundError(list_id)

        cursor = self.conn.execute(
            "INSERT INTO tasks (name, description, created_at, priority, list_id)"
            " VALUES (?, ?, ?, ?, ?)",
            (name, description, _to_db(utcnow()), Priority(priority).value, list_id),
        )
        self.conn.commit()
        task = await self.get_task(int(cursor.lastrowid or 0))
        assert task is not None
        return task

    async def get_task(self, task_id: int) -> Task | None:
        row = self.conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,)).fetchone()
        return _row_to_task(row) if row else None

    async def list_tasks(self, list_id: int) -> list[Task]:
        rows = self.conn.execute(
            "SELECT * FROM tasks WHERE list_id = ? ORDER BY id", (list_id,)
        ).fetchall()
        return [_row_to_task(row) for row in rows]

    async def complete_task(self, task_id: int, when: datetime | None = None) -> Task:
        return await self._set_timestamp(task_id, "completed_at", when or utcnow())

    async def archive_task(self, task_id: int, when: datetime | None = None) -> Task:
        return await self._set_timestamp(task_id, "archived_at", when or utcnow())

    async def delete_task(self, task_id: int) -> None:
        self.conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
        self.conn.commit()

    async def _set_timestamp(self, task_id: int, column: str, when: datetime) -> Task:
        # column is one of two literals chosen above, never user input
        cursor = self.conn.execute(
            f"UPDATE tasks SET {column} = ? WHERE id = ?", (_to_db(when), task_id)
        )
        self.conn.commit()
        if cursor.rowcount == 0:
            raise TaskNotFoundError(task_id)
        task = await self.get_task(task_id)
        assert task is not None
        return task


def create_store(path: Path | str | None) -> TodoStore:
    """Create a store for a database path.

    Args:
        path: SQLite file path. None or ":memory:" selects the in-memory store.

    Returns:
        An uninitialized store.
    """
    if path is None or str(path) == MEMORY_DATABASE:
        return MemoryTodoStore()
    return SqliteTodoStore(path)


def _to_db(dt: datetime) -> str:
    return ensure_utc(dt).isoformat()


def _from_db(value: str | None) -> datetime | None:
    if value is None:
        return None
    return ensure_utc(datetime.fromisoformat(value))


def _row_to_list(row: sqlite3.Row) -> TodoList:
    return TodoList(
        id=row["id"],
        name=row["name"],
        description=row["description"],
        created_at=_from_db(row["created_at"]),
        archived_at=_from_db(row["archived_at"]),
    )


def _row_to_task(row: sqlite3.Row) -> Task:
    return Task(
        id=row["id"],
        name=row["name"],
        description=row["description"],
        priority=Priority(row["priority"]),
        list_id=row["list_id"],
        created_at=_from_db(row["created_at"]),
        completed_at=_from_db(row["completed_at"]),
        archived_at=_from_db(row["archived_at"]),
    )
