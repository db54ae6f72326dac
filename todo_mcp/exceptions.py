"""Custom exceptions for todo-mcp.

Every message is plain prose meant to be shown directly to a user or a
language model, so alternatives are listed wherever that is cheap.
"""


class TodoMcpError(Exception):
    """Base exception for todo-mcp errors."""

    pass


class ConfigError(TodoMcpError):
    """Raised when configuration cannot be loaded or is invalid."""

    pass


# Tool registry and invocation errors


class ToolError(TodoMcpError):
    """Base exception for registry and invocation errors."""

    def __init__(self, tool: str, message: str) -> None:
        self.tool = tool
        super().__init__(message)


class ToolNotFoundError(ToolError):
    """Raised when a tool name is not registered."""

    def __init__(self, tool: str, available: list[str]) -> None:
        self.available = list(available)
        super().__init__(
            tool,
            f'Tool "{tool}" not found. Available tools: {", ".join(self.available)}',
        )


class ToolAlreadyRegisteredError(ToolError):
    """Raised when a tool name is registered twice without replace=True."""

    def __init__(self, tool: str) -> None:
        super().__init__(tool, f'Tool "{tool}" is already registered')


class InvalidParametersError(ToolError):
    """Raised when parameters fail validation against a tool's input schema."""

    def __init__(self, tool: str, diagnostic: str) -> None:
        self.diagnostic = diagnostic
        super().__init__(tool, f'Invalid parameters for tool "{tool}": {diagnostic}')


class ToolExecutionFailedError(ToolError):
    """Raised when a tool handler raises.

    The handler's exception is kept on ``original`` and chained as the cause.
    """

    def __init__(self, tool: str, original: BaseException) -> None:
        self.original = original
        super().__init__(tool, f'Tool "{tool}" execution failed: {original}')


# Domain errors


class ListNotFoundError(TodoMcpError):
    """Raised when a list cannot be found by name or ID."""

    def __init__(self, query: str | int, available: list[str] | None = None) -> None:
        self.query = query
        self.available = available or []
        if isinstance(query, int):
            msg = f"List with ID {query} not found"
        else:
            msg = f'List "{query}" not found. Available lists: {", ".join(self.available)}'
        super().__init__(msg)


class TaskNotFoundError(TodoMcpError):
    """Raised when a task cannot be found by ID."""

    def __init__(self, task_id: int) -> None:
        self.task_id = task_id
        super().__init__(f"Task with ID {task_id} not found")


class AlreadyCompletedError(TodoMcpError):
    """Raised when completing a task that is already completed."""

    def __init__(self, task_name: str) -> None:
        self.task_name = task_name
        super().__init__(f'Task "{task_name}" is already completed')


class AlreadyArchivedError(TodoMcpError):
    """Raised when archiving a task that is already archived."""

    def __init__(self, task_name: str) -> None:
        self.task_name = task_name
        super().__init__(f'Task "{task_name}" is already archived')


class ValidationConstraintError(TodoMcpError):
    """Raised when a field violates a length or range constraint."""

    pass


class StoreUnavailableError(TodoMcpError):
    """Raised when the database cannot be opened and a connection is required."""

    def __init__(self, path: str, reason: object) -> None:
        self.path = path
        super().__init__(f"Could not open database at {path}: {reason}")
