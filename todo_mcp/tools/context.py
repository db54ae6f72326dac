"""Per-call invocation context handed to tool handlers."""

import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import datetime

from todo_mcp.utils.dates import utcnow


def new_request_id() -> str:
    """Generate a unique identifier for one tool invocation."""
    return f"call-{uuid.uuid4().hex}"


@dataclass
class ToolContext:
    """Context for a single tool call.

    The cancellation event is never set by the engine itself; a transport
    may set it, and handlers are free to ignore it.
    """

    tool: str = ""
    request_id: str = field(default_factory=new_request_id)
    started_at: datetime = field(default_factory=utcnow)
    cancel_event: asyncio.Event = field(default_factory=asyncio.Event)

    @property
    def cancelled(self) -> bool:
        """Check if cancellation has been requested."""
        return self.cancel_event.is_set()
