"""Server assembly.

Builds the store, tool registry and invocation engine from an
:class:`AppConfig` and runs one transport over them.
"""

import asyncio
import logging
import signal
import sqlite3
from typing import Any, Literal

import click

from todo_mcp.config import AppConfig, load_config
from todo_mcp.exceptions import ConfigError, StoreUnavailableError, TodoMcpError
from todo_mcp.logging_setup import setup_logging
from todo_mcp.services.store import MemoryTodoStore, TodoStore, create_store
from todo_mcp.services.testing import load_testing_service
from todo_mcp.services.todo import load_todo_service
from todo_mcp.tools.engine import InvocationEngine
from todo_mcp.tools.registry import ToolRegistry
from todo_mcp.transports.http import HttpTransport
from todo_mcp.transports.openapi import OpenApiTransport
from todo_mcp.transports.stdio import run_stdio

logger = logging.getLogger(__name__)

ServiceName = Literal["todo", "testing"]
NETWORK_TRANSPORTS = ("http", "openapi")


class TodoServer:
    """Owns the runtime (store, registry, engine) for one process.

    Use as an async context manager, or call :meth:`open` and :meth:`close`.
    """

    def __init__(self, config: AppConfig, service: ServiceName = "todo") -> None:
        """Initialize the server.

        Args:
            config: Application configuration.
            service: Which tool set to register: the todo tools or the
                echo/math testing tools.
        """
        self.config = config
        self.service = service
        self.registry = ToolRegistry()
        self.engine = InvocationEngine(self.registry)
        self._store: TodoStore | None = None
        self._transport: HttpTransport | OpenApiTransport | None = None
        self._shutdown_event: asyncio.Event | None = None

    @property
    def store(self) -> TodoStore | None:
        """Get the store, or None for the testing service."""
        return self._store

    async def open(self) -> None:
        """Open the store and register tools."""
        if self.service == "testing":
            load_testing_service(self.registry)
        else:
            self._store = await self._open_store()
            load_todo_service(self.registry, self._store)

        logger.info(
            "%s %s ready with %d tools (%s)",
            self.config.server.name,
            self.config.server.version,
            len(self.registry),
            ", ".join(self.registry.names()),
        )

    async def close(self) -> None:
        """Stop any running transport and close the store."""
        await self.stop()
        if self._store is not None:
            await self._store.close()
            self._store = None

    async def __aenter__(self) -> "TodoServer":
        await self.open()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def serve(self, transport: str | None = None) -> None:
        """Run a transport until it finishes or :meth:`stop` is called.

        Args:
            transport: Transport name; defaults to the configured one.

        Raises:
            ConfigError: If the transport cannot be served.
        """
        name = transport or self.config.mcp.transport

        if name == "stdio":
            await run_stdio(self.engine, self.config)
            return

        if name == "cli":
            self.print_cli_usage()
            return

        if name not in NETWORK_TRANSPORTS:
            raise ConfigError(
                f"Unknown transport '{name}'; expected stdio, http, openapi or cli"
            )

        if name == "http":
            self._transport = HttpTransport(self.engine, self.config)
        else:
            self._transport = OpenApiTransport(self.engine, self.config)

        self._shutdown_event = asyncio.Event()
        await self._transport.start()
        await self._shutdown_event.wait()

    def print_cli_usage(self) -> None:
        """Print the available tools and how to call them from the command line.

        The cli transport has no long-running server; tools are executed
        one command at a time through ``todo-mcp call`` and ``todo-mcp batch``.
        """
        click.echo("Todo MCP CLI Mode")
        click.echo()
        click.echo("Available tools:")
        for tool in self.registry:
            click.echo(f"  {tool.name} - {tool.description}")
        click.echo()
        click.echo("Usage:")
        click.echo("  todo-mcp tools")
        click.echo("  todo-mcp call getLists")
        click.echo("  todo-mcp call createList -p '{\"name\": \"Work\"}'")
        click.echo("  todo-mcp batch calls.json")

    async def stop(self) -> None:
        """Stop the running network transport, if any."""
        if self._transport is not None:
            await self._transport.stop()
            self._transport = None
        if self._shutdown_event is not None:
            self._shutdown_event.set()

    def health_check(self) -> dict[str, Any]:
        """Get health status of the server."""
        status: dict[str, Any] = {
            "service": self.service,
            "tools": self.registry.names(),
            "store": type(self._store).__name__ if self._store else None,
        }
        if self._transport is not None:
            status["url"] = self._transport.url
            status["running"] = self._transport.is_running
        return status

    async def _open_store(self) -> TodoStore:
        """Open the configured store, falling back to memory when allowed."""
        path = self.config.database.path
        store = create_store(path)
        try:
            await store.initialize()
        except (sqlite3.Error, OSError) as e:
            if self.config.database.require_connection:
                raise StoreUnavailableError(path, e) from e
            logger.warning(
                "Could not open database at %s (%s); using the in-memory store", path, e
            )
            store = MemoryTodoStore()
            await store.initialize()
        return store


async def run_server(
    config: AppConfig,
    service: ServiceName = "todo",
    transport: str | None = None,
) -> None:
    """Open a server and serve one transport until shutdown."""
    server = TodoServer(config, service)
    async with server:
        loop = asyncio.get_running_loop()

        def handle_shutdown(signum: int) -> None:
            """Handle shutdown signal."""
            logger.info("Received signal %s, shutting down...", signal.Signals(signum).name)
            loop.create_task(server.stop())

        name = transport or config.mcp.transport
        if name in NETWORK_TRANSPORTS:
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.add_signal_handler(sig, handle_shutdown, sig)

        await server.serve(name)


def main() -> None:
    """Entry point for the todo-mcp-server command.

    Configuration comes from the config file and environment only.
    """
    try:
        config = load_config()
    except ConfigError as e:
        setup_logging()
        logger.error("%s", e)
        raise SystemExit(1) from e

    setup_logging(config.log.level)

    try:
        asyncio.run(run_server(config))
    except KeyboardInterrupt:
        pass
    except TodoMcpError as e:
        logger.error("%s", e)
        raise SystemExit(1) from e


if __name__ == "__main__":
    main()
