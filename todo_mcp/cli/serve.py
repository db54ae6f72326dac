"""Serve command for todo-mcp CLI."""

import asyncio

import click

from todo_mcp.config import AppConfig
from todo_mcp.server import run_server


@click.command()
@click.option(
    "-t",
    "--transport",
    type=click.Choice(["stdio", "http", "openapi"]),
    help="Transport to serve (default: from config)",
)
@click.option("--host", help="Bind host for http/openapi")
@click.option("-p", "--port", type=click.IntRange(1, 65535), help="Bind port for http/openapi")
@click.option(
    "--service",
    type=click.Choice(["todo", "testing"]),
    default="todo",
    show_default=True,
    help="Tool set to serve",
)
@click.pass_context
def serve(
    ctx: click.Context,
    transport: str | None,
    host: str | None,
    port: int | None,
    service: str,
) -> None:
    """Serve the tools over a transport.

    Examples:
        todo-mcp serve                        # MCP over stdio
        todo-mcp serve -t http -p 3000        # JSON-RPC over HTTP
        todo-mcp serve -t openapi             # REST API with /doc
        todo-mcp serve --service testing      # echo and math tools only
    """
    app_config: AppConfig = ctx.obj["config"]

    server_overrides = {k: v for k, v in {"host": host, "port": port}.items() if v is not None}
    if server_overrides:
        app_config = app_config.model_copy(
            update={"server": app_config.server.model_copy(update=server_overrides)}
        )

    try:
        asyncio.run(run_server(app_config, service, transport))  # type: ignore[arg-type]
    except KeyboardInterrupt:
        pass
