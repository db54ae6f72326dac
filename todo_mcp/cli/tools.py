"""Tool commands for todo-mcp CLI: list, call and batch-call tools directly."""

import asyncio
import json
import logging
import time
from typing import Any

import click
from rich.console import Console
from rich.table import Table

from todo_mcp.config import AppConfig
from todo_mcp.server import TodoServer
from todo_mcp.tools.engine import BatchResult
from todo_mcp.transports.protocol import to_jsonable

console = Console()
logger = logging.getLogger(__name__)

service_option = click.option(
    "--service",
    type=click.Choice(["todo", "testing"]),
    default="todo",
    show_default=True,
    help="Tool set to load",
)


def _dumps(data: Any) -> str:
    return json.dumps(to_jsonable(data), indent=2, ensure_ascii=False)


@click.command()
@service_option
@click.option("--json", "as_json", is_flag=True, help="Print full tool metadata as JSON")
@click.pass_context
def tools(ctx: click.Context, service: str, as_json: bool) -> None:
    """List available tools.

    Examples:
        todo-mcp tools
        todo-mcp tools --json
        todo-mcp tools --service testing
    """
    app_config: AppConfig = ctx.obj["config"]

    async def _list() -> list[dict[str, Any]]:
        async with TodoServer(app_config, service) as server:  # type: ignore[arg-type]
            return server.registry.list()

    metadata = asyncio.run(_list())

    if as_json:
        click.echo(_dumps(metadata))
        return

    table = Table(title="Available Tools")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    for meta in metadata:
        table.add_row(meta["name"], meta["description"])
    console.print(table)


@click.command()
@click.argument("tool")
@click.option("-p", "--parameters", help="Tool parameters as a JSON object")
@service_option
@click.pass_context
def call(ctx: click.Context, tool: str, parameters: str | None, service: str) -> None:
    """Execute a tool and print its result.

    Examples:
        todo-mcp call getLists
        todo-mcp call createList -p '{"name": "Groceries"}'
        todo-mcp call getTasks -p '{"list": "Groceries", "includeCompleted": true}'
    """
    app_config: AppConfig = ctx.obj["config"]

    parsed: Any = {}
    if parameters:
        try:
            parsed = json.loads(parameters)
        except json.JSONDecodeError as e:
            console.print(f"[red]Invalid JSON parameters:[/red] {e}")
            raise click.Abort() from None
        console.print("[dim]Parameters:[/dim]")
        click.echo(_dumps(parsed))

    async def _call() -> Any:
        async with TodoServer(app_config, service) as server:  # type: ignore[arg-type]
            return await server.engine.call(tool, parsed)

    console.print(f"[bold]Executing tool:[/bold] {tool}")
    started = time.perf_counter()
    try:
        result = asyncio.run(_call())
    except Exception as e:
        console.print("[red]Tool execution failed:[/red]")
        click.echo(str(e))
        logger.debug("Tool %s failed", tool, exc_info=True)
        raise click.Abort() from None

    duration = (time.perf_counter() - started) * 1000
    console.print(f"[green]Result[/green] [dim]({duration:.0f}ms)[/dim]:")
    click.echo(_dumps(result))


@click.command()
@click.argument("file", type=click.File("r"))
@service_option
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON")
@click.pass_context
def batch(ctx: click.Context, file: Any, service: str, as_json: bool) -> None:
    """Execute a JSON array of tool calls in order.

    FILE holds entries like {"tool": "createList", "parameters": {...}}.
    Use - to read from stdin. A failing entry does not stop the rest.

    Examples:
        todo-mcp batch calls.json
        echo '[{"tool": "getLists"}]' | todo-mcp batch -
    """
    app_config: AppConfig = ctx.obj["config"]

    try:
        calls = json.load(file)
    except json.JSONDecodeError as e:
        console.print(f"[red]Invalid JSON:[/red] {e}")
        raise click.Abort() from None

    if not isinstance(calls, list):
        console.print("[red]Batch file must contain a JSON array of calls[/red]")
        raise click.Abort()

    async def _batch() -> list[BatchResult]:
        async with TodoServer(app_config, service) as server:  # type: ignore[arg-type]
            return await server.engine.call_batch(calls)

    results = asyncio.run(_batch())

    if as_json:
        click.echo(_dumps([r.to_dict() for r in results]))
    else:
        table = Table(title="Batch Results")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Tool", style="cyan")
        table.add_column("Status")
        table.add_column("Detail")
        for index, r in enumerate(results, start=1):
            if r.success:
                table.add_row(str(index), r.tool, "[green]ok[/green]", _summary(r.result))
            else:
                table.add_row(str(index), r.tool, "[red]failed[/red]", r.error or "")
        console.print(table)

    failed = sum(1 for r in results if not r.success)
    if failed:
        console.print(f"[red]{failed} of {len(results)} call(s) failed[/red]")
        raise click.Abort()


def _summary(result: Any) -> str:
    """First line of a result's text content, for table display."""
    data = to_jsonable(result)
    if isinstance(data, list) and data and isinstance(data[0], dict) and "text" in data[0]:
        return str(data[0]["text"]).splitlines()[0] if data[0]["text"] else ""
    return json.dumps(data, ensure_ascii=False)
