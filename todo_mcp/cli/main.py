"""Main CLI entry point for todo-mcp."""

import sys
from pathlib import Path

import click
from rich.console import Console

from todo_mcp.cli.config import config
from todo_mcp.cli.serve import serve
from todo_mcp.cli.tools import batch, call, tools
from todo_mcp.config import load_config
from todo_mcp.exceptions import TodoMcpError
from todo_mcp.logging_setup import setup_logging

console = Console()


@click.group()
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to a YAML config file",
)
@click.option("--database", help='Database path, or ":memory:" for a throwaway store')
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"]),
    help="Log level (default: from config)",
)
@click.option("--debug/--no-debug", default=False, help="Show debug information")
@click.pass_context
def cli(
    ctx: click.Context,
    config_file: Path | None,
    database: str | None,
    log_level: str | None,
    debug: bool,
) -> None:
    """todo-mcp - Task lists exposed as MCP tools.

    Serve the tools over stdio, HTTP or a generated REST API, or call
    them directly from the command line.
    """
    app_config = load_config(
        config_file,
        overrides={"database": {"path": database}, "log": {"level": log_level}},
    )
    setup_logging(app_config.log.level, verbose=debug)

    ctx.ensure_object(dict)
    ctx.obj["config"] = app_config
    ctx.obj["debug"] = debug


# Register commands
cli.add_command(serve)
cli.add_command(tools)
cli.add_command(call)
cli.add_command(batch)
cli.add_command(config)


def main() -> None:
    """Main entry point with error handling."""
    try:
        cli()
    except TodoMcpError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    except Exception as e:
        if "--debug" in sys.argv:
            raise
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
