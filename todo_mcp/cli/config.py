"""Config CLI commands for todo-mcp."""

from typing import Any

import click
from rich.console import Console
from rich.tree import Tree

from todo_mcp.config import AppConfig, resolve_config_file

console = Console()


def _get_nested_value(d: dict[str, Any], key: str) -> Any:
    """Get a nested value from a dictionary using dot notation.

    Args:
        d: The dictionary to search.
        key: Dot-separated key path, e.g. "server.port".

    Returns:
        The value if found, None otherwise.
    """
    current: Any = d
    for part in key.split("."):
        if not isinstance(current, dict) or part not in current:
            return None
        current = current[part]
    return current


def _format_value(value: Any) -> str:
    """Format a value for display."""
    if value is None:
        return "[dim]not set[/dim]"
    if isinstance(value, bool):
        return "[green]true[/green]" if value else "[red]false[/red]"
    return str(value)


def _render_dict_tree(tree: Tree, d: dict[str, Any]) -> None:
    """Recursively render a dictionary as a tree."""
    for key, value in d.items():
        if isinstance(value, dict):
            branch = tree.add(f"[cyan]{key}[/cyan]")
            _render_dict_tree(branch, value)
        else:
            tree.add(f"[cyan]{key}[/cyan]: {_format_value(value)}")


@click.group()
def config() -> None:
    """View the effective configuration."""
    pass


@config.command(name="show")
@click.argument("key", required=False)
@click.pass_context
def config_show(ctx: click.Context, key: str | None) -> None:
    """Show configuration values.

    If KEY is provided, show only that value. Otherwise show all config.

    Examples:
        todo-mcp config show              # Show all config
        todo-mcp config show server       # Show server section
        todo-mcp config show server.port  # Show specific value
    """
    app_config: AppConfig = ctx.obj["config"]
    config_data = app_config.to_dict()

    if key:
        value = _get_nested_value(config_data, key)
        if value is None:
            console.print(f"[yellow]Key '{key}' is not set[/yellow]")
        elif isinstance(value, dict):
            tree = Tree(f"[bold cyan]{key}[/bold cyan]")
            _render_dict_tree(tree, value)
            console.print(tree)
        else:
            console.print(f"{key}: {_format_value(value)}")
        return

    tree = Tree("[bold]Configuration[/bold]")
    _render_dict_tree(tree, config_data)
    console.print(tree)


@config.command(name="path")
def config_path() -> None:
    """Show which config file is loaded, if any."""
    path = resolve_config_file()
    if path is None:
        console.print("[dim]No config file; using defaults and environment[/dim]")
    else:
        console.print(str(path))
