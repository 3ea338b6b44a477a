"""CLI commands for working memory and context."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

import typer
from rich.console import Console
from rich.table import Table

from mnemo.errors import MnemoError

if TYPE_CHECKING:
    from mnemo.engine import MemoryEngine

console = Console()


@contextmanager
def cli_engine(config_path: str | None, compact: bool | None = None) -> Iterator[MemoryEngine]:
    """Open the configured engine, reporting failures as a clean exit 1.

    Args:
        config_path: Optional path to config file
        compact: Passed to :func:`mnemo.engine.open_engine`
    """
    from mnemo.config.loader import load_config
    from mnemo.engine import open_engine

    try:
        config = load_config(Path(config_path) if config_path else None)
        with open_engine(config, compact=compact) as engine:
            yield engine
    except MnemoError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from None


def print_result(data: Any) -> None:
    """Print a tool-style result as JSON."""
    from mnemo.tools.registry import to_jsonable

    console.print_json(data=to_jsonable(data))


def _format_timestamp(value: datetime | None) -> str:
    if value is None:
        return "never"
    return value.strftime("%Y-%m-%d %H:%M:%S")


def remember_command(
    key: str,
    value: str,
    project: str,
    context: str | None = None,
    tags: list[str] | None = None,
    ttl: float | None = None,
    config_path: str | None = None,
) -> None:
    """Store or update an item and print it."""
    with cli_engine(config_path) as engine:
        item = engine.memory.remember(
            key, value, project, context=context, tags=tags, ttl=ttl
        )
        print_result(item)


def recall_command(key: str, project: str, config_path: str | None = None) -> None:
    """Print one item, or exit 1 when it is missing or expired."""
    with cli_engine(config_path) as engine:
        item = engine.memory.recall(key, project)
    if item is None:
        console.print(f"[yellow]No memory item named {key!r}[/yellow]")
        raise typer.Exit(1)
    print_result(item)


def search_command(
    query: str,
    project: str,
    tags: list[str] | None = None,
    limit: int | None = None,
    config_path: str | None = None,
) -> None:
    """Print items matching a free-text query."""
    with cli_engine(config_path) as engine:
        items = engine.memory.recall_relevant(query, project, tags=tags, limit=limit)
    print_result(items)


def list_command(
    project: str,
    limit: int = 0,
    offset: int = 0,
    tags: list[str] | None = None,
    output_format: str = "table",
    config_path: str | None = None,
) -> None:
    """Print a page of items."""
    with cli_engine(config_path) as engine:
        items = engine.memory.list(project, limit=limit, offset=offset, tags=tags)
        total = engine.memory.count(project)

    if output_format == "json":
        print_result({"items": items, "total": total})
        return

    if not items:
        console.print("[yellow]No memory items found[/yellow]")
        return

    table = Table(title=f"Working Memory ({len(items)} of {total})")
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    table.add_column("Tags", style="magenta")
    table.add_column("Updated", style="green")
    table.add_column("Expires", style="dim")
    for item in items:
        value = item.value if len(item.value) <= 60 else item.value[:57] + "..."
        table.add_row(
            item.key,
            value,
            ", ".join(item.tags),
            _format_timestamp(item.updated_at),
            _format_timestamp(item.expires_at),
        )
    console.print(table)


def forget_command(key: str, project: str, config_path: str | None = None) -> None:
    """Delete an item."""
    with cli_engine(config_path) as engine:
        deleted = engine.memory.forget(key, project)
    if deleted:
        console.print(f"[green]✓[/green] Forgot {key!r}")
    else:
        console.print(f"[yellow]No memory item named {key!r}[/yellow]")


def compact_command(project: str | None = None, config_path: str | None = None) -> None:
    """Delete expired items and report how many were removed."""
    with cli_engine(config_path, compact=False) as engine:
        removed = engine.memory.compact(project)
    console.print(f"[green]✓[/green] Removed {removed} expired item(s)")


def context_command(
    project: str,
    query: str = "",
    max_tokens: int | None = None,
    sources: list[str] | None = None,
    config_path: str | None = None,
) -> None:
    """Print assembled session context as JSON."""
    with cli_engine(config_path) as engine:
        context = engine.injector.get_relevant_context(
            project, query=query, max_tokens=max_tokens, sources=sources
        )
    print_result(context)
