"""CLI commands for session handoffs."""

import typer
from rich.console import Console
from rich.table import Table

from mnemo.cli.memory_cmd import cli_engine, print_result

console = Console()


def prepare_command(
    session_id: str,
    project: str,
    include: list[str] | None = None,
    config_path: str | None = None,
) -> None:
    """Create a handoff and print it as JSON."""
    with cli_engine(config_path) as engine:
        handoff = engine.handoffs.prepare_handoff(session_id, project, include=include)
    print_result(handoff)


def resume_command(
    handoff_id: str,
    new_session_id: str,
    project: str,
    config_path: str | None = None,
) -> None:
    """Resume a handoff, or exit 1 when it does not exist."""
    with cli_engine(config_path) as engine:
        handoff = engine.handoffs.resume_from_handoff(handoff_id, project, new_session_id)
    if handoff is None:
        console.print(f"[yellow]No handoff {handoff_id} for this project[/yellow]")
        raise typer.Exit(1)
    print_result(handoff)


def list_command(project: str, output_format: str = "table", config_path: str | None = None) -> None:
    """Print the project's handoffs, most recent first."""
    with cli_engine(config_path) as engine:
        handoffs = engine.handoffs.list_handoffs(project)

    if output_format == "json":
        print_result(handoffs)
        return

    if not handoffs:
        console.print("[yellow]No handoffs found[/yellow]")
        return

    table = Table(title=f"Session Handoffs ({len(handoffs)})")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("From Session", style="green")
    table.add_column("Created")
    table.add_column("Resumed By", style="magenta")
    table.add_column("Summary", style="dim")
    for handoff in handoffs:
        table.add_row(
            handoff.id,
            handoff.from_session_id,
            handoff.created_at.strftime("%Y-%m-%d %H:%M:%S"),
            handoff.resumed_by_session_id or "-",
            handoff.context_summary,
        )
    console.print(table)
