"""Main CLI application using Typer."""

import sys

import typer
from rich.console import Console

from mnemo import __version__
from mnemo.runtime import ensure_supported_python

# Create Typer app
app = typer.Typer(
    name="mnemo",
    help="mnemo - Durable project memory for AI coding assistants",
    no_args_is_help=True,
)

console = Console()

CONFIG_OPTION_HELP = "Path to config file (default: ~/.mnemo/mnemo.yaml)"


@app.command()
def version():
    """Show mnemo version."""
    console.print(f"mnemo version {__version__}")


@app.command()
def doctor(
    config_path: str = typer.Option(None, "--config", "-c", help=CONFIG_OPTION_HELP),
):
    """Run environment and database health checks."""
    from mnemo.cli.doctor import doctor_command

    doctor_command(config_path=config_path)


@app.command()
def serve(
    transport: str = typer.Option(
        None,
        "--transport",
        "-t",
        help="Transport type: stdio or http (default from config)",
    ),
    host: str = typer.Option(None, "--host", help="Bind host (HTTP transport only)"),
    port: int = typer.Option(None, "--port", "-p", help="Bind port (HTTP transport only)"),
    config_path: str = typer.Option(None, "--config", "-c", help=CONFIG_OPTION_HELP),
):
    """Start the MCP server exposing mnemo tools."""
    from mnemo.cli.serve_cmd import serve_command

    serve_command(transport=transport, host=host, port=port, config_path=config_path)


@app.command()
def compact(
    project: str = typer.Option(None, "--project", "-P", help="Only this project path"),
    config_path: str = typer.Option(None, "--config", "-c", help=CONFIG_OPTION_HELP),
):
    """Delete expired working memory items."""
    from mnemo.cli.memory_cmd import compact_command

    compact_command(project=project, config_path=config_path)


@app.command()
def context(
    project: str = typer.Option(..., "--project", "-P", help="Project path"),
    query: str = typer.Option("", "--query", "-q", help="What the session is about"),
    max_tokens: int = typer.Option(None, "--max-tokens", "-m", help="Token budget", min=0),
    source: list[str] = typer.Option(
        None, "--source", "-s", help="Source to include (memory, decisions, handoffs); repeatable"
    ),
    config_path: str = typer.Option(None, "--config", "-c", help=CONFIG_OPTION_HELP),
):
    """Assemble context for a new session and print it as JSON."""
    from mnemo.cli.memory_cmd import context_command

    context_command(
        project=project,
        query=query,
        max_tokens=max_tokens,
        sources=source or None,
        config_path=config_path,
    )


# Working memory commands
memory_app = typer.Typer(help="Read and write project working memory")
app.add_typer(memory_app, name="memory")


@memory_app.command("remember")
def memory_remember(
    key: str = typer.Argument(..., help="Key"),
    value: str = typer.Argument(..., help="Value"),
    project: str = typer.Option(..., "--project", "-P", help="Project path"),
    context_text: str = typer.Option(None, "--context", help="Why this matters"),
    tag: list[str] = typer.Option(None, "--tag", help="Tag (repeatable)"),
    ttl: float = typer.Option(None, "--ttl", help="Seconds until expiry (0 for never)"),
    config_path: str = typer.Option(None, "--config", "-c", help=CONFIG_OPTION_HELP),
):
    """Store or update an item."""
    from mnemo.cli.memory_cmd import remember_command

    remember_command(
        key=key,
        value=value,
        project=project,
        context=context_text,
        tags=tag or None,
        ttl=ttl,
        config_path=config_path,
    )


@memory_app.command("recall")
def memory_recall(
    key: str = typer.Argument(..., help="Key"),
    project: str = typer.Option(..., "--project", "-P", help="Project path"),
    config_path: str = typer.Option(None, "--config", "-c", help=CONFIG_OPTION_HELP),
):
    """Show one item."""
    from mnemo.cli.memory_cmd import recall_command

    recall_command(key=key, project=project, config_path=config_path)


@memory_app.command("search")
def memory_search(
    query: str = typer.Argument(..., help="Search text"),
    project: str = typer.Option(..., "--project", "-P", help="Project path"),
    tag: list[str] = typer.Option(None, "--tag", help="Tag filter (repeatable, any match)"),
    limit: int = typer.Option(None, "--limit", "-n", help="Maximum results", min=1),
    config_path: str = typer.Option(None, "--config", "-c", help=CONFIG_OPTION_HELP),
):
    """Search items by relevance."""
    from mnemo.cli.memory_cmd import search_command

    search_command(query=query, project=project, tags=tag or None, limit=limit, config_path=config_path)


@memory_app.command("list")
def memory_list(
    project: str = typer.Option(..., "--project", "-P", help="Project path"),
    limit: int = typer.Option(0, "--limit", "-n", help="Maximum items (0 for all)", min=0),
    offset: int = typer.Option(0, "--offset", help="Items to skip"),
    tag: list[str] = typer.Option(None, "--tag", help="Tag filter (repeatable, any match)"),
    output_format: str = typer.Option("table", "--format", "-f", help="Output format (table, json)"),
    config_path: str = typer.Option(None, "--config", "-c", help=CONFIG_OPTION_HELP),
):
    """List items, most recent first."""
    from mnemo.cli.memory_cmd import list_command

    list_command(
        project=project,
        limit=limit,
        offset=offset,
        tags=tag or None,
        output_format=output_format,
        config_path=config_path,
    )


@memory_app.command("forget")
def memory_forget(
    key: str = typer.Argument(..., help="Key"),
    project: str = typer.Option(..., "--project", "-P", help="Project path"),
    config_path: str = typer.Option(None, "--config", "-c", help=CONFIG_OPTION_HELP),
):
    """Delete an item."""
    from mnemo.cli.memory_cmd import forget_command

    forget_command(key=key, project=project, config_path=config_path)


# Handoff commands
handoff_app = typer.Typer(help="Capture and resume session handoffs")
app.add_typer(handoff_app, name="handoff")


@handoff_app.command("prepare")
def handoff_prepare(
    session_id: str = typer.Argument(..., help="Session handing off"),
    project: str = typer.Option(..., "--project", "-P", help="Project path"),
    include: list[str] = typer.Option(
        None, "--include", "-i", help="Category to capture (decisions, memory, files); repeatable"
    ),
    empty: bool = typer.Option(False, "--empty", help="Capture nothing"),
    config_path: str = typer.Option(None, "--config", "-c", help=CONFIG_OPTION_HELP),
):
    """Create a handoff for the next session."""
    from mnemo.cli.handoff_cmd import prepare_command

    prepare_command(
        session_id=session_id,
        project=project,
        include=[] if empty else (include or None),
        config_path=config_path,
    )


@handoff_app.command("resume")
def handoff_resume(
    handoff_id: str = typer.Argument(..., help="Handoff id"),
    new_session_id: str = typer.Argument(..., help="Session taking over"),
    project: str = typer.Option(..., "--project", "-P", help="Project path"),
    config_path: str = typer.Option(None, "--config", "-c", help=CONFIG_OPTION_HELP),
):
    """Resume a handoff in a new session."""
    from mnemo.cli.handoff_cmd import resume_command

    resume_command(
        handoff_id=handoff_id,
        new_session_id=new_session_id,
        project=project,
        config_path=config_path,
    )


@handoff_app.command("list")
def handoff_list(
    project: str = typer.Option(..., "--project", "-P", help="Project path"),
    output_format: str = typer.Option("table", "--format", "-f", help="Output format (table, json)"),
    config_path: str = typer.Option(None, "--config", "-c", help=CONFIG_OPTION_HELP),
):
    """List handoffs, most recent first."""
    from mnemo.cli.handoff_cmd import list_command

    list_command(project=project, output_format=output_format, config_path=config_path)


def main():
    """Entry point for the CLI."""
    ensure_supported_python()
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
