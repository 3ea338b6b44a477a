"""Doctor command - environment and database health check."""

import sys
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from mnemo.config.loader import load_config, resolve_config_path
from mnemo.errors import MnemoError
from mnemo.runtime import MIN_PYTHON, python_version_ok
from mnemo.storage.database import fts5_available, open_database

console = Console()

OK = "[green]✓[/green]"
WARN = "[yellow]⚠[/yellow]"
FAIL = "[red]✗[/red]"


def doctor_command(config_path: str | None = None) -> bool:
    """Run health checks and print a report.

    Returns:
        True when no blocking issue was found
    """
    console.print(Panel.fit(
        "[bold blue]mnemo health check[/bold blue]\n"
        "Checking your installation...",
        border_style="blue",
    ))

    issues: list[str] = []
    warnings: list[str] = []

    table = Table(title="Health Check", show_header=True, header_style="bold cyan")
    table.add_column("Check", style="white", width=24)
    table.add_column("Status", width=8)
    table.add_column("Details", style="dim")

    # 1. Python version
    py_version = f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"
    required = ".".join(str(part) for part in MIN_PYTHON)
    if python_version_ok():
        table.add_row("Python Version", OK, py_version)
    else:
        table.add_row("Python Version", FAIL, f"{py_version} (need {required}+)")
        issues.append(f"Python version too old. Upgrade to Python {required} or higher.")

    # 2. Config file
    path = resolve_config_path(Path(config_path) if config_path else None)
    config = None
    try:
        config = load_config(path)
    except MnemoError as e:
        table.add_row("Configuration", FAIL, f"Invalid: {e}")
        issues.append(f"Config file is invalid: {e}")
    else:
        if path.exists():
            table.add_row("Configuration", OK, str(path))
        else:
            table.add_row("Configuration", WARN, "Not found (using defaults)")
            warnings.append(f"No config file at {path}; defaults are in use.")

    # 3. SQLite full-text search
    if fts5_available():
        table.add_row("SQLite FTS5", OK, "Available")
    else:
        table.add_row("SQLite FTS5", FAIL, "Missing")
        issues.append("The linked SQLite library lacks FTS5; relevance search cannot work.")

    # 4. Database
    if config is not None:
        storage = config.storage
        try:
            with open_database(storage.path, busy_timeout=storage.busy_timeout, wal=storage.wal) as db:
                row = db.fetchone(
                    "read schema version",
                    "SELECT value FROM mnemo_metadata WHERE key = 'schema_version'",
                )
                count = db.fetchone("count memory", "SELECT COUNT(*) AS n FROM working_memory")
            version = row["value"] if row else "?"
            table.add_row(
                "Database",
                OK,
                f"{storage.path} (schema v{version}, {count['n'] if count else 0} memory items)",
            )
        except MnemoError as e:
            table.add_row("Database", FAIL, str(e))
            issues.append(f"Cannot open database at {storage.path}.")
        except OSError as e:
            table.add_row("Database", FAIL, str(e))
            issues.append(f"Cannot create database directory for {storage.path}.")

    console.print("\n")
    console.print(table)
    console.print("\n")

    if not issues and not warnings:
        console.print(Panel.fit(
            "[bold green]✓ All checks passed![/bold green]\n"
            "Your mnemo installation is healthy.",
            border_style="green",
        ))
        return True

    if issues:
        console.print("[bold red]Issues Found:[/bold red]")
        for i, issue in enumerate(issues, 1):
            console.print(f"  {i}. {issue}")
        console.print()

    if warnings:
        console.print("[bold yellow]Warnings:[/bold yellow]")
        for i, warning in enumerate(warnings, 1):
            console.print(f"  {i}. {warning}")
        console.print()

    if issues:
        console.print("[yellow]Fix the issues above before using mnemo.[/yellow]")
    else:
        console.print("[green]No critical issues. Warnings are optional improvements.[/green]")
    return not issues
