"""Process start-up checks and logging setup."""

import logging
import sys

from rich.console import Console

MIN_PYTHON = (3, 11)

LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"


def python_version_ok(version_info: tuple[int, ...] | None = None) -> bool:
    """Check the interpreter against the minimum supported version."""
    current = tuple(version_info or sys.version_info)[:2]
    return current >= MIN_PYTHON


def ensure_supported_python(version_info: tuple[int, ...] | None = None) -> None:
    """Exit immediately when running on an unsupported interpreter.

    Args:
        version_info: Version to check (defaults to the running interpreter)
    """
    if python_version_ok(version_info):
        return

    detected = ".".join(str(part) for part in (version_info or sys.version_info)[:3])
    required = ".".join(str(part) for part in MIN_PYTHON)
    console = Console(stderr=True)
    console.print(f"[red]mnemo requires Python {required} or later.[/red]")
    console.print(f"   Detected Python {detected}.")
    console.print("   Please upgrade Python and reinstall:")
    console.print(f"   - pipx install --python python{required} mnemo")
    sys.exit(1)


def configure_logging(level: str = "INFO") -> None:
    """Send diagnostics to stderr; stdout is reserved for tool output."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        stream=sys.stderr,
        format=LOG_FORMAT,
        force=True,
    )
