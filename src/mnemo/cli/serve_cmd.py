"""CLI command for running the MCP server."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import typer
from rich.console import Console

# Stdout carries the stdio protocol
console = Console(stderr=True)

logger = logging.getLogger(__name__)

SUPPORTED_TRANSPORTS = ("stdio", "http")


def serve_command(
    transport: str | None = None,
    host: str | None = None,
    port: int | None = None,
    config_path: str | None = None,
) -> None:
    """Start the MCP server exposing mnemo tools.

    Options left as None fall back to the ``mcp`` config section.

    Args:
        transport: Transport type (stdio or http)
        host: Bind host for HTTP transport
        port: Bind port for HTTP transport
        config_path: Optional path to config file
    """
    from mnemo.config.loader import load_config
    from mnemo.errors import MnemoError
    from mnemo.runtime import configure_logging

    path = Path(config_path) if config_path else None
    try:
        config = load_config(path)
    except MnemoError as e:
        console.print(f"[red]Failed to load config: {e}[/red]")
        raise typer.Exit(1) from None

    configure_logging(config.logging.level)

    transport = transport or config.mcp.transport
    if transport == "streamable-http":
        transport = "http"
    if transport not in SUPPORTED_TRANSPORTS:
        console.print(f"[red]Unknown transport: {transport}[/red]")
        console.print("Supported: " + ", ".join(SUPPORTED_TRANSPORTS))
        raise typer.Exit(1)

    from mnemo.engine import open_engine
    from mnemo.mcp.server import create_mcp_server
    from mnemo.tools.handlers import build_registry

    try:
        with open_engine(config) as engine:
            registry = build_registry(engine)
            server = create_mcp_server(registry, server_name=config.mcp.server_name)
            logger.info("Serving %d tools from %s", len(registry), config.storage.path)

            if transport == "stdio":
                console.print("[cyan]Starting MCP server (stdio transport)...[/cyan]")
                from mnemo.mcp.transports import run_stdio_server

                asyncio.run(run_stdio_server(server))
            else:
                bind_host = host or config.mcp.host
                bind_port = port or config.mcp.port
                console.print(f"[cyan]Starting MCP server (HTTP) on {bind_host}:{bind_port}...[/cyan]")
                from mnemo.mcp.transports import run_streamable_http_server

                asyncio.run(run_streamable_http_server(server, host=bind_host, port=bind_port))
    except MnemoError as e:
        console.print(f"[red]Server failed: {e}[/red]")
        raise typer.Exit(1) from None
