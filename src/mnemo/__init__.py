"""Mnemo - Durable project memory for AI coding assistants.

Mnemo stores project-scoped facts, decisions and session snapshots in a local
SQLite database so that a later session can recover useful context within a
fixed token budget.

Key modules:

- :mod:`mnemo.memory` - Working memory: TTL-aware key/value store with FTS5 search
- :mod:`mnemo.handoff` - Session handoff snapshots and resumption
- :mod:`mnemo.context` - Token-budgeted context assembly across sources
- :mod:`mnemo.storage` - SQLite database handle and schema
- :mod:`mnemo.tools` - Tool registry used by the MCP server and CLI
- :mod:`mnemo.mcp` - Model Context Protocol server and transports
"""

__version__ = "0.2.0"
