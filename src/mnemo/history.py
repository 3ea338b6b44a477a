"""Read-only access to records written by the conversation indexer.

Decisions and tool uses are extracted from conversation transcripts by a
separate indexer. They reach a project through ``messages`` and
``conversations``; nothing in this module writes to those tables.
"""

from datetime import datetime

from mnemo.models import CamelModel
from mnemo.storage.database import MemoryDatabase
from mnemo.utils import ms_to_datetime, safe_json_loads

# Tools whose ``file_path`` parameter marks a file as touched by the session
FILE_TOOLS = frozenset({"Read", "Edit", "MultiEdit", "Write", "NotebookEdit"})


class Decision(CamelModel):
    """A decision extracted from a conversation."""

    id: str
    message_id: str
    decision_text: str
    rationale: str | None = None
    context: str | None = None
    timestamp: datetime


class ActiveFile(CamelModel):
    """A file recently touched by a file tool."""

    path: str
    last_tool: str
    last_touched: datetime


class ConversationHistory:
    """Queries over the indexer-owned tables."""

    def __init__(self, db: MemoryDatabase):
        self.db = db

    def recent_decisions(self, project_path: str, limit: int = 20) -> list[Decision]:
        """Decisions for a project, most recent first."""
        if limit <= 0:
            return []
        rows = self.db.fetchall(
            "recent decisions",
            """
            SELECT d.* FROM decisions AS d
            JOIN messages AS m ON m.id = d.message_id
            JOIN conversations AS c ON c.id = m.conversation_id
            WHERE c.project_path = ?
            ORDER BY d.timestamp DESC, d.rowid DESC
            LIMIT ?
        """,
            (project_path, limit),
        )
        return [
            Decision(
                id=row["id"],
                message_id=row["message_id"],
                decision_text=row["decision_text"],
                rationale=row["rationale"],
                context=row["context"],
                timestamp=ms_to_datetime(row["timestamp"]),
            )
            for row in rows
        ]

    def active_files(self, project_path: str, limit: int = 20) -> list[ActiveFile]:
        """Files most recently touched by file tools in a project.

        Tool parameters are stored as JSON by the indexer; rows whose
        parameters cannot be parsed are skipped.
        """
        if limit <= 0:
            return []
        placeholders = ", ".join("?" for _ in FILE_TOOLS)
        rows = self.db.fetchall(
            "active files",
            f"""
            SELECT t.tool_name, t.parameters, t.timestamp FROM tool_uses AS t
            JOIN messages AS m ON m.id = t.message_id
            JOIN conversations AS c ON c.id = m.conversation_id
            WHERE c.project_path = ? AND t.tool_name IN ({placeholders})
            ORDER BY t.timestamp DESC, t.rowid DESC
        """,
            (project_path, *sorted(FILE_TOOLS)),
        )

        files: dict[str, ActiveFile] = {}
        for row in rows:
            params = safe_json_loads(row["parameters"], {})
            path = params.get("file_path") if isinstance(params, dict) else None
            if not isinstance(path, str) or not path or path in files:
                continue
            files[path] = ActiveFile(
                path=path,
                last_tool=row["tool_name"],
                last_touched=ms_to_datetime(row["timestamp"]),
            )
            if len(files) >= limit:
                break
        return list(files.values())
