"""Session handoff snapshots and resumption."""

import logging
import sqlite3
import uuid
from collections.abc import Iterable

from pydantic import ValidationError

from mnemo.config.schema import HandoffConfig
from mnemo.errors import InvalidArgumentsError
from mnemo.handoff.schema import (
    EMPTY_HANDOFF_SUMMARY,
    HandoffCategory,
    HandoffSnapshot,
    SessionHandoff,
    parse_categories,
)
from mnemo.history import ConversationHistory
from mnemo.memory.store import WorkingMemoryStore
from mnemo.storage.database import MemoryDatabase
from mnemo.utils import ms_to_datetime, now_ms, safe_json_loads

logger = logging.getLogger(__name__)


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


def summarize(session_id: str, snapshot: HandoffSnapshot, categories: list[HandoffCategory]) -> str:
    """Build the one-paragraph summary stored with a handoff."""
    if not categories:
        return EMPTY_HANDOFF_SUMMARY

    parts = []
    if HandoffCategory.DECISIONS in categories:
        parts.append(_plural(len(snapshot.decisions), "decision"))
    if HandoffCategory.MEMORY in categories:
        parts.append(_plural(len(snapshot.working_memory), "working memory item"))
    if HandoffCategory.FILES in categories:
        parts.append(_plural(len(snapshot.active_files), "active file"))

    summary = f"Handoff from session {session_id}: {', '.join(parts)}."
    if snapshot.decisions:
        summary += f" Latest decision: {snapshot.decisions[0].decision_text}"
    return summary


class SessionHandoffStore:
    """Creates, lists and resumes handoffs for a project.

    A handoff is immutable once written except for ``resumed_by_session_id``
    and ``resumed_at``, which every resumption overwrites.
    """

    def __init__(
        self,
        db: MemoryDatabase,
        memory: WorkingMemoryStore,
        history: ConversationHistory | None = None,
        config: HandoffConfig | None = None,
    ):
        """Initialize the store.

        Args:
            db: Open database handle
            memory: Working memory captured by handoffs
            history: Source of decisions and active files
            config: Capture limits
        """
        self.db = db
        self.memory = memory
        self.history = history or ConversationHistory(db)
        self.config = config or HandoffConfig()

    def prepare_handoff(
        self,
        session_id: str,
        project_path: str,
        include: Iterable[str] | None = None,
    ) -> SessionHandoff:
        """Capture the current state of a project into a new handoff.

        Every call creates a new handoff with a fresh id.

        Args:
            session_id: Session handing off
            project_path: Project scope
            include: Categories to capture (None for all). An empty list
                     captures nothing and stores the "Empty handoff." summary.

        Returns:
            The stored handoff

        Raises:
            InvalidArgumentsError: If include names an unknown category
        """
        if not isinstance(session_id, str) or not session_id:
            raise InvalidArgumentsError("session_id must be a non-empty string")
        categories = parse_categories(include)

        snapshot = HandoffSnapshot()
        if HandoffCategory.DECISIONS in categories:
            snapshot.decisions = self.history.recent_decisions(
                project_path, limit=self.config.max_decisions
            )
        if HandoffCategory.MEMORY in categories and self.config.max_memory_items > 0:
            snapshot.working_memory = self.memory.list(
                project_path, limit=self.config.max_memory_items
            )
        if HandoffCategory.FILES in categories:
            snapshot.active_files = self.history.active_files(
                project_path, limit=self.config.max_files
            )
        snapshot.context_summary = summarize(session_id, snapshot, categories)

        created_at = now_ms()
        handoff = SessionHandoff(
            id=str(uuid.uuid4()),
            from_session_id=session_id,
            project_path=project_path,
            created_at=ms_to_datetime(created_at),
            **snapshot.model_dump(),
        )

        with self.db.transaction("prepare handoff") as conn:
            conn.execute(
                """
                INSERT INTO session_handoffs
                (id, from_session_id, project_path, created_at, handoff_data)
                VALUES (?, ?, ?, ?, ?)
            """,
                (
                    handoff.id,
                    handoff.from_session_id,
                    handoff.project_path,
                    created_at,
                    snapshot.model_dump_json(by_alias=True),
                ),
            )

        logger.info("Prepared handoff %s from session %s", handoff.id, session_id)
        return handoff

    def get_handoff(self, handoff_id: str, project_path: str) -> SessionHandoff | None:
        """Get a handoff by id, or None if it doesn't exist for the project."""
        row = self.db.fetchone(
            "get handoff",
            "SELECT * FROM session_handoffs WHERE id = ? AND project_path = ?",
            (handoff_id, project_path),
        )
        return self._row_to_handoff(row) if row else None

    def resume_from_handoff(
        self,
        handoff_id: str,
        project_path: str,
        new_session_id: str,
    ) -> SessionHandoff | None:
        """Mark a handoff as resumed by a new session.

        Resuming is repeatable; the latest call's session and time win.

        Args:
            handoff_id: Handoff to resume
            project_path: Project scope
            new_session_id: Session taking over

        Returns:
            The updated handoff, or None if no such handoff exists for the project
        """
        with self.db.transaction("resume handoff") as conn:
            cursor = conn.execute(
                """
                UPDATE session_handoffs
                SET resumed_by_session_id = ?, resumed_at = ?
                WHERE id = ? AND project_path = ?
            """,
                (new_session_id, now_ms(), handoff_id, project_path),
            )
            if cursor.rowcount == 0:
                return None
            row = conn.execute(
                "SELECT * FROM session_handoffs WHERE id = ?", (handoff_id,)
            ).fetchone()

        logger.info("Handoff %s resumed by session %s", handoff_id, new_session_id)
        return self._row_to_handoff(row)

    def list_handoffs(self, project_path: str) -> list[SessionHandoff]:
        """All handoffs for a project, most recent first."""
        rows = self.db.fetchall(
            "list handoffs",
            """
            SELECT * FROM session_handoffs
            WHERE project_path = ?
            ORDER BY created_at DESC, rowid DESC
        """,
            (project_path,),
        )
        return [self._row_to_handoff(row) for row in rows]

    def latest_handoff(self, project_path: str) -> SessionHandoff | None:
        """The most recent handoff for a project."""
        row = self.db.fetchone(
            "latest handoff",
            """
            SELECT * FROM session_handoffs
            WHERE project_path = ?
            ORDER BY created_at DESC, rowid DESC
            LIMIT 1
        """,
            (project_path,),
        )
        return self._row_to_handoff(row) if row else None

    def _row_to_handoff(self, row: sqlite3.Row) -> SessionHandoff:
        data = safe_json_loads(row["handoff_data"], {})
        try:
            snapshot = HandoffSnapshot.model_validate(data)
        except ValidationError:
            logger.warning("Handoff %s has an unreadable snapshot; returning it empty", row["id"])
            snapshot = HandoffSnapshot()

        return SessionHandoff(
            id=row["id"],
            from_session_id=row["from_session_id"],
            project_path=row["project_path"],
            created_at=ms_to_datetime(row["created_at"]),
            resumed_by_session_id=row["resumed_by_session_id"],
            resumed_at=ms_to_datetime(row["resumed_at"]),
            **snapshot.model_dump(),
        )
