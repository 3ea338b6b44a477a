"""Working memory: a TTL-aware key/value store with lexical search."""

from __future__ import annotations

import json
import logging
import math
import re
import sqlite3
import uuid
from collections.abc import Sequence
from typing import Any

from mnemo.errors import InvalidArgumentsError
from mnemo.memory.schema import WorkingMemoryItem
from mnemo.storage.database import MemoryDatabase
from mnemo.utils import MAX_SQLITE_INT, expiry_from_ttl, ms_to_datetime, now_ms, safe_json_loads

logger = logging.getLogger(__name__)

# FTS5 treats these as operators only when written in upper case
FTS_OPERATORS = frozenset({"AND", "OR", "NOT", "NEAR"})
MAX_QUERY_TERMS = 20

_TERM_PATTERN = re.compile(r"\w+")

_NOT_EXPIRED = "(wm.expires_at IS NULL OR wm.expires_at > ?)"


def build_fts_query(query: str | None) -> str:
    """Turn free-form text into a safe FTS5 MATCH expression.

    FTS5 has strict syntax and punctuation breaks it, so only word tokens are
    kept. Each token is quoted (a quoted string is always a literal in FTS5)
    and the tokens are joined with OR for better recall. Bare operator words
    are dropped.

    Args:
        query: User query

    Returns:
        MATCH expression, or "" when the query has no searchable terms
    """
    if not query:
        return ""

    terms = [t for t in _TERM_PATTERN.findall(query) if t not in FTS_OPERATORS]
    terms = list(dict.fromkeys(t.lower() for t in terms))[:MAX_QUERY_TERMS]
    return " OR ".join(f'"{term}"' for term in terms)


def _tag_clause(tags: Sequence[str] | None) -> tuple[str, list[Any]]:
    """SQL fragment keeping items that carry at least one of ``tags``."""
    if not tags:
        return "", []
    placeholders = ", ".join("?" for _ in tags)
    clause = (
        " AND EXISTS (SELECT 1 FROM json_each(wm.tags)"
        f" WHERE json_each.value IN ({placeholders}))"
    )
    return clause, list(tags)


def _require_text(name: str, value: Any, allow_none: bool = False) -> None:
    if value is None and allow_none:
        return
    if not isinstance(value, str):
        raise InvalidArgumentsError(f"{name} must be a string")
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as e:
        raise InvalidArgumentsError(f"{name} is not valid UTF-8 text") from e


def _validate_tags(tags: Any) -> list[str]:
    if tags is None:
        return []
    if isinstance(tags, str) or not isinstance(tags, Sequence):
        raise InvalidArgumentsError("tags must be a list of strings")
    for tag in tags:
        _require_text("tag", tag)
    return list(tags)


def _validate_ttl(ttl: Any) -> None:
    if ttl is None:
        return
    if isinstance(ttl, bool) or not isinstance(ttl, int | float):
        raise InvalidArgumentsError("ttl must be a number of seconds")
    if not math.isfinite(ttl):
        raise InvalidArgumentsError("ttl must be finite")


def _page_bounds(limit: int, offset: int) -> tuple[int, int]:
    """Map limit and offset onto SQLite's 64-bit range (-1 is no limit)."""
    limit = -1 if limit <= 0 or limit >= MAX_SQLITE_INT else limit
    return limit, min(max(offset, 0), MAX_SQLITE_INT)


def _row_to_item(row: sqlite3.Row) -> WorkingMemoryItem:
    tags = safe_json_loads(row["tags"], [])
    if not isinstance(tags, list):
        tags = []
    return WorkingMemoryItem(
        id=row["id"],
        key=row["key"],
        value=row["value"],
        context=row["context"],
        tags=[str(tag) for tag in tags],
        session_id=row["session_id"],
        project_path=row["project_path"],
        created_at=ms_to_datetime(row["created_at"]),
        updated_at=ms_to_datetime(row["updated_at"]),
        expires_at=ms_to_datetime(row["expires_at"]),
    )


class WorkingMemoryStore:
    """Persistent per-project key/value store.

    Items are unique on ``(project_path, key)``. Expired items stay in the
    table until :meth:`compact` runs but are invisible to every read.
    """

    def __init__(self, db: MemoryDatabase, search_limit: int = 20):
        """Initialize the store.

        Args:
            db: Open database handle
            search_limit: Default maximum results for relevance search
        """
        self.db = db
        self.search_limit = search_limit

    def remember(
        self,
        key: str,
        value: str,
        project_path: str,
        context: str | None = None,
        tags: Sequence[str] | None = None,
        session_id: str | None = None,
        ttl: float | None = None,
    ) -> WorkingMemoryItem:
        """Store or update an item.

        Args:
            key: Item key, unique within the project
            value: Item value
            project_path: Project the item belongs to
            context: Optional free-text context
            tags: Optional ordered tags (duplicates kept)
            session_id: Optional session that wrote the item
            ttl: Seconds until expiry. None or 0 never expires; negative
                 values are expired from the moment of writing.

        Returns:
            The stored item

        Raises:
            InvalidArgumentsError: If an argument has the wrong type
            StorageError: If the write fails
        """
        _require_text("key", key)
        _require_text("value", value)
        _require_text("project_path", project_path)
        _require_text("context", context, allow_none=True)
        _require_text("session_id", session_id, allow_none=True)
        tag_list = _validate_tags(tags)
        _validate_ttl(ttl)

        now = now_ms()
        expires_at = expiry_from_ttl(ttl, now)
        tags_json = json.dumps(tag_list, ensure_ascii=False)

        with self.db.transaction("remember") as conn:
            existing = conn.execute(
                "SELECT id, created_at FROM working_memory WHERE project_path = ? AND key = ?",
                (project_path, key),
            ).fetchone()

            if existing is None:
                item_id = str(uuid.uuid4())
                created_at = now
                conn.execute(
                    """
                    INSERT INTO working_memory
                    (id, key, value, context, tags, session_id, project_path,
                     created_at, updated_at, expires_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                    (
                        item_id,
                        key,
                        value,
                        context,
                        tags_json,
                        session_id,
                        project_path,
                        created_at,
                        now,
                        expires_at,
                    ),
                )
            else:
                item_id = existing["id"]
                created_at = existing["created_at"]
                conn.execute(
                    """
                    UPDATE working_memory
                    SET value = ?, context = ?, tags = ?, session_id = ?,
                        updated_at = ?, expires_at = ?
                    WHERE id = ?
                """,
                    (
                        value,
                        context,
                        tags_json,
                        session_id,
                        max(now, created_at),
                        expires_at,
                        item_id,
                    ),
                )
                conn.execute("DELETE FROM working_memory_fts WHERE id = ?", (item_id,))

            conn.execute(
                "INSERT INTO working_memory_fts (id, key, value, context) VALUES (?, ?, ?, ?)",
                (item_id, key, value, context),
            )

        logger.debug("Stored memory %s for %s", item_id, project_path)

        return WorkingMemoryItem(
            id=item_id,
            key=key,
            value=value,
            context=context,
            tags=tag_list,
            session_id=session_id,
            project_path=project_path,
            created_at=ms_to_datetime(created_at),
            updated_at=ms_to_datetime(max(now, created_at)),
            expires_at=ms_to_datetime(expires_at),
        )

    def recall(self, key: str, project_path: str) -> WorkingMemoryItem | None:
        """Get an item by key.

        Args:
            key: Item key
            project_path: Project scope

        Returns:
            The item, or None if it is unknown or expired
        """
        _require_text("key", key)
        _require_text("project_path", project_path)
        row = self.db.fetchone(
            "recall",
            f"SELECT * FROM working_memory AS wm"
            f" WHERE wm.project_path = ? AND wm.key = ? AND {_NOT_EXPIRED}",
            (project_path, key, now_ms()),
        )
        return _row_to_item(row) if row else None

    def recall_relevant(
        self,
        query: str | None,
        project_path: str,
        tags: Sequence[str] | None = None,
        limit: int | None = None,
    ) -> list[WorkingMemoryItem]:
        """Search items by lexical relevance over key, value and context.

        A query with no searchable terms (empty, punctuation or operators
        only) returns the most recently updated items instead. If the search
        engine rejects the expression the result is empty.

        Args:
            query: Free-form search text
            project_path: Project scope
            tags: Optional tags; items must carry at least one
            limit: Maximum results (defaults to the store's search limit)

        Returns:
            Items ordered by relevance, then most recently updated
        """
        _require_text("query", query, allow_none=True)
        _require_text("project_path", project_path)
        tags = _validate_tags(tags)
        limit = self.search_limit if limit is None or limit <= 0 else min(limit, MAX_SQLITE_INT)
        match = build_fts_query(query)
        if not match:
            return self.list(project_path, limit=limit, tags=tags)

        tag_sql, tag_params = _tag_clause(tags)
        sql = (
            "SELECT wm.*, bm25(working_memory_fts) AS score"
            " FROM working_memory_fts"
            " JOIN working_memory AS wm ON wm.id = working_memory_fts.id"
            f" WHERE working_memory_fts MATCH ? AND wm.project_path = ? AND {_NOT_EXPIRED}"
            f"{tag_sql}"
            " ORDER BY score ASC, wm.updated_at DESC, wm.rowid DESC"
            " LIMIT ?"
        )
        params = [match, project_path, now_ms(), *tag_params, limit]

        with self.db.reading("recall relevant") as conn:
            try:
                rows = conn.execute(sql, params).fetchall()
            except sqlite3.OperationalError as e:
                logger.warning("Lexical search degraded to empty result: %s", e)
                return []

        return [_row_to_item(row) for row in rows]

    def list(
        self,
        project_path: str,
        limit: int = 0,
        offset: int = 0,
        tags: Sequence[str] | None = None,
    ) -> list[WorkingMemoryItem]:
        """List items, most recently updated first.

        Args:
            project_path: Project scope
            limit: Maximum items; 0 (or less) means unlimited
            offset: Items to skip; negative values are treated as 0
            tags: Optional tags; items must carry at least one

        Returns:
            Non-expired items
        """
        _require_text("project_path", project_path)
        limit, offset = _page_bounds(limit, offset)
        tag_sql, tag_params = _tag_clause(_validate_tags(tags))
        sql = (
            "SELECT wm.* FROM working_memory AS wm"
            f" WHERE wm.project_path = ? AND {_NOT_EXPIRED}{tag_sql}"
            " ORDER BY wm.updated_at DESC, wm.rowid DESC"
            " LIMIT ? OFFSET ?"
        )
        params = [
            project_path,
            now_ms(),
            *tag_params,
            limit,
            offset,
        ]
        rows = self.db.fetchall("list memory", sql, params)
        return [_row_to_item(row) for row in rows]

    def count(self, project_path: str) -> int:
        """Count non-expired items for a project."""
        row = self.db.fetchone(
            "count memory",
            f"SELECT COUNT(*) FROM working_memory AS wm WHERE wm.project_path = ? AND {_NOT_EXPIRED}",
            (project_path, now_ms()),
        )
        return int(row[0]) if row else 0

    def forget(self, key: str, project_path: str) -> bool:
        """Delete an item, expired or not.

        Returns:
            True if an item was deleted, False if the key was unknown
        """
        _require_text("key", key)
        _require_text("project_path", project_path)
        with self.db.transaction("forget") as conn:
            row = conn.execute(
                "SELECT id FROM working_memory WHERE project_path = ? AND key = ?",
                (project_path, key),
            ).fetchone()
            if row is None:
                return False
            conn.execute("DELETE FROM working_memory_fts WHERE id = ?", (row["id"],))
            conn.execute("DELETE FROM working_memory WHERE id = ?", (row["id"],))
        return True

    def clear(self, project_path: str) -> int:
        """Delete every item of a project.

        Returns:
            Number of items deleted
        """
        with self.db.transaction("clear memory") as conn:
            conn.execute(
                "DELETE FROM working_memory_fts WHERE id IN"
                " (SELECT id FROM working_memory WHERE project_path = ?)",
                (project_path,),
            )
            cursor = conn.execute(
                "DELETE FROM working_memory WHERE project_path = ?", (project_path,)
            )
            return cursor.rowcount

    def compact(self, project_path: str | None = None) -> int:
        """Physically delete expired items.

        Args:
            project_path: Limit compaction to one project (None for all)

        Returns:
            Number of items deleted
        """
        where = "expires_at IS NOT NULL AND expires_at <= ?"
        params: list[Any] = [now_ms()]
        if project_path is not None:
            where += " AND project_path = ?"
            params.append(project_path)

        with self.db.transaction("compact memory") as conn:
            conn.execute(
                f"DELETE FROM working_memory_fts WHERE id IN (SELECT id FROM working_memory WHERE {where})",
                params,
            )
            cursor = conn.execute(f"DELETE FROM working_memory WHERE {where}", params)
            removed = cursor.rowcount

        if removed:
            logger.info("Compacted %d expired memory items", removed)
        return removed
