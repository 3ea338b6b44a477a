"""SQLite database handle shared by the mnemo stores.

Schema Design:
- working_memory: project-scoped key/value items, unique on (project_path, key)
- working_memory_fts: FTS5 mirror of key/value/context keyed by item id
- session_handoffs: handoff snapshots and their resumption fields
- conversations, messages, decisions, tool_uses: owned by the conversation
  indexer; created here only so the engine can run standalone, never written
  by the stores

One handle owns one connection. Writes run inside ``BEGIN IMMEDIATE`` so the
primary row and its FTS row are committed together, and SQLite's busy timeout
serializes writers from other processes sharing the file.
"""

import logging
import sqlite3
import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from mnemo.errors import StorageError

logger = logging.getLogger(__name__)

IN_MEMORY = ":memory:"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS mnemo_metadata (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS working_memory (
    id TEXT PRIMARY KEY,
    key TEXT NOT NULL,
    value TEXT NOT NULL,
    context TEXT,
    tags TEXT NOT NULL DEFAULT '[]',
    session_id TEXT,
    project_path TEXT NOT NULL,
    created_at INTEGER NOT NULL,
    updated_at INTEGER NOT NULL,
    expires_at INTEGER,
    embedding BLOB,
    UNIQUE(project_path, key)
);

CREATE INDEX IF NOT EXISTS idx_wm_project_updated
    ON working_memory(project_path, updated_at);
CREATE INDEX IF NOT EXISTS idx_wm_expires ON working_memory(expires_at);

CREATE VIRTUAL TABLE IF NOT EXISTS working_memory_fts USING fts5(
    id UNINDEXED,
    key,
    value,
    context
);

CREATE TABLE IF NOT EXISTS session_handoffs (
    id TEXT PRIMARY KEY,
    from_session_id TEXT NOT NULL,
    project_path TEXT NOT NULL,
    created_at INTEGER NOT NULL,
    handoff_data TEXT NOT NULL,
    resumed_by_session_id TEXT,
    resumed_at INTEGER
);

CREATE INDEX IF NOT EXISTS idx_handoffs_project_created
    ON session_handoffs(project_path, created_at);

CREATE TABLE IF NOT EXISTS conversations (
    id TEXT PRIMARY KEY,
    session_id TEXT NOT NULL,
    project_path TEXT NOT NULL,
    created_at INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS messages (
    id TEXT PRIMARY KEY,
    conversation_id TEXT NOT NULL,
    role TEXT NOT NULL,
    content TEXT,
    timestamp INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS decisions (
    id TEXT PRIMARY KEY,
    message_id TEXT NOT NULL,
    decision_text TEXT NOT NULL,
    rationale TEXT,
    context TEXT,
    timestamp INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS tool_uses (
    id TEXT PRIMARY KEY,
    message_id TEXT NOT NULL,
    tool_name TEXT NOT NULL,
    parameters TEXT,
    result TEXT,
    timestamp INTEGER NOT NULL
);
"""


class MemoryDatabase:
    """SQLite handle owned by the process entry point.

    Thread-safe: in-process callers are serialized by a lock. Every
    ``sqlite3.Error`` escaping a read or write is logged with its traceback
    and re-raised as :class:`StorageError`.
    """

    SCHEMA_VERSION = 1

    def __init__(
        self,
        db_path: str | Path = IN_MEMORY,
        busy_timeout: float = 30.0,
        wal: bool = True,
    ):
        """Open the database and create the schema if needed.

        Args:
            db_path: Path to SQLite database file, or ":memory:"
            busy_timeout: Seconds to wait on a lock held by another connection
            wal: Enable write-ahead logging (ignored for in-memory databases)
        """
        if str(db_path) == IN_MEMORY:
            self.db_path: Path | None = None
            target = IN_MEMORY
        else:
            self.db_path = Path(db_path).expanduser()
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            target = str(self.db_path)

        self._lock = threading.RLock()
        try:
            self._conn: sqlite3.Connection | None = sqlite3.connect(
                target,
                timeout=busy_timeout,
                isolation_level=None,
                check_same_thread=False,
            )
            self._conn.row_factory = sqlite3.Row
            if wal and self.db_path is not None:
                self._conn.execute("PRAGMA journal_mode=WAL")
                self._conn.execute("PRAGMA synchronous=NORMAL")
            self._initialize_schema()
        except sqlite3.Error as e:
            logger.exception("Failed to open memory database")
            raise StorageError("open database") from e

    def _initialize_schema(self) -> None:
        """Create tables and indexes if they don't exist."""
        with self.transaction("initialize schema") as conn:
            for statement in _SCHEMA.split(";"):
                if statement.strip():
                    conn.execute(statement)
            row = conn.execute(
                "SELECT value FROM mnemo_metadata WHERE key = 'schema_version'"
            ).fetchone()
            if row is None:
                conn.execute(
                    "INSERT INTO mnemo_metadata (key, value) VALUES ('schema_version', ?)",
                    (str(self.SCHEMA_VERSION),),
                )

    @property
    def connection(self) -> sqlite3.Connection:
        """The underlying connection.

        Raises:
            StorageError: If the handle has been closed
        """
        if self._conn is None:
            raise StorageError("database is closed")
        return self._conn

    @property
    def is_closed(self) -> bool:
        return self._conn is None

    @contextmanager
    def transaction(self, operation: str) -> Iterator[sqlite3.Connection]:
        """Run a block of writes as one atomic unit.

        Args:
            operation: Short description used in logs and the error message

        Yields:
            Connection with an open ``BEGIN IMMEDIATE`` transaction

        Raises:
            StorageError: If SQLite fails; the transaction is rolled back
        """
        with self._lock:
            conn = self.connection
            try:
                conn.execute("BEGIN IMMEDIATE")
            except sqlite3.Error as e:
                logger.exception("Could not begin transaction for %s", operation)
                raise StorageError(operation) from e

            try:
                yield conn
            except sqlite3.Error as e:
                conn.rollback()
                logger.exception("Storage failure during %s", operation)
                raise StorageError(operation) from e
            except BaseException:
                conn.rollback()
                raise

            try:
                conn.commit()
            except sqlite3.Error as e:
                conn.rollback()
                logger.exception("Commit failed during %s", operation)
                raise StorageError(operation) from e

    @contextmanager
    def reading(self, operation: str) -> Iterator[sqlite3.Connection]:
        """Run a block of reads, converting engine errors to StorageError.

        Args:
            operation: Short description used in logs and the error message

        Yields:
            Connection
        """
        with self._lock:
            conn = self.connection
            try:
                yield conn
            except sqlite3.Error as e:
                logger.exception("Storage failure during %s", operation)
                raise StorageError(operation) from e

    def fetchall(
        self, operation: str, sql: str, params: Sequence[Any] = ()
    ) -> list[sqlite3.Row]:
        """Execute a parameter-bound query and return every row."""
        with self.reading(operation) as conn:
            return conn.execute(sql, params).fetchall()

    def fetchone(
        self, operation: str, sql: str, params: Sequence[Any] = ()
    ) -> sqlite3.Row | None:
        """Execute a parameter-bound query and return the first row."""
        with self.reading(operation) as conn:
            row: sqlite3.Row | None = conn.execute(sql, params).fetchone()
            return row

    def table_names(self) -> set[str]:
        """Names of all tables, including virtual tables."""
        rows = self.fetchall(
            "list tables", "SELECT name FROM sqlite_master WHERE type = 'table'"
        )
        return {row["name"] for row in rows}

    def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def __enter__(self) -> "MemoryDatabase":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def fts5_available() -> bool:
    """Check whether the linked SQLite library was built with FTS5."""
    conn = sqlite3.connect(IN_MEMORY)
    try:
        conn.execute("CREATE VIRTUAL TABLE probe USING fts5(body)")
        return True
    except sqlite3.OperationalError:
        return False
    finally:
        conn.close()


@contextmanager
def open_database(
    db_path: str | Path,
    busy_timeout: float = 30.0,
    wal: bool = True,
) -> Iterator[MemoryDatabase]:
    """Open a database handle and guarantee it is closed on exit.

    Args:
        db_path: Path to SQLite database file, or ":memory:"
        busy_timeout: Seconds to wait on a lock held by another connection
        wal: Enable write-ahead logging

    Yields:
        Open MemoryDatabase
    """
    db = MemoryDatabase(db_path, busy_timeout=busy_timeout, wal=wal)
    logger.debug("Opened memory database at %s", db.db_path or IN_MEMORY)
    try:
        yield db
    finally:
        db.close()
        logger.debug("Closed memory database")
