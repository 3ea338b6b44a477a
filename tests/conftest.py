"""Pytest configuration and shared fixtures."""

import uuid

import pytest

from mnemo.config.schema import MnemoConfig
from mnemo.engine import MemoryEngine
from mnemo.storage.database import MemoryDatabase
from mnemo.utils import compact_json, now_ms

PROJECT = "/work/project"


@pytest.fixture
def default_config() -> MnemoConfig:
    """Provide a default configuration for tests."""
    return MnemoConfig()


@pytest.fixture
def db():
    """Create an in-memory database for testing."""
    database = MemoryDatabase()
    yield database
    database.close()


@pytest.fixture
def engine(db, default_config) -> MemoryEngine:
    """Wire every store to the in-memory database."""
    return MemoryEngine.from_database(db, default_config)


@pytest.fixture
def memory(engine):
    return engine.memory


@pytest.fixture
def handoffs(engine):
    return engine.handoffs


@pytest.fixture
def injector(engine):
    return engine.injector


class HistoryWriter:
    """Writes indexer-owned rows the way the conversation indexer would."""

    def __init__(self, db: MemoryDatabase, project_path: str = PROJECT):
        self.db = db
        self.project_path = project_path
        self.conversation_id = str(uuid.uuid4())
        with db.transaction("seed conversation") as conn:
            conn.execute(
                "INSERT INTO conversations (id, session_id, project_path, created_at)"
                " VALUES (?, ?, ?, ?)",
                (self.conversation_id, "session-seed", project_path, now_ms()),
            )

    def message(self, timestamp: int | None = None) -> str:
        message_id = str(uuid.uuid4())
        with self.db.transaction("seed message") as conn:
            conn.execute(
                "INSERT INTO messages (id, conversation_id, role, content, timestamp)"
                " VALUES (?, ?, 'assistant', '', ?)",
                (message_id, self.conversation_id, timestamp or now_ms()),
            )
        return message_id

    def decision(self, text: str, rationale: str | None = None, timestamp: int | None = None) -> str:
        timestamp = timestamp or now_ms()
        message_id = self.message(timestamp)
        decision_id = str(uuid.uuid4())
        with self.db.transaction("seed decision") as conn:
            conn.execute(
                "INSERT INTO decisions (id, message_id, decision_text, rationale, context, timestamp)"
                " VALUES (?, ?, ?, ?, NULL, ?)",
                (decision_id, message_id, text, rationale, timestamp),
            )
        return decision_id

    def tool_use(self, tool_name: str, parameters, timestamp: int | None = None) -> str:
        """Record a tool use; ``parameters`` is JSON-encoded unless already a string."""
        timestamp = timestamp or now_ms()
        message_id = self.message(timestamp)
        if not isinstance(parameters, str):
            parameters = compact_json(parameters)
        tool_use_id = str(uuid.uuid4())
        with self.db.transaction("seed tool use") as conn:
            conn.execute(
                "INSERT INTO tool_uses (id, message_id, tool_name, parameters, result, timestamp)"
                " VALUES (?, ?, ?, ?, NULL, ?)",
                (tool_use_id, message_id, tool_name, parameters, timestamp),
            )
        return tool_use_id


@pytest.fixture
def history_writer(db) -> HistoryWriter:
    """Seed decisions and tool uses for the default test project."""
    return HistoryWriter(db)


@pytest.fixture
def make_history_writer(db):
    """Build a history writer for any project."""

    def factory(project_path: str = PROJECT) -> HistoryWriter:
        return HistoryWriter(db, project_path)

    return factory
