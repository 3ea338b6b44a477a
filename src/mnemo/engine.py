"""Wiring of the stores around one database handle."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from mnemo.config.schema import MnemoConfig
from mnemo.context.injector import ContextInjector
from mnemo.handoff.store import SessionHandoffStore
from mnemo.history import ConversationHistory
from mnemo.memory.store import WorkingMemoryStore
from mnemo.storage.database import MemoryDatabase, open_database

logger = logging.getLogger(__name__)


@dataclass
class MemoryEngine:
    """The three stores sharing one explicitly owned database handle."""

    db: MemoryDatabase
    memory: WorkingMemoryStore
    history: ConversationHistory
    handoffs: SessionHandoffStore
    injector: ContextInjector

    @classmethod
    def from_database(cls, db: MemoryDatabase, config: MnemoConfig | None = None) -> "MemoryEngine":
        """Build every component on top of an open handle.

        Args:
            db: Open database handle (the caller keeps ownership)
            config: Configuration; defaults when None
        """
        config = config or MnemoConfig()
        memory = WorkingMemoryStore(db, search_limit=config.memory.search_limit)
        history = ConversationHistory(db)
        handoffs = SessionHandoffStore(db, memory, history=history, config=config.handoff)
        injector = ContextInjector(memory, handoffs, history=history, config=config.context)
        return cls(db=db, memory=memory, history=history, handoffs=handoffs, injector=injector)


@contextmanager
def open_engine(config: MnemoConfig, compact: bool | None = None) -> Iterator[MemoryEngine]:
    """Open the configured database and yield a ready engine.

    The database is closed when the block exits, however it exits.

    Args:
        config: Configuration naming the database and limits
        compact: Remove expired memory before yielding; None follows
                 ``memory.compact_on_startup``
    """
    storage = config.storage
    with open_database(storage.path, busy_timeout=storage.busy_timeout, wal=storage.wal) as db:
        engine = MemoryEngine.from_database(db, config)
        if config.memory.compact_on_startup if compact is None else compact:
            engine.memory.compact()
        yield engine
