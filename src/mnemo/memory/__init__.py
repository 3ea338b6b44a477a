"""Working memory for mnemo.

Provides a SQLite-backed, project-scoped key/value store with TTL expiry and
FTS5 relevance search.

Components:

- :class:`WorkingMemoryStore` - remember / recall / search / list / compact
- :class:`WorkingMemoryItem` - stored item model
"""

from mnemo.memory.schema import WorkingMemoryItem
from mnemo.memory.store import WorkingMemoryStore, build_fts_query

__all__ = ["WorkingMemoryItem", "WorkingMemoryStore", "build_fts_query"]
