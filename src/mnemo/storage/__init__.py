"""SQLite storage handle and schema."""

from mnemo.storage.database import MemoryDatabase, fts5_available, open_database

__all__ = ["MemoryDatabase", "fts5_available", "open_database"]
