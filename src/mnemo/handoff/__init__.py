"""Session handoffs: capture state at the end of a session, resume it in the next."""

from mnemo.handoff.schema import (
    EMPTY_HANDOFF_SUMMARY,
    HandoffCategory,
    HandoffSnapshot,
    SessionHandoff,
)
from mnemo.handoff.store import SessionHandoffStore

__all__ = [
    "EMPTY_HANDOFF_SUMMARY",
    "HandoffCategory",
    "HandoffSnapshot",
    "SessionHandoff",
    "SessionHandoffStore",
]
