"""Pydantic models for session handoffs."""

from collections.abc import Iterable
from datetime import datetime
from enum import StrEnum

from pydantic import Field

from mnemo.errors import InvalidArgumentsError
from mnemo.history import ActiveFile, Decision
from mnemo.memory.schema import WorkingMemoryItem
from mnemo.models import CamelModel

# Summary of a handoff that captured nothing. Callers match on this text.
EMPTY_HANDOFF_SUMMARY = "Empty handoff."


class HandoffCategory(StrEnum):
    """State categories a handoff can capture."""

    DECISIONS = "decisions"
    MEMORY = "memory"
    FILES = "files"


def parse_categories(include: Iterable[str] | None) -> list[HandoffCategory]:
    """Normalize an ``include`` argument.

    Args:
        include: Category names; None selects every category

    Returns:
        Distinct categories in the order given

    Raises:
        InvalidArgumentsError: If a name is not a known category
    """
    if include is None:
        return list(HandoffCategory)
    if isinstance(include, str):
        raise InvalidArgumentsError("include must be a list of category names")

    categories: list[HandoffCategory] = []
    for name in include:
        try:
            category = HandoffCategory(name)
        except ValueError:
            known = ", ".join(c.value for c in HandoffCategory)
            raise InvalidArgumentsError(
                f"Unknown handoff category: {name!r} (expected one of: {known})"
            ) from None
        if category not in categories:
            categories.append(category)
    return categories


class HandoffSnapshot(CamelModel):
    """Serialized state captured by a handoff."""

    context_summary: str = EMPTY_HANDOFF_SUMMARY
    decisions: list[Decision] = Field(default_factory=list)
    working_memory: list[WorkingMemoryItem] = Field(default_factory=list)
    active_files: list[ActiveFile] = Field(default_factory=list)


class SessionHandoff(HandoffSnapshot):
    """A handoff record: the snapshot plus its identity and resumption state."""

    id: str
    from_session_id: str
    project_path: str
    created_at: datetime
    resumed_by_session_id: str | None = None
    resumed_at: datetime | None = None

    def snapshot(self) -> HandoffSnapshot:
        """The captured state without identity fields."""
        return HandoffSnapshot(
            context_summary=self.context_summary,
            decisions=self.decisions,
            working_memory=self.working_memory,
            active_files=self.active_files,
        )
