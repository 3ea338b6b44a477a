"""Pydantic models for context injection."""

from collections.abc import Iterable
from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import model_serializer

from mnemo.errors import InvalidArgumentsError
from mnemo.history import Decision
from mnemo.memory.schema import WorkingMemoryItem
from mnemo.models import CamelModel


class ContextSource(StrEnum):
    """Sources the injector can draw from, in priority order."""

    HANDOFFS = "handoffs"
    DECISIONS = "decisions"
    MEMORY = "memory"


def parse_sources(sources: Iterable[str] | None) -> list[ContextSource]:
    """Normalize a ``sources`` argument into priority order.

    Args:
        sources: Source names; None selects every source

    Returns:
        Distinct sources in priority order

    Raises:
        InvalidArgumentsError: If a name is not a known source
    """
    if sources is None:
        return list(ContextSource)
    if isinstance(sources, str):
        raise InvalidArgumentsError("sources must be a list of source names")

    requested: set[ContextSource] = set()
    for name in sources:
        try:
            requested.add(ContextSource(name))
        except ValueError:
            known = ", ".join(s.value for s in ContextSource)
            raise InvalidArgumentsError(
                f"Unknown context source: {name!r} (expected one of: {known})"
            ) from None
    return [source for source in ContextSource if source in requested]


class HandoffDigest(CamelModel):
    """The part of a handoff worth injecting into a new session."""

    id: str
    from_session_id: str
    created_at: datetime
    context_summary: str
    resumed_by_session_id: str | None = None


class InjectedContext(CamelModel):
    """Context assembled for one request.

    A source that was not requested is None and left out of the serialized
    payload. A requested source with nothing to offer is an empty list.
    """

    project_path: str
    query: str = ""
    max_tokens: int
    token_estimate: int = 0
    handoffs: list[HandoffDigest] | None = None
    decisions: list[Decision] | None = None
    memory: list[WorkingMemoryItem] | None = None

    @model_serializer(mode="wrap")
    def _drop_unrequested(self, handler: Any) -> dict[str, Any]:
        data = handler(self)
        for field in ("handoffs", "decisions", "memory"):
            if getattr(self, field) is None:
                data.pop(field, None)
        return data
