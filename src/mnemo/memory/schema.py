"""Pydantic models for working memory."""

from datetime import datetime

from pydantic import Field

from mnemo.models import CamelModel


class WorkingMemoryItem(CamelModel):
    """A durable key/value fact scoped to one project."""

    id: str
    key: str
    value: str
    context: str | None = None
    tags: list[str] = Field(default_factory=list)
    session_id: str | None = None
    project_path: str
    created_at: datetime
    updated_at: datetime
    expires_at: datetime | None = None
    # Reserved for semantic search; nothing reads it
    embedding: bytes | None = Field(default=None, exclude=True)
