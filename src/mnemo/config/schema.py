"""Pydantic models for mnemo.yaml configuration."""

from typing import Literal

from pydantic import BaseModel, Field


class StorageConfig(BaseModel):
    """SQLite storage configuration."""

    path: str = Field(
        default="~/.mnemo/memory.db",
        description="Path to the SQLite database file",
    )
    busy_timeout: float = Field(
        default=30.0,
        description="Seconds to wait for a lock held by another process before failing",
        ge=0.0,
    )
    wal: bool = Field(default=True, description="Enable write-ahead logging")


class MemoryConfig(BaseModel):
    """Working memory configuration."""

    compact_on_startup: bool = Field(
        default=True,
        description="Physically delete expired items when the server starts",
    )
    search_limit: int = Field(
        default=20,
        description="Maximum results returned by relevance search",
        ge=1,
    )


class ContextConfig(BaseModel):
    """Context injection configuration."""

    max_tokens: int = Field(
        default=2000,
        description="Default token budget for assembled context",
        ge=0,
    )
    chars_per_token: int = Field(
        default=4,
        description="Characters per token used by the token estimator",
        ge=1,
    )
    memory_candidates: int = Field(
        default=50,
        description="Maximum working memory candidates considered per request",
        ge=1,
    )
    decision_candidates: int = Field(
        default=20,
        description="Maximum decision candidates considered per request",
        ge=1,
    )
    sources: list[Literal["memory", "decisions", "handoffs"]] = Field(
        default_factory=lambda: ["memory", "decisions", "handoffs"],
        description="Sources used when a request does not name any",
    )


class HandoffConfig(BaseModel):
    """Session handoff configuration."""

    max_decisions: int = Field(default=10, description="Decisions captured per handoff", ge=0)
    max_memory_items: int = Field(
        default=20, description="Working memory items captured per handoff", ge=0
    )
    max_files: int = Field(default=20, description="Active files captured per handoff", ge=0)


class LoggingConfig(BaseModel):
    """Diagnostic logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Log level for the stderr diagnostic stream",
    )


class MCPConfig(BaseModel):
    """Model Context Protocol server configuration."""

    server_name: str = Field(default="mnemo", description="Name advertised to MCP clients")
    transport: Literal["stdio", "http"] = Field(
        default="stdio",
        description="Default transport for 'mnemo serve'",
    )
    host: str = Field(default="127.0.0.1", description="Bind address (HTTP transport only)")
    port: int = Field(default=8200, description="Bind port (HTTP transport only)", ge=1, le=65535)


class MnemoConfig(BaseModel):
    """Root configuration schema for mnemo."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    memory: MemoryConfig = Field(default_factory=MemoryConfig)
    context: ContextConfig = Field(default_factory=ContextConfig)
    handoff: HandoffConfig = Field(default_factory=HandoffConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    mcp: MCPConfig = Field(default_factory=MCPConfig)
