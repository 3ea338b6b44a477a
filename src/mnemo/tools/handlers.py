"""Tool definitions for the mnemo operations."""

from pydantic import Field

from mnemo.context.schema import ContextSource
from mnemo.engine import MemoryEngine
from mnemo.handoff.schema import HandoffCategory
from mnemo.tools.base import Tool, ToolArguments
from mnemo.tools.registry import ToolRegistry


class RememberArgs(ToolArguments):
    key: str = Field(description="Key, unique within the project")
    value: str = Field(description="Value to store")
    project_path: str = Field(description="Project the item belongs to")
    context: str | None = Field(default=None, description="Why this is worth remembering")
    tags: list[str] | None = Field(default=None, description="Tags for filtering")
    session_id: str | None = Field(default=None, description="Session writing the item")
    ttl: float | None = Field(
        default=None,
        description="Seconds until the item expires (omit or 0 for never, negative for already expired)",
    )


class RecallArgs(ToolArguments):
    key: str = Field(description="Key to look up")
    project_path: str = Field(description="Project scope")


class RecallRelevantArgs(ToolArguments):
    query: str = Field(default="", description="Free-text search; empty lists recent items")
    project_path: str = Field(description="Project scope")
    tags: list[str] | None = Field(default=None, description="Only items with any of these tags")
    limit: int | None = Field(default=None, description="Maximum results", ge=1)


class ListMemoryArgs(ToolArguments):
    project_path: str = Field(description="Project scope")
    limit: int = Field(default=0, description="Maximum items (0 for all)", ge=0)
    offset: int = Field(default=0, description="Items to skip")
    tags: list[str] | None = Field(default=None, description="Only items with any of these tags")


class ForgetArgs(ToolArguments):
    key: str = Field(description="Key to delete")
    project_path: str = Field(description="Project scope")


class CompactArgs(ToolArguments):
    project_path: str | None = Field(default=None, description="Project to compact (all if omitted)")


class PrepareHandoffArgs(ToolArguments):
    session_id: str = Field(description="Session handing off")
    project_path: str = Field(description="Project scope")
    include: list[HandoffCategory] | None = Field(
        default=None,
        description="Categories to capture (all if omitted, nothing if empty)",
    )


class ResumeHandoffArgs(ToolArguments):
    handoff_id: str = Field(description="Handoff to resume")
    project_path: str = Field(description="Project scope")
    new_session_id: str = Field(description="Session taking over")


class ListHandoffsArgs(ToolArguments):
    project_path: str = Field(description="Project scope")


class GetContextArgs(ToolArguments):
    project_path: str = Field(description="Project scope")
    query: str = Field(default="", description="What the new session is about")
    max_tokens: int | None = Field(default=None, description="Token budget", ge=0)
    sources: list[ContextSource] | None = Field(
        default=None,
        description="Sources to draw from (configured default if omitted)",
    )


def build_registry(engine: MemoryEngine) -> ToolRegistry:
    """Register every mnemo operation against one engine.

    Args:
        engine: Engine whose stores back the tools

    Returns:
        Validated registry
    """
    memory = engine.memory
    handoffs = engine.handoffs
    injector = engine.injector

    def remember(args: RememberArgs):
        return memory.remember(
            args.key,
            args.value,
            args.project_path,
            context=args.context,
            tags=args.tags,
            session_id=args.session_id,
            ttl=args.ttl,
        )

    def recall(args: RecallArgs):
        return memory.recall(args.key, args.project_path)

    def recall_relevant(args: RecallRelevantArgs):
        return memory.recall_relevant(
            args.query, args.project_path, tags=args.tags, limit=args.limit
        )

    def list_memory(args: ListMemoryArgs):
        items = memory.list(args.project_path, limit=args.limit, offset=args.offset, tags=args.tags)
        return {"items": items, "total": memory.count(args.project_path)}

    def forget(args: ForgetArgs):
        return {"deleted": memory.forget(args.key, args.project_path)}

    def compact_memory(args: CompactArgs):
        return {"removed": memory.compact(args.project_path)}

    def prepare_handoff(args: PrepareHandoffArgs):
        return handoffs.prepare_handoff(args.session_id, args.project_path, include=args.include)

    def resume_from_handoff(args: ResumeHandoffArgs):
        return handoffs.resume_from_handoff(args.handoff_id, args.project_path, args.new_session_id)

    def list_handoffs(args: ListHandoffsArgs):
        return handoffs.list_handoffs(args.project_path)

    def get_relevant_context(args: GetContextArgs):
        return injector.get_relevant_context(
            args.project_path,
            query=args.query,
            max_tokens=args.max_tokens,
            sources=args.sources,
        )

    registry = ToolRegistry()
    for tool in (
        Tool("remember", "Store or update a fact in project working memory.", RememberArgs, remember),
        Tool("recall", "Get a working memory item by key (null if missing or expired).", RecallArgs, recall),
        Tool(
            "recall_relevant",
            "Search working memory by relevance to a query.",
            RecallRelevantArgs,
            recall_relevant,
        ),
        Tool("list_memory", "List working memory items, most recent first.", ListMemoryArgs, list_memory),
        Tool("forget", "Delete a working memory item.", ForgetArgs, forget),
        Tool("compact_memory", "Physically delete expired working memory.", CompactArgs, compact_memory),
        Tool(
            "prepare_handoff",
            "Snapshot decisions, working memory and active files for the next session.",
            PrepareHandoffArgs,
            prepare_handoff,
        ),
        Tool(
            "resume_from_handoff",
            "Resume from a handoff (null if it doesn't exist for the project).",
            ResumeHandoffArgs,
            resume_from_handoff,
        ),
        Tool("list_handoffs", "List handoffs for a project, most recent first.", ListHandoffsArgs, list_handoffs),
        Tool(
            "get_relevant_context",
            "Assemble memory, decisions and the latest handoff within a token budget.",
            GetContextArgs,
            get_relevant_context,
        ),
    ):
        registry.register(tool)

    registry.validate()
    return registry
