"""Token-budgeted context assembly across memory, decisions and handoffs."""

import logging
from collections.abc import Iterable, Iterator

from mnemo.config.schema import ContextConfig
from mnemo.context.schema import ContextSource, HandoffDigest, InjectedContext, parse_sources
from mnemo.errors import InvalidArgumentsError
from mnemo.handoff.store import SessionHandoffStore
from mnemo.history import ConversationHistory
from mnemo.memory.store import WorkingMemoryStore, build_fts_query
from mnemo.models import CamelModel
from mnemo.utils import compact_json, estimate_tokens

logger = logging.getLogger(__name__)


class ContextInjector:
    """Assembles the most useful context that fits a token budget.

    Sources are visited in priority order (handoffs, decisions, memory) and
    each candidate is visited once. A candidate is costed by estimating the
    tokens of its compact JSON; the first candidate that would push the running
    total past the budget ends assembly, so the estimate never exceeds
    ``max_tokens``.
    """

    def __init__(
        self,
        memory: WorkingMemoryStore,
        handoffs: SessionHandoffStore,
        history: ConversationHistory | None = None,
        config: ContextConfig | None = None,
    ):
        """Initialize the injector.

        Args:
            memory: Working memory store
            handoffs: Handoff store
            history: Source of decisions (defaults to the handoff store's)
            config: Budget and candidate limits
        """
        self.memory = memory
        self.handoffs = handoffs
        self.history = history or handoffs.history
        self.config = config or ContextConfig()

    def get_relevant_context(
        self,
        project_path: str,
        query: str | None = "",
        max_tokens: int | None = None,
        sources: Iterable[str] | None = None,
    ) -> InjectedContext:
        """Assemble context for a project.

        Args:
            project_path: Project scope
            query: Free-text query; empty disables lexical filtering of memory
            max_tokens: Token budget (>= 0); None uses the configured default
            sources: Sources to draw from; None uses the configured default

        Returns:
            Context holding only the requested sources

        Raises:
            InvalidArgumentsError: For a negative budget or unknown source
        """
        if max_tokens is None:
            max_tokens = self.config.max_tokens
        if isinstance(max_tokens, bool) or not isinstance(max_tokens, int) or max_tokens < 0:
            raise InvalidArgumentsError("max_tokens must be a non-negative integer")

        requested = parse_sources(self.config.sources if sources is None else sources)
        query = query or ""

        result = InjectedContext(project_path=project_path, query=query, max_tokens=max_tokens)
        for source in requested:
            setattr(result, source.value, [])

        for source, candidate in self._candidates(requested, project_path, query):
            cost = estimate_tokens(
                compact_json(candidate.to_json_dict()), self.config.chars_per_token
            )
            if result.token_estimate + cost > max_tokens:
                logger.debug(
                    "Context budget reached at %d/%d tokens", result.token_estimate, max_tokens
                )
                break
            getattr(result, source.value).append(candidate)
            result.token_estimate += cost

        return result

    def _candidates(
        self,
        requested: list[ContextSource],
        project_path: str,
        query: str,
    ) -> Iterator[tuple[ContextSource, CamelModel]]:
        """Yield candidates lazily, source by source, in priority order."""
        for source in requested:
            if source is ContextSource.HANDOFFS:
                latest = self.handoffs.latest_handoff(project_path)
                if latest is not None:
                    yield source, HandoffDigest(
                        id=latest.id,
                        from_session_id=latest.from_session_id,
                        created_at=latest.created_at,
                        context_summary=latest.context_summary,
                        resumed_by_session_id=latest.resumed_by_session_id,
                    )
            elif source is ContextSource.DECISIONS:
                for decision in self.history.recent_decisions(
                    project_path, limit=self.config.decision_candidates
                ):
                    yield source, decision
            elif source is ContextSource.MEMORY:
                if build_fts_query(query):
                    items = self.memory.recall_relevant(
                        query, project_path, limit=self.config.memory_candidates
                    )
                else:
                    items = self.memory.list(project_path, limit=self.config.memory_candidates)
                for item in items:
                    yield source, item
