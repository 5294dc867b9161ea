"""Memory retriever: relevant facts for a query, formatted for the prompt."""

from typing import Any

import structlog

from ..exceptions import EmbeddingError, ModelLoadError
from .models import MemoryQueryResult

logger = structlog.get_logger()

MATCH_THRESHOLD = 0.78
MATCH_COUNT = 5

CONTEXT_HEADER = (
    "Before you answer, review these relevant facts from your permanent "
    "memory about {user_name}:"
)


class MemoryRetriever:
    """Embed a query, search the store, render the hits as bullets."""

    def __init__(
        self,
        embedder: Any,
        store: Any,
        user_name: str,
        threshold: float = MATCH_THRESHOLD,
        limit: int = MATCH_COUNT,
    ) -> None:
        self._embedder = embedder
        self._store = store
        self._user_name = user_name
        self.threshold = threshold
        self.limit = limit

    async def retrieve_context(self, query_text: str) -> str:
        """Return the context block for `query_text`, or "" if nothing matches."""
        try:
            embedding = await self._embedder.embed(query_text)
        except (ModelLoadError, EmbeddingError, ValueError) as exc:
            logger.error("Could not embed memory query", error=str(exc))
            return ""

        result = await self._store.similarity_search(
            embedding, threshold=self.threshold, limit=self.limit
        )
        logger.debug("Memory recall", matches=len(result))
        return self.format_for_prompt(result)

    def format_for_prompt(self, result: MemoryQueryResult) -> str:
        """Format matches as text for system prompt injection."""
        if result.is_empty:
            return ""
        memories = "\n".join(f"- {match.content}" for match in result)
        header = CONTEXT_HEADER.format(user_name=self._user_name)
        return f"{header}\n{memories}\n"
