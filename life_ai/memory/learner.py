"""Learning step: persist facts newly stated in a turn."""

from typing import Any

import structlog

from .extractor import FactExtractor
from .models import MemoryRecord

logger = structlog.get_logger()


class LearningStep:
    """Extract, embed and store. Best effort: never raises."""

    def __init__(self, extractor: FactExtractor, embedder: Any, store: Any) -> None:
        self._extractor = extractor
        self._embedder = embedder
        self._store = store

    async def learn_from_turn(self, turn_text: str) -> None:
        try:
            fact = await self._extractor.extract(turn_text)
            if fact is None:
                return

            logger.info("Saving fact to memory", fact=fact)
            embedding = await self._embedder.embed(fact)
            await self._store.append(MemoryRecord(content=fact, embedding=embedding))
        except Exception as exc:
            logger.error(
                "Learning from turn failed",
                error_type=type(exc).__name__,
                error=str(exc),
            )
