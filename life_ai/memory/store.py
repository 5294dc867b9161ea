"""Memory store adapter over a Qdrant collection.

Each record becomes one point whose vector is the fact embedding and whose
payload carries the fact text. Ranking and threshold filtering happen in
Qdrant (cosine distance); results are passed through unchanged.
"""

import uuid
from typing import Any, Optional

import structlog
from qdrant_client import AsyncQdrantClient
from qdrant_client import models as qdrant_models

from ..config.settings import Settings
from ..exceptions import StoreQueryError, StoreWriteError
from .models import MemoryMatch, MemoryQueryResult, MemoryRecord

logger = structlog.get_logger()


def create_qdrant_client(settings: Settings) -> AsyncQdrantClient:
    """Build a client for a remote URL, a local path, or an in-process store."""
    if settings.qdrant_url:
        return AsyncQdrantClient(
            url=settings.qdrant_url, api_key=settings.qdrant_api_key_str
        )
    if settings.qdrant_path:
        return AsyncQdrantClient(path=str(settings.qdrant_path))
    return AsyncQdrantClient(location=":memory:")


class MemoryStore:
    """Append fact records and run similarity queries."""

    def __init__(
        self,
        client: Any,
        collection_name: str,
        vector_size: int,
    ) -> None:
        self._client = client
        self.collection_name = collection_name
        self.vector_size = vector_size

    @classmethod
    def from_settings(cls, settings: Settings) -> "MemoryStore":
        return cls(
            client=create_qdrant_client(settings),
            collection_name=settings.memory_collection,
            vector_size=settings.embedding_dimension,
        )

    async def ensure_collection(self) -> bool:
        """Create the collection when it does not exist yet.

        Returns False when the store cannot be reached. Later appends and
        searches then fail individually and degrade as usual.
        """
        try:
            if await self._client.collection_exists(self.collection_name):
                return True
            logger.info(
                "Creating memory collection",
                collection=self.collection_name,
                vector_size=self.vector_size,
            )
            await self._client.create_collection(
                collection_name=self.collection_name,
                vectors_config=qdrant_models.VectorParams(
                    size=self.vector_size,
                    distance=qdrant_models.Distance.COSINE,
                ),
            )
        except Exception as exc:
            logger.warning(
                "Memory collection check failed",
                collection=self.collection_name,
                error=str(exc) or type(exc).__name__,
            )
            return False
        return True

    async def append(self, record: MemoryRecord) -> bool:
        """Write one record. Returns False on failure; never retries."""
        try:
            await self._insert(record)
        except StoreWriteError as exc:
            logger.warning("Failed to save fact", error=str(exc))
            return False
        logger.info("Fact saved", content=record.content)
        return True

    async def similarity_search(
        self,
        query_embedding: list[float],
        threshold: float,
        limit: int,
    ) -> MemoryQueryResult:
        """Return up to `limit` records scoring at least `threshold`.

        An unreachable or failing store yields an empty result.
        """
        if not 0.0 <= threshold <= 1.0:
            raise ValueError(f"threshold must be within [0, 1], got {threshold}")
        if limit <= 0:
            raise ValueError(f"limit must be positive, got {limit}")

        try:
            return await self._query(query_embedding, threshold, limit)
        except StoreQueryError as exc:
            logger.warning("Memory search failed", error=str(exc))
            return MemoryQueryResult()

    async def count(self) -> int:
        result = await self._client.count(collection_name=self.collection_name)
        return result.count

    async def close(self) -> None:
        await self._client.close()

    async def _insert(self, record: MemoryRecord) -> None:
        if record.dimension != self.vector_size:
            raise StoreWriteError(
                f"Embedding dimension {record.dimension} != collection "
                f"dimension {self.vector_size}"
            )
        point = qdrant_models.PointStruct(
            id=str(uuid.uuid4()),
            vector=list(record.embedding),
            payload=record.to_payload(),
        )
        try:
            await self._client.upsert(
                collection_name=self.collection_name,
                points=[point],
                wait=True,
            )
        except Exception as exc:
            raise StoreWriteError(str(exc) or type(exc).__name__) from exc

    async def _query(
        self,
        query_embedding: list[float],
        threshold: float,
        limit: int,
    ) -> MemoryQueryResult:
        try:
            response = await self._client.query_points(
                collection_name=self.collection_name,
                query=list(query_embedding),
                score_threshold=threshold,
                limit=limit,
                with_payload=True,
            )
        except Exception as exc:
            raise StoreQueryError(str(exc) or type(exc).__name__) from exc

        matches = []
        for point in response.points:
            content = _payload_content(point.payload)
            if content is None:
                logger.debug("Skipping point without content", point_id=str(point.id))
                continue
            matches.append(MemoryMatch(content=content, score=float(point.score)))
        return MemoryQueryResult(matches=matches)


def _payload_content(payload: Optional[dict]) -> Optional[str]:
    if not payload:
        return None
    content = payload.get("content")
    return content if isinstance(content, str) and content else None
