"""Shared test fixtures."""

import hashlib
import math
from typing import Dict, Iterator, List

import numpy as np
import pytest
from qdrant_client import AsyncQdrantClient

from life_ai.embedding.service import EmbeddingService
from life_ai.events.bus import Event, EventBus
from life_ai.memory.store import MemoryStore

TEST_DIMENSION = 384


class FakeTextEmbedding:
    """Deterministic stand-in for `fastembed.TextEmbedding`.

    Each token contributes a pseudo-random vector seeded by its hash, so equal
    texts give equal vectors and texts sharing words point the same way.
    """

    def __init__(self, dimension: int = TEST_DIMENSION) -> None:
        self.dimension = dimension
        self.calls: List[str] = []

    def embed(self, documents: List[str]) -> Iterator[np.ndarray]:
        for text in documents:
            self.calls.append(text)
            vector = np.zeros(self.dimension, dtype=np.float32)
            for token in text.lower().split():
                seed = int.from_bytes(hashlib.md5(token.encode()).digest()[:4], "little")
                vector += np.random.default_rng(seed).standard_normal(self.dimension)
            # Unnormalised on purpose: the service must normalise.
            yield vector * 3.0


class StaticEmbedder:
    """Async embedder returning preset vectors per text."""

    def __init__(self, vectors: Dict[str, List[float]]) -> None:
        self.vectors = vectors
        self.calls: List[str] = []

    async def embed(self, text: str) -> List[float]:
        self.calls.append(text)
        return self.vectors[text]


def unit_vector_at(similarity: float, dimension: int = 4) -> List[float]:
    """A unit vector whose cosine similarity to `axis_vector()` is `similarity`."""
    vector = [0.0] * dimension
    vector[0] = similarity
    vector[1] = math.sqrt(max(0.0, 1.0 - similarity * similarity))
    return vector


def axis_vector(dimension: int = 4) -> List[float]:
    vector = [0.0] * dimension
    vector[0] = 1.0
    return vector


class EventRecorder:
    """Collects every event published on a bus."""

    def __init__(self) -> None:
        self.events: List[Event] = []

    async def __call__(self, event: Event) -> None:
        self.events.append(event)

    def of_type(self, event_type: type) -> list:
        return [e for e in self.events if isinstance(e, event_type)]


@pytest.fixture
def fake_model() -> FakeTextEmbedding:
    return FakeTextEmbedding()


@pytest.fixture
def embedding_service(fake_model: FakeTextEmbedding) -> EmbeddingService:
    return EmbeddingService(
        model_name="test/fake-minilm",
        dimension=TEST_DIMENSION,
        loader=lambda: fake_model,
    )


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def recorder(event_bus: EventBus) -> EventRecorder:
    rec = EventRecorder()
    event_bus.subscribe(Event, rec)
    return rec


@pytest.fixture
async def qdrant_client():
    client = AsyncQdrantClient(location=":memory:")
    yield client
    await client.close()


@pytest.fixture
async def small_store(qdrant_client) -> MemoryStore:
    """In-process store with 4-dimensional vectors."""
    store = MemoryStore(qdrant_client, collection_name="test_memory", vector_size=4)
    await store.ensure_collection()
    return store


@pytest.fixture
async def full_store(qdrant_client) -> MemoryStore:
    """In-process store sized for the MiniLM dimension."""
    store = MemoryStore(
        qdrant_client, collection_name="test_memory_full", vector_size=TEST_DIMENSION
    )
    await store.ensure_collection()
    return store


@pytest.fixture
def vector_at():
    return unit_vector_at


@pytest.fixture
def axis() -> List[float]:
    return axis_vector()


@pytest.fixture
def static_embedder_cls():
    return StaticEmbedder
