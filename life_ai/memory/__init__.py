"""Long-term semantic memory: extraction, storage, retrieval."""

from .extractor import FactExtractor
from .learner import LearningStep
from .models import ConversationTurn, MemoryMatch, MemoryQueryResult, MemoryRecord
from .retriever import MemoryRetriever
from .store import MemoryStore

__all__ = [
    "ConversationTurn",
    "FactExtractor",
    "LearningStep",
    "MemoryMatch",
    "MemoryQueryResult",
    "MemoryRecord",
    "MemoryRetriever",
    "MemoryStore",
]
