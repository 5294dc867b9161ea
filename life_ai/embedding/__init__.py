"""Local text embeddings."""

from .service import EmbeddingService

__all__ = ["EmbeddingService"]
