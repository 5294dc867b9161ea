"""Embedding service backed by a local fastembed ONNX model.

The model is expensive to load, so it is acquired lazily on first use and
then shared by every request. Acquisition is memoised as a single asyncio
task: concurrent first callers all await that one task and observe the same
result or the same failure. A failed attempt is discarded so that the next
call starts a fresh load.
"""

import asyncio
from pathlib import Path
from typing import Any, Callable, Optional

import numpy as np
import structlog

from ..config.settings import Settings
from ..exceptions import EmbeddingError, ModelLoadError

logger = structlog.get_logger()

ModelLoader = Callable[[], Any]


def fastembed_loader(model_name: str, cache_dir: Optional[Path] = None) -> ModelLoader:
    """Build a loader returning a `fastembed.TextEmbedding` instance."""

    def load() -> Any:
        from fastembed import TextEmbedding

        kwargs: dict[str, Any] = {"model_name": model_name}
        if cache_dir is not None:
            cache_dir.mkdir(parents=True, exist_ok=True)
            kwargs["cache_dir"] = str(cache_dir)
        return TextEmbedding(**kwargs)

    return load


class EmbeddingService:
    """Turns text into unit-length vectors of a fixed dimension."""

    def __init__(
        self,
        model_name: str,
        dimension: int,
        loader: Optional[ModelLoader] = None,
        cache_dir: Optional[Path] = None,
    ) -> None:
        self.model_name = model_name
        self._dimension = dimension
        self._loader = loader or fastembed_loader(model_name, cache_dir)
        self._model: Any = None
        self._load_task: Optional[asyncio.Task[Any]] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "EmbeddingService":
        return cls(
            model_name=settings.embedding_model,
            dimension=settings.embedding_dimension,
            cache_dir=settings.embedding_cache_dir,
        )

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def is_loaded(self) -> bool:
        return self._model is not None

    async def warm_up(self) -> None:
        """Load the model now instead of on the first `embed` call."""
        await self._get_model()

    async def embed(self, text: str) -> list[float]:
        """Embed one non-empty text.

        Raises:
            ValueError: `text` is empty or whitespace.
            ModelLoadError: The model could not be acquired.
            EmbeddingError: Inference failed or returned the wrong shape.
        """
        if not text or not text.strip():
            raise ValueError("Cannot embed empty text")

        model = await self._get_model()
        try:
            raw = await asyncio.to_thread(_infer, model, text)
        except Exception as exc:
            raise EmbeddingError(f"Embedding inference failed: {exc}") from exc

        vector = _l2_normalize(raw)
        if len(vector) != self._dimension:
            raise EmbeddingError(
                f"Embedding length {len(vector)} != configured dimension "
                f"{self._dimension} (model={self.model_name})"
            )
        return vector

    async def close(self) -> None:
        """Release the model handle.

        Callers still waiting on a running load get ModelLoadError.
        """
        task = self._load_task
        self._load_task = None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except (asyncio.CancelledError, ModelLoadError):
                pass
        self._model = None

    async def _get_model(self) -> Any:
        if self._model is not None:
            return self._model

        # No await between the check and the assignment, so only one
        # coroutine can create the load task.
        if self._load_task is None:
            self._load_task = asyncio.create_task(
                self._load(), name=f"load-embedding-{self.model_name}"
            )
        task = self._load_task

        try:
            return await asyncio.shield(task)
        except ModelLoadError:
            if self._load_task is task:
                self._load_task = None
            raise
        except asyncio.CancelledError:
            # close() cancels the shared load; a cancelled caller leaves
            # the shielded task running.
            if not task.cancelled():
                raise
            if self._load_task is task:
                self._load_task = None
            raise ModelLoadError(
                self.model_name, RuntimeError("service closed during load")
            ) from None

    async def _load(self) -> Any:
        logger.info("Loading embedding model", model=self.model_name)
        try:
            model = await asyncio.to_thread(self._loader)
        except Exception as exc:
            logger.error(
                "Embedding model load failed",
                model=self.model_name,
                error=str(exc),
            )
            raise ModelLoadError(self.model_name, exc) from exc

        self._model = model
        logger.info("Embedding model ready", model=self.model_name)
        return model


def _infer(model: Any, text: str) -> np.ndarray:
    """Run one blocking inference; fastembed yields one array per input."""
    embeddings = list(model.embed([text]))
    if len(embeddings) != 1:
        raise EmbeddingError(f"Expected one embedding, got {len(embeddings)}")
    return np.asarray(embeddings[0], dtype=np.float32)


def _l2_normalize(vector: np.ndarray) -> list[float]:
    vector = np.asarray(vector, dtype=np.float32).reshape(-1)
    norm = float(np.linalg.norm(vector))
    if norm == 0.0:
        raise EmbeddingError("Embedding has zero norm")
    return (vector / norm).tolist()
