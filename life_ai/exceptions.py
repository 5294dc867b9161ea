"""Error taxonomy for the memory pipeline and its collaborators."""


class LifeAIError(Exception):
    """Base class for all Life AI errors."""


class ModelLoadError(LifeAIError):
    """Raised when the embedding model cannot be acquired.

    Acquisition can be retried: the failed attempt is never cached.
    """

    def __init__(self, model_name: str, cause: BaseException) -> None:
        self.model_name = model_name
        self.cause = cause
        super().__init__(f"Could not load embedding model {model_name}: {cause}")


class EmbeddingError(LifeAIError):
    """Raised when inference against a loaded model fails."""


class TransportError(LifeAIError):
    """Network failure talking to the completion or vector store service."""


class ApiResponseError(LifeAIError):
    """The completion service answered with an unexpected shape."""


class StoreError(LifeAIError):
    """Base class for vector store failures."""


class StoreWriteError(StoreError):
    """A memory record could not be written."""


class StoreQueryError(StoreError):
    """A similarity search could not be completed."""


class ConfigurationError(LifeAIError, ValueError):
    """Required configuration is missing or unusable."""
