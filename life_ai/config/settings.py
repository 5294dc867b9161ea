"""Application settings loaded from environment variables and `.env`."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_LLM_BASE_URL = "https://api.groq.com/openai/v1"
DEFAULT_LLM_MODEL = "llama-3.1-8b-instant"
DEFAULT_EMBEDDING_MODEL = "sentence-transformers/all-MiniLM-L6-v2"
DEFAULT_COLLECTION = "permanent_memory"


class Settings(BaseSettings):
    """Process-wide configuration.

    Credentials are kept as `SecretStr`; use the `*_str` properties to get
    the raw value when building a client.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Completion service
    groq_api_key: Optional[SecretStr] = None
    llm_base_url: str = DEFAULT_LLM_BASE_URL
    llm_model: str = DEFAULT_LLM_MODEL
    llm_timeout_seconds: float = Field(default=60.0, gt=0)

    # Vector store
    qdrant_url: Optional[str] = None
    qdrant_path: Optional[Path] = None
    qdrant_api_key: Optional[SecretStr] = None
    memory_collection: str = DEFAULT_COLLECTION

    # Embeddings
    embedding_model: str = DEFAULT_EMBEDDING_MODEL
    embedding_dimension: int = Field(default=384, gt=0)
    embedding_cache_dir: Optional[Path] = None

    # Retrieval policy
    memory_match_threshold: float = Field(default=0.78, ge=0.0, le=1.0)
    memory_match_count: int = Field(default=5, gt=0)

    # Persona
    user_name: str = "Salman"

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    @field_validator("user_name")
    @classmethod
    def _user_name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("user_name must not be blank")
        return value

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def groq_api_key_str(self) -> Optional[str]:
        return self.groq_api_key.get_secret_value() if self.groq_api_key else None

    @property
    def qdrant_api_key_str(self) -> Optional[str]:
        return self.qdrant_api_key.get_secret_value() if self.qdrant_api_key else None

    @property
    def qdrant_location(self) -> str:
        """Where the vector store lives: a URL, a local path, or in memory."""
        if self.qdrant_url:
            return self.qdrant_url
        if self.qdrant_path:
            return str(self.qdrant_path)
        return ":memory:"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once per process."""
    return Settings()
