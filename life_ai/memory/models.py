"""Memory data models."""

from dataclasses import dataclass, field
from typing import Iterator


@dataclass(frozen=True)
class MemoryRecord:
    """A durable fact and its embedding, as written to the store."""

    content: str
    embedding: list[float]

    def __post_init__(self) -> None:
        if not self.content or not self.content.strip():
            raise ValueError("MemoryRecord content must not be empty")
        if not self.embedding:
            raise ValueError("MemoryRecord embedding must not be empty")

    @property
    def dimension(self) -> int:
        return len(self.embedding)

    def to_payload(self) -> dict:
        """Payload stored next to the vector."""
        return {"content": self.content}


@dataclass
class ConversationTurn:
    """One utterance within a single orchestration cycle."""

    text: str
    role: str = "user"  # "user" | "ai" | "system"

    def render(self, user_name: str) -> str:
        """Transcript line handed to the fact extractor."""
        if self.role == "user":
            return f"User ({user_name}): {self.text}"
        return f"{self.role.capitalize()}: {self.text}"


@dataclass(frozen=True)
class MemoryMatch:
    """A stored fact returned by a similarity search."""

    content: str
    score: float


@dataclass
class MemoryQueryResult:
    """Matches ordered by descending similarity."""

    matches: list[MemoryMatch] = field(default_factory=list)

    def __iter__(self) -> Iterator[MemoryMatch]:
        return iter(self.matches)

    def __len__(self) -> int:
        return len(self.matches)

    @property
    def is_empty(self) -> bool:
        return not self.matches

    @property
    def contents(self) -> list[str]:
        return [match.content for match in self.matches]
