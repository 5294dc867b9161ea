"""Test memory data models — MemoryRecord, ConversationTurn, MemoryQueryResult."""

import pytest

from life_ai.memory.models import (
    ConversationTurn,
    MemoryMatch,
    MemoryQueryResult,
    MemoryRecord,
)


class TestMemoryRecord:
    """Test MemoryRecord dataclass."""

    def test_construction(self) -> None:
        record = MemoryRecord(content="Salman loves chess", embedding=[0.6, 0.8])

        assert record.content == "Salman loves chess"
        assert record.embedding == [0.6, 0.8]
        assert record.dimension == 2

    def test_payload_holds_content_only(self) -> None:
        record = MemoryRecord(content="Salman loves chess", embedding=[1.0])
        assert record.to_payload() == {"content": "Salman loves chess"}

    @pytest.mark.parametrize("content", ["", "   ", "\n"])
    def test_rejects_empty_content(self, content: str) -> None:
        with pytest.raises(ValueError, match="content"):
            MemoryRecord(content=content, embedding=[1.0])

    def test_rejects_empty_embedding(self) -> None:
        with pytest.raises(ValueError, match="embedding"):
            MemoryRecord(content="Salman loves chess", embedding=[])

    def test_records_are_immutable(self) -> None:
        record = MemoryRecord(content="Salman loves chess", embedding=[1.0])
        with pytest.raises(AttributeError):
            record.content = "changed"  # type: ignore[misc]


class TestConversationTurn:
    """Test ConversationTurn rendering."""

    def test_default_role_is_user(self) -> None:
        assert ConversationTurn(text="hi").role == "user"

    def test_render_user_turn(self) -> None:
        turn = ConversationTurn(text="My name is Salman and I love chess")
        assert turn.render("Salman") == "User (Salman): My name is Salman and I love chess"

    def test_render_other_roles(self) -> None:
        turn = ConversationTurn(text="Hello!", role="ai")
        assert turn.render("Salman") == "Ai: Hello!"


class TestMemoryQueryResult:
    """Test MemoryQueryResult container."""

    def test_empty_by_default(self) -> None:
        result = MemoryQueryResult()
        assert result.is_empty
        assert len(result) == 0
        assert list(result) == []

    def test_preserves_order(self) -> None:
        matches = [
            MemoryMatch(content="first", score=0.95),
            MemoryMatch(content="second", score=0.9),
        ]
        result = MemoryQueryResult(matches=matches)

        assert not result.is_empty
        assert len(result) == 2
        assert result.contents == ["first", "second"]
        assert [m.score for m in result] == [0.95, 0.9]
