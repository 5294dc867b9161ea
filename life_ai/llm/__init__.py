"""Completion service client."""

from .chat_provider import ChatProvider, ChatResponse

__all__ = ["ChatProvider", "ChatResponse"]
