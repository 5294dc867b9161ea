"""Life AI: a conversational agent with long-term semantic memory."""

__version__ = "2.1.0"
