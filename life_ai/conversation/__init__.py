"""Per-message conversation flow."""

from .orchestrator import ConversationOrchestrator, PipelineState

__all__ = ["ConversationOrchestrator", "PipelineState"]
