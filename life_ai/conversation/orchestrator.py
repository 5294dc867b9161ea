"""Conversation orchestrator: learn, recall, then answer.

Each inbound message runs Learning -> Retrieving -> Generating strictly in
sequence, and only one message is in flight at a time. Learning for a
message always finishes before its retrieval starts, so a fact stated in a
message can already inform the reply to that same message (the store
acknowledges writes before returning).
"""

from enum import Enum
from typing import Any, Optional

import structlog

from ..events.bus import EventBus
from ..events.types import InputStateEvent, MessageEvent, StateChangedEvent
from ..exceptions import ApiResponseError, ModelLoadError, TransportError
from ..memory.models import ConversationTurn

logger = structlog.get_logger()

PERSONA_PROMPT = (
    "You are a personal AI. The user you are interacting with is named "
    "{user_name}. Your purpose is to be their direct, loyal, and intelligent "
    "companion. Your highest priority is to be accurate and helpful to them. "
)

INITIALIZING_MESSAGE = "Initializing System v2.1..."
ONLINE_MESSAGE = "Life AI System v2.1 is online. Instant learning is active."
INIT_FAILED_MESSAGE = (
    "Initialization Failed: Could not load memory model. "
    "Please retry. Error: {error}"
)
SYSTEM_ERROR_MESSAGE = "SYSTEM ERROR: {error}"


class PipelineState(str, Enum):
    """Where the current message is in the pipeline."""

    IDLE = "idle"
    LEARNING = "learning"
    RETRIEVING = "retrieving"
    GENERATING = "generating"
    ERROR = "error"


class ConversationOrchestrator:
    """Sequences learning, retrieval and generation for each user message."""

    def __init__(
        self,
        learner: Any,
        retriever: Any,
        chat_provider: Any,
        embedder: Any,
        event_bus: EventBus,
        user_name: str,
    ) -> None:
        self._learner = learner
        self._retriever = retriever
        self._provider = chat_provider
        self._embedder = embedder
        self._event_bus = event_bus
        self._user_name = user_name
        self._state = PipelineState.IDLE
        self._in_flight = False

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def input_enabled(self) -> bool:
        return not self._in_flight

    def build_system_prompt(self, memory_context: str) -> str:
        return PERSONA_PROMPT.format(user_name=self._user_name) + memory_context

    async def initialize(self) -> bool:
        """Load the embedding model up front.

        Returns False if the model could not be loaded; calling again retries.
        """
        await self._emit(INITIALIZING_MESSAGE, "system")
        try:
            await self._embedder.warm_up()
        except ModelLoadError as exc:
            logger.error("System initialization failed", error=str(exc))
            await self._emit(INIT_FAILED_MESSAGE.format(error=exc), "ai")
            return False

        logger.info("System initialized")
        await self._emit(ONLINE_MESSAGE, "ai")
        return True

    async def handle_message(self, text: str) -> Optional[str]:
        """Run one user message through the pipeline.

        Returns the reply, or None when the message was ignored or the reply
        could not be generated.
        """
        text = (text or "").strip()
        if not text:
            return None

        if self._in_flight:
            logger.warning("Message rejected, another message is in flight")
            return None

        self._in_flight = True
        await self._emit(text, "user")
        await self._event_bus.publish(InputStateEvent(enabled=False))

        try:
            await self._set_state(PipelineState.LEARNING)
            turn = ConversationTurn(text=text, role="user")
            await self._learner.learn_from_turn(turn.render(self._user_name))

            await self._set_state(PipelineState.RETRIEVING)
            memory_context = await self._retriever.retrieve_context(text)

            await self._set_state(PipelineState.GENERATING)
            reply = await self._provider.complete(
                system_prompt=self.build_system_prompt(memory_context),
                user_message=text,
            )
            await self._emit(reply, "ai")
            return reply
        except (TransportError, ApiResponseError) as exc:
            logger.error(
                "Response generation failed",
                error_type=type(exc).__name__,
                error=str(exc),
            )
            await self._set_state(PipelineState.ERROR)
            await self._emit(SYSTEM_ERROR_MESSAGE.format(error=exc), "ai")
            return None
        except Exception:
            logger.exception("Message pipeline crashed", state=self._state.value)
            await self._set_state(PipelineState.ERROR)
            raise
        finally:
            await self._set_state(PipelineState.IDLE)
            self._in_flight = False
            await self._event_bus.publish(InputStateEvent(enabled=True))

    async def _set_state(self, state: PipelineState) -> None:
        if state is self._state:
            return
        previous, self._state = self._state, state
        logger.debug("Pipeline state changed", previous=previous.value, current=state.value)
        await self._event_bus.publish(
            StateChangedEvent(previous=previous.value, current=state.value)
        )

    async def _emit(self, text: str, role: str) -> None:
        await self._event_bus.publish(MessageEvent(text=text, role=role))
