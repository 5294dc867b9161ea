"""Terminal entry point: wires the pipeline and runs a read-eval loop."""

import argparse
import asyncio
import sys
from dataclasses import dataclass
from typing import Optional

import structlog
from pydantic import ValidationError

from . import __version__
from .config.settings import Settings, get_settings
from .conversation.orchestrator import ConversationOrchestrator
from .embedding.service import EmbeddingService
from .events.bus import EventBus
from .events.types import MessageEvent
from .exceptions import ConfigurationError
from .llm.chat_provider import ChatProvider
from .logging_config import configure_logging
from .memory.extractor import FactExtractor
from .memory.learner import LearningStep
from .memory.retriever import MemoryRetriever
from .memory.store import MemoryStore

logger = structlog.get_logger()

EXIT_COMMANDS = {"/exit", "/quit"}


@dataclass
class Application:
    """All long-lived components of one session."""

    settings: Settings
    event_bus: EventBus
    chat_provider: ChatProvider
    embedder: EmbeddingService
    store: MemoryStore
    orchestrator: ConversationOrchestrator

    async def close(self) -> None:
        await self.store.close()
        await self.embedder.close()
        await self.chat_provider.close()


async def create_application(settings: Settings) -> Application:
    """Build and connect the pipeline components from settings."""
    event_bus = EventBus()
    chat_provider = ChatProvider.from_settings(settings)
    try:
        embedder = EmbeddingService.from_settings(settings)
        store = MemoryStore.from_settings(settings)
        if not await store.ensure_collection():
            logger.warning("Memory store unavailable, continuing without memory")
    except Exception:
        await chat_provider.close()
        raise

    extractor = FactExtractor(chat_provider, user_name=settings.user_name)
    learner = LearningStep(extractor, embedder, store)
    retriever = MemoryRetriever(
        embedder,
        store,
        user_name=settings.user_name,
        threshold=settings.memory_match_threshold,
        limit=settings.memory_match_count,
    )
    orchestrator = ConversationOrchestrator(
        learner=learner,
        retriever=retriever,
        chat_provider=chat_provider,
        embedder=embedder,
        event_bus=event_bus,
        user_name=settings.user_name,
    )
    return Application(
        settings=settings,
        event_bus=event_bus,
        chat_provider=chat_provider,
        embedder=embedder,
        store=store,
        orchestrator=orchestrator,
    )


async def print_message(event: MessageEvent) -> None:
    # The user's own line is already on screen.
    if event.role == "user":
        return
    prefix = "[system]" if event.role == "system" else "ai>"
    print(f"{prefix} {event.text}", flush=True)


async def run_session(app: Application) -> None:
    app.event_bus.subscribe(MessageEvent, print_message)

    while not await app.orchestrator.initialize():
        retry = await asyncio.to_thread(input, "Retry loading the memory model? [y/N] ")
        if retry.strip().lower() != "y":
            return

    while True:
        try:
            text = await asyncio.to_thread(input, "you> ")
        except EOFError:
            break
        if text.strip() in EXIT_COMMANDS:
            break
        try:
            await app.orchestrator.handle_message(text)
        except Exception:
            # The orchestrator has already released the gate.
            logger.exception("Message handling failed")


async def _amain(settings: Settings) -> None:
    app = await create_application(settings)
    try:
        await run_session(app)
    finally:
        await app.close()


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="life-ai",
        description="Chat with a personal AI that remembers what you tell it.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--debug", action="store_true", help="enable debug logging")
    args = parser.parse_args(argv)

    try:
        settings = get_settings()
    except ValidationError as exc:
        configure_logging(level="DEBUG" if args.debug else "INFO")
        logger.error("Invalid configuration", error=str(exc))
        return 2
    configure_logging(
        level="DEBUG" if args.debug else settings.log_level,
        json_output=settings.log_json,
    )

    try:
        asyncio.run(_amain(settings))
    except ConfigurationError as exc:
        logger.error("Invalid configuration", error=str(exc))
        return 2
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    sys.exit(main())
