"""LLM-based fact extraction from a conversation turn."""

from typing import Any, Optional

import structlog

from ..exceptions import ApiResponseError, TransportError

logger = structlog.get_logger()

NO_FACT_SENTINEL = "NULL"

EXTRACT_FACT_SYSTEM = """\
You are a silent fact extractor. The user is {user_name}. Review the following \
conversation. If {user_name} stated a new, important fact about themselves, \
their life, or their preferences, summarize that fact into a single, concise \
sentence. For example, if the user says 'my full name is...', extract \
'{user_name}'s full name is...'. If no new fact is present, respond with only \
the word '{sentinel}'.

Conversation:
{conversation}"""


def parse_fact(raw: Optional[str]) -> Optional[str]:
    """Map a raw model reply to a fact, or None for the sentinel."""
    if raw is None:
        return None
    fact = raw.strip()
    if not fact or fact.upper() == NO_FACT_SENTINEL:
        return None
    return fact


class FactExtractor:
    """Ask the completion service whether a turn holds a new durable fact."""

    def __init__(self, chat_provider: Any, user_name: str) -> None:
        self._provider = chat_provider
        self._user_name = user_name

    def build_prompt(self, turn_text: str) -> str:
        return EXTRACT_FACT_SYSTEM.format(
            user_name=self._user_name,
            sentinel=NO_FACT_SENTINEL,
            conversation=turn_text,
        )

    async def extract(self, turn_text: str) -> Optional[str]:
        """Return the fact stated in `turn_text`, or None.

        Failures are logged and read as "no fact" so that learning never
        blocks the conversation.
        """
        try:
            raw = await self._provider.complete(
                system_prompt=self.build_prompt(turn_text)
            )
        except (TransportError, ApiResponseError) as exc:
            logger.warning(
                "Fact extraction failed",
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return None
        except Exception as exc:
            logger.warning("Fact extraction failed", error=str(exc), exc_info=True)
            return None

        fact = parse_fact(raw)
        if fact is None:
            logger.debug("No new fact detected for memory")
        else:
            logger.info("Fact extracted", fact=fact)
        return fact
