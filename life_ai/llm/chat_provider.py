"""OpenAI-compatible chat provider for Groq and other vendors.

Uses the openai SDK, which speaks Groq's OpenAI-compatible API when given
its base URL.
"""

import time
from dataclasses import dataclass
from typing import Any, Optional

import openai
import structlog
from openai import AsyncOpenAI

from ..config.settings import Settings
from ..exceptions import ApiResponseError, ConfigurationError, TransportError

logger = structlog.get_logger()


@dataclass
class ChatResponse:
    """Response from a chat completion."""

    content: str
    model: str
    input_tokens: int
    output_tokens: int
    duration_ms: int


class ChatProvider:
    """OpenAI-compatible chat provider."""

    def __init__(
        self,
        model: str,
        api_key: str,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.client = AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout)
        self.model = model

    @classmethod
    def from_settings(cls, settings: Settings) -> "ChatProvider":
        api_key = settings.groq_api_key_str
        if not api_key:
            raise ConfigurationError("GROQ_API_KEY is not configured")
        return cls(
            model=settings.llm_model,
            api_key=api_key,
            base_url=settings.llm_base_url,
            timeout=settings.llm_timeout_seconds,
        )

    async def chat(
        self,
        messages: list[dict[str, str]],
        model: Optional[str] = None,
    ) -> ChatResponse:
        """Send a chat completion request.

        Raises:
            TransportError: The service could not be reached or refused the call.
            ApiResponseError: The response failed validation or has no content.
        """
        used_model = model or self.model
        start = time.monotonic()

        try:
            response = await self.client.chat.completions.create(
                model=used_model,
                messages=messages,  # type: ignore[arg-type]
            )
        except openai.APIStatusError as exc:
            raise TransportError(
                f"Completion service returned HTTP {exc.status_code}: {exc.message}"
            ) from exc
        except openai.APIConnectionError as exc:
            # Also covers APITimeoutError
            raise TransportError(f"Completion service unreachable: {exc}") from exc
        except openai.APIResponseValidationError as exc:
            raise ApiResponseError(f"Completion response did not validate: {exc}") from exc
        except openai.APIError as exc:
            raise TransportError(f"Completion request failed: {exc}") from exc

        duration_ms = int((time.monotonic() - start) * 1000)
        content = _first_choice_content(response)
        usage = getattr(response, "usage", None)

        logger.debug(
            "Chat completion finished",
            model=used_model,
            duration_ms=duration_ms,
        )

        return ChatResponse(
            content=content,
            model=getattr(response, "model", None) or used_model,
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
            duration_ms=duration_ms,
        )

    async def complete(
        self,
        system_prompt: str,
        user_message: Optional[str] = None,
        model: Optional[str] = None,
    ) -> str:
        """Generate text for a system prompt and an optional user message."""
        messages = [{"role": "system", "content": system_prompt}]
        if user_message is not None:
            messages.append({"role": "user", "content": user_message})
        response = await self.chat(messages, model=model)
        return response.content

    async def close(self) -> None:
        await self.client.close()


def _first_choice_content(response: Any) -> str:
    """Return `choices[0].message.content` or raise ApiResponseError."""
    choices = getattr(response, "choices", None)
    if not choices:
        raise ApiResponseError("Completion response has no choices")
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None)
    if not isinstance(content, str):
        raise ApiResponseError("Completion response has no message content")
    return content
