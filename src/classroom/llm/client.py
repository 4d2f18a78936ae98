"""LLM client for the lesson chat assistant.

Thin async wrapper over an OpenAI-compatible chat completions API
(OpenAI, LM Studio, or any compatible server via ``base_url``).
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Literal

import structlog
from openai import AsyncOpenAI

from classroom.config.app_config import LLMSettings, load_app_config

logger = structlog.get_logger(__name__)


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class Message:
    """A chat message."""

    role: Literal["system", "user", "assistant"]
    content: str

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for API call."""
        return {"role": self.role, "content": self.content}


@dataclass
class LLMResponse:
    """Response from LLM."""

    content: str
    model: str
    usage: dict[str, int] = field(default_factory=dict)
    latency_ms: int = 0

    @property
    def total_tokens(self) -> int:
        """Get total token count."""
        return self.usage.get("total_tokens", 0)


class LLMError(Exception):
    """Error during LLM interaction."""

    pass


class LLMConnectionError(LLMError):
    """Error connecting to LLM server."""

    pass


class LLMResponseError(LLMError):
    """Error in LLM response."""

    pass


# =============================================================================
# LLM CLIENT
# =============================================================================


class LLMClient:
    """Async chat client for an OpenAI-compatible provider."""

    def __init__(self, settings: LLMSettings | None = None, model: str | None = None):
        """Initialize LLM client.

        Args:
            settings: Provider settings (loads app config if not provided)
            model: Override model from settings
        """
        if settings is None:
            settings = load_app_config().llm

        self.settings = settings
        self.model = model or settings.model

        self._client = AsyncOpenAI(
            base_url=settings.base_url,
            api_key=settings.get_api_key() or "not-needed",
            timeout=settings.timeout,
        )

        logger.info(
            "llm_client_initialized",
            provider=settings.provider,
            model=self.model,
            base_url=settings.base_url,
        )

    async def chat(
        self,
        messages: list[Message],
        temperature: float | None = None,
    ) -> LLMResponse:
        """Send chat completion request.

        Args:
            messages: List of messages in conversation
            temperature: Override default temperature

        Returns:
            LLMResponse with content and metadata

        Raises:
            LLMConnectionError: If cannot connect to server
            LLMResponseError: If response is invalid
        """
        if temperature is None:
            temperature = self.settings.temperature

        request_kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": [m.to_dict() for m in messages],
            "temperature": temperature,
        }

        start_time = time.time()

        try:
            response = await self._client.chat.completions.create(**request_kwargs)
        except Exception as e:
            error_msg = str(e)
            if "Connection" in error_msg or "connect" in error_msg.lower():
                raise LLMConnectionError(
                    f"Could not connect to {self.settings.provider}: {e}"
                ) from e
            raise LLMError(f"LLM call failed: {e}") from e

        latency_ms = int((time.time() - start_time) * 1000)

        if not response.choices:
            raise LLMResponseError("Empty response from LLM")

        content = response.choices[0].message.content or ""

        usage = {}
        if response.usage:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            }

        logger.debug(
            "llm_response",
            provider=self.settings.provider,
            model=response.model,
            tokens=usage.get("total_tokens", 0),
            latency_ms=latency_ms,
        )

        return LLMResponse(
            content=content,
            model=response.model,
            usage=usage,
            latency_ms=latency_ms,
        )
