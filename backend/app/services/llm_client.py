"""Unified LLM client — tries OpenAI first, falls back to Anthropic."""

import logging

import anthropic
from openai import AsyncOpenAI

from app.config import settings

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """Base class for LLM failures."""


class LLMTransportError(LLMError):
    """Every configured provider failed (network, HTTP status, rate limit...)."""


class LLMNotConfiguredError(LLMError):
    """No provider API key is set."""


class LLMClient:
    """Unified async LLM client with OpenAI primary + Anthropic fallback."""

    def __init__(self, openai_api_key: str | None = None, anthropic_api_key: str | None = None):
        openai_api_key = settings.openai_api_key if openai_api_key is None else openai_api_key
        anthropic_api_key = settings.anthropic_api_key if anthropic_api_key is None else anthropic_api_key
        self._openai = AsyncOpenAI(api_key=openai_api_key, max_retries=0) if openai_api_key else None
        self._anthropic = (
            anthropic.AsyncAnthropic(api_key=anthropic_api_key, max_retries=0) if anthropic_api_key else None
        )

    @property
    def configured(self) -> bool:
        return bool(self._openai or self._anthropic)

    async def generate(
        self,
        system: str,
        user: str,
        *,
        max_tokens: int = 1500,
        timeout: float = 15.0,
        temperature: float | None = None,
    ) -> str:
        """Get a completion from the best available LLM.

        Args:
            system: System prompt
            user: User message
            max_tokens: Max output tokens
            timeout: Per-provider request timeout in seconds
            temperature: Sampling temperature (settings default when None)

        Returns:
            Raw text response from the LLM (may be empty).

        Raises:
            LLMNotConfiguredError if no provider is configured.
            LLMTransportError if every provider failed.
        """
        if not self.configured:
            raise LLMNotConfiguredError("No LLM provider configured")

        temperature = settings.llm_temperature if temperature is None else temperature
        errors = []

        # Try OpenAI first
        if self._openai:
            try:
                response = await self._openai.chat.completions.create(
                    model=settings.openai_model,
                    max_tokens=max_tokens,
                    temperature=temperature,
                    messages=[
                        {"role": "system", "content": system},
                        {"role": "user", "content": user},
                    ],
                    timeout=timeout,
                )
                return (response.choices[0].message.content or "").strip()
            except Exception as e:
                errors.append(f"OpenAI: {e}")
                logger.warning(f"OpenAI failed, trying Anthropic: {e}")

        # Fallback to Anthropic
        if self._anthropic:
            try:
                response = await self._anthropic.messages.create(
                    model=settings.anthropic_model,
                    max_tokens=max_tokens,
                    temperature=temperature,
                    system=system,
                    messages=[{"role": "user", "content": user}],
                    timeout=timeout,
                )
                return "".join(
                    block.text for block in response.content if getattr(block, "type", "") == "text"
                ).strip()
            except Exception as e:
                errors.append(f"Anthropic: {e}")
                logger.warning(f"Anthropic also failed: {e}")

        raise LLMTransportError(f"All LLM providers failed: {'; '.join(errors)}")


# Singleton
llm_client = LLMClient()
