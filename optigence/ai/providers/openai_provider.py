"""
OpenAI Provider - GPT client for composition and fallback.

OpenAI is the default backend for composing and rewriting emails and the
universal fallback: when the classified backend fails, the router retries
the same request here once before giving up.

API Documentation: https://platform.openai.com/docs/api-reference
"""

import logging
from typing import Optional, Tuple

from openai import AsyncOpenAI

from optigence.core.config import settings
from optigence.ai.providers.base import JSON_ONLY_INSTRUCTION, AIProvider, ProviderType, TokenUsage

logger = logging.getLogger("optigence.ai.openai")


class OpenAIProvider(AIProvider):
    """
    Usage:
        provider = OpenAIProvider()
        response = await provider.generate("Draft a follow-up to...")
    """

    provider_type = ProviderType.OPENAI
    display_name = "OpenAI"

    def __init__(self, model: str = None, api_key: str = None, timeout: float = None):
        """
        Args:
            model: Model name (default: settings.OPENAI_MODEL)
            api_key: API key (default: settings.OPENAI_API_KEY)
            timeout: Request timeout in seconds (default: settings.AI_REQUEST_TIMEOUT)
        """
        self.model = model or settings.OPENAI_MODEL
        self.timeout = timeout or settings.AI_REQUEST_TIMEOUT
        api_key = api_key or settings.OPENAI_API_KEY

        self._client = AsyncOpenAI(api_key=api_key, timeout=self.timeout, max_retries=0) if api_key else None
        if self._client:
            logger.info(f"OpenAI provider initialized with model: {self.model}")
        else:
            logger.warning("OpenAI API key not configured - provider unavailable")

    @property
    def is_configured(self) -> bool:
        return self._client is not None

    async def _complete(
        self,
        prompt: str,
        system_prompt: Optional[str],
        temperature: float,
        max_tokens: int,
        json_mode: bool,
    ) -> Tuple[str, TokenUsage]:
        if json_mode:
            system_prompt = f"{system_prompt or ''}\n\n{JSON_ONLY_INSTRUCTION}".strip()

        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        params = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if json_mode:
            params["response_format"] = {"type": "json_object"}

        response = await self._client.chat.completions.create(**params)

        usage = response.usage
        return response.choices[0].message.content or "", TokenUsage(
            prompt_tokens=usage.prompt_tokens if usage else 0,
            completion_tokens=usage.completion_tokens if usage else 0,
        )
