"""
Anthropic Provider - Claude client for nuanced writing.

Claude handles the emotionally delicate and long-context intents:
replies, thank-you notes, apologies and thread summaries.

API Documentation: https://docs.anthropic.com/en/api/messages
"""

import logging
from typing import Optional, Tuple

from anthropic import AsyncAnthropic

from optigence.core.config import settings
from optigence.ai.providers.base import JSON_ONLY_INSTRUCTION, AIProvider, ProviderType, TokenUsage

logger = logging.getLogger("optigence.ai.anthropic")


class AnthropicProvider(AIProvider):
    """
    Anthropic Claude provider.

    Claude has no native JSON mode; JSON requests add an explicit
    instruction to the system prompt and the base class strips any fence.
    """

    provider_type = ProviderType.ANTHROPIC
    display_name = "Anthropic"

    def __init__(self, model: str = None, api_key: str = None, timeout: float = None):
        self.model = model or settings.ANTHROPIC_MODEL
        self.timeout = timeout or settings.AI_REQUEST_TIMEOUT
        api_key = api_key or settings.ANTHROPIC_API_KEY

        self._client = AsyncAnthropic(api_key=api_key, timeout=self.timeout, max_retries=0) if api_key else None
        if self._client:
            logger.info(f"Anthropic provider initialized with model: {self.model}")
        else:
            logger.warning("Anthropic API key not configured - provider unavailable")

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
            system_prompt = f"{system_prompt or ''}\n\nIMPORTANT: {JSON_ONLY_INSTRUCTION}".strip()

        params = {
            "model": self.model,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
        }
        if system_prompt:
            params["system"] = system_prompt

        response = await self._client.messages.create(**params)

        # Claude answers with a list of content blocks; only text blocks count
        text = "".join(getattr(block, "text", "") for block in response.content or [])
        usage = response.usage
        return text, TokenUsage(
            prompt_tokens=usage.input_tokens if usage else 0,
            completion_tokens=usage.output_tokens if usage else 0,
        )
