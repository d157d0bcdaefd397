"""
Gemini Provider - Google's GenAI SDK.

Gemini takes scheduling requests and anything that needs fresh
information ("latest", "news", "current").
"""

import logging
from typing import Optional, Tuple

from google import genai
from google.genai import types

from optigence.core.config import settings
from optigence.ai.providers.base import AIProvider, ProviderType, TokenUsage

logger = logging.getLogger("optigence.ai.gemini")


class GeminiProvider(AIProvider):
    provider_type = ProviderType.GEMINI
    display_name = "Gemini"

    def __init__(self, model: str = None, api_key: str = None, timeout: float = None):
        self.model = model or settings.GEMINI_MODEL
        self.timeout = timeout or settings.AI_REQUEST_TIMEOUT
        api_key = api_key or settings.gemini_key

        if api_key:
            # HttpOptions.timeout is expressed in milliseconds
            self._client = genai.Client(
                api_key=api_key,
                http_options=types.HttpOptions(timeout=int(self.timeout * 1000)),
            )
            logger.info(f"Gemini provider initialized with model: {self.model}")
        else:
            self._client = None
            logger.warning("Gemini API key not configured")

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
        config = types.GenerateContentConfig(
            temperature=temperature,
            max_output_tokens=max_tokens,
            system_instruction=system_prompt,
            response_mime_type="application/json" if json_mode else None,
        )
        if json_mode:
            prompt = f"{prompt}\n\nIMPORTANT: Respond ONLY with valid JSON."

        response = await self._client.aio.models.generate_content(
            model=self.model,
            contents=prompt,
            config=config,
        )

        # usage_metadata can be None when the API reports nothing
        meta = response.usage_metadata
        return response.text or "", TokenUsage(
            prompt_tokens=(meta.prompt_token_count or 0) if meta else 0,
            completion_tokens=(meta.candidates_token_count or 0) if meta else 0,
        )
