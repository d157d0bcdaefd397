"""
Cohere Provider - Command R models over the v2 chat REST API.

Cohere is the pattern classifier: the intent classifier sends it a short,
low-temperature prompt and expects a JSON verdict back. It is also a
selectable backend for generation.

The provider talks HTTP directly with httpx, so no Cohere SDK is needed.

API Documentation: https://docs.cohere.com/reference/chat
"""

import logging
from typing import Any, Dict, Optional, Tuple

import httpx

from optigence.core.config import settings
from optigence.ai.providers.base import AIProvider, ProviderType, TokenUsage

logger = logging.getLogger("optigence.ai.cohere")


class CohereAPIError(Exception):
    """Non-200 answer or unusable body from the chat endpoint."""


class CohereProvider(AIProvider):
    """
    Usage:
        provider = CohereProvider()
        response = await provider.generate_json(
            prompt="Classify: 'can we move the sync to friday?'",
            system_prompt=INTENT_CLASSIFICATION_PROMPT,
        )
    """

    provider_type = ProviderType.COHERE
    display_name = "Cohere"

    # Classification calls are short and near-deterministic
    json_temperature = 0.1
    json_max_tokens = 500

    def __init__(
        self,
        model: str = None,
        api_key: str = None,
        timeout: float = None,
        api_url: str = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            model: Model name (default: settings.COHERE_MODEL)
            api_key: API key (default: settings.COHERE_API_KEY)
            timeout: Request timeout in seconds
            api_url: Chat endpoint (default: settings.COHERE_API_URL)
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.model = model or settings.COHERE_MODEL
        self.api_key = api_key or settings.COHERE_API_KEY
        self.timeout = timeout or settings.AI_REQUEST_TIMEOUT
        self.api_url = api_url or settings.COHERE_API_URL
        self._transport = transport

        if self.api_key:
            logger.info(f"Cohere provider initialized with model: {self.model}")
        else:
            logger.warning("Cohere API key not configured - provider unavailable")

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def _complete(
        self,
        prompt: str,
        system_prompt: Optional[str],
        temperature: float,
        max_tokens: int,
        json_mode: bool,
    ) -> Tuple[str, TokenUsage]:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}

        data = await self._post(payload)

        blocks = (data.get("message") or {}).get("content") or []
        text = "".join(block.get("text", "") for block in blocks if block.get("type") == "text")
        tokens = (data.get("usage") or {}).get("tokens") or {}
        return text, TokenUsage(
            prompt_tokens=int(tokens.get("input_tokens", 0)),
            completion_tokens=int(tokens.get("output_tokens", 0)),
        )

    async def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.post(self.api_url, json=payload, headers=headers)
            except httpx.HTTPError as e:
                raise CohereAPIError(f"Network error: {e}") from e

        try:
            data = response.json() if response.content else {}
        except ValueError:
            data = {}

        if response.status_code != 200:
            message = data.get("message", response.text) if isinstance(data, dict) else response.text
            raise CohereAPIError(f"Cohere API error {response.status_code}: {message}")
        if not isinstance(data, dict):
            raise CohereAPIError("Unexpected Cohere response body")
        return data
