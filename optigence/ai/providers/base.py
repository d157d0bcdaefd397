"""
Base AI Provider - the contract every LLM adapter follows.

Adapters only implement _complete(): one request to their API, returning
the text and token usage or raising. Everything else lives here:

    generate()        plain completion, failures returned as AIResponse.error
    generate_json()   JSON mode + fence stripping + json.loads validation
    call()            strict variant, raises ProviderUnavailableError
    ping()            tiny completion, the full AIResponse
    health_check()    ping() reduced to True when it answers

The router and the module assistants pick providers by backend name, so
swapping or adding one needs no change outside this package.
"""

import json
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from optigence.core.errors import ProviderUnavailableError

logger = logging.getLogger("optigence.ai")


class ProviderType(str, Enum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"
    COHERE = "cohere"


@dataclass
class TokenUsage:
    """Token counts for one request; total is derived when left at 0."""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def __post_init__(self):
        if self.total_tokens == 0:
            self.total_tokens = self.prompt_tokens + self.completion_tokens

    def to_dict(self) -> Dict[str, int]:
        return {
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
        }


@dataclass
class AIResponse:
    """
    Outcome of one provider request.

    success=False responses carry the reason in `error` and an empty
    `content`; callers decide whether to fall back. invalid_json marks a
    JSON request whose answer did not parse.
    """
    content: str
    provider: ProviderType
    model: str
    usage: TokenUsage = field(default_factory=TokenUsage)
    latency_ms: float = 0.0
    success: bool = True
    error: Optional[str] = None
    invalid_json: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Log-friendly summary; long content is truncated."""
        return {
            "content": self.content[:100] + "..." if len(self.content) > 100 else self.content,
            "provider": self.provider.value,
            "model": self.model,
            "tokens": self.usage.to_dict(),
            "latency_ms": self.latency_ms,
            "success": self.success,
            "error": self.error,
        }


JSON_ONLY_INSTRUCTION = "You must respond with valid JSON only. No explanation, no markdown code blocks."


def strip_code_fence(content: str) -> str:
    """Remove a ```json ... ``` wrapper some models put around JSON."""
    content = content.strip()
    if content.startswith("```"):
        content = content.split("\n", 1)[1] if "\n" in content else content[3:]
        if content.rstrip().endswith("```"):
            content = content.rstrip()[:-3]
    return content.strip()


class AIProvider(ABC):
    """
    Abstract base class for AI providers.

    A provider built without an API key stays importable, reports
    is_configured == False and answers every request with an error
    response naming the missing key.
    """

    provider_type: ProviderType
    display_name: str = ""
    model: str = ""

    # Sampling used by generate_json() unless the caller overrides it
    json_temperature: float = 0.2
    json_max_tokens: int = 1024

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """True when the provider has credentials."""

    @abstractmethod
    async def _complete(
        self,
        prompt: str,
        system_prompt: Optional[str],
        temperature: float,
        max_tokens: int,
        json_mode: bool,
    ) -> Tuple[str, TokenUsage]:
        """One API request. Raise on any failure; the message becomes AIResponse.error."""

    async def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
        **kwargs
    ) -> AIResponse:
        """Plain completion. Never raises."""
        return await self._run(prompt, system_prompt, temperature, max_tokens, json_mode=False)

    async def generate_json(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        **kwargs
    ) -> AIResponse:
        """
        JSON completion. Never raises.

        The content of a successful response parses with json.loads; schema
        validation is left to the caller.
        """
        response = await self._run(
            prompt,
            system_prompt,
            kwargs.get("temperature", self.json_temperature),
            kwargs.get("max_tokens", self.json_max_tokens),
            json_mode=True,
        )
        if not response.success:
            return response

        content = strip_code_fence(response.content)
        try:
            json.loads(content)
        except json.JSONDecodeError as e:
            logger.warning(f"{self.display_name} returned invalid JSON: {e}")
            return self._error_response(f"Invalid JSON response: {e}", response.latency_ms, invalid_json=True)

        response.content = content
        return response

    async def call(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 2000,
    ) -> str:
        """
        Send a prompt and return the text, raising on failure.

        Single attempt, no retry. Callers catch ProviderUnavailableError and
        move on to the next provider in their chain.
        """
        response = await self.generate(
            prompt=prompt,
            system_prompt=system_prompt,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        if not response.success:
            raise ProviderUnavailableError(self.provider_type.value, response.error or "")
        return response.content

    async def ping(self) -> AIResponse:
        """Smallest possible request; the response keeps the provider's error."""
        return await self.generate(prompt="Say 'ok' and nothing else.", max_tokens=10)

    async def health_check(self) -> bool:
        if not self.is_configured:
            return False
        response = await self.ping()
        return response.success and len(response.content) > 0

    # -------------------------------------------------------------------------
    # INTERNALS
    # -------------------------------------------------------------------------

    async def _run(
        self,
        prompt: str,
        system_prompt: Optional[str],
        temperature: float,
        max_tokens: int,
        json_mode: bool,
    ) -> AIResponse:
        start_time = time.time()

        if not self.is_configured:
            return self._error_response(f"{self.display_name} API key not configured", 0.0)

        try:
            content, usage = await self._complete(prompt, system_prompt, temperature, max_tokens, json_mode)
        except Exception as e:
            return self._error_response(str(e), (time.time() - start_time) * 1000)

        latency_ms = (time.time() - start_time) * 1000
        logger.info(
            f"{self.display_name} request completed in {latency_ms:.0f}ms, tokens: {usage.total_tokens}"
        )
        return AIResponse(
            content=content,
            provider=self.provider_type,
            model=self.model,
            usage=usage,
            latency_ms=latency_ms,
            success=True,
        )

    def _error_response(self, error: str, latency_ms: float, invalid_json: bool = False) -> AIResponse:
        logger.error(f"AI Provider Error [{self.provider_type.value}]: {error}")
        return AIResponse(
            content="",
            provider=self.provider_type,
            model=self.model,
            latency_ms=latency_ms,
            success=False,
            error=error,
            invalid_json=invalid_json,
        )
