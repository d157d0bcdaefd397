"""
Provider Registry - maps backend names to provider instances.

The classifier speaks in backend names ("openai", "claude", "gemini",
"cohere"); the registry resolves them to adapters. One registry is built at
application start-up and injected wherever providers are needed, so tests
can hand in mocks instead of patching module globals.
"""

import logging
from typing import Dict, Iterable, Optional, Tuple

from optigence.ai.providers.base import AIProvider, ProviderType

logger = logging.getLogger("optigence.ai.providers")


# Backend names used by the classifier and in API payloads
BACKEND_ALIASES: Dict[str, ProviderType] = {
    "openai": ProviderType.OPENAI,
    "gpt": ProviderType.OPENAI,
    "claude": ProviderType.ANTHROPIC,
    "anthropic": ProviderType.ANTHROPIC,
    "gemini": ProviderType.GEMINI,
    "google": ProviderType.GEMINI,
    "cohere": ProviderType.COHERE,
}


def resolve_backend(name: str) -> Optional[ProviderType]:
    """Translate a backend name into a ProviderType (None if unknown)."""
    if isinstance(name, ProviderType):
        return name
    return BACKEND_ALIASES.get((name or "").strip().lower())


class ProviderRegistry:
    """
    Holds one adapter per provider type.

    Usage:
        registry = ProviderRegistry.from_settings()
        provider = registry.get("claude")
        for name, provider in registry.fallback_chain("gemini"):
            ...
    """

    def __init__(self, providers: Dict[ProviderType, AIProvider]):
        self._providers = dict(providers)

    @classmethod
    def from_settings(cls) -> "ProviderRegistry":
        """Build adapters for every provider from settings."""
        from optigence.ai.providers.anthropic_provider import AnthropicProvider
        from optigence.ai.providers.cohere_provider import CohereProvider
        from optigence.ai.providers.gemini import GeminiProvider
        from optigence.ai.providers.openai_provider import OpenAIProvider

        return cls({
            ProviderType.OPENAI: OpenAIProvider(),
            ProviderType.ANTHROPIC: AnthropicProvider(),
            ProviderType.GEMINI: GeminiProvider(),
            ProviderType.COHERE: CohereProvider(),
        })

    def get(self, name) -> Optional[AIProvider]:
        provider_type = resolve_backend(name)
        if provider_type is None:
            return None
        return self._providers.get(provider_type)

    def items(self) -> Iterable[Tuple[ProviderType, AIProvider]]:
        return self._providers.items()

    def fallback_chain(self, preferred) -> Iterable[Tuple[ProviderType, AIProvider]]:
        """
        Preferred provider first, then OpenAI.

        Unknown preferred names go straight to OpenAI. OpenAI is never
        listed twice.
        """
        chain = []
        preferred_type = resolve_backend(preferred)
        if preferred_type is not None and preferred_type in self._providers:
            chain.append((preferred_type, self._providers[preferred_type]))
        if preferred_type != ProviderType.OPENAI and ProviderType.OPENAI in self._providers:
            chain.append((ProviderType.OPENAI, self._providers[ProviderType.OPENAI]))
        return chain
