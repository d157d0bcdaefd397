"""
AI Providers Module - Unified clients for multiple LLM providers.

This module provides consistent interfaces to different AI providers:
- OpenAI (composition, universal fallback)
- Anthropic Claude (replies, apologies, summaries)
- Google Gemini (scheduling, real-time information)
- Cohere (fast intent classification)

Each provider has the same interface, making them interchangeable:
    response = await provider.generate(prompt, **kwargs)
    text = await provider.call(prompt)   # raises on failure
"""

from optigence.ai.providers.base import AIProvider, AIResponse, ProviderType, TokenUsage
from optigence.ai.providers.openai_provider import OpenAIProvider
from optigence.ai.providers.anthropic_provider import AnthropicProvider
from optigence.ai.providers.gemini import GeminiProvider
from optigence.ai.providers.cohere_provider import CohereProvider
from optigence.ai.providers.registry import ProviderRegistry, resolve_backend

__all__ = [
    "AIProvider",
    "AIResponse",
    "ProviderType",
    "TokenUsage",
    "OpenAIProvider",
    "AnthropicProvider",
    "GeminiProvider",
    "CohereProvider",
    "ProviderRegistry",
    "resolve_backend",
]
