"""
Test configuration and fixtures for pytest.

This module provides shared fixtures used across all tests:
- Provider mocks (no network, no tokens)
- A provider registry built from those mocks
- Test client (FastAPI TestClient) wired to a fresh application
- A clean AI monitor and empty provider credentials for every test
"""

from typing import Callable, Dict, Generator, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from optigence.ai.monitoring import ai_monitor
from optigence.ai.providers.base import AIProvider, AIResponse, ProviderType, TokenUsage
from optigence.ai.providers.registry import ProviderRegistry
from optigence.core.config import settings


# ---------------------------------------------------------------------------
# ENVIRONMENT ISOLATION
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """
    Blank every credential so a developer's .env never reaches the tests.
    """
    for name in (
        "OPENAI_API_KEY",
        "ANTHROPIC_API_KEY",
        "GEMINI_API_KEY",
        "GOOGLE_API_KEY",
        "COHERE_API_KEY",
        "SUPABASE_URL",
        "SUPABASE_ANON_KEY",
        "GOOGLE_CLIENT_ID",
        "GOOGLE_CLIENT_SECRET",
    ):
        monkeypatch.setattr(settings, name, "")
    monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
    monkeypatch.setattr(settings, "STATIC_TEMPLATE_FALLBACK", False)
    monkeypatch.setattr(settings, "INTENT_CLASSIFIER_STRATEGY", "remote")


@pytest.fixture(autouse=True)
def reset_monitor() -> Generator[None, None, None]:
    ai_monitor.reset()
    yield
    ai_monitor.reset()


# ---------------------------------------------------------------------------
# PROVIDER FIXTURES
# ---------------------------------------------------------------------------

def make_response(
    provider_type: ProviderType,
    content: str = "",
    success: bool = True,
    error: Optional[str] = None,
) -> AIResponse:
    return AIResponse(
        content=content,
        provider=provider_type,
        model=f"{provider_type.value}-test",
        usage=TokenUsage(prompt_tokens=10, completion_tokens=20),
        latency_ms=12.5,
        success=success,
        error=error,
    )


def make_provider(
    provider_type: ProviderType,
    content: str = "Generated email body",
    success: bool = True,
    error: Optional[str] = None,
    configured: bool = True,
) -> MagicMock:
    """
    Mock provider whose generate()/generate_json() return one canned response.
    """
    provider = MagicMock(spec=AIProvider)
    provider.provider_type = provider_type
    provider.model = f"{provider_type.value}-test"
    provider.is_configured = configured
    response = make_response(provider_type, content, success, error)
    provider.generate = AsyncMock(return_value=response)
    provider.generate_json = AsyncMock(return_value=response)
    provider.ping = AsyncMock(return_value=response)
    provider.health_check = AsyncMock(return_value=success and configured)
    return provider


@pytest.fixture
def provider_factory() -> Callable[..., MagicMock]:
    return make_provider


@pytest.fixture
def mock_providers() -> Dict[ProviderType, MagicMock]:
    """All four providers, healthy."""
    return {
        ProviderType.OPENAI: make_provider(ProviderType.OPENAI, "OpenAI draft"),
        ProviderType.ANTHROPIC: make_provider(ProviderType.ANTHROPIC, "Claude draft"),
        ProviderType.GEMINI: make_provider(ProviderType.GEMINI, "Gemini draft"),
        ProviderType.COHERE: make_provider(
            ProviderType.COHERE,
            '{"intent": "reply", "confidence": 0.92, "suggestedLLM": "claude"}',
        ),
    }


@pytest.fixture
def registry(mock_providers) -> ProviderRegistry:
    return ProviderRegistry(mock_providers)


# ---------------------------------------------------------------------------
# API FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture
def app(registry):
    """A fresh application per test: new memory, pending actions and rate limits."""
    from optigence.main import create_app

    application = create_app(registry)
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client
