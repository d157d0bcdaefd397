"""Tests for the AI monitor counters."""

import pytest

from optigence.ai.monitoring.monitor import AIMonitor, estimate_cost
from optigence.ai.providers.base import AIResponse, ProviderType, TokenUsage


def response(provider=ProviderType.OPENAI, success=True, prompt=1000, completion=500):
    return AIResponse(
        content="draft",
        provider=provider,
        model="test-model",
        usage=TokenUsage(prompt_tokens=prompt, completion_tokens=completion),
        latency_ms=100.0,
        success=success,
        error=None if success else "timeout",
    )


@pytest.fixture
def monitor():
    return AIMonitor(max_history=3)


class TestEstimateCost:

    def test_known_provider(self):
        assert estimate_cost("openai", 1_000_000, 1_000_000) == pytest.approx(40.0)

    def test_unknown_provider_is_free(self):
        assert estimate_cost("local", 1000, 1000) == 0.0


class TestAIMonitor:
    """Aggregation and history."""

    def test_tracks_calls(self, monitor):
        monitor.track_response("r1", response())
        monitor.track_response("r2", response(ProviderType.ANTHROPIC, success=False))

        stats = monitor.get_stats()

        assert stats.total_requests == 2
        assert stats.failed_requests == 1
        assert stats.success_rate == 50.0
        assert stats.total_tokens == 3000
        assert stats.avg_latency_ms == 100.0
        assert stats.requests_by_provider == {"openai": 1, "anthropic": 1}
        assert stats.estimated_total_cost == pytest.approx(0.025 + 0.0105)

    def test_empty_stats(self, monitor):
        stats = monitor.get_stats()

        assert stats.success_rate == 0.0
        assert stats.avg_latency_ms == 0.0

    def test_recent_calls_bounded_newest_first(self, monitor):
        for index in range(5):
            monitor.track_response(f"r{index}", response())

        assert [call.request_id for call in monitor.get_recent_calls()] == ["r4", "r3", "r2"]
        assert monitor.get_stats().total_requests == 5

    def test_classification_and_routing_counters(self, monitor):
        monitor.track_classification("r1", "hello", "compose", 0.7, strategy="keyword")
        monitor.track_classification("r2", "hello", "compose", 0.9, strategy="remote")
        monitor.track_classification("r3", "hello", "compose", 0.9, strategy="remote")
        monitor.track_routing("r3", "compose", "openai", 0.72, fallback_used=True)
        monitor.track_routing("r4", "compose", "openai", 0.9)

        stats = monitor.get_stats()

        assert stats.classifications_by_strategy == {"keyword": 1, "remote": 2}
        assert stats.fallbacks_used == 1

    def test_reset(self, monitor):
        monitor.track_response("r1", response())
        monitor.track_routing("r1", "compose", "openai", 0.5, fallback_used=True)

        monitor.reset()

        assert monitor.get_stats().total_requests == 0
        assert monitor.get_stats().fallbacks_used == 0
        assert monitor.get_recent_calls() == []
