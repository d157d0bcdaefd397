"""
Tests for the diagnostics service behind GET /optimail/diagnostics.

Providers are mocks and Supabase runs against httpx.MockTransport, so no
probe leaves the process.
"""

from unittest.mock import AsyncMock

import httpx
import pytest

from optigence.ai.providers import ProviderRegistry
from optigence.ai.providers.base import ProviderType
from optigence.ai.providers.cohere_provider import CohereProvider
from optigence.core.config import Settings, settings
from optigence.services.diagnostics_service import (
    DiagnosticResult,
    DiagnosticsService,
    DiagnosticStatus,
    OverallStatus,
    summarize_results,
)


def supabase_transport(status_code: int = 200, captured=None) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if captured is not None:
            captured.append(request)
        return httpx.Response(status_code, json={})

    return httpx.MockTransport(handler)


@pytest.fixture
def configured_services(monkeypatch):
    monkeypatch.setattr(settings, "SUPABASE_URL", "https://project.supabase.co/")
    monkeypatch.setattr(settings, "SUPABASE_ANON_KEY", "anon-key")
    monkeypatch.setattr(settings, "GOOGLE_CLIENT_ID", "client-id")
    monkeypatch.setattr(settings, "GOOGLE_CLIENT_SECRET", "client-secret")


def by_service(report):
    return {result.service: result for result in report.results}


class TestSummarizeResults:
    """Overall status rules."""

    def _results(self, *statuses):
        return [DiagnosticResult(service=f"s{i}", status=status) for i, status in enumerate(statuses)]

    def test_healthy(self):
        report = summarize_results(self._results(DiagnosticStatus.SUCCESS, DiagnosticStatus.SUCCESS))

        assert report.overall == OverallStatus.HEALTHY

    def test_degraded_at_half(self):
        report = summarize_results(self._results(DiagnosticStatus.SUCCESS, DiagnosticStatus.ERROR))

        assert report.overall == OverallStatus.DEGRADED
        assert report.summary.errors == 1

    def test_unhealthy(self):
        report = summarize_results(self._results(
            DiagnosticStatus.SUCCESS, DiagnosticStatus.NOT_CONFIGURED, DiagnosticStatus.ERROR
        ))

        assert report.overall == OverallStatus.UNHEALTHY
        assert report.summary.not_configured == 1


class TestDiagnosticsService:
    """run_all_diagnostics against mocked dependencies."""

    @pytest.mark.asyncio
    async def test_degraded_without_external_services(self, registry):
        """Four healthy providers, Supabase and Calendar unconfigured."""
        report = await DiagnosticsService(registry).run_all_diagnostics()

        assert report.overall == OverallStatus.DEGRADED
        assert report.summary.total == 6
        assert report.summary.success == 4
        assert report.summary.not_configured == 2
        assert [r.service for r in report.results] == [
            "OpenAI API", "Anthropic API", "Gemini API", "Cohere API",
            "Supabase Database", "Google Calendar API",
        ]
        assert by_service(report)["OpenAI API"].details == "Model openai-test responded"

    @pytest.mark.asyncio
    async def test_healthy_when_everything_answers(self, registry, configured_services):
        captured = []
        service = DiagnosticsService(registry, transport=supabase_transport(captured=captured))

        report = await service.run_all_diagnostics()

        assert report.overall == OverallStatus.HEALTHY
        request = captured[0]
        assert str(request.url) == "https://project.supabase.co/rest/v1/"
        assert request.headers["apikey"] == "anon-key"
        assert request.headers["Authorization"] == "Bearer anon-key"

    @pytest.mark.asyncio
    async def test_supabase_error_status(self, registry, configured_services):
        service = DiagnosticsService(registry, transport=supabase_transport(status_code=503))

        result = await service.check_supabase()

        assert result.status == DiagnosticStatus.ERROR
        assert result.error == "Unexpected status: 503"

    @pytest.mark.asyncio
    async def test_supabase_connection_error(self, registry, configured_services):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        service = DiagnosticsService(registry, transport=httpx.MockTransport(handler))

        result = await service.check_supabase()

        assert result.status == DiagnosticStatus.ERROR
        assert result.error == "refused"

    @pytest.mark.asyncio
    async def test_placeholder_values_not_configured(self, registry, monkeypatch):
        monkeypatch.setattr(settings, "SUPABASE_URL", "paste_your_actual_url_here")
        monkeypatch.setattr(settings, "SUPABASE_ANON_KEY", "anon-key")

        result = await DiagnosticsService(registry).check_supabase()

        assert result.status == DiagnosticStatus.NOT_CONFIGURED

    @pytest.mark.asyncio
    async def test_unconfigured_and_failing_providers(self, provider_factory):
        registry = ProviderRegistry({
            ProviderType.OPENAI: provider_factory(ProviderType.OPENAI, success=False, error="down"),
            ProviderType.COHERE: provider_factory(ProviderType.COHERE, configured=False),
        })

        report = await DiagnosticsService(registry).run_all_diagnostics()
        results = by_service(report)

        assert results["OpenAI API"].status == DiagnosticStatus.ERROR
        assert results["OpenAI API"].error == "down"
        assert results["Cohere API"].status == DiagnosticStatus.NOT_CONFIGURED
        assert results["Cohere API"].details == "COHERE_API_KEY not set"
        assert results["Anthropic API"].status == DiagnosticStatus.NOT_CONFIGURED
        assert report.overall == OverallStatus.UNHEALTHY

    @pytest.mark.asyncio
    async def test_crashed_probe_reported_as_error(self, registry, mock_providers):
        mock_providers[ProviderType.GEMINI].ping = AsyncMock(side_effect=RuntimeError("kaboom"))

        report = await DiagnosticsService(registry).run_all_diagnostics()

        gemini = by_service(report)["Gemini API"]
        assert gemini.status == DiagnosticStatus.ERROR
        assert gemini.error == "kaboom"
        assert report.summary.total == 6

    @pytest.mark.asyncio
    async def test_provider_error_is_reported(self):
        """The provider's own error reaches the result."""
        def handler(request):
            return httpx.Response(429, json={"message": "slow down"})

        cohere = CohereProvider(api_key="test-key", transport=httpx.MockTransport(handler))
        service = DiagnosticsService(ProviderRegistry({ProviderType.COHERE: cohere}))

        result = await service.check_provider(ProviderType.COHERE, "Cohere API", "COHERE_API_KEY")

        assert result.status == DiagnosticStatus.ERROR
        assert result.error == "Cohere API error 429: slow down"

    def test_supabase_probe_settings(self):
        """Only the URL and anon key are read; no unused service-role setting."""
        supabase_fields = {name for name in Settings.model_fields if name.startswith("SUPABASE_")}

        assert supabase_fields == {"SUPABASE_URL", "SUPABASE_ANON_KEY"}
