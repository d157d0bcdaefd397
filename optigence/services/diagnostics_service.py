"""
Diagnostics Service - Connectivity report behind GET /optimail/diagnostics.

Every external dependency gets one probe. Probes run concurrently and
never raise; a crashed probe is reported as an "error" result for its
service.

    {
        "overall": "healthy" | "degraded" | "unhealthy",
        "results": [{"service", "status", "latency", "details", "error", "timestamp"}],
        "summary": {"total", "success", "errors", "not_configured"}
    }

overall is "healthy" only when nothing errored and nothing is missing
configuration; "degraded" while at least half of the probes succeed.
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

import httpx
from pydantic import BaseModel, Field

from optigence.ai.providers import ProviderRegistry, ProviderType
from optigence.core.config import settings

logger = logging.getLogger("optigence.services.diagnostics")

PLACEHOLDER_MARKER = "paste_your_actual"

PROVIDER_SERVICES: Tuple[Tuple[ProviderType, str, str], ...] = (
    (ProviderType.OPENAI, "OpenAI API", "OPENAI_API_KEY"),
    (ProviderType.ANTHROPIC, "Anthropic API", "ANTHROPIC_API_KEY"),
    (ProviderType.GEMINI, "Gemini API", "GEMINI_API_KEY or GOOGLE_API_KEY"),
    (ProviderType.COHERE, "Cohere API", "COHERE_API_KEY"),
)


class DiagnosticStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    NOT_CONFIGURED = "not_configured"


class OverallStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class DiagnosticResult(BaseModel):
    service: str
    status: DiagnosticStatus
    latency: Optional[float] = None
    details: Optional[str] = None
    error: Optional[str] = None
    timestamp: str = Field(default_factory=_now)


class DiagnosticSummary(BaseModel):
    total: int
    success: int
    errors: int
    not_configured: int


class HealthCheckResponse(BaseModel):
    overall: OverallStatus
    results: List[DiagnosticResult]
    summary: DiagnosticSummary


def summarize_results(results: List[DiagnosticResult]) -> HealthCheckResponse:
    summary = DiagnosticSummary(
        total=len(results),
        success=sum(1 for r in results if r.status == DiagnosticStatus.SUCCESS),
        errors=sum(1 for r in results if r.status == DiagnosticStatus.ERROR),
        not_configured=sum(1 for r in results if r.status == DiagnosticStatus.NOT_CONFIGURED),
    )

    if summary.errors == 0 and summary.not_configured == 0:
        overall = OverallStatus.HEALTHY
    elif summary.success >= summary.total / 2:
        overall = OverallStatus.DEGRADED
    else:
        overall = OverallStatus.UNHEALTHY

    return HealthCheckResponse(overall=overall, results=results, summary=summary)


def _is_placeholder(value: str) -> bool:
    return not value or PLACEHOLDER_MARKER in value


class DiagnosticsService:
    """
    Usage:
        service = DiagnosticsService(registry)
        report = await service.run_all_diagnostics()
        report.overall  # OverallStatus.DEGRADED
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
    ):
        self.registry = registry
        self._transport = transport
        self.timeout = timeout or settings.AI_REQUEST_TIMEOUT

    async def run_all_diagnostics(self) -> HealthCheckResponse:
        logger.info("Running OptiMail API diagnostics")

        probes: List[Tuple[str, Callable[[], Awaitable[DiagnosticResult]]]] = [
            (name, self._provider_probe(provider_type, name, env_hint))
            for provider_type, name, env_hint in PROVIDER_SERVICES
        ]
        probes.append(("Supabase Database", self.check_supabase))
        probes.append(("Google Calendar API", self.check_google_calendar))

        outcomes = await asyncio.gather(*(probe() for _, probe in probes), return_exceptions=True)

        results = []
        for (service, _), outcome in zip(probes, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning(f"Diagnostic probe for {service} crashed: {outcome}")
                results.append(DiagnosticResult(
                    service=service,
                    status=DiagnosticStatus.ERROR,
                    error=str(outcome) or "Diagnostic test failed",
                ))
            else:
                results.append(outcome)

        report = summarize_results(results)
        logger.info(
            f"Diagnostics finished: {report.overall.value} "
            f"({report.summary.success}/{report.summary.total} ok)"
        )
        return report

    # -------------------------------------------------------------------------
    # PROBES
    # -------------------------------------------------------------------------

    def _provider_probe(
        self,
        provider_type: ProviderType,
        service: str,
        env_hint: str,
    ) -> Callable[[], Awaitable[DiagnosticResult]]:
        async def probe() -> DiagnosticResult:
            return await self.check_provider(provider_type, service, env_hint)
        return probe

    async def check_provider(self, provider_type: ProviderType, service: str, env_hint: str) -> DiagnosticResult:
        provider = self.registry.get(provider_type)
        if provider is None or not provider.is_configured:
            return DiagnosticResult(
                service=service,
                status=DiagnosticStatus.NOT_CONFIGURED,
                details=f"{env_hint} not set",
            )

        start = time.time()
        response = await provider.ping()
        latency = round((time.time() - start) * 1000, 2)

        if response.success and response.content:
            return DiagnosticResult(
                service=service,
                status=DiagnosticStatus.SUCCESS,
                latency=latency,
                details=f"Model {provider.model} responded",
            )
        return DiagnosticResult(
            service=service,
            status=DiagnosticStatus.ERROR,
            latency=latency,
            error=response.error or "Empty response from provider",
        )

    async def check_supabase(self) -> DiagnosticResult:
        service = "Supabase Database"
        url = settings.SUPABASE_URL
        key = settings.SUPABASE_ANON_KEY
        if _is_placeholder(url) or _is_placeholder(key):
            return DiagnosticResult(
                service=service,
                status=DiagnosticStatus.NOT_CONFIGURED,
                details="SUPABASE_URL and SUPABASE_ANON_KEY need to be configured",
            )

        headers: Dict[str, str] = {"apikey": key, "Authorization": f"Bearer {key}"}
        start = time.time()
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(f"{url.rstrip('/')}/rest/v1/", headers=headers)
        except httpx.HTTPError as e:
            return DiagnosticResult(
                service=service,
                status=DiagnosticStatus.ERROR,
                latency=round((time.time() - start) * 1000, 2),
                error=str(e) or "Connection error",
            )

        latency = round((time.time() - start) * 1000, 2)
        if response.status_code < 400:
            return DiagnosticResult(
                service=service,
                status=DiagnosticStatus.SUCCESS,
                latency=latency,
                details="Connection successful",
            )
        return DiagnosticResult(
            service=service,
            status=DiagnosticStatus.ERROR,
            latency=latency,
            error=f"Unexpected status: {response.status_code}",
        )

    async def check_google_calendar(self) -> DiagnosticResult:
        """Credentials only; a full OAuth round-trip needs a user."""
        service = "Google Calendar API"
        if _is_placeholder(settings.GOOGLE_CLIENT_ID) or _is_placeholder(settings.GOOGLE_CLIENT_SECRET):
            return DiagnosticResult(
                service=service,
                status=DiagnosticStatus.NOT_CONFIGURED,
                details="GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET need to be configured with real values",
            )
        return DiagnosticResult(
            service=service,
            status=DiagnosticStatus.SUCCESS,
            latency=0.0,
            details="OAuth credentials configured - requires user authorization for full testing",
        )
