"""
Dependencies module - reusable FastAPI dependencies for route handlers.

Shared, mutable components (provider registry, rate limiter store,
pending cross-module actions, interaction memory) are created once in
create_app() and parked on app.state. Handlers receive them through the
getters below, so tests swap any of them with app.dependency_overrides.
"""

from fastapi import Depends, Request, Response

from optigence.ai.intent import IntentClassifier
from optigence.ai.memory import InteractionMemory
from optigence.ai.providers import ProviderRegistry
from optigence.ai.router import IntelligentRouter
from optigence.ai.suggestions import LiveSuggestionEngine
from optigence.core.config import settings
from optigence.core.errors import RateLimitExceededError
from optigence.core.rate_limit import RATE_LIMIT_PRESETS, RateLimiterStore, client_fingerprint
from optigence.services.cross_module_service import CrossModuleRouter, PendingActionRegistry
from optigence.services.diagnostics_service import DiagnosticsService
from optigence.services.module_service import ModuleAssistant


# ---------------------------------------------------------------------------
# COMPONENT GETTERS
# ---------------------------------------------------------------------------

def get_registry(request: Request) -> ProviderRegistry:
    return request.app.state.registry


def get_rate_limiter(request: Request) -> RateLimiterStore:
    return request.app.state.rate_limiter


def get_pending_actions(request: Request) -> PendingActionRegistry:
    return request.app.state.pending_actions


def get_memory(request: Request) -> InteractionMemory:
    return request.app.state.memory


def get_classifier(request: Request) -> IntentClassifier:
    return request.app.state.classifier


def get_email_router(request: Request) -> IntelligentRouter:
    return request.app.state.email_router


def get_cross_module_router(request: Request) -> CrossModuleRouter:
    return request.app.state.cross_module_router


def get_suggestion_engine(request: Request) -> LiveSuggestionEngine:
    return request.app.state.suggestion_engine


def get_module_assistant(request: Request) -> ModuleAssistant:
    return request.app.state.module_assistant


def get_diagnostics(request: Request) -> DiagnosticsService:
    return request.app.state.diagnostics


# ---------------------------------------------------------------------------
# RATE LIMITING
# ---------------------------------------------------------------------------

def rate_limited(policy_name: str):
    """
    Dependency factory enforcing one rate limit preset.

    Usage:
        @router.post("", dependencies=[Depends(rate_limited("ai"))])

    Allowed requests get X-RateLimit-* headers on the response. Rejected
    ones raise RateLimitExceededError, which the app-level handler turns
    into a 429 with Retry-After.
    """
    policy = RATE_LIMIT_PRESETS[policy_name]

    def dependency(
        request: Request,
        response: Response,
        store: RateLimiterStore = Depends(get_rate_limiter),
    ) -> None:
        if not settings.RATE_LIMIT_ENABLED:
            return

        decision = store.check(client_fingerprint(request), policy)
        if not decision.allowed:
            raise RateLimitExceededError(
                retry_after=decision.retry_after,
                limit=decision.limit,
                reset_at=decision.reset_at,
            )

        for name, value in decision.headers().items():
            response.headers[name] = value

    return dependency
