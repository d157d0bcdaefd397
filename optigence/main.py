"""
Main application entry point - FastAPI app instance and configuration.
Run with: uvicorn optigence.main:app --reload
"""

import logging
import math
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from optigence.ai.emotion import EmotionalAnalyzer
from optigence.ai.intent import build_intent_classifier
from optigence.ai.memory import InteractionMemory
from optigence.ai.providers import ProviderRegistry
from optigence.ai.router import IntelligentRouter
from optigence.ai.suggestions import LiveSuggestionEngine
from optigence.core.config import settings
from optigence.core.errors import OptigenceError, RateLimitExceededError
from optigence.core.rate_limit import RateLimiterStore
from optigence.routers import cross_module, intent, modules, optimail, suggestions
from optigence.services.cross_module_service import CrossModuleRouter, PendingActionRegistry
from optigence.services.diagnostics_service import DiagnosticsService
from optigence.services.module_service import ModuleAssistant

logger = logging.getLogger("optigence.main")


def build_state(app: FastAPI, registry: Optional[ProviderRegistry] = None) -> None:
    """
    Create the shared components and park them on app.state.

    One instance of each per application; route handlers reach them
    through optigence.deps.
    """
    registry = registry or ProviderRegistry.from_settings()
    analyzer = EmotionalAnalyzer()
    memory = InteractionMemory()
    pending_actions = PendingActionRegistry()
    classifier = build_intent_classifier(
        registry,
        strategy=settings.INTENT_CLASSIFIER_STRATEGY,
        provider_name=settings.INTENT_CLASSIFIER_PROVIDER,
    )
    cross_module_router = CrossModuleRouter(pending_actions)

    app.state.registry = registry
    app.state.rate_limiter = RateLimiterStore()
    app.state.pending_actions = pending_actions
    app.state.memory = memory
    app.state.classifier = classifier
    app.state.cross_module_router = cross_module_router
    app.state.email_router = IntelligentRouter(registry, classifier, memory, analyzer=analyzer)
    app.state.suggestion_engine = LiveSuggestionEngine(cross_module_router, analyzer=analyzer)
    app.state.module_assistant = ModuleAssistant(registry)
    app.state.diagnostics = DiagnosticsService(registry)


def create_app(registry: Optional[ProviderRegistry] = None) -> FastAPI:
    # ---------------------------------------------------------------------------
    # CREATE FASTAPI APPLICATION
    # ---------------------------------------------------------------------------
    app = FastAPI(
        title=settings.APP_NAME,
        debug=settings.DEBUG,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    build_state(app, registry)

    # ---------------------------------------------------------------------------
    # CORS MIDDLEWARE
    # ---------------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ---------------------------------------------------------------------------
    # ERROR HANDLERS
    # ---------------------------------------------------------------------------
    @app.exception_handler(RateLimitExceededError)
    async def rate_limit_exceeded(request: Request, exc: RateLimitExceededError):
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": "Rate limit exceeded",
                "message": f"Too many requests. Try again in {exc.retry_after} seconds.",
                "retryAfter": exc.retry_after,
            },
            headers={
                "Retry-After": str(exc.retry_after),
                "X-RateLimit-Limit": str(exc.limit),
                "X-RateLimit-Remaining": "0",
                "X-RateLimit-Reset": str(math.ceil(exc.reset_at)),
            },
        )

    @app.exception_handler(OptigenceError)
    async def optigence_error(request: Request, exc: OptigenceError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail()})

    # ---------------------------------------------------------------------------
    # REGISTER ROUTERS
    # ---------------------------------------------------------------------------
    app.include_router(intent.router)
    app.include_router(suggestions.router)
    app.include_router(optimail.router)
    app.include_router(modules.router)
    app.include_router(cross_module.router)

    # ---------------------------------------------------------------------------
    # HEALTH CHECK ENDPOINT
    # ---------------------------------------------------------------------------
    @app.get("/health", tags=["health"])
    def health_check():
        """Liveness only; GET /optimail/diagnostics probes the providers."""
        return {"status": "ok"}

    return app


app = create_app()
