"""
OptiMail Router - email drafting, feedback, emotion and diagnostics.

Endpoints:
    POST /optimail              one-shot module assistant (action + emailData)
    POST /optimail/process      full orchestrator: classify, route, fall back
    POST /optimail/feedback     rate a generated draft
    GET  /optimail/patterns     what a user's past drafts and ratings favour
    POST /optimail/emotion      emotional analysis of a draft (pro tier)
    POST /optimail/realtime     typing-time suggestions (upgrade notice on free)
    GET  /optimail/diagnostics  connectivity report for every external service

Errors raised by the services map to their HTTP status with
to_http_exception(); anything unexpected is logged and becomes a 500.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import Field

from optigence.ai.emotion import EmotionalAnalysis
from optigence.ai.memory import InteractionMemory
from optigence.ai.router import EmailRequest, IntelligentRouter, Tier
from optigence.core.errors import OptigenceError, to_http_exception
from optigence.deps import get_diagnostics, get_email_router, get_memory, get_module_assistant, rate_limited
from optigence.routers.modules import ModuleRequest, ModuleResponse, run_module
from optigence.schemas import CamelModel
from optigence.services.diagnostics_service import DiagnosticsService, HealthCheckResponse
from optigence.services.module_service import ModuleAssistant


# ---------------------------------------------------------------------------
# LOGGER SETUP
# ---------------------------------------------------------------------------
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# ROUTER SETUP
# ---------------------------------------------------------------------------
router = APIRouter(prefix="/optimail", tags=["optimail"])


# ---------------------------------------------------------------------------
# REQUEST/RESPONSE SCHEMAS
# ---------------------------------------------------------------------------

class ProcessRequest(CamelModel):
    """
    Example:
    {
        "userInput": "Reply to Dana with thanks for the quick turnaround",
        "originalEmail": "Hi, the contract is signed...",
        "requestedTone": "friendly",
        "tier": "pro",
        "action": "reply"
    }
    """
    user_input: str = Field(..., min_length=1, max_length=10000)
    original_email: Optional[str] = None
    email_thread: Optional[str] = None
    requested_tone: Optional[str] = None
    user_id: Optional[str] = None
    tier: Tier = Tier.FREE
    action: str = "compose"
    context: Dict[str, Any] = Field(default_factory=dict)

    def to_email_request(self) -> EmailRequest:
        return EmailRequest(
            user_input=self.user_input,
            original_email=self.original_email,
            email_thread=self.email_thread,
            requested_tone=self.requested_tone,
            user_id=self.user_id,
            tier=self.tier,
            action=self.action,
            context=tuple(sorted(self.context.items())),
        )


class FeedbackRequest(CamelModel):
    user_input: str = Field(..., min_length=1)
    response: str
    rating: int = Field(..., ge=1, le=5)
    notes: Optional[str] = None
    requested_tone: Optional[str] = None
    user_id: Optional[str] = None


class FeedbackResponse(CamelModel):
    success: bool = True
    feedback: str


class UserPatterns(CamelModel):
    preferred_tones: List[str]
    common_intents: List[str]
    average_rating: Optional[float] = None
    total_interactions: int


class EmotionRequest(CamelModel):
    text: str
    original_email: str = ""
    tone: Optional[str] = None
    tier: Tier = Tier.FREE


class RealtimeRequest(CamelModel):
    partial_input: str
    existing_content: str = ""
    user_id: Optional[str] = None
    tier: Tier = Tier.FREE


# ---------------------------------------------------------------------------
# HELPERS
# ---------------------------------------------------------------------------

def _http_error(error: Exception, what: str) -> HTTPException:
    if isinstance(error, OptigenceError):
        if error.status_code >= 500:
            logger.error(f"Failed to {what}: {error.message}")
        return to_http_exception(error)
    logger.error(f"Failed to {what}: {error}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {what}",
    )


# ---------------------------------------------------------------------------
# ENDPOINTS
# ---------------------------------------------------------------------------

@router.post("", response_model=ModuleResponse, dependencies=[Depends(rate_limited("ai"))])
async def optimail_assistant(
    request: ModuleRequest,
    assistant: ModuleAssistant = Depends(get_module_assistant),
):
    """
    One-shot email assistant.

    Actions: compose, reply, summarize, rewrite, tone_analysis, template,
    optimize. Returns {"action", "result", "usage"}.
    """
    return await run_module("optimail", request, assistant)


@router.post("/process", dependencies=[Depends(rate_limited("ai"))])
async def process_email(
    request: ProcessRequest,
    email_router: IntelligentRouter = Depends(get_email_router),
):
    """
    Draft an email with the backend chosen by intent classification.

    Falls back to OpenAI when the chosen backend fails (usedLLM ends in
    "-fallback", confidence x0.8). A tier that does not include the
    requested action gets a 403 before any provider is called.
    """
    try:
        response = await email_router.process_email_request(request.to_email_request())
    except Exception as e:
        raise _http_error(e, "process email request")
    return response.to_dict()


@router.post(
    "/feedback",
    response_model=FeedbackResponse,
    response_model_by_alias=True,
    dependencies=[Depends(rate_limited("general"))],
)
async def submit_feedback(
    request: FeedbackRequest,
    email_router: IntelligentRouter = Depends(get_email_router),
):
    """Ratings >= 4 count as positive, <= 2 as negative."""
    email_request = EmailRequest(
        user_input=request.user_input,
        requested_tone=request.requested_tone,
        user_id=request.user_id,
    )
    feedback = email_router.provide_feedback(email_request, request.response, request.rating, request.notes)
    return FeedbackResponse(feedback=feedback)


@router.get(
    "/patterns",
    response_model=UserPatterns,
    response_model_by_alias=True,
    dependencies=[Depends(rate_limited("general"))],
)
async def user_patterns(
    user_id: Optional[str] = Query(default=None, alias="userId"),
    memory: InteractionMemory = Depends(get_memory),
):
    """Summary of what one user's stored drafts and ratings favour."""
    return UserPatterns(**memory.get_user_patterns(user_id))


@router.post("/emotion", response_model=EmotionalAnalysis, response_model_by_alias=True)
async def analyze_emotion(
    request: EmotionRequest,
    email_router: IntelligentRouter = Depends(get_email_router),
):
    try:
        email_router.tier_policy.enforce("emotion", request.tier)
    except OptigenceError as e:
        raise _http_error(e, "analyze emotion")
    return email_router.analyze_emotion(request.text, request.original_email, request.tone)


@router.post("/realtime")
async def realtime_suggestions(
    request: RealtimeRequest,
    email_router: IntelligentRouter = Depends(get_email_router),
):
    suggestions = email_router.tier_policy.get_realtime_suggestions(
        request.partial_input,
        request.tier,
        existing_content=request.existing_content,
        user_id=request.user_id,
    )
    return suggestions.to_dict()


@router.get("/diagnostics", response_model=HealthCheckResponse)
async def diagnostics(service: DiagnosticsService = Depends(get_diagnostics)):
    """
    Probe every external dependency.

    overall is "healthy" with no errors and nothing unconfigured,
    "degraded" while at least half the probes succeed, else "unhealthy".
    """
    return await service.run_all_diagnostics()
