"""
Intent Router - classification endpoint and AI usage statistics.

HTTP handling only; the classifier lives in optigence.ai.intent.

    POST /intent        {"text": "..."}  -> IntentClassification
    GET  /intent/stats                   -> aggregated AI metrics
"""

import logging
from typing import Dict

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from optigence.ai.intent import IntentClassification, IntentClassifier
from optigence.ai.monitoring import AggregatedMetrics, ai_monitor
from optigence.deps import get_classifier, rate_limited


# ---------------------------------------------------------------------------
# LOGGER SETUP
# ---------------------------------------------------------------------------
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# ROUTER SETUP
# ---------------------------------------------------------------------------
router = APIRouter(prefix="/intent", tags=["intent"])


# ---------------------------------------------------------------------------
# REQUEST/RESPONSE SCHEMAS
# ---------------------------------------------------------------------------

class IntentRequest(BaseModel):
    """
    Example:
    {
        "text": "Can we move the budget review to Friday?"
    }
    """
    text: str = Field(
        ...,
        min_length=1,
        max_length=5000,
        description="What the user typed or dictated",
    )


class UsageStats(BaseModel):
    """Counters since start-up; rates and cost are pre-formatted for dashboards."""
    total_requests: int
    successful_requests: int
    failed_requests: int
    success_rate: str
    total_tokens: int
    avg_latency_ms: float
    estimated_total_cost: str
    requests_by_provider: Dict[str, int]
    classifications_by_strategy: Dict[str, int]
    fallbacks_used: int

    @classmethod
    def from_metrics(cls, metrics: AggregatedMetrics) -> "UsageStats":
        counters = {
            name: getattr(metrics, name)
            for name in (
                "total_requests",
                "successful_requests",
                "failed_requests",
                "total_tokens",
                "requests_by_provider",
                "classifications_by_strategy",
                "fallbacks_used",
            )
        }
        return cls(
            **counters,
            success_rate=f"{metrics.success_rate:.1f}%",
            avg_latency_ms=round(metrics.avg_latency_ms, 2),
            estimated_total_cost=f"${metrics.estimated_total_cost:.4f}",
        )


# ---------------------------------------------------------------------------
# ENDPOINTS
# ---------------------------------------------------------------------------

@router.post(
    "",
    response_model=IntentClassification,
    response_model_by_alias=True,
    dependencies=[Depends(rate_limited("general"))],
)
async def classify_intent(
    request: IntentRequest,
    classifier: IntentClassifier = Depends(get_classifier),
):
    """
    Classify what the user wants to do with their email.

    The configured provider answers first; any provider or parse failure
    falls back to the keyword table (confidence 0.7).
    """
    try:
        return await classifier.classify_intent(request.text)
    except Exception as e:
        logger.error(f"Failed to classify intent: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to classify intent",
        )


@router.get("/stats", response_model=UsageStats)
async def get_ai_stats():
    """Provider usage, classifier strategy counts and routing fallbacks."""
    return UsageStats.from_metrics(ai_monitor.get_stats())
