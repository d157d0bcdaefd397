"""
Suggestions Router - live action suggestions while the user types.

    POST /suggestions/live  SuggestionContext -> SuggestionPipelineResult

The engine never raises for a failing source; it degrades to static
fallback suggestions. Anything escaping it is a 500.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from optigence.ai.suggestions import LiveSuggestionEngine, SuggestionContext, SuggestionPipelineResult
from optigence.deps import get_suggestion_engine, rate_limited

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/suggestions", tags=["suggestions"])


@router.post(
    "/live",
    response_model=SuggestionPipelineResult,
    response_model_by_alias=True,
    dependencies=[Depends(rate_limited("general"))],
)
async def live_suggestions(
    context: SuggestionContext,
    engine: LiveSuggestionEngine = Depends(get_suggestion_engine),
):
    """Ranked suggestions plus an optional primary action for the current draft."""
    try:
        return await engine.generate_suggestions(context)
    except Exception as e:
        logger.error(f"Failed to generate suggestions: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate suggestions",
        )
