"""
Module Assistant Router - one-shot prompts for OptiHire, OptiTrip and OptiShop.

    POST /optihire  {"action": "resume", "data": {...}, "instructions": "..."}
    POST /optitrip  {"action": "plan", "data": {...}}
    POST /optishop  {"action": "compare", "data": {...}}

Every module answers {"action", "result", "usage"}. The payload key may be
"data" or "emailData" (the OptiMail spelling); both are accepted.
POST /optimail uses the same envelope and lives in the optimail router.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import AliasChoices, BaseModel, Field

from optigence.core.errors import OptigenceError, to_http_exception
from optigence.deps import get_module_assistant, rate_limited
from optigence.services.module_service import ModuleAssistant

logger = logging.getLogger(__name__)

router = APIRouter(tags=["modules"])


# ---------------------------------------------------------------------------
# REQUEST/RESPONSE SCHEMAS
# ---------------------------------------------------------------------------

class ModuleRequest(BaseModel):
    """
    Example:
    {
        "action": "plan",
        "data": {"destination": "Lisbon", "duration": "4 days"},
        "instructions": "Keep it walkable"
    }
    """
    action: Optional[str] = None
    data: Optional[Dict[str, Any]] = Field(
        default=None,
        validation_alias=AliasChoices("emailData", "data"),
    )
    instructions: Optional[str] = None
    preferred_provider: str = Field(
        default="openai",
        validation_alias=AliasChoices("preferredProvider", "preferred_provider"),
    )


class ModuleResponse(BaseModel):
    action: str
    result: str
    usage: Dict[str, int]


# ---------------------------------------------------------------------------
# HELPERS
# ---------------------------------------------------------------------------

async def run_module(module: str, request: ModuleRequest, assistant: ModuleAssistant) -> ModuleResponse:
    """Shared handler body for every module endpoint."""
    try:
        result = await assistant.run(
            module,
            request.action,
            request.data,
            instructions=request.instructions,
            preferred_provider=request.preferred_provider,
        )
    except OptigenceError as e:
        if e.status_code >= 500:
            logger.error(f"{module} request failed: {e.message}")
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"{module} request failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to process {module} request",
        )
    return ModuleResponse(**result.to_dict())


# ---------------------------------------------------------------------------
# ENDPOINTS
# ---------------------------------------------------------------------------

@router.post("/optihire", response_model=ModuleResponse, dependencies=[Depends(rate_limited("ai"))])
async def optihire(request: ModuleRequest, assistant: ModuleAssistant = Depends(get_module_assistant)):
    """Resumes, cover letters, interview prep, job matching, career and skills advice."""
    return await run_module("optihire", request, assistant)


@router.post("/optitrip", response_model=ModuleResponse, dependencies=[Depends(rate_limited("ai"))])
async def optitrip(request: ModuleRequest, assistant: ModuleAssistant = Depends(get_module_assistant)):
    """Trip plans, recommendations, budgets, itineraries and local tips."""
    return await run_module("optitrip", request, assistant)


@router.post("/optishop", response_model=ModuleResponse, dependencies=[Depends(rate_limited("ai"))])
async def optishop(request: ModuleRequest, assistant: ModuleAssistant = Depends(get_module_assistant)):
    """Product search, comparison, recommendations, analysis and wishlists."""
    return await run_module("optishop", request, assistant)
