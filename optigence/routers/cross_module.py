"""
Cross-Module Router - hand an email over to OptiHire, OptiTrip or OptiShop.

    POST /cross-module/analyze       detect actions (and meetings) in an email
    POST /cross-module/execute       run a pending action by id
    GET  /cross-module/pending       pending actions, optionally per user
    GET  /cross-module/capabilities  what each module accepts

Detected actions are stored in the app's PendingActionRegistry until
executed, and only stored actions can run. A refused or failed execution
is not an HTTP error: the result comes back with success=false.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import Field

from optigence.deps import get_cross_module_router, get_pending_actions, rate_limited
from optigence.schemas import CamelModel
from optigence.services.cross_module_service import (
    CrossModuleAction,
    CrossModuleAnalysis,
    CrossModuleResult,
    CrossModuleRouter,
    ModuleCapability,
    PendingActionRegistry,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cross-module", tags=["cross-module"])


class AnalyzeRequest(CamelModel):
    text: str = Field(..., min_length=1)
    subject: str = ""
    thread_content: Optional[str] = None
    user_id: Optional[str] = None


class ExecuteRequest(CamelModel):
    action_id: str = Field(..., min_length=1)
    user_id: Optional[str] = None


@router.post(
    "/analyze",
    response_model=CrossModuleAnalysis,
    response_model_by_alias=True,
    dependencies=[Depends(rate_limited("general"))],
)
async def analyze(
    request: AnalyzeRequest,
    cross_module: CrossModuleRouter = Depends(get_cross_module_router),
):
    text = request.text
    if request.thread_content:
        text = f"{text} {request.thread_content}"
    return cross_module.analyze_email(text, subject=request.subject, user_id=request.user_id)


@router.post(
    "/execute",
    response_model=CrossModuleResult,
    response_model_by_alias=True,
    dependencies=[Depends(rate_limited("general"))],
)
async def execute(
    request: ExecuteRequest,
    cross_module: CrossModuleRouter = Depends(get_cross_module_router),
    pending: PendingActionRegistry = Depends(get_pending_actions),
):
    action = pending.get(request.action_id)
    if action is None or (request.user_id and action.user_id not in (None, request.user_id)):
        return cross_module.unknown_action_result(request.action_id)

    result = await cross_module.execute_cross_module_action(action)
    logger.info(f"Executed {action.id} -> {action.target_module}: success={result.success}")
    return result


@router.get("/pending", response_model=List[CrossModuleAction], response_model_by_alias=True)
async def list_pending(
    user_id: Optional[str] = Query(default=None, alias="userId"),
    pending: PendingActionRegistry = Depends(get_pending_actions),
):
    return pending.list(user_id)


@router.get("/capabilities", response_model=List[ModuleCapability], response_model_by_alias=True)
async def capabilities(
    module: Optional[str] = None,
    cross_module: CrossModuleRouter = Depends(get_cross_module_router),
):
    if module is None:
        return cross_module.get_all_module_capabilities()

    capability = cross_module.get_module_capabilities(module)
    if capability is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown module: {module}",
        )
    return [capability]
