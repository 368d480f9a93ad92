"""
Manager Assistant Routes
Voice-driven dashboard assistant: conversation turns and confirmed actions
"""
import logging
from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from app.api.forms import parse_form, read_json_object
from app.core.security import CurrentUser, get_current_profile, get_current_user
from app.middleware.rate_limit import RateLimit
from app.models.schemas import (
    ExecuteActionRequest,
    ManagerAIResponse,
    ManagerChatRequest,
    MANAGER_FALLBACK,
)
from app.services.assistant import (
    ActionError,
    ActionExecutor,
    MANAGER_SYSTEM_PROMPT,
    build_manager_prompt,
)
from app.services.llm import GenerateOptions, LLMClient, get_optional_llm_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai/manager", tags=["assistant"])


@router.post("")
async def manager_chat(
    http_request: Request,
    identifier: str = Depends(RateLimit(15, 60 * 1000)),
    profile: Dict[str, Any] = Depends(get_current_profile),
    llm: Optional[LLMClient] = Depends(get_optional_llm_client)
):
    """
    One manager-assistant turn.

    Model or parsing failures return 200 with an apology so the voice UI
    can speak it instead of breaking the conversation.
    """
    request = parse_form(ManagerChatRequest, await read_json_object(http_request), "Message is required")
    if not request.message or not isinstance(request.message, str):
        raise HTTPException(status_code=400, detail="Message is required")

    branch = profile.get("branch") or {}
    prompt = build_manager_prompt(
        request.message,
        request.history,
        branch_id=profile.get("branch_id") or "all",
        branch_name=branch.get("name") or "All Branches",
        role=profile.get("role") or "branch_admin",
    )

    try:
        if llm is None:
            raise RuntimeError("LLM client not configured")

        raw = await llm.generate_json(
            prompt,
            MANAGER_SYSTEM_PROMPT,
            GenerateOptions(temperature=0.4, max_tokens=1024)
        )
        reply = ManagerAIResponse.model_validate(raw)

    except Exception as e:
        logger.error(f"Manager assistant failed for {identifier}: {e}", exc_info=True)
        return MANAGER_FALLBACK.model_dump()

    logger.info(f"🤖 Manager assistant intent={reply.intent}")
    return reply.model_dump()


@router.post("/execute")
async def execute_action(
    http_request: Request,
    user: CurrentUser = Depends(get_current_user),
    profile: Dict[str, Any] = Depends(get_current_profile)
):
    """Run a confirmed assistant action against the caller's branch."""
    request = parse_form(
        ExecuteActionRequest,
        await read_json_object(http_request),
        "actionType and entity are required"
    )
    if not request.actionType or not request.entity:
        raise HTTPException(status_code=400, detail="actionType and entity are required")

    executor = ActionExecutor(user.supabase, profile)

    try:
        return await executor.execute(request.actionType, request.entity, request.data)

    except ActionError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    except Exception as e:
        logger.error(f"Execute action {request.actionType} on {request.entity} failed: {e}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": "Failed to execute action"})
