"""
Receptionist Route
Public voice agent on the marketing site: service discovery, quotes, intake
"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Request
from supabase import Client

from app.api.forms import parse_form, read_json_object
from app.core.dependencies import get_supabase_admin
from app.middleware.rate_limit import RateLimit
from app.models.schemas import ReceptionistAIResponse, ReceptionistRequest, RECEPTIONIST_FALLBACK
from app.services.assistant import RECEPTIONIST_SYSTEM_PROMPT, build_receptionist_prompt
from app.services.llm import GenerateOptions, LLMClient, get_optional_llm_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["receptionist"])

PACKAGE_COLUMNS = "id, name, description, category, base_rate, currency, includes, available_addons, is_active"
MAX_PACKAGES = 10


@router.post("/receptionist")
async def receptionist_chat(
    http_request: Request,
    identifier: str = Depends(RateLimit(10, 60 * 1000)),
    supabase: Client = Depends(get_supabase_admin),
    llm: Optional[LLMClient] = Depends(get_optional_llm_client)
):
    """
    One receptionist turn, grounded in the live service packages.

    Failures return 200 with a scripted apology for the voice UI.
    """
    request = parse_form(ReceptionistRequest, await read_json_object(http_request), "Message is required")
    if not request.message or not isinstance(request.message, str):
        raise HTTPException(status_code=400, detail="Message is required")

    try:
        packages = supabase.table("service_packages")\
            .select(PACKAGE_COLUMNS)\
            .eq("is_active", True)\
            .limit(MAX_PACKAGES)\
            .execute().data or []

        if llm is None:
            raise RuntimeError("LLM client not configured")

        raw = await llm.generate_json(
            build_receptionist_prompt(request.message, request.history, packages),
            RECEPTIONIST_SYSTEM_PROMPT,
            GenerateOptions(temperature=0.4, max_tokens=1024)
        )
        reply = ReceptionistAIResponse.model_validate(raw)

    except Exception as e:
        logger.error(f"Receptionist failed for {identifier}: {e}", exc_info=True)
        return RECEPTIONIST_FALLBACK.model_dump()

    reply.packages = packages if reply.shouldShowPackages else []
    logger.info(f"🎙️ Receptionist intent={reply.intent} packages={len(reply.packages)}")
    return reply.model_dump()
