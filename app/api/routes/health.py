"""
Health Check
"""
from datetime import datetime, timezone
from fastapi import APIRouter

from app.core import dependencies
from app.core.config import settings
from app.models.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Liveness plus which integrations are configured (never their keys)."""
    return HealthResponse(
        status="healthy",
        environment=settings.environment,
        integrations={
            "supabase": dependencies.supabase_client is not None,
            "supabase_admin": dependencies.supabase_admin_client is not None,
            "llm": settings.llm_configured,
            "speech": settings.speech_configured,
        },
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
