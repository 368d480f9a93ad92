"""
Dependency Injection
Provides global clients and services to routes via FastAPI dependencies

SUPABASE CLIENTS:
- supabase_client: anon key, used for auth lookups and per-user clients
  (row-level policies apply)
- supabase_admin_client: service role key, bypasses row-level policies;
  only for public intake paths (contact form, service requests, packages)
"""
from typing import Optional
import logging
import httpx
from fastapi import HTTPException
from postgrest import SyncPostgrestClient
from postgrest.constants import DEFAULT_POSTGREST_CLIENT_HEADERS
from supabase import Client, create_client

from app.core.config import settings

logger = logging.getLogger(__name__)

# ============================================================================
# GLOBAL CLIENTS (initialized at startup)
# ============================================================================

http_client: Optional[httpx.AsyncClient] = None

supabase_client: Optional[Client] = None
supabase_admin_client: Optional[Client] = None


# ============================================================================
# DEPENDENCY FUNCTIONS
# ============================================================================

async def get_http_client() -> httpx.AsyncClient:
    """Get global HTTP client."""
    if not http_client:
        raise RuntimeError("HTTP client not initialized")
    return http_client


async def get_supabase() -> Client:
    """Get the anon-key Supabase client (auth + row-level policies)."""
    if not supabase_client:
        logger.error("Supabase client not initialized (SUPABASE_URL / SUPABASE_ANON_KEY missing?)")
        raise HTTPException(status_code=500, detail="Internal server error")
    return supabase_client


async def get_supabase_admin() -> Client:
    """
    Get the elevated-privilege Supabase client.
    SECURITY: bypasses row-level policies - only public intake routes use it.
    """
    if not supabase_admin_client:
        logger.error("Supabase admin client not initialized (SUPABASE_SERVICE_KEY missing?)")
        raise HTTPException(status_code=500, detail="Internal server error")
    return supabase_admin_client


def create_user_client(access_token: str) -> SyncPostgrestClient:
    """
    Create a PostgREST client that acts as the signed-in user.
    Queries through it are filtered by the backend's row-level policies.

    Only the REST session is opened (no auth client or token refresh).
    Use it as a context manager so the session is closed per request.
    """
    return SyncPostgrestClient(
        f"{settings.supabase_url}/rest/v1",
        headers={
            **DEFAULT_POSTGREST_CLIENT_HEADERS,
            "apikey": settings.supabase_anon_key or "",
            "Authorization": f"Bearer {access_token}",
        },
    )


# ============================================================================
# STARTUP/SHUTDOWN
# ============================================================================

async def initialize_clients():
    """Initialize all global clients at startup."""
    global http_client, supabase_client, supabase_admin_client

    # HTTP client (speech provider)
    http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(30.0),
        limits=httpx.Limits(max_keepalive_connections=10, max_connections=20)
    )

    if settings.supabase_url and settings.supabase_anon_key:
        supabase_client = create_client(settings.supabase_url, settings.supabase_anon_key)
        logger.info("✅ Supabase connected")
    else:
        logger.warning("⚠️  Supabase not configured (SUPABASE_URL / SUPABASE_ANON_KEY) - dashboard routes will fail")

    if settings.supabase_url and settings.supabase_service_key:
        supabase_admin_client = create_client(settings.supabase_url, settings.supabase_service_key)
        logger.info("✅ Supabase service-role client ready (public intake)")
    else:
        logger.warning("⚠️  SUPABASE_SERVICE_KEY not set - public intake routes will fail")

    if not settings.llm_configured:
        logger.warning("⚠️  GROQ_API_KEY not set - AI assistants will answer with fallbacks")
    if not settings.speech_configured:
        logger.warning("⚠️  DEEPGRAM_API_KEY not set - speech routes will fail")


async def shutdown_clients():
    """Cleanup clients at shutdown."""
    global http_client

    # Close HTTP client to prevent socket exhaustion
    if http_client:
        await http_client.aclose()
        http_client = None
        logger.info("✅ HTTP client closed")

    # LLM client holds its own connection pool
    from app.services.llm.client import close_llm_client
    await close_llm_client()
