"""
Security and Authentication
Validates Supabase session tokens and loads the caller's profile

SECURITY FEATURES:
- JWT validation via Supabase Auth
- Per-request user-scoped PostgREST client (row-level policies apply), closed after the request
- Profile lookup with branch info for branch scoping
"""
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, Optional
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from postgrest import SyncPostgrestClient
from supabase import Client

from app.core.dependencies import get_supabase, create_user_client

logger = logging.getLogger(__name__)

# auto_error=False so a missing header maps to our own 401 instead of a 403
bearer_scheme = HTTPBearer(auto_error=False)

PROFILE_COLUMNS = "*, branch:branches(*)"


@dataclass
class CurrentUser:
    """Authenticated caller."""
    id: str
    email: Optional[str]
    access_token: str
    supabase: SyncPostgrestClient  # acts as this user


# ============================================================================
# JWT AUTHENTICATION (Supabase)
# ============================================================================

async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    supabase: Client = Depends(get_supabase)
) -> AsyncIterator[CurrentUser]:
    """
    Validate the bearer token with Supabase Auth.

    Yields the caller with a user-scoped client that is closed once the
    request has been handled.

    Raises:
        HTTPException: 401 if the token is missing or invalid
    """
    if not credentials or not credentials.credentials:
        raise HTTPException(status_code=401, detail="Unauthorized")

    token = credentials.credentials

    try:
        response = supabase.auth.get_user(token)
    except Exception as e:
        logger.warning(f"Authentication failed: {e}")
        raise HTTPException(status_code=401, detail="Unauthorized")

    if not response or not response.user:
        raise HTTPException(status_code=401, detail="Unauthorized")

    user = response.user
    logger.debug(f"✅ Authenticated user: {user.id[:8]}...")

    with create_user_client(token) as user_client:
        yield CurrentUser(
            id=user.id,
            email=getattr(user, "email", None),
            access_token=token,
            supabase=user_client,
        )


async def get_current_profile(
    user: CurrentUser = Depends(get_current_user)
) -> Dict[str, Any]:
    """
    Load the caller's profile row joined with its branch.

    Raises:
        HTTPException: 404 if the profile does not exist or cannot be read
    """
    try:
        result = user.supabase.table("profiles")\
            .select(PROFILE_COLUMNS)\
            .eq("id", user.id)\
            .maybe_single()\
            .execute()
    except Exception as e:
        logger.error(f"Profile lookup failed for {user.id[:8]}...: {e}")
        raise HTTPException(status_code=404, detail="Profile not found")

    profile = result.data if result is not None else None
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")

    profile = dict(profile)
    profile["branch"] = profile.get("branch") or None
    return profile


async def require_super_admin(
    profile: Dict[str, Any] = Depends(get_current_profile)
) -> Dict[str, Any]:
    """
    Profile of a super admin caller.

    Raises:
        HTTPException: 403 for any other role
    """
    if profile.get("role") != "super_admin":
        logger.warning(f"⚠️ {profile.get('id', '')[:8]}... denied super admin route")
        raise HTTPException(status_code=403, detail="Unauthorized")
    return profile
