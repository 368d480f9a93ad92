"""
Dashboard Routes
Authenticated layout shell and lead management

The shell is everything the dashboard frame needs in one call: who is
signed in, which sections they may see, and where the voice agent talks to.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List
from fastapi import APIRouter, Depends, HTTPException

from app.core.config import settings
from app.core.security import CurrentUser, get_current_profile, get_current_user
from app.models.schemas import LEAD_STATUSES, LeadStatusUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])

# (name, href, super_admin only)
NAVIGATION = [
    ("Overview", "/dashboard", False),
    ("Leads", "/dashboard/leads", False),
    ("AI Monitor", "/dashboard/leads/monitoring", True),
    ("Branches", "/dashboard/branches", True),
    ("Places", "/dashboard/places", False),
    ("Guards", "/dashboard/guards", False),
    ("Assignments", "/dashboard/assignments", False),
    ("Attendance", "/dashboard/attendance", False),
    ("Inventory", "/dashboard/inventory", False),
    ("Invoices", "/dashboard/invoices", False),
    ("Reports", "/dashboard/reports", False),
    ("Settings", "/dashboard/settings", True),
]

VOICE_AGENT_ENDPOINTS = {
    "chat": "/api/ai/manager",
    "execute": "/api/ai/manager/execute",
    "speech": "/api/ai/speech",
    "tts": "/api/ai/tts",
}


def navigation_for(role: str) -> List[Dict[str, str]]:
    return [
        {"name": name, "href": href}
        for name, href, super_admin_only in NAVIGATION
        if not super_admin_only or role == "super_admin"
    ]


@router.get("/shell")
async def dashboard_shell(profile: Dict[str, Any] = Depends(get_current_profile)):
    """Profile, role-filtered navigation and voice-agent config."""
    return {
        "profile": profile,
        "navigation": navigation_for(profile.get("role")),
        "voice_agent": {
            "enabled": settings.llm_configured and settings.speech_configured,
            "endpoints": VOICE_AGENT_ENDPOINTS,
        },
    }


@router.patch("/leads/{lead_id}/status")
async def update_lead_status(
    lead_id: str,
    update: LeadStatusUpdate,
    user: CurrentUser = Depends(get_current_user)
):
    """Move a lead (service request) through its pipeline."""
    if update.status not in LEAD_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid status")

    now = datetime.now(timezone.utc).isoformat()
    changes = {"status": update.status, "updated_at": now}
    if update.status == "confirmed":
        changes["confirmed_at"] = now

    try:
        user.supabase.table("service_requests").update(changes).eq("id", lead_id).execute()
    except Exception as e:
        logger.error(f"Error updating lead status for {lead_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update status")

    return {"success": True}


@router.delete("/leads/{lead_id}")
async def delete_lead(
    lead_id: str,
    user: CurrentUser = Depends(get_current_user)
):
    try:
        user.supabase.table("service_requests").delete().eq("id", lead_id).execute()
    except Exception as e:
        logger.error(f"Error deleting service request {lead_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete service request")

    logger.info(f"🗑️ Service request {lead_id} deleted by {user.id[:8]}...")
    return {"success": True}
