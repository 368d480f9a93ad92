"""
Assignment Routes
Posting guards to places, with overlap checks against the guard's other postings
"""
import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends, HTTPException, Request
from postgrest import SyncPostgrestClient

from app.api.forms import parse_form, read_json
from app.core.security import CurrentUser, get_current_profile, get_current_user
from app.models.schemas import AssignmentEnd, AssignmentForm, AssignmentUpdate
from app.services.lookup import fetch_row

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/dashboard/assignments", tags=["assignments"])

OVERLAP_MESSAGE = "This assignment overlaps with an existing assignment for this guard"


def assignment_overlaps(
    supabase: SyncPostgrestClient,
    guard_id: str,
    start_date: date,
    end_date: Optional[date],
    exclude_id: Optional[str] = None
) -> bool:
    """
    Ask the database whether the guard is already posted in the date range.

    A failing check is logged and treated as no overlap.
    """
    try:
        result = supabase.rpc("check_assignment_overlap", {
            "p_guard_id": guard_id,
            "p_start_date": start_date.isoformat(),
            "p_end_date": end_date.isoformat() if end_date else None,
            "p_exclude_id": exclude_id,
        }).execute()
    except Exception as e:
        logger.error(f"Error checking assignment overlap for guard {guard_id}: {e}")
        return False

    return bool(result.data)


def _assignment_columns(form: AssignmentForm) -> Dict[str, Any]:
    return {
        "guard_id": form.guard_id,
        "place_id": form.place_id,
        "start_date": form.start_date.isoformat(),
        "end_date": form.end_date.isoformat() if form.end_date else None,
        "shift_type": form.shift_type,
        "notes": form.notes,
    }


@router.post("")
async def create_assignment(
    request: Request,
    user: CurrentUser = Depends(get_current_user),
    profile: Dict[str, Any] = Depends(get_current_profile)
):
    """
    Post a guard to a place.

    Super admins create it under the guard's branch; everyone else under their own.
    """
    form = parse_form(AssignmentForm, await read_json(request))

    branch_id = profile.get("branch_id")
    if profile.get("role") == "super_admin":
        guard = fetch_row(user.supabase, "guards", form.guard_id, "branch_id")
        branch_id = (guard or {}).get("branch_id") or branch_id

    if not branch_id:
        raise HTTPException(status_code=400, detail="Could not determine branch")

    if assignment_overlaps(user.supabase, form.guard_id, form.start_date, form.end_date):
        raise HTTPException(status_code=409, detail=OVERLAP_MESSAGE)

    try:
        result = user.supabase.table("assignments").insert({
            **_assignment_columns(form),
            "branch_id": branch_id,
            "status": "active",
            "created_by": user.id,
        }).execute()
        assignment = result.data[0]
    except Exception as e:
        logger.error(f"Error creating assignment for guard {form.guard_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create assignment")

    logger.info(f"📌 Guard {form.guard_id} assigned to {form.place_id} from {form.start_date}")
    return {"success": True, "id": assignment["id"]}


@router.put("/{assignment_id}")
async def update_assignment(
    assignment_id: str,
    request: Request,
    user: CurrentUser = Depends(get_current_user)
):
    form = parse_form(AssignmentUpdate, await read_json(request))

    if not fetch_row(user.supabase, "assignments", assignment_id, "id"):
        raise HTTPException(status_code=404, detail="Assignment not found")

    if assignment_overlaps(user.supabase, form.guard_id, form.start_date, form.end_date, exclude_id=assignment_id):
        raise HTTPException(status_code=409, detail=OVERLAP_MESSAGE)

    try:
        user.supabase.table("assignments").update({
            **_assignment_columns(form),
            "status": form.status,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }).eq("id", assignment_id).execute()
    except Exception as e:
        logger.error(f"Error updating assignment {assignment_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update assignment")

    return {"success": True}


@router.post("/{assignment_id}/end")
async def end_assignment(
    assignment_id: str,
    request: Request,
    user: CurrentUser = Depends(get_current_user)
):
    """Close an assignment on the given date and mark it completed."""
    form = parse_form(AssignmentEnd, await read_json(request), "End date is required")

    try:
        user.supabase.table("assignments").update({
            "end_date": form.end_date.isoformat(),
            "status": "completed",
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }).eq("id", assignment_id).execute()
    except Exception as e:
        logger.error(f"Error ending assignment {assignment_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to end assignment")

    return {"success": True}


@router.delete("/{assignment_id}")
async def delete_assignment(
    assignment_id: str,
    user: CurrentUser = Depends(get_current_user)
):
    """Delete an assignment that has no attendance recorded against it."""
    attendance = user.supabase.table("attendance")\
        .select("id")\
        .eq("assignment_id", assignment_id)\
        .limit(1)\
        .execute()

    if attendance.data:
        raise HTTPException(
            status_code=400,
            detail="Cannot delete assignment with attendance records. Consider marking it as completed instead."
        )

    try:
        user.supabase.table("assignments").delete().eq("id", assignment_id).execute()
    except Exception as e:
        logger.error(f"Error deleting assignment {assignment_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete assignment")

    logger.info(f"🗑️ Assignment {assignment_id} deleted by {user.id[:8]}...")
    return {"success": True}
