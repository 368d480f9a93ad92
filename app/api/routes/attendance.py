"""
Attendance Routes
Daily attendance marking per assignment, date and shift
"""
import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from postgrest import SyncPostgrestClient

from app.api.forms import parse_form, read_json
from app.core.security import CurrentUser, get_current_user
from app.models.schemas import AttendanceMark, BulkAttendance
from app.services.lookup import fetch_row

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/dashboard/attendance", tags=["attendance"])

SHIFTS = ("day", "night")


def save_attendance(
    supabase: SyncPostgrestClient,
    assignment: Dict[str, Any],
    day: date,
    shift: str,
    fields: Dict[str, Any],
    marked_by: str,
    branch_id: Optional[str] = None
) -> None:
    """
    Record attendance for one assignment on a date and shift.

    There is at most one record per (assignment, date, shift): an existing
    record is updated, otherwise a new one is inserted.
    """
    existing = supabase.table("attendance")\
        .select("id")\
        .eq("assignment_id", assignment["id"])\
        .eq("date", day.isoformat())\
        .eq("shift", shift)\
        .limit(1)\
        .execute()

    if existing.data:
        supabase.table("attendance").update({
            **fields,
            "marked_by": marked_by,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }).eq("id", existing.data[0]["id"]).execute()
        return

    supabase.table("attendance").insert({
        **fields,
        "assignment_id": assignment["id"],
        "guard_id": assignment.get("guard_id"),
        "place_id": assignment.get("place_id"),
        "branch_id": branch_id or assignment.get("branch_id"),
        "date": day.isoformat(),
        "shift": shift,
        "marked_by": marked_by,
    }).execute()


@router.get("/assignments")
async def assignments_for_attendance(
    place_id: str = Query(..., min_length=1),
    day: date = Query(..., alias="date"),
    shift: str = Query(...),
    user: CurrentUser = Depends(get_current_user)
):
    """
    Guards on duty at a place for a date and shift, each with the
    attendance already recorded for them (or null).
    """
    if shift not in SHIFTS:
        raise HTTPException(status_code=400, detail="Invalid shift")

    result = user.supabase.table("assignments")\
        .select("id, shift_type, start_date, end_date, guard:guards(id, name, guard_code, photo_url)")\
        .eq("place_id", place_id)\
        .eq("status", "active")\
        .lte("start_date", day.isoformat())\
        .execute()

    assignments = [
        row for row in result.data or []
        if row.get("shift_type") in (shift, "both")
        and (not row.get("end_date") or row["end_date"] >= day.isoformat())
    ]
    if not assignments:
        return {"assignments": []}

    records = user.supabase.table("attendance")\
        .select("id, assignment_id, status, notes")\
        .in_("assignment_id", [row["id"] for row in assignments])\
        .eq("date", day.isoformat())\
        .eq("shift", shift)\
        .execute()
    by_assignment = {record["assignment_id"]: record for record in records.data or []}

    return {
        "assignments": [
            {**row, "attendance": by_assignment.get(row["id"])}
            for row in assignments
        ]
    }


@router.post("")
async def mark_attendance(
    request: Request,
    user: CurrentUser = Depends(get_current_user)
):
    form = parse_form(AttendanceMark, await read_json(request))

    assignment = fetch_row(user.supabase, "assignments", form.assignment_id, "id, guard_id, place_id, branch_id")
    if not assignment:
        raise HTTPException(status_code=404, detail="Assignment not found")

    try:
        save_attendance(
            user.supabase,
            assignment,
            form.date,
            form.shift,
            {
                "status": form.status,
                "check_in_time": form.check_in_time,
                "check_out_time": form.check_out_time,
                "half_day_hours": form.half_day_hours if form.status == "half_day" else None,
                "notes": form.notes,
            },
            marked_by=user.id,
        )
    except Exception as e:
        logger.error(f"Error marking attendance for {form.assignment_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to mark attendance")

    return {"success": True}


@router.post("/bulk")
async def mark_bulk_attendance(
    request: Request,
    user: CurrentUser = Depends(get_current_user)
):
    """Mark a whole place's sheet; entries are saved one by one and failures counted."""
    form = parse_form(BulkAttendance, await read_json(request))

    place = fetch_row(user.supabase, "places", form.place_id, "id, branch_id")
    if not place:
        raise HTTPException(status_code=404, detail="Place not found")

    failed = 0
    for entry in form.attendance:
        try:
            assignment = fetch_row(user.supabase, "assignments", entry.assignment_id, "id, guard_id, place_id")
            if not assignment:
                raise LookupError(f"assignment {entry.assignment_id} not found")

            save_attendance(
                user.supabase,
                {**assignment, "place_id": form.place_id},
                form.date,
                form.shift,
                {"status": entry.status, "notes": entry.notes},
                marked_by=user.id,
                branch_id=place.get("branch_id"),
            )
        except Exception as e:
            failed += 1
            logger.error(f"Error marking attendance for {entry.assignment_id}: {e}")

    if failed:
        raise HTTPException(status_code=500, detail=f"Failed to mark {failed} attendance records")

    logger.info(f"📋 Marked {len(form.attendance)} attendance records at {form.place_id} ({form.shift})")
    return {"success": True, "count": len(form.attendance)}


@router.delete("/{attendance_id}")
async def delete_attendance(
    attendance_id: str,
    user: CurrentUser = Depends(get_current_user)
):
    try:
        user.supabase.table("attendance").delete().eq("id", attendance_id).execute()
    except Exception as e:
        logger.error(f"Error deleting attendance {attendance_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete attendance")

    return {"success": True}
