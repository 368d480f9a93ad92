"""
Inventory Routes
Serialised units, and handing units or stock out to places and guards

Serialised units move between available and assigned; quantity items are
drawn down from the item's total_quantity and restored on return.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends, HTTPException, Request
from postgrest import SyncPostgrestClient

from app.api.forms import parse_form, read_json
from app.core.security import CurrentUser, get_current_profile, get_current_user
from app.models.schemas import InventoryAssignmentForm, InventoryUnitForm
from app.services.lookup import fetch_row

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/dashboard/inventory", tags=["inventory"])

UNIQUE_VIOLATION = "23505"


def _scoped_branch(profile: Dict[str, Any], branch_id: Optional[str]) -> Optional[str]:
    """Branch admins always act in their own branch."""
    if profile.get("role") == "branch_admin":
        return profile.get("branch_id")
    return branch_id


def _unit_open_assignment(supabase: SyncPostgrestClient, unit_id: str) -> bool:
    result = supabase.table("inventory_assignments")\
        .select("id")\
        .eq("unit_id", unit_id)\
        .is_("returned_at", "null")\
        .limit(1)\
        .execute()
    return bool(result.data)


def _save_failed(e: Exception, action: str) -> HTTPException:
    if getattr(e, "code", None) == UNIQUE_VIOLATION:
        return HTTPException(status_code=409, detail="Serial number already exists")
    return HTTPException(status_code=500, detail=f"Failed to {action} inventory unit")


# ============================================================================
# UNITS
# ============================================================================

@router.post("/units")
async def create_unit(
    request: Request,
    user: CurrentUser = Depends(get_current_user),
    profile: Dict[str, Any] = Depends(get_current_profile)
):
    form = parse_form(InventoryUnitForm, await read_json(request))

    branch_id = _scoped_branch(profile, form.branch_id)
    if not branch_id:
        raise HTTPException(status_code=400, detail="Branch is required")

    try:
        result = user.supabase.table("inventory_units").insert({
            "item_id": form.item_id,
            "serial_number": form.serial_number,
            "branch_id": branch_id,
            "status": form.status,
        }).execute()
        unit = result.data[0]
    except Exception as e:
        logger.error(f"Error creating inventory unit {form.serial_number}: {e}")
        raise _save_failed(e, "create")

    return {"success": True, "id": unit["id"]}


@router.put("/units/{unit_id}")
async def update_unit(
    unit_id: str,
    request: Request,
    user: CurrentUser = Depends(get_current_user),
    profile: Dict[str, Any] = Depends(get_current_profile)
):
    form = parse_form(InventoryUnitForm, await read_json(request))

    branch_id = _scoped_branch(profile, form.branch_id)
    if not branch_id:
        raise HTTPException(status_code=400, detail="Branch is required")

    try:
        user.supabase.table("inventory_units").update({
            "item_id": form.item_id,
            "serial_number": form.serial_number,
            "branch_id": branch_id,
            "status": form.status,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }).eq("id", unit_id).execute()
    except Exception as e:
        logger.error(f"Error updating inventory unit {unit_id}: {e}")
        raise _save_failed(e, "update")

    return {"success": True}


@router.delete("/units/{unit_id}")
async def delete_unit(
    unit_id: str,
    user: CurrentUser = Depends(get_current_user)
):
    if _unit_open_assignment(user.supabase, unit_id):
        raise HTTPException(status_code=400, detail="Cannot delete unit that is currently assigned. Return it first.")

    try:
        user.supabase.table("inventory_units").delete().eq("id", unit_id).execute()
    except Exception as e:
        logger.error(f"Error deleting inventory unit {unit_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete inventory unit")

    return {"success": True}


# ============================================================================
# ASSIGNMENTS
# ============================================================================

@router.post("/assignments")
async def assign_inventory(
    request: Request,
    user: CurrentUser = Depends(get_current_user),
    profile: Dict[str, Any] = Depends(get_current_profile)
):
    """
    Hand out a serialised unit (always quantity 1) or a quantity of an item.

    Stock is only drawn down once the assignment row exists.
    """
    form = parse_form(InventoryAssignmentForm, await read_json(request))
    supabase = user.supabase

    item = None
    if form.unit_id:
        unit = fetch_row(supabase, "inventory_units", form.unit_id, "item_id, branch_id")
        if not unit:
            raise HTTPException(status_code=404, detail="Unit not found")

        if _unit_open_assignment(supabase, form.unit_id):
            raise HTTPException(status_code=400, detail="This unit is already assigned. Return it first.")

        branch_id = _scoped_branch(profile, unit.get("branch_id"))
        item_id = unit.get("item_id")
        quantity = 1
    else:
        item = fetch_row(supabase, "inventory_items", form.item_id, "branch_id, total_quantity")
        if not item:
            raise HTTPException(status_code=404, detail="Item not found")

        if (item.get("total_quantity") or 0) < form.quantity:
            raise HTTPException(status_code=400, detail="Not enough quantity available")

        branch_id = _scoped_branch(profile, item.get("branch_id"))
        item_id = form.item_id
        quantity = form.quantity

    if not item_id:
        raise HTTPException(status_code=400, detail="Item is required")
    if not branch_id:
        raise HTTPException(status_code=400, detail="Branch is required")

    try:
        result = supabase.table("inventory_assignments").insert({
            "branch_id": branch_id,
            "assigned_to_type": form.assigned_to_type,
            "place_id": form.place_id,
            "guard_id": form.guard_id,
            "item_id": item_id,
            "unit_id": form.unit_id,
            "quantity": quantity,
            "condition": form.condition,
            "notes": form.notes,
        }).execute()
        assignment = result.data[0]

        if form.unit_id:
            supabase.table("inventory_units").update({"status": "assigned"}).eq("id", form.unit_id).execute()
        else:
            supabase.table("inventory_items")\
                .update({"total_quantity": (item.get("total_quantity") or 0) - quantity})\
                .eq("id", item_id)\
                .execute()
    except Exception as e:
        logger.error(f"Error assigning inventory item {item_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to assign inventory")

    logger.info(f"📦 Assigned {quantity} x {item_id} to {form.assigned_to_type} {form.guard_id or form.place_id}")
    return {"success": True, "id": assignment["id"]}


@router.post("/assignments/{assignment_id}/return")
async def return_inventory(
    assignment_id: str,
    user: CurrentUser = Depends(get_current_user)
):
    """Close an inventory assignment and put the unit or quantity back in stock."""
    supabase = user.supabase

    assignment = fetch_row(supabase, "inventory_assignments", assignment_id, "unit_id, item_id, quantity, returned_at")
    if not assignment:
        raise HTTPException(status_code=404, detail="Assignment not found")

    if assignment.get("returned_at"):
        raise HTTPException(status_code=400, detail="Already returned")

    try:
        supabase.table("inventory_assignments")\
            .update({"returned_at": datetime.now(timezone.utc).isoformat()})\
            .eq("id", assignment_id)\
            .execute()

        if assignment.get("unit_id"):
            supabase.table("inventory_units").update({"status": "available"}).eq("id", assignment["unit_id"]).execute()
        elif assignment.get("item_id"):
            item = fetch_row(supabase, "inventory_items", assignment["item_id"], "total_quantity")
            if item:
                supabase.table("inventory_items")\
                    .update({"total_quantity": (item.get("total_quantity") or 0) + (assignment.get("quantity") or 1)})\
                    .eq("id", assignment["item_id"])\
                    .execute()
    except Exception as e:
        logger.error(f"Error returning inventory assignment {assignment_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to return inventory")

    return {"success": True}
