"""
Branch Routes
Super-admin management of company branches
"""
import logging
from typing import Any, Dict
from fastapi import APIRouter, Depends, HTTPException, Request

from app.api.forms import parse_form, read_json
from app.core.security import CurrentUser, get_current_user, require_super_admin
from app.models.schemas import BranchForm

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/dashboard/branches", tags=["branches"])


@router.post("")
async def create_branch(
    request: Request,
    user: CurrentUser = Depends(get_current_user),
    profile: Dict[str, Any] = Depends(require_super_admin)
):
    form = parse_form(BranchForm, await read_json(request))

    try:
        result = user.supabase.table("branches").insert(form.model_dump()).execute()
        branch = result.data[0]
    except Exception as e:
        logger.error(f"Error creating branch {form.name}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create branch")

    logger.info(f"🏢 Branch {form.name} ({form.city}) created")
    return {"success": True, "id": branch["id"]}


@router.put("/{branch_id}")
async def update_branch(
    branch_id: str,
    request: Request,
    user: CurrentUser = Depends(get_current_user),
    profile: Dict[str, Any] = Depends(require_super_admin)
):
    form = parse_form(BranchForm, await read_json(request))

    try:
        user.supabase.table("branches").update(form.model_dump()).eq("id", branch_id).execute()
    except Exception as e:
        logger.error(f"Error updating branch {branch_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update branch")

    return {"success": True}


@router.delete("/{branch_id}")
async def delete_branch(
    branch_id: str,
    user: CurrentUser = Depends(get_current_user),
    profile: Dict[str, Any] = Depends(require_super_admin)
):
    """Delete a branch that no place or guard belongs to."""
    for table in ("places", "guards"):
        result = user.supabase.table(table)\
            .select("id", count="exact", head=True)\
            .eq("branch_id", branch_id)\
            .execute()
        if result.count:
            raise HTTPException(status_code=400, detail="Cannot delete branch with existing places or guards")

    try:
        user.supabase.table("branches").delete().eq("id", branch_id).execute()
    except Exception as e:
        logger.error(f"Error deleting branch {branch_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete branch")

    logger.info(f"🗑️ Branch {branch_id} deleted by {user.id[:8]}...")
    return {"success": True}
