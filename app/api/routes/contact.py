"""
Contact Route
Marketing-site contact form
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from supabase import Client

from app.api.forms import parse_form, read_json
from app.core.dependencies import get_supabase_admin
from app.models.schemas import InquiryCreate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["contact"])


@router.post("/contact")
async def submit_inquiry(
    request: Request,
    supabase: Client = Depends(get_supabase_admin)
):
    """Validate and store a contact inquiry."""
    inquiry = parse_form(InquiryCreate, await read_json(request), "Invalid form data")

    try:
        supabase.table("inquiries").insert({
            "name": inquiry.name,
            "phone": inquiry.phone,
            "email": inquiry.email,
            "message": inquiry.message,
        }).execute()
    except Exception as e:
        logger.error(f"Error submitting inquiry: {e}")
        raise HTTPException(status_code=500, detail="Failed to submit inquiry")

    return {"success": True}
