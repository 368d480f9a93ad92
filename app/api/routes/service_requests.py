"""
Service Request Routes
Public intake of service requests captured by the receptionist
"""
import logging
from typing import Any
from fastapi import APIRouter, Depends, HTTPException, Request
from supabase import Client

from app.api.forms import read_json_object
from app.core.dependencies import get_supabase_admin
from app.middleware.rate_limit import RateLimit
from app.models.schemas import EMAIL_STATUSES, SERVICE_REQUEST_REQUIRED_FIELDS

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/service-requests", tags=["service-requests"])

RETURNED_FIELDS = (
    "id", "request_number", "customer_name", "customer_email",
    "service_type", "estimated_total", "branch_id",
)

OPTIONAL_FIELDS = (
    "customer_phone", "company_name", "location_city", "location_state",
    "duration_hours", "start_date", "start_time", "additional_notes",
    "package_id", "hourly_rate", "estimated_total", "ai_transcript",
)


def match_branch(supabase: Client, city: Any) -> Any:
    """Branch id whose city matches (case-insensitive), or None."""
    if not city or not isinstance(city, str) or not city.strip():
        return None

    result = supabase.table("branches")\
        .select("id")\
        .ilike("city", city.strip())\
        .limit(1)\
        .execute()

    return result.data[0]["id"] if result.data else None


@router.post("")
async def create_service_request(
    request: Request,
    identifier: str = Depends(RateLimit(5, 60 * 1000)),
    supabase: Client = Depends(get_supabase_admin)
):
    """
    Create a service request from the receptionist's collected details.

    The branch is matched from location_city; unmatched requests land
    unassigned for a super admin to route.
    """
    body = await read_json_object(request)
    if not all(body.get(field) for field in SERVICE_REQUEST_REQUIRED_FIELDS):
        raise HTTPException(
            status_code=400,
            detail=f"Missing required fields: {', '.join(SERVICE_REQUEST_REQUIRED_FIELDS)}"
        )

    try:
        branch_id = match_branch(supabase, body.get("location_city"))

        record = {field: body[field] for field in SERVICE_REQUEST_REQUIRED_FIELDS}
        record.update({field: body.get(field) or None for field in OPTIONAL_FIELDS})
        record.update({
            "branch_id": branch_id,
            "num_guards": body.get("num_guards") or 1,
            "special_requirements": body.get("special_requirements") or [],
            "source": "ai_voice",
            "status": "new",
            "priority": "normal",
        })

        result = supabase.table("service_requests").insert(record).execute()
        created = result.data[0]

    except Exception as e:
        logger.error(f"Error creating service request: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create service request")

    logger.info(f"📝 Service request {created.get('request_number')} created (branch: {branch_id})")

    return {
        "success": True,
        **{field: created.get(field) for field in RETURNED_FIELDS},
    }


@router.patch("")
async def update_email_status(
    request: Request,
    identifier: str = Depends(RateLimit(10, 60 * 1000, message="Too many requests")),
    supabase: Client = Depends(get_supabase_admin)
):
    """Record the invoice email delivery status on a service request."""
    body = await read_json_object(request)
    request_id = body.get("id")
    email_status = body.get("email_status")

    if not request_id or not email_status:
        raise HTTPException(status_code=400, detail="id and email_status required")

    if email_status not in EMAIL_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid email_status")

    try:
        supabase.table("service_requests")\
            .update({"email_status": email_status})\
            .eq("id", request_id)\
            .execute()
    except Exception as e:
        logger.error(f"Error updating email status for {request_id}: {e}")
        raise HTTPException(status_code=500, detail="Update failed")

    return {"success": True}
