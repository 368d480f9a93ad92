"""
Invoice Routes
Client billing: numbering, create/update with line items, status and delete
"""
import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Depends, HTTPException, Request
from postgrest import SyncPostgrestClient

from app.api.forms import parse_form, read_json, read_json_object
from app.core.security import CurrentUser, get_current_profile, get_current_user
from app.models.schemas import INVOICE_STATUSES, InvoiceForm, InvoiceLineItem
from app.services.lookup import fetch_row

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/dashboard/invoices", tags=["invoices"])


def next_invoice_number(supabase: SyncPostgrestClient, today: Optional[date] = None) -> str:
    """
    Next number in the INV-YYYYMM-NNNN sequence for the current month.

    The sequence restarts at 0001 every month.
    """
    today = today or date.today()
    prefix = f"INV-{today:%Y%m}-"

    result = supabase.table("invoices")\
        .select("invoice_number")\
        .like("invoice_number", f"{prefix}%")\
        .order("invoice_number", desc=True)\
        .limit(1)\
        .execute()

    next_number = 1
    if result.data:
        suffix = (result.data[0].get("invoice_number") or "")[len(prefix):]
        if suffix.isdigit():
            next_number = int(suffix) + 1

    return f"{prefix}{next_number:04d}"


def invoice_number_taken(
    supabase: SyncPostgrestClient,
    invoice_number: str,
    exclude_id: Optional[str] = None
) -> bool:
    query = supabase.table("invoices").select("id").eq("invoice_number", invoice_number)
    if exclude_id:
        query = query.neq("id", exclude_id)
    return bool(query.limit(1).execute().data)


def _invoice_columns(form: InvoiceForm) -> Dict[str, Any]:
    return {
        "place_id": form.place_id,
        "invoice_number": form.invoice_number,
        "invoice_date": form.invoice_date.isoformat(),
        "due_date": form.due_date.isoformat() if form.due_date else None,
        "period_start": form.period_start.isoformat() if form.period_start else None,
        "period_end": form.period_end.isoformat() if form.period_end else None,
        "subtotal": form.subtotal,
        "tax_rate": form.tax_rate,
        "tax_amount": form.tax_amount,
        "total": form.total,
        "status": form.status,
        "notes": form.notes,
    }


def _insert_line_items(supabase: SyncPostgrestClient, invoice_id: str, items: List[InvoiceLineItem]) -> None:
    if not items:
        return

    rows = [
        {
            "invoice_id": invoice_id,
            "description": item.description,
            "quantity": item.quantity,
            "unit_price": item.unit_price,
            "amount": item.amount,
            "sort_order": index,
        }
        for index, item in enumerate(items)
    ]
    supabase.table("invoice_line_items").insert(rows).execute()


@router.get("/next-number")
async def get_next_invoice_number(user: CurrentUser = Depends(get_current_user)):
    return {"invoice_number": next_invoice_number(user.supabase)}


@router.post("")
async def create_invoice(
    request: Request,
    user: CurrentUser = Depends(get_current_user),
    profile: Dict[str, Any] = Depends(get_current_profile)
):
    """
    Create an invoice and its line items.

    Super admins bill under the place's branch; everyone else under their own.
    """
    form = parse_form(InvoiceForm, await read_json(request))

    branch_id = profile.get("branch_id")
    if profile.get("role") == "super_admin":
        place = fetch_row(user.supabase, "places", form.place_id, "branch_id")
        branch_id = (place or {}).get("branch_id") or branch_id

    if not branch_id:
        raise HTTPException(status_code=400, detail="Could not determine branch")

    if invoice_number_taken(user.supabase, form.invoice_number):
        raise HTTPException(status_code=409, detail="Invoice number already exists")

    try:
        result = user.supabase.table("invoices").insert({
            **_invoice_columns(form),
            "branch_id": branch_id,
            "created_by": user.id,
        }).execute()
        invoice = result.data[0]
    except Exception as e:
        logger.error(f"Error creating invoice {form.invoice_number}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create invoice")

    try:
        _insert_line_items(user.supabase, invoice["id"], form.line_items)
    except Exception as e:
        logger.error(f"Error adding line items to invoice {invoice['id']}: {e}")
        raise HTTPException(status_code=500, detail="Invoice created but failed to add line items")

    logger.info(f"🧾 Invoice {form.invoice_number} created ({len(form.line_items)} line items)")
    return {"success": True, "id": invoice["id"], "invoice_number": form.invoice_number}


@router.put("/{invoice_id}")
async def update_invoice(
    invoice_id: str,
    request: Request,
    user: CurrentUser = Depends(get_current_user)
):
    """Replace an invoice's fields and line items."""
    form = parse_form(InvoiceForm, await read_json(request))

    if invoice_number_taken(user.supabase, form.invoice_number, exclude_id=invoice_id):
        raise HTTPException(status_code=409, detail="Invoice number already exists")

    try:
        user.supabase.table("invoices").update({
            **_invoice_columns(form),
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }).eq("id", invoice_id).execute()
    except Exception as e:
        logger.error(f"Error updating invoice {invoice_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update invoice")

    # line items are replaced wholesale
    try:
        user.supabase.table("invoice_line_items").delete().eq("invoice_id", invoice_id).execute()
        _insert_line_items(user.supabase, invoice_id, form.line_items)
    except Exception as e:
        logger.error(f"Error replacing line items for invoice {invoice_id}: {e}")

    return {"success": True}


@router.patch("/{invoice_id}/status")
async def update_invoice_status(
    invoice_id: str,
    request: Request,
    user: CurrentUser = Depends(get_current_user)
):
    status = (await read_json_object(request)).get("status")
    if status not in INVOICE_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid status")

    try:
        user.supabase.table("invoices").update({
            "status": status,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }).eq("id", invoice_id).execute()
    except Exception as e:
        logger.error(f"Error updating status for invoice {invoice_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update status")

    return {"success": True}


@router.delete("/{invoice_id}")
async def delete_invoice(
    invoice_id: str,
    user: CurrentUser = Depends(get_current_user)
):
    """Delete an unpaid invoice together with its line items."""
    invoice = fetch_row(user.supabase, "invoices", invoice_id, "id, status")
    if not invoice:
        raise HTTPException(status_code=404, detail="Invoice not found")

    if invoice.get("status") == "paid":
        raise HTTPException(status_code=400, detail="Cannot delete a paid invoice")

    try:
        user.supabase.table("invoice_line_items").delete().eq("invoice_id", invoice_id).execute()
        user.supabase.table("invoices").delete().eq("id", invoice_id).execute()
    except Exception as e:
        logger.error(f"Error deleting invoice {invoice_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete invoice")

    logger.info(f"🗑️ Invoice {invoice_id} deleted by {user.id[:8]}...")
    return {"success": True}
