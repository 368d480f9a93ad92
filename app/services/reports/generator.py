"""
Operational Reports - Core Generator

Builds guard attendance, place and monthly summary reports from backend rows.
Branch admins only see their own branch.
"""
import logging
import math
from typing import Dict, Any, List, Optional, Tuple
from datetime import date
from postgrest import SyncPostgrestClient

from app.services.lookup import resolve_entity_id
from app.services.reports.models import (
    AttendanceSummary,
    GuardAttendance,
    OperationalReport,
    ReportError,
    ReportPeriod,
    ReportType,
)

logger = logging.getLogger(__name__)

ATTENDANCE_STATUSES = ("present", "absent", "late", "half_day", "leave")

ATTENDANCE_COLUMNS = (
    "*, assignment:assignments(id, shift_type, "
    "guard:guards(id, name, guard_code, photo_url, branch_id), "
    "place:places(id, name, city, branch_id))"
)


def default_period(today: Optional[date] = None) -> Tuple[str, str]:
    """First day of the current month through today."""
    today = today or date.today()
    return today.replace(day=1).isoformat(), today.isoformat()


def _branch_scope(profile: Dict[str, Any]) -> Optional[str]:
    """Branch to filter on, or None when the caller sees every branch."""
    if profile.get("role") == "branch_admin" and profile.get("branch_id"):
        return profile["branch_id"]
    return None


def _percent(part: float, total: int) -> int:
    """Whole-number percentage, halves rounded up (62.5 -> 63)."""
    if not total:
        return 0
    return int(math.floor(part / total * 100 + 0.5))


def _count_statuses(rows: List[Dict[str, Any]]) -> AttendanceSummary:
    summary = AttendanceSummary(total_days=len(rows))
    for row in rows:
        status = row.get("status")
        if status in ATTENDANCE_STATUSES:
            setattr(summary, status, getattr(summary, status) + 1)
    return summary


# ============================================================================
# GUARD ATTENDANCE
# ============================================================================

def _guard_attendance(
    supabase: SyncPostgrestClient,
    profile: Dict[str, Any],
    data: Dict[str, Any],
    period: ReportPeriod
) -> OperationalReport:
    guard_name = data.get("guard_name")
    guard_id = None
    if guard_name:
        guard_id = resolve_entity_id(supabase, "guards", guard_name, profile.get("branch_id"))
        if not guard_id:
            raise ReportError(404, f'Guard "{guard_name}" not found')

    result = supabase.table("attendance")\
        .select(ATTENDANCE_COLUMNS)\
        .gte("date", period.start)\
        .lte("date", period.end)\
        .order("date")\
        .execute()
    records = result.data or []

    branch_id = _branch_scope(profile)
    if branch_id:
        records = [
            r for r in records
            if ((r.get("assignment") or {}).get("guard") or {}).get("branch_id") == branch_id
        ]
    if guard_id:
        records = [
            r for r in records
            if ((r.get("assignment") or {}).get("guard") or {}).get("id") == guard_id
        ]

    guards: Dict[str, GuardAttendance] = {}
    for record in records:
        assignment = record.get("assignment") or {}
        guard = assignment.get("guard")
        if not guard:
            continue

        entry = guards.get(guard["id"])
        if entry is None:
            entry = GuardAttendance(guard=guard, place=assignment.get("place"))
            guards[guard["id"]] = entry

        entry.attendance.append({
            "date": record.get("date"),
            "shift": record.get("shift"),
            "status": record.get("status"),
            "check_in_time": record.get("check_in_time"),
            "check_out_time": record.get("check_out_time"),
        })
        summary = entry.summary
        summary.total_days += 1
        status = record.get("status")
        if status in ATTENDANCE_STATUSES:
            setattr(summary, status, getattr(summary, status) + 1)

    for entry in guards.values():
        summary = entry.summary
        # half days count as half a worked day
        worked = summary.present + summary.late + summary.half_day * 0.5
        summary.attendance_rate = _percent(worked, summary.total_days)

    label = f"Guard Attendance — {guard_name}" if guard_name else "Guard Attendance Report"
    return OperationalReport(
        reportType=ReportType.GUARD_ATTENDANCE,
        data=[entry.model_dump() for entry in guards.values()],
        period=period,
        label=label,
    )


# ============================================================================
# PLACE
# ============================================================================

def _place(
    supabase: SyncPostgrestClient,
    profile: Dict[str, Any],
    data: Dict[str, Any],
    period: ReportPeriod
) -> OperationalReport:
    place_name = data.get("place_name")
    if not place_name:
        raise ReportError(400, "Place name is required for a place report")

    place_id = resolve_entity_id(supabase, "places", place_name, profile.get("branch_id"))
    if not place_id:
        raise ReportError(404, f'Place "{place_name}" not found')

    place_result = supabase.table("places").select("*").eq("id", place_id).limit(1).execute()
    if not place_result.data:
        raise ReportError(404, "Place not found")
    place = place_result.data[0]

    assignments = supabase.table("assignments")\
        .select("id, shift_type, start_date, end_date, guard:guards(id, name, guard_code)")\
        .eq("place_id", place_id)\
        .eq("status", "active")\
        .execute().data or []

    attendance = supabase.table("attendance")\
        .select("status")\
        .eq("place_id", place_id)\
        .gte("date", period.start)\
        .lte("date", period.end)\
        .execute().data or []

    summary = _count_statuses(attendance)
    summary.attendance_rate = _percent(summary.present + summary.late, summary.total_days)

    inventory = supabase.table("inventory_assignments")\
        .select("id, quantity, assigned_at, item:inventory_items!item_id(name), "
                "unit:inventory_units(serial_number), guard:guards(name)")\
        .eq("place_id", place_id)\
        .is_("returned_at", "null")\
        .execute().data or []

    guards = []
    for a in assignments:
        guard = a.get("guard") or {}
        if not guard.get("id"):
            continue
        guards.append({
            "id": guard["id"],
            "name": guard.get("name") or "Unknown",
            "guard_code": guard.get("guard_code") or "",
            "shift": a.get("shift_type"),
            "start_date": a.get("start_date"),
            "end_date": a.get("end_date"),
        })

    report_data = {
        "place": {
            key: place.get(key)
            for key in ("id", "name", "address", "city", "contact_person", "contact_phone")
        },
        "guards": guards,
        "attendance_summary": {**summary.model_dump(), "total_records": summary.total_days},
        "inventory": [
            {
                "id": a.get("id"),
                "item_name": (a.get("item") or {}).get("name") or "Unknown",
                "serial_number": (a.get("unit") or {}).get("serial_number"),
                "quantity": a.get("quantity"),
                "assigned_at": a.get("assigned_at"),
                "assigned_to_guard": (a.get("guard") or {}).get("name"),
            }
            for a in inventory
        ],
        "period": period.model_dump(),
    }

    return OperationalReport(
        reportType=ReportType.PLACE,
        data=report_data,
        period=period,
        label=f"Place Report — {place.get('name')}",
    )


# ============================================================================
# MONTHLY SUMMARY
# ============================================================================

def _active_count(supabase: SyncPostgrestClient, table: str, branch_id: Optional[str]) -> int:
    query = supabase.table(table).select("id", count="exact", head=True).eq("status", "active")
    if branch_id:
        query = query.eq("branch_id", branch_id)
    return query.execute().count or 0


def _invoice_amount(invoice: Dict[str, Any]) -> float:
    return invoice.get("total_amount") or invoice.get("total") or 0


def _monthly_summary(
    supabase: SyncPostgrestClient,
    profile: Dict[str, Any],
    period: ReportPeriod,
    today: date
) -> OperationalReport:
    branch_id = _branch_scope(profile)

    attendance = supabase.table("attendance")\
        .select("status")\
        .gte("date", period.start)\
        .lte("date", period.end)\
        .execute().data or []

    invoice_query = supabase.table("invoices")\
        .select("total_amount, status, total")\
        .gte("created_at", period.start)\
        .lte("created_at", f"{period.end}T23:59:59")
    if branch_id:
        invoice_query = invoice_query.eq("branch_id", branch_id)
    invoices = invoice_query.execute().data or []

    worked = sum(1 for a in attendance if a.get("status") in ("present", "late"))
    month = today.strftime("%B")

    stats = {
        "totalGuards": _active_count(supabase, "guards", branch_id),
        "totalPlaces": _active_count(supabase, "places", branch_id),
        "activeAssignments": _active_count(supabase, "assignments", branch_id),
        "totalAttendance": len(attendance),
        "presentDays": sum(1 for a in attendance if a.get("status") == "present"),
        "absentDays": sum(1 for a in attendance if a.get("status") == "absent"),
        "attendanceRate": _percent(worked, len(attendance)),
        "totalRevenue": sum(_invoice_amount(inv) for inv in invoices),
        "paidAmount": sum(_invoice_amount(inv) for inv in invoices if inv.get("status") == "paid"),
        "pendingInvoices": sum(1 for inv in invoices if inv.get("status") in ("pending", "sent")),
    }

    return OperationalReport(
        reportType=ReportType.MONTHLY_SUMMARY,
        data={"month": month, "year": today.year, "stats": stats},
        period=period,
        label=f"Monthly Summary — {month} {today.year}",
    )


# ============================================================================
# ENTRY POINT
# ============================================================================

async def generate_report(
    supabase: SyncPostgrestClient,
    profile: Dict[str, Any],
    data: Dict[str, Any],
    today: Optional[date] = None
) -> OperationalReport:
    """
    Generate an operational report.

    Args:
        supabase: User-scoped Supabase client
        profile: Caller profile (role, branch_id)
        data: report_type plus optional guard_name / place_name / start_date / end_date
        today: Reference date (defaults to today)

    Returns:
        OperationalReport

    Raises:
        ReportError: unknown report type, missing name or unresolved name
    """
    today = today or date.today()
    default_start, default_end = default_period(today)
    period = ReportPeriod(
        start=data.get("start_date") or default_start,
        end=data.get("end_date") or default_end,
    )
    report_type = data.get("report_type")

    logger.info(f"📊 Generating {report_type} report for {period.start}..{period.end}")

    if report_type == ReportType.GUARD_ATTENDANCE:
        return _guard_attendance(supabase, profile, data, period)
    if report_type == ReportType.PLACE:
        return _place(supabase, profile, data, period)
    if report_type == ReportType.MONTHLY_SUMMARY:
        return _monthly_summary(supabase, profile, period, today)

    raise ReportError(400, f"Unknown report type: {report_type}")
