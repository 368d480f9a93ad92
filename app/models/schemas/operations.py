"""
Dashboard Operations Schemas
Form bodies for branches, assignments, attendance, invoices and inventory units
"""
from datetime import date
from typing import List, Literal, Optional
from pydantic import BaseModel, Field, field_validator, model_validator

from app.models.schemas.intake import PHONE_PATTERN

INVOICE_STATUSES = ("draft", "sent", "paid", "partial", "unpaid", "overdue", "cancelled")

AttendanceStatus = Literal["present", "absent", "leave", "half_day", "late"]
Shift = Literal["day", "night"]


def _blank_is_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


# ============================================================================
# BRANCHES
# ============================================================================

class BranchForm(BaseModel):
    name: str = Field(..., min_length=2)
    city: str = Field(..., min_length=2)
    address: str = Field(..., min_length=5)
    phone: str

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, value: str) -> str:
        if not PHONE_PATTERN.match(value):
            raise ValueError("Invalid phone number format")
        return value


# ============================================================================
# ASSIGNMENTS
# ============================================================================

class AssignmentForm(BaseModel):
    """Guard posted to a place for a date range"""
    guard_id: str = Field(..., min_length=1)
    place_id: str = Field(..., min_length=1)
    start_date: date
    end_date: Optional[date] = None
    shift_type: Literal["day", "night", "both"] = "day"
    notes: Optional[str] = None

    @field_validator("end_date", "notes", mode="before")
    @classmethod
    def blank_is_none(cls, value):
        return _blank_is_none(value)

    @model_validator(mode="after")
    def end_after_start(self):
        if self.end_date and self.end_date < self.start_date:
            raise ValueError("End date must be after start date")
        return self


class AssignmentUpdate(AssignmentForm):
    status: Literal["active", "completed", "cancelled"] = "active"


class AssignmentEnd(BaseModel):
    end_date: date


# ============================================================================
# ATTENDANCE
# ============================================================================

class AttendanceMark(BaseModel):
    """One guard's attendance for a date and shift"""
    assignment_id: str = Field(..., min_length=1)
    date: date
    shift: Shift
    status: AttendanceStatus
    check_in_time: Optional[str] = None
    check_out_time: Optional[str] = None
    half_day_hours: Optional[float] = Field(default=None, ge=1, le=11)
    notes: Optional[str] = None

    @field_validator("check_in_time", "check_out_time", "half_day_hours", "notes", mode="before")
    @classmethod
    def blank_is_none(cls, value):
        return _blank_is_none(value)

    @model_validator(mode="after")
    def half_day_needs_hours(self):
        if self.status == "half_day" and not self.half_day_hours:
            raise ValueError("Half day hours required when status is half_day")
        return self


class BulkAttendanceEntry(BaseModel):
    assignment_id: str = Field(..., min_length=1)
    status: AttendanceStatus
    notes: Optional[str] = None


class BulkAttendance(BaseModel):
    """Attendance sheet for every guard at a place on one date and shift"""
    date: date
    shift: Shift
    place_id: str = Field(..., min_length=1)
    attendance: List[BulkAttendanceEntry]


# ============================================================================
# INVOICES
# ============================================================================

class InvoiceLineItem(BaseModel):
    description: str = Field(..., min_length=1)
    quantity: float = Field(..., ge=0.01)
    unit_price: float = Field(..., ge=0)
    amount: float = Field(default=0, ge=0)


class InvoiceForm(BaseModel):
    place_id: str = Field(..., min_length=1)
    invoice_number: str = Field(..., min_length=1)
    invoice_date: date
    due_date: Optional[date] = None
    period_start: Optional[date] = None
    period_end: Optional[date] = None
    subtotal: float = Field(default=0, ge=0)
    tax_rate: float = Field(default=0, ge=0, le=100)
    tax_amount: float = Field(default=0, ge=0)
    total: float = Field(default=0, ge=0)
    status: Literal["draft", "sent", "paid", "partial", "unpaid", "overdue", "cancelled"] = "draft"
    notes: Optional[str] = None
    line_items: List[InvoiceLineItem] = Field(default_factory=list)

    @field_validator("due_date", "period_start", "period_end", "notes", mode="before")
    @classmethod
    def blank_is_none(cls, value):
        return _blank_is_none(value)


# ============================================================================
# INVENTORY
# ============================================================================

class InventoryUnitForm(BaseModel):
    """Serialised unit of an inventory item"""
    item_id: str = Field(..., min_length=1)
    serial_number: str = Field(..., min_length=2)
    branch_id: Optional[str] = None
    status: Literal["available", "assigned", "maintenance"] = "available"


class InventoryAssignmentForm(BaseModel):
    """Hand out a serialised unit, or a quantity of an item, to a place or guard"""
    assigned_to_type: Optional[Literal["place", "guard"]] = None
    place_id: Optional[str] = None
    guard_id: Optional[str] = None
    item_id: Optional[str] = None
    unit_id: Optional[str] = None
    quantity: int = Field(default=1, ge=1)
    condition: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("place_id", "guard_id", "item_id", "unit_id", "condition", "notes", mode="before")
    @classmethod
    def blank_is_none(cls, value):
        return _blank_is_none(value)

    @model_validator(mode="after")
    def needs_item_and_target(self):
        if not self.item_id and not self.unit_id:
            raise ValueError("Either item or unit must be selected")
        if not self.place_id and not self.guard_id:
            raise ValueError("Either place or guard must be selected")
        if self.assigned_to_type is None:
            self.assigned_to_type = "guard" if self.guard_id else "place"
        return self
