"""
Operational Reports - Data Models

Pydantic models for report payloads returned to the dashboard.
"""
from pydantic import BaseModel, Field
from typing import List, Dict, Any, Optional


class ReportType:
    """Report type constants."""
    GUARD_ATTENDANCE = "guard_attendance"
    PLACE = "place"
    MONTHLY_SUMMARY = "monthly_summary"


class ReportError(Exception):
    """Report could not be built from the request (bad input or unknown name)."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class ReportPeriod(BaseModel):
    start: str = Field(..., description="YYYY-MM-DD, inclusive")
    end: str = Field(..., description="YYYY-MM-DD, inclusive")


class AttendanceSummary(BaseModel):
    """Status counts over a period."""
    present: int = 0
    absent: int = 0
    late: int = 0
    half_day: int = 0
    leave: int = 0
    total_days: int = 0
    attendance_rate: int = 0


class GuardAttendance(BaseModel):
    """One guard's attendance within a guard_attendance report."""
    guard: Dict[str, Any]
    place: Optional[Dict[str, Any]] = None
    attendance: List[Dict[str, Any]] = Field(default_factory=list)
    summary: AttendanceSummary = Field(default_factory=AttendanceSummary)
    inventory: List[Dict[str, Any]] = Field(default_factory=list)


class OperationalReport(BaseModel):
    """Report envelope consumed by the dashboard voice agent and PDF export."""
    reportType: str
    data: Any
    period: ReportPeriod
    label: str
