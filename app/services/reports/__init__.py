"""
Operational Reports

Reports the dashboard manager can ask for by voice.

Report types:
- guard_attendance: per-guard attendance with rate (half days count 0.5)
- place: place details, active guards, attendance and open inventory
- monthly_summary: headcounts, attendance totals and invoice revenue

Architecture:
- models.py: Data validation (Pydantic)
- generator.py: Queries and aggregation
"""

from app.services.reports.models import (
    OperationalReport,
    ReportError,
    ReportPeriod,
    ReportType
)
from app.services.reports.generator import generate_report, default_period

__all__ = [
    "OperationalReport",
    "ReportError",
    "ReportPeriod",
    "ReportType",
    "generate_report",
    "default_period"
]
