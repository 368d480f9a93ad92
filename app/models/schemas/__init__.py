"""
API Schemas
Pydantic models for all API endpoints
"""
from app.models.schemas.assistant import (
    ManagerAction,
    ManagerAIResponse,
    MANAGER_FALLBACK,
    ExecuteActionRequest,
    ManagerChatRequest,
    ReceptionistRequest,
    ReceptionistAIResponse,
    RECEPTIONIST_FALLBACK,
)
from app.models.schemas.intake import (
    InquiryCreate,
    LeadStatusUpdate,
    EMAIL_STATUSES,
    LEAD_STATUSES,
    SERVICE_REQUEST_REQUIRED_FIELDS,
)
from app.models.schemas.operations import (
    BranchForm,
    AssignmentForm,
    AssignmentUpdate,
    AssignmentEnd,
    AttendanceMark,
    BulkAttendance,
    InvoiceForm,
    InvoiceLineItem,
    INVOICE_STATUSES,
    InventoryUnitForm,
    InventoryAssignmentForm,
)
from app.models.schemas.health import HealthResponse

__all__ = [
    # Assistant models
    "ManagerAction",
    "ManagerAIResponse",
    "MANAGER_FALLBACK",
    "ExecuteActionRequest",
    "ManagerChatRequest",
    "ReceptionistRequest",
    "ReceptionistAIResponse",
    "RECEPTIONIST_FALLBACK",

    # Intake models
    "InquiryCreate",
    "LeadStatusUpdate",
    "EMAIL_STATUSES",
    "LEAD_STATUSES",
    "SERVICE_REQUEST_REQUIRED_FIELDS",

    # Operations models
    "BranchForm",
    "AssignmentForm",
    "AssignmentUpdate",
    "AssignmentEnd",
    "AttendanceMark",
    "BulkAttendance",
    "InvoiceForm",
    "InvoiceLineItem",
    "INVOICE_STATUSES",
    "InventoryUnitForm",
    "InventoryAssignmentForm",

    # Health models
    "HealthResponse",
]
