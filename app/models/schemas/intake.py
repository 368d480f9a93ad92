"""
Public Intake Schemas
Contact inquiries and service-request status values
"""
import re
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_validator

# Pakistani mobile (03XXXXXXXXX) or landline (0 + area code + number)
PHONE_PATTERN = re.compile(r"^(03[0-9]{9}|0[1-9][0-9]{9,10})$")

SERVICE_REQUEST_REQUIRED_FIELDS = ("customer_name", "customer_email", "service_type", "location_address")
EMAIL_STATUSES = ("sent", "failed", "sending")
LEAD_STATUSES = ("new", "confirmed", "assigned", "active", "completed", "cancelled")


class InquiryCreate(BaseModel):
    """Contact form submission"""
    name: str = Field(..., min_length=2)
    phone: str
    email: Optional[EmailStr] = None
    message: str = Field(..., min_length=10)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, value: str) -> str:
        if not PHONE_PATTERN.match(value):
            raise ValueError("Invalid phone number format")
        return value

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_none(cls, value):
        if value == "":
            return None
        return value


class LeadStatusUpdate(BaseModel):
    """Dashboard lead status change"""
    status: str
