"""
Assistant Schemas
Structured replies from the manager assistant and the public receptionist

Model replies are validated leniently: nulls fall back to defaults so a
usable reply is not discarded over an empty field.
"""
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field, field_validator


# ============================================================================
# MANAGER ASSISTANT
# ============================================================================

class ManagerAction(BaseModel):
    """Operation the assistant wants the dashboard to run"""
    type: Literal["create", "update", "delete", "list", "assign", "generate_report"]
    entity: Literal["place", "guard", "inventory", "assignment", "lead", "report"]
    data: Dict[str, Any] = Field(default_factory=dict)
    requiresConfirmation: bool = False

    @field_validator("data", mode="before")
    @classmethod
    def null_data_is_empty(cls, value):
        return {} if value is None else value

    @field_validator("requiresConfirmation", mode="before")
    @classmethod
    def null_is_false(cls, value):
        return False if value is None else value


class ManagerAIResponse(BaseModel):
    """One manager-assistant turn"""
    message: str
    action: Optional[ManagerAction] = None
    confirmed: bool = False
    intent: str = "clarification"

    @field_validator("confirmed", mode="before")
    @classmethod
    def null_is_false(cls, value):
        return False if value is None else value

    @field_validator("intent", mode="before")
    @classmethod
    def null_intent_is_clarification(cls, value):
        return "clarification" if value is None else value


MANAGER_FALLBACK = ManagerAIResponse(
    message="Sorry, I encountered an issue. Could you repeat that?",
    action=None,
    confirmed=False,
    intent="error",
)


class ExecuteActionRequest(BaseModel):
    """Confirmed action sent back by the dashboard"""
    actionType: Optional[str] = None
    entity: Optional[str] = None
    data: Optional[Dict[str, Any]] = None


# ============================================================================
# RECEPTIONIST
# ============================================================================

class ServiceDetails(BaseModel):
    serviceType: Optional[str] = None
    location: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    numGuards: Optional[float] = None
    durationHours: Optional[float] = None
    startDate: Optional[str] = None
    startTime: Optional[str] = None
    specialRequirements: List[str] = Field(default_factory=list)
    additionalNotes: Optional[str] = None

    @field_validator("specialRequirements", mode="before")
    @classmethod
    def null_is_empty(cls, value):
        return [] if value is None else value


class Pricing(BaseModel):
    packageId: Optional[str] = None
    packageName: Optional[str] = None
    hourlyRate: Optional[float] = None
    estimatedTotal: Optional[float] = None


class CustomerInfo(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None


class ReceptionistAIResponse(BaseModel):
    """One receptionist turn"""
    message: str
    serviceDetails: ServiceDetails = Field(default_factory=ServiceDetails)
    pricing: Pricing = Field(default_factory=Pricing)
    intent: str = "discovery"
    shouldShowPackages: bool = False
    captureCustomerInfo: Optional[CustomerInfo] = None
    createServiceRequest: bool = False
    packages: List[Dict[str, Any]] = Field(default_factory=list)

    @field_validator("serviceDetails", "pricing", mode="before")
    @classmethod
    def null_section_is_empty(cls, value):
        return {} if value is None else value

    @field_validator("shouldShowPackages", "createServiceRequest", mode="before")
    @classmethod
    def null_is_false(cls, value):
        return False if value is None else value

    @field_validator("intent", mode="before")
    @classmethod
    def null_intent_is_discovery(cls, value):
        return "discovery" if value is None else value


class ChatRequest(BaseModel):
    """Body of a chat turn; history entries are passed through as sent"""
    message: Any = None
    history: List[Any] = Field(default_factory=list)

    @field_validator("history", mode="before")
    @classmethod
    def history_must_be_list(cls, value):
        return value if isinstance(value, list) else []


class ReceptionistRequest(ChatRequest):
    pass


class ManagerChatRequest(ChatRequest):
    pass


RECEPTIONIST_FALLBACK = ReceptionistAIResponse(
    message="I apologize, I'm having a brief technical issue. Could you please try again in a moment?",
    intent="error",
)
