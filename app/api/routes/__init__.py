"""
API Routes
All HTTP endpoints
"""
from app.api.routes.health import router as health_router
from app.api.routes.assistant import router as assistant_router
from app.api.routes.receptionist import router as receptionist_router
from app.api.routes.voice import router as voice_router
from app.api.routes.service_requests import router as service_requests_router
from app.api.routes.contact import router as contact_router
from app.api.routes.dashboard import router as dashboard_router
from app.api.routes.branches import router as branches_router
from app.api.routes.assignments import router as assignments_router
from app.api.routes.attendance import router as attendance_router
from app.api.routes.invoices import router as invoices_router
from app.api.routes.inventory import router as inventory_router
from app.api.routes.seo import router as seo_router

__all__ = [
    "health_router",
    "assistant_router",
    "receptionist_router",
    "voice_router",
    "service_requests_router",
    "contact_router",
    "dashboard_router",
    "branches_router",
    "assignments_router",
    "attendance_router",
    "invoices_router",
    "inventory_router",
    "seo_router",
]
