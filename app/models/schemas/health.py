"""
Health Schemas
"""
from typing import Dict
from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    environment: str
    integrations: Dict[str, bool]
    timestamp: str
