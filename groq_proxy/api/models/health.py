"""
Health check models.
"""
from typing import Literal, Optional

from pydantic import BaseModel


class HealthStatus(BaseModel):
    """Result of probing the Groq API."""

    status: Literal["healthy", "unhealthy"]
    model: Optional[str] = None
    error: Optional[str] = None
    timestamp: str


class HealthResponse(BaseModel):
    """General liveness response; does not touch the upstream."""

    status: str
    service: str
    timestamp: str
    uptime: float
