"""
Health check and service metadata endpoints.
Neither endpoint calls the Groq API.
"""
import time

from fastapi import APIRouter

from groq_proxy.api.models import HealthResponse
from groq_proxy.utils.constants import SERVICE_CONFIG
from groq_proxy.utils.timestamps import utc_timestamp

router = APIRouter(tags=["health"])

PROCESS_STARTED_AT = time.monotonic()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Basic liveness check."""
    return HealthResponse(
        status="healthy",
        service=SERVICE_CONFIG["NAME"],
        timestamp=utc_timestamp(),
        uptime=round(time.monotonic() - PROCESS_STARTED_AT, 3),
    )


@router.get("/")
async def service_info():
    """Service metadata and endpoint listing."""
    return {
        "name": "Groq API Proxy",
        "version": SERVICE_CONFIG["VERSION"],
        "description": "Secure proxy backend for Groq AI API",
        "endpoints": {
            "POST /chat": "Create chat completion",
            "GET /chat/health": "Chat service health check",
            "GET /chat/models": "Get available models",
            "GET /health": "General health check",
        },
        "documentation": "See README.md for detailed usage instructions",
    }
