"""
CORS configuration.
Builds CORSMiddleware options for the current environment.
"""
from typing import Any, Dict

from groq_proxy.config.settings import Settings


def get_cors_options(settings: Settings) -> Dict[str, Any]:
    """
    Get CORSMiddleware keyword arguments for the given settings.

    Production restricts origins to ALLOWED_ORIGINS when it is set (all
    origins otherwise). Development and test allow every origin.
    """
    if settings.is_production:
        return {
            "allow_origins": settings.allowed_origin_list or ["*"],
            "allow_methods": ["GET", "POST"],
            "allow_headers": ["Content-Type", "Authorization"],
            "allow_credentials": False,
        }

    return {
        "allow_origins": ["*"],
        "allow_methods": ["GET", "POST", "OPTIONS"],
        "allow_headers": ["Content-Type", "Authorization", "X-Requested-With"],
        "allow_credentials": False,
    }
