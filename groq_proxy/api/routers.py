from fastapi import APIRouter

from .endpoints import chat
from .endpoints import health

api_router = APIRouter()

# Include endpoint routers
api_router.include_router(chat.router, tags=["chat"])
api_router.include_router(health.router, prefix="", tags=["health"])
