from .chat import ChatMessage, ChatRequest, ModelInfo, ModelsResponse
from .error import ErrorResponse, NotFoundResponse
from .health import HealthResponse, HealthStatus

__all__ = [
    "ErrorResponse",
    "NotFoundResponse",
    "ChatMessage",
    "ChatRequest",
    "ModelInfo",
    "ModelsResponse",
    "HealthResponse",
    "HealthStatus",
]
