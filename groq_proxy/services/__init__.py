from .exceptions import GroqAPIError, GroqTimeoutError, ModelLookupError
from .groq_service import GroqService

__all__ = ["GroqService", "GroqAPIError", "GroqTimeoutError", "ModelLookupError"]
