"""
Errors raised by the Groq service layer.
"""
from typing import Optional


class GroqAPIError(Exception):
    """
    An upstream failure annotated with the HTTP status to surface.

    Attributes:
        message: Client-facing message, prefixed with the Groq error prefix
        status_code: Upstream status code, or 500 when the upstream gave none
        original_error: The exception raised by the upstream client
    """

    def __init__(self, message: str, status_code: int = 500, original_error: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.original_error = original_error


class GroqTimeoutError(GroqAPIError):
    """The upstream call exceeded the configured timeout."""

    def __init__(self, message: str, original_error: Optional[BaseException] = None):
        super().__init__(message, status_code=504, original_error=original_error)


class ModelLookupError(Exception):
    """Raised when the list of available models cannot be produced."""
