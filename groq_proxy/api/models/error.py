from typing import Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response model."""

    error: str
    details: Optional[str] = None
    timestamp: Optional[str] = None
    stack: Optional[str] = None


class NotFoundResponse(BaseModel):
    """Response for requests that match no route."""

    error: str
    path: str
    method: str
