"""
Error handling middleware.
Centralizes error handling and response formatting for the proxy.
"""
import logging
import traceback
from typing import Callable

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from groq_proxy.api.models.error import NotFoundResponse
from groq_proxy.middleware.validation import ChatValidationError
from groq_proxy.utils.constants import ERROR_MESSAGES

logger = logging.getLogger(__name__)


def _is_production(request: Request) -> bool:
    settings = getattr(request.app.state, "settings", None)
    if settings is None:
        return True  # Default to production mode for safety
    return settings.is_production


def render_internal_error(request: Request, exc: BaseException) -> JSONResponse:
    """
    Log an unhandled error and build the 500 response.

    Must not raise: this is the last line of defense for every stage.
    """
    try:
        tb_str = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        is_production = _is_production(request)

        logger.error(
            "Unhandled error",
            extra={
                "error": str(exc),
                "error_type": type(exc).__name__,
                "method": request.method,
                "url": request.url.path,
            },
            exc_info=(type(exc), exc, exc.__traceback__),
        )

        content = {"error": ERROR_MESSAGES["INTERNAL_ERROR"]}
        # Don't expose internal errors in production
        if not is_production:
            content["details"] = str(exc)
            content["stack"] = tb_str
    except Exception:
        content = {"error": ERROR_MESSAGES["INTERNAL_ERROR"]}

    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """App-level handler for failures raised outside ErrorHandlingMiddleware."""
    return render_internal_error(request, exc)


async def chat_validation_exception_handler(request: Request, exc: ChatValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": exc.message},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Shape framework HTTP errors.

    Unknown paths and unsupported methods on known paths are both reported
    as a missing route.
    """
    if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
        query = request.url.query
        path = f"{request.url.path}?{query}" if query else request.url.path
        logger.warning(
            "Route not found",
            extra={
                "method": request.method,
                "url": path,
                "ip": request.client.host if request.client else "unknown",
            },
        )
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=NotFoundResponse(
                error=ERROR_MESSAGES["ROUTE_NOT_FOUND"], path=path, method=request.method
            ).model_dump(),
        )

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Middleware for centralized error handling and logging."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            response = await call_next(request)
            return response
        except Exception as e:
            return render_internal_error(request, e)
