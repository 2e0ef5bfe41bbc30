"""
Groq API Proxy
FastAPI application that forwards chat completions to Groq without exposing the API key.
"""
import asyncio
import logging
import os
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from groq_proxy.api.routers import api_router
from groq_proxy.config.cors import get_cors_options
from groq_proxy.config.logging_config import configure_logging
from groq_proxy.config.settings import ConfigurationError, Settings, get_settings
from groq_proxy.middleware.error_handling import (
    ErrorHandlingMiddleware,
    chat_validation_exception_handler,
    http_exception_handler,
    unhandled_exception_handler,
)
from groq_proxy.middleware.json_body import JSONBodyMiddleware
from groq_proxy.middleware.request_logging import RequestLoggingMiddleware
from groq_proxy.middleware.static_assets import StaticAssetsMiddleware
from groq_proxy.middleware.validation import ChatValidationError
from groq_proxy.services.groq_service import GroqService
from groq_proxy.utils.constants import SERVICE_CONFIG

logger = logging.getLogger(__name__)


def _handle_loop_exception(loop: asyncio.AbstractEventLoop, context: dict) -> None:
    """Unhandled asyncio errors are fatal: log them and exit."""
    exc = context.get("exception")
    logger.critical(
        "Unhandled asynchronous error",
        extra={"error": str(exc) if exc else context.get("message")},
        exc_info=(type(exc), exc, exc.__traceback__) if exc else None,
    )
    os._exit(1)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager."""
    # Startup
    settings: Settings = app.state.settings
    if not settings.is_test:
        asyncio.get_running_loop().set_exception_handler(_handle_loop_exception)
    logger.info(
        "Groq API Proxy started",
        extra={
            "port": settings.port,
            "environment": settings.environment,
            "default_model": settings.default_model,
        },
    )

    yield

    # Shutdown
    logger.info("Starting graceful shutdown...")
    await app.state.groq_service.close()
    logger.info("Graceful shutdown completed")


def create_app(settings: Optional[Settings] = None, groq_service: Optional[GroqService] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Settings snapshot; resolved from the environment when omitted
        groq_service: Upstream service; built from ``settings`` when omitted
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Groq API Proxy",
        description="Secure proxy backend for Groq AI API",
        version=SERVICE_CONFIG["VERSION"],
        lifespan=lifespan,
        redirect_slashes=False,
    )
    app.state.settings = settings
    app.state.groq_service = groq_service or GroqService(settings)

    # Middleware added last runs first. Request order:
    # JSON body -> CORS -> static assets -> logging -> error handling -> routes
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(StaticAssetsMiddleware, directory=settings.static_dir)
    app.add_middleware(CORSMiddleware, **get_cors_options(settings))
    app.add_middleware(JSONBodyMiddleware)

    app.add_exception_handler(ChatValidationError, chat_validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    # Failures in the outer middleware stages end up here
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(api_router)

    return app


def install_fatal_handlers() -> None:
    """Log uncaught exceptions before the process dies."""

    def excepthook(exc_type, exc, tb):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc, tb)
            return
        logger.critical("Uncaught exception", extra={"error": str(exc)}, exc_info=(exc_type, exc, tb))
        sys.exit(1)

    sys.excepthook = excepthook


def run() -> None:
    """Start the HTTP server. uvicorn drains in-flight requests on SIGTERM/SIGINT."""
    try:
        settings = get_settings()
    except ConfigurationError as e:
        logging.basicConfig(level=logging.ERROR)
        logger.error("Configuration Error: %s", e)
        sys.exit(1)

    configure_logging(settings)
    install_fatal_handlers()

    try:
        app = create_app(settings)
    except Exception as e:
        logger.error("Failed to start server", extra={"error": str(e)}, exc_info=True)
        sys.exit(1)

    logger.info(f"Groq API Proxy server listening at http://localhost:{settings.port}")
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        timeout_graceful_shutdown=30,
    )


if __name__ == "__main__":
    run()
