"""
Chat completion endpoints.

Proxies chat completions to the Groq API and exposes upstream health and
model information.
"""
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from groq_proxy.api.models import ErrorResponse, HealthStatus, ModelsResponse
from groq_proxy.controllers.chat_controller import ChatController
from groq_proxy.middleware.validation import validated_chat_body

# ============================================================================
# Dependency Injection
# ============================================================================


def get_chat_controller(request: Request) -> ChatController:
    """Dependency injection for ChatController."""
    return ChatController(request.app.state.groq_service, request.app.state.settings)


# ============================================================================
# Router
# ============================================================================

router = APIRouter(prefix="/chat")


# ============================================================================
# Endpoints
# ============================================================================


@router.post(
    "",
    status_code=status.HTTP_200_OK,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request or malformed JSON"},
        500: {"model": ErrorResponse, "description": "Groq API or internal error"},
        504: {"model": ErrorResponse, "description": "Groq API timed out"},
    },
)
@router.post("/", include_in_schema=False)
async def create_chat_completion(
    body: Dict[str, Any] = Depends(validated_chat_body),
    controller: ChatController = Depends(get_chat_controller),
) -> JSONResponse:
    """
    Create a chat completion using the Groq API.

    Accepts `{model?, messages, temperature?, top_p?, max_tokens?, ...}`.
    Fields other than the ones listed are forwarded to Groq untouched.
    Returns the Groq completion verbatim.
    """
    return await controller.create_chat_completion(body)


@router.get(
    "/health",
    responses={
        200: {"model": HealthStatus, "description": "Groq API reachable"},
        500: {"model": HealthStatus, "description": "Groq API unreachable"},
    },
)
async def chat_health(controller: ChatController = Depends(get_chat_controller)) -> JSONResponse:
    """Probe the Groq API with a one-token completion."""
    return await controller.health_check()


@router.get(
    "/models",
    responses={
        200: {"model": ModelsResponse},
        500: {"model": ErrorResponse, "description": "Model lookup failed"},
    },
)
async def list_models(controller: ChatController = Depends(get_chat_controller)) -> JSONResponse:
    return await controller.get_models()
