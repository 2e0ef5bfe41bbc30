"""
Chat controller.

Binds validated chat requests to the Groq service and maps results and
errors to HTTP responses.
"""
import logging
from typing import Any, Dict

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from groq_proxy.api.models.chat import ChatRequest, ModelsResponse
from groq_proxy.config.settings import Settings
from groq_proxy.services.groq_service import GroqService
from groq_proxy.utils.timestamps import utc_timestamp

logger = logging.getLogger(__name__)

SERVICE_TAG = "chat"


def _completion_body(completion: Any) -> Any:
    """Return the completion as Groq sent it, without SDK defaults filled in."""
    if hasattr(completion, "to_dict"):
        return completion.to_dict()
    return jsonable_encoder(completion)


class ChatController:
    """Controller for chat completion operations."""

    def __init__(self, service: GroqService, settings: Settings):
        self.service = service
        self.settings = settings

    async def create_chat_completion(self, body: Dict[str, Any]) -> JSONResponse:
        """
        Handle a chat completion request.

        Args:
            body: Request body that already passed validation

        Returns:
            200 with the upstream completion, or the classified error status
        """
        try:
            chat_request = ChatRequest.model_validate(body)
            completion = await self.service.create_chat_completion(**chat_request.to_completion_params())
            return JSONResponse(status_code=status.HTTP_200_OK, content=_completion_body(completion))

        except Exception as e:
            # Already logged by the service; just pick the status
            status_code = getattr(e, "status_code", None) or status.HTTP_500_INTERNAL_SERVER_ERROR
            content: Dict[str, Any] = {"error": getattr(e, "message", None) or str(e)}

            # Only include additional error details outside production
            if self.settings.is_development:
                original = getattr(e, "original_error", None)
                content["details"] = str(original) if original is not None else None
                content["timestamp"] = utc_timestamp()

            return JSONResponse(status_code=status_code, content=content)

    async def health_check(self) -> JSONResponse:
        """Report upstream reachability: 200 when healthy, 500 otherwise."""
        try:
            health = await self.service.health_check()
            status_code = (
                status.HTTP_200_OK
                if health.status == "healthy"
                else status.HTTP_500_INTERNAL_SERVER_ERROR
            )
            return JSONResponse(
                status_code=status_code,
                content={"service": SERVICE_TAG, **health.model_dump(exclude_none=True)},
            )
        except Exception as e:
            logger.error("Chat health check raised", extra={"error": str(e)})
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "service": SERVICE_TAG,
                    "status": "unhealthy",
                    "error": str(e),
                    "timestamp": utc_timestamp(),
                },
            )

    async def get_models(self) -> JSONResponse:
        try:
            models = await self.service.get_models()
            response = ModelsResponse(models=models, count=len(models), timestamp=utc_timestamp())
            return JSONResponse(status_code=status.HTTP_200_OK, content=response.model_dump())
        except Exception as e:
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": str(e), "timestamp": utc_timestamp()},
            )
