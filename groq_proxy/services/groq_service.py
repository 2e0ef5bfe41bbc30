"""
Groq API service.

Owns the single upstream client and the Groq credential. Every chat
completion, model lookup and health probe goes through this class.
"""
import logging
from typing import Any, Dict, List, Optional

from openai import APITimeoutError, AsyncOpenAI

from groq_proxy.api.models.health import HealthStatus
from groq_proxy.api.models.chat import ModelInfo
from groq_proxy.config.settings import Settings
from groq_proxy.services.exceptions import GroqAPIError, GroqTimeoutError, ModelLookupError
from groq_proxy.utils.constants import ERROR_MESSAGES
from groq_proxy.utils.timestamps import utc_timestamp

logger = logging.getLogger(__name__)

HEALTH_CHECK_MESSAGES = [{"role": "user", "content": "health check"}]


def _field(obj: Any, name: str, default: Any = None) -> Any:
    """Read a field from an SDK response object or a plain dict."""
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


def _plain(value: Any) -> Any:
    if hasattr(value, "model_dump"):
        return value.model_dump()
    return value


class GroqService:
    """Service for Groq chat completion operations."""

    def __init__(self, settings: Settings, client: Optional[AsyncOpenAI] = None):
        """
        Initialize the service.

        Args:
            settings: Application settings snapshot
            client: Pre-built upstream client; tests pass a stub here
        """
        self.settings = settings
        self.client = client or AsyncOpenAI(
            api_key=settings.groq_api_key or "not-configured",
            base_url=settings.groq_base_url,
            timeout=settings.groq_timeout_seconds,
            max_retries=0,
        )
        logger.info(
            "Groq service initialized",
            extra={
                "api_key_status": "Set" if settings.groq_api_key else "Not Set",
                "default_model": settings.default_model,
            },
        )

    def _build_payload(
        self,
        messages: List[Dict[str, Any]],
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        top_p: Optional[float] = None,
        **rest: Any,
    ) -> Dict[str, Any]:
        # Only absent values fall back; an explicit temperature/top_p of 0 is kept
        payload = {
            "model": model or self.settings.default_model,
            "messages": messages,
            "temperature": temperature if temperature is not None else self.settings.default_temperature,
            "top_p": top_p if top_p is not None else self.settings.default_top_p,
        }
        if rest:
            payload["extra_body"] = rest
        return payload

    async def create_chat_completion(
        self,
        messages: List[Dict[str, Any]],
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        top_p: Optional[float] = None,
        **rest: Any,
    ) -> Any:
        """
        Create a chat completion using the Groq API.

        Args:
            messages: Conversation messages, forwarded verbatim
            model: Model name, defaults to the configured model
            temperature: Sampling temperature (0-2)
            top_p: Nucleus sampling value (0-1)
            **rest: Any other completion parameters (max_tokens, stop, ...)

        Returns:
            The upstream completion, unchanged

        Raises:
            GroqTimeoutError: If the upstream call timed out
            GroqAPIError: If the upstream call failed for any other reason
        """
        payload = self._build_payload(messages, model, temperature, top_p, **rest)

        try:
            completion = await self.client.chat.completions.create(**payload)
        except Exception as e:
            logger.error(
                "Groq API error",
                extra={
                    "error": str(e),
                    "model": payload["model"],
                    "message_count": len(messages or []),
                },
                exc_info=True,
            )
            message = f"{ERROR_MESSAGES['GROQ_API_ERROR']}: {e}"
            if isinstance(e, APITimeoutError):
                raise GroqTimeoutError(message, original_error=e) from e
            status_code = getattr(e, "status_code", None) or getattr(e, "status", None) or 500
            raise GroqAPIError(message, status_code=status_code, original_error=e) from e

        if not completion:
            logger.warning("Groq API returned null/empty response")
            return completion

        logger.info(
            "Groq API call successful",
            extra={
                "model": _field(completion, "model"),
                "usage": _plain(_field(completion, "usage")),
                "choices": len(_field(completion, "choices") or []),
            },
        )
        return completion

    async def get_models(self) -> List[ModelInfo]:
        """
        Get available models.

        Groq model listing is not wired up yet, so this reports the
        configured default model only.

        Raises:
            ModelLookupError: If the model list cannot be built
        """
        try:
            logger.info("Fetching available models")
            return [
                ModelInfo(
                    id=self.settings.default_model,
                    name=self.settings.default_model,
                    description="Default Groq model",
                )
            ]
        except Exception as e:
            logger.error("Error fetching models", extra={"error": str(e)})
            raise ModelLookupError(ERROR_MESSAGES["MODELS_ERROR"]) from e

    async def health_check(self) -> HealthStatus:
        """Probe the upstream with a one-token completion. Never raises."""
        try:
            completion = await self.client.chat.completions.create(
                model=self.settings.default_model,
                messages=HEALTH_CHECK_MESSAGES,
                max_tokens=1,
            )
            return HealthStatus(
                status="healthy",
                model=_field(completion, "model"),
                timestamp=utc_timestamp(),
            )
        except Exception as e:
            logger.error("Groq service health check failed", extra={"error": str(e)})
            return HealthStatus(
                status="unhealthy",
                error=str(e),
                timestamp=utc_timestamp(),
            )

    async def close(self) -> None:
        """Release the upstream HTTP connection pool."""
        close = getattr(self.client, "close", None)
        if close is not None:
            await close()
