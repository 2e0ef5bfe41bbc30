"""
Chat request validation.

Structural checks on the parsed request body, run before the controller.
Each check stops at the first violation.
"""
import logging
from numbers import Real
from typing import Any, Dict

from fastapi import Request

from groq_proxy.utils.constants import ERROR_MESSAGES

logger = logging.getLogger(__name__)


class ChatValidationError(Exception):
    """An inbound chat request failed validation. Answered with a 400."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def _is_missing(value: Any) -> bool:
    # Empty strings, zero and false count as missing alongside absent values
    if value is None:
        return True
    if isinstance(value, (str, bool, int, float)):
        return not value
    return False


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _is_positive_integer(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return value > 0
    if isinstance(value, float):
        return value.is_integer() and value > 0
    return False


def validate_chat_request(body: Any) -> None:
    """
    Ensure ``messages`` is a non-empty list of role/content string pairs.

    Raises:
        ChatValidationError: On the first violation found
    """
    messages = body.get("messages") if isinstance(body, dict) else None

    if not isinstance(messages, list) or not messages:
        raise ChatValidationError(ERROR_MESSAGES["MESSAGES_REQUIRED"])

    for index, message in enumerate(messages):
        if not isinstance(message, dict):
            message = {}

        if _is_missing(message.get("role")) or _is_missing(message.get("content")):
            raise ChatValidationError(
                f"Message at index {index} is missing required fields (role, content)"
            )

        if not isinstance(message["role"], str) or not isinstance(message["content"], str):
            raise ChatValidationError(
                f"Message at index {index} has invalid field types "
                "(role and content must be strings)"
            )


def validate_chat_parameters(body: Dict[str, Any]) -> None:
    """
    Check the optional sampling parameters that are present in the body.

    Raises:
        ChatValidationError: On the first out-of-range or mistyped value
    """
    if "temperature" in body:
        temperature = body["temperature"]
        if not _is_number(temperature) or not 0 <= temperature <= 2:
            raise ChatValidationError("Temperature must be a number between 0 and 2")

    if "top_p" in body:
        top_p = body["top_p"]
        if not _is_number(top_p) or not 0 <= top_p <= 1:
            raise ChatValidationError("top_p must be a number between 0 and 1")

    if "max_tokens" in body and not _is_positive_integer(body["max_tokens"]):
        raise ChatValidationError("max_tokens must be a positive integer")

    if "model" in body and not isinstance(body["model"], str):
        raise ChatValidationError("model must be a string")


async def validated_chat_body(request: Request) -> Dict[str, Any]:
    """
    Dependency returning the parsed body of a valid chat request.

    The body is parsed once by JSONBodyMiddleware and read from request state.
    """
    body = getattr(request.state, "json_body", None)
    if body is None:
        body = {}

    try:
        validate_chat_request(body)
        validate_chat_parameters(body)
    except ChatValidationError as e:
        logger.warning(
            "Chat request validation failed",
            extra={"path": request.url.path, "method": request.method, "error": e.message},
        )
        raise

    return body
