"""
JSON body parsing middleware.
Parses request bodies once and rejects malformed JSON before anything else runs.
"""
import json
import logging
from typing import Callable

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from groq_proxy.utils.constants import ERROR_MESSAGES, WRITE_METHODS

logger = logging.getLogger(__name__)


def _is_json_request(request: Request) -> bool:
    content_type = request.headers.get("content-type", "")
    media_type = content_type.split(";")[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


class JSONBodyMiddleware(BaseHTTPMiddleware):
    """
    Parses JSON request bodies into ``request.state.json_body``.

    Requests without a JSON body get an empty dict. Only objects and arrays
    are accepted at the top level.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request.state.json_body = {}

        if request.method in WRITE_METHODS and _is_json_request(request):
            body_bytes = await request.body()
            if body_bytes.strip():
                try:
                    parsed = json.loads(body_bytes)
                    if not isinstance(parsed, (dict, list)):
                        raise ValueError(f"Unexpected top-level JSON value: {type(parsed).__name__}")
                except ValueError as e:
                    logger.warning(
                        "JSON parsing error",
                        extra={
                            "error": str(e),
                            "method": request.method,
                            "url": str(request.url),
                            "headers": {
                                "content-type": request.headers.get("content-type"),
                                "user-agent": request.headers.get("user-agent"),
                            },
                        },
                    )
                    return JSONResponse(
                        status_code=status.HTTP_400_BAD_REQUEST,
                        content={"error": ERROR_MESSAGES["JSON_PARSE_ERROR"]},
                    )
                request.state.json_body = parsed

        return await call_next(request)
