"""
Request logging middleware.
Logs HTTP requests and responses for monitoring and debugging.
"""
import json
import logging
import time
from typing import Any, Dict, List, Optional

from fastapi import Request
from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from groq_proxy.utils.constants import WRITE_METHODS

logger = logging.getLogger(__name__)

SENSITIVE_FIELDS = {"password", "token", "secret", "api_key", "apikey", "authorization", "credit_card"}


def sanitize_body(body: Any) -> Any:
    """Redact sensitive top-level keys from a request body."""
    if isinstance(body, dict):
        return {
            key: "***REDACTED***" if key.lower() in SENSITIVE_FIELDS else value
            for key, value in body.items()
        }
    return body


class ResponseRecorder:
    """
    Wraps the ASGI ``send`` callable to observe the response being written.

    The wrapped application is unaware of the recorder. ``on_complete`` is
    invoked once, after the final body chunk has been handed to ``send``.
    """

    def __init__(self, send: Send, started_at: float, on_complete):
        self._send = send
        self._started_at = started_at
        self._on_complete = on_complete
        self._chunks: List[bytes] = []
        self.status_code: Optional[int] = None
        self.completed = False

    async def __call__(self, message: Message) -> None:
        if message["type"] == "http.response.start":
            self.status_code = message["status"]
            headers = MutableHeaders(scope=message)
            headers["X-Process-Time"] = str(time.time() - self._started_at)
            await self._send(message)
            return

        if message["type"] == "http.response.body":
            self._chunks.append(message.get("body", b""))
            await self._send(message)
            if not message.get("more_body", False) and not self.completed:
                self.completed = True
                self._on_complete(self)
            return

        await self._send(message)

    @property
    def body(self) -> bytes:
        return b"".join(self._chunks)


class RequestLoggingMiddleware:
    """Middleware for logging HTTP requests and responses."""

    def __init__(self, app: ASGIApp, ignore_paths: tuple = ()):
        self.app = app
        self.ignore_paths = ignore_paths

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["path"] in self.ignore_paths:
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        start_time = time.time()

        request_log = {
            "method": request.method,
            "url": self._get_url(request),
            "headers": {
                "content-type": request.headers.get("content-type"),
                "user-agent": request.headers.get("user-agent"),
                "x-forwarded-for": self._get_client_ip(request),
            },
        }
        if request.method in WRITE_METHODS:
            request_log["body"] = sanitize_body(getattr(request.state, "json_body", None))

        logger.info("Incoming request", extra=request_log)

        def log_response(recorder: ResponseRecorder) -> None:
            self._log_response(request, recorder.status_code, recorder.body, start_time)

        recorder = ResponseRecorder(send, start_time, log_response)
        try:
            await self.app(scope, receive, recorder)
        except Exception:
            # Nothing reached the client; the outer error handler will answer with a 500
            if not recorder.completed:
                recorder.completed = True
                self._log_response(request, 500, b"", start_time)
            raise

    def _log_response(self, request: Request, status_code: Optional[int], body: bytes, start_time: float) -> None:
        duration_ms = round((time.time() - start_time) * 1000, 2)
        response_log: Dict[str, Any] = {
            "method": request.method,
            "url": self._get_url(request),
            "status_code": status_code,
            "duration": f"{duration_ms}ms",
            "duration_ms": duration_ms,
            "response_size": len(body),
            "response": self._decode_body(body),
        }

        # Log level based on status code
        status_code = status_code or 0
        if status_code >= 500:
            logger.error("Outgoing response", extra=response_log)
        elif status_code >= 400:
            logger.warning("Outgoing response", extra=response_log)
        else:
            logger.info("Outgoing response", extra=response_log)

    @staticmethod
    def _decode_body(body: bytes) -> Any:
        if not body:
            return None
        try:
            return json.loads(body)
        except ValueError:
            return f"<{len(body)} bytes>"

    @staticmethod
    def _get_url(request: Request) -> str:
        query = request.url.query
        return f"{request.url.path}?{query}" if query else request.url.path

    def _get_client_ip(self, request: Request) -> str:
        """Extract client IP address from request."""
        # Check for forwarded headers (when behind proxy)
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()

        real_ip = request.headers.get("x-real-ip")
        if real_ip:
            return real_ip

        # Fallback to direct client
        if request.client:
            return request.client.host

        return "unknown"
