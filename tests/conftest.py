"""Shared fixtures: a test-mode app wired to a stubbed Groq client."""

import logging
import time
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from groq_proxy.config.settings import Settings
from groq_proxy.main import create_app
from groq_proxy.services.groq_service import GroqService


# ── Helpers ──────────────────────────────────────────────────

def make_completion(
    model: str = "llama-3.1-8b-instant",
    content: str = "This is a mocked response.",
    completion_id: str = "chatcmpl-test",
) -> Dict[str, Any]:
    return {
        "id": completion_id,
        "object": "chat.completion",
        "created": int(time.time()),
        "model": model,
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
        "usage": {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15},
    }


def groq_completion_json() -> Dict[str, Any]:
    """A chat completion exactly as Groq returns it on the wire."""
    return {
        "id": "chatcmpl-4f1c",
        "object": "chat.completion",
        "created": 1730000000,
        "model": "llama-3.1-8b-instant",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": "hi"},
                "logprobs": None,
                "finish_reason": "stop",
            }
        ],
        "usage": {
            "queue_time": 0.01,
            "prompt_tokens": 12,
            "prompt_time": 0.002,
            "completion_tokens": 2,
            "completion_time": 0.003,
            "total_tokens": 14,
            "total_time": 0.005,
        },
        "x_groq": {"id": "req_01abc"},
    }


async def echo_completion(**params: Any) -> Dict[str, Any]:
    """Stub upstream that answers with the requested model."""
    return make_completion(model=params["model"])


def make_stub_client(create: Optional[AsyncMock] = None) -> MagicMock:
    client = MagicMock()
    client.chat.completions.create = create or AsyncMock(side_effect=echo_completion)
    client.close = AsyncMock()
    return client


def make_settings(**overrides: Any) -> Settings:
    values = {
        "environment": "test",
        "groq_api_key": "gsk_test",
        "static_dir": "does-not-exist",
    }
    values.update(overrides)
    return Settings(**values)


def valid_body(**overrides: Any) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "model": "llama-3.1-8b-instant",
        "messages": [{"role": "user", "content": "hi"}],
    }
    body.update(overrides)
    return body


def records_with_message(caplog, message: str) -> List[logging.LogRecord]:
    return [record for record in caplog.records if record.getMessage() == message]


# ── Fixtures ─────────────────────────────────────────────────

@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def stub_client() -> MagicMock:
    return make_stub_client()


@pytest.fixture
def groq_service(settings, stub_client) -> GroqService:
    return GroqService(settings, client=stub_client)


@pytest.fixture
def app(settings, groq_service):
    return create_app(settings, groq_service)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(autouse=True)
def _capture_package_logs(caplog):
    caplog.set_level(logging.DEBUG, logger="groq_proxy")
    yield
