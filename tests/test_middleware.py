"""Tests for the request pipeline stages.

Covers JSON body parsing, request/response logging, the global error
handler, the route-not-found fallback, CORS and static assets.
"""


import pytest
from fastapi.testclient import TestClient

from conftest import make_settings, make_stub_client, records_with_message, valid_body
from groq_proxy.main import create_app
from groq_proxy.middleware.request_logging import sanitize_body
from groq_proxy.services.groq_service import GroqService


def _build_client(**settings_overrides) -> TestClient:
    settings = make_settings(**settings_overrides)
    app = create_app(settings, GroqService(settings, client=make_stub_client()))

    async def boom():
        raise RuntimeError("kaboom")

    app.add_api_route("/boom", boom, methods=["GET"])
    return TestClient(app)


# ── JSON body parsing ────────────────────────────────────────

class TestJSONBody:
    @pytest.mark.parametrize("raw", ['{"messages": [', "not json", '"just a string"', "42"])
    def test_malformed_body_rejected(self, client, stub_client, raw):
        resp = client.post("/chat", content=raw, headers={"content-type": "application/json"})

        assert resp.status_code == 400
        assert resp.json() == {"error": "Failed to parse JSON body."}
        stub_client.chat.completions.create.assert_not_called()

    def test_malformed_body_never_reaches_logging_or_validation(self, client, caplog):
        client.post("/chat", content="{bad", headers={"content-type": "application/json"})

        assert records_with_message(caplog, "JSON parsing error")
        assert not records_with_message(caplog, "Incoming request")
        assert not records_with_message(caplog, "Chat request validation failed")

    def test_empty_json_body_treated_as_empty_object(self, client):
        resp = client.post("/chat", content="", headers={"content-type": "application/json"})

        assert resp.status_code == 400
        assert resp.json() == {"error": "Messages are required."}

    def test_non_json_content_type_ignored(self, client):
        resp = client.post("/chat", content="hello", headers={"content-type": "text/plain"})

        assert resp.status_code == 400
        assert resp.json() == {"error": "Messages are required."}


# ── Request/response logging ─────────────────────────────────

class TestRequestLogging:
    def test_one_incoming_and_one_outgoing_record(self, client, caplog):
        client.post("/chat", json=valid_body())

        incoming = records_with_message(caplog, "Incoming request")
        outgoing = records_with_message(caplog, "Outgoing response")
        assert len(incoming) == 1
        assert len(outgoing) == 1
        assert caplog.records.index(incoming[0]) < caplog.records.index(outgoing[0])

    def test_incoming_record_fields(self, client, caplog):
        client.post("/chat", json=valid_body(), headers={"user-agent": "pytest", "x-forwarded-for": "10.0.0.1, 10.0.0.2"})

        [record] = records_with_message(caplog, "Incoming request")
        assert record.method == "POST"
        assert record.url == "/chat"
        assert record.headers["user-agent"] == "pytest"
        assert record.headers["x-forwarded-for"] == "10.0.0.1"
        assert record.body == valid_body()

    def test_get_requests_do_not_log_body(self, client, caplog):
        client.get("/health")

        [record] = records_with_message(caplog, "Incoming request")
        assert not hasattr(record, "body")

    def test_outgoing_record_captures_response(self, client, caplog):
        resp = client.post("/chat", json=valid_body())

        [record] = records_with_message(caplog, "Outgoing response")
        assert record.status_code == 200
        assert record.response == resp.json()
        assert record.response_size == len(resp.content)
        assert record.duration.endswith("ms")

    def test_validation_failure_logged_once_at_warning(self, client, caplog):
        client.post("/chat", json={"messages": []})

        [record] = records_with_message(caplog, "Outgoing response")
        assert record.status_code == 400
        assert record.levelname == "WARNING"

    def test_not_found_logged_once(self, client, caplog):
        client.get("/nope")

        assert len(records_with_message(caplog, "Outgoing response")) == 1

    def test_process_time_header_added(self, client):
        resp = client.get("/health")
        assert "x-process-time" in resp.headers

    def test_sensitive_fields_redacted(self):
        body = {"messages": [], "api_key": "gsk_secret", "Password": "hunter2"}
        assert sanitize_body(body) == {
            "messages": [],
            "api_key": "***REDACTED***",
            "Password": "***REDACTED***",
        }


# ── Global error handler ─────────────────────────────────────

class TestErrorHandling:
    def test_unhandled_error_verbose_outside_production(self, caplog):
        client = _build_client(environment="development")

        resp = client.get("/boom")

        body = resp.json()
        assert resp.status_code == 500
        assert body["error"] == "Internal server error"
        assert body["details"] == "kaboom"
        assert "RuntimeError" in body["stack"]
        [record] = records_with_message(caplog, "Unhandled error")
        assert record.exc_info is not None

    def test_unhandled_error_terse_in_production(self):
        client = _build_client(environment="production")

        resp = client.get("/boom")

        assert resp.status_code == 500
        assert resp.json() == {"error": "Internal server error"}

    def test_unhandled_error_response_is_logged(self, caplog):
        client = _build_client()

        client.get("/boom")

        [record] = records_with_message(caplog, "Outgoing response")
        assert record.status_code == 500
        assert record.levelname == "ERROR"


# ── Route not found ──────────────────────────────────────────

class TestNotFound:
    def test_unknown_route(self, client):
        resp = client.get("/does/not/exist")

        assert resp.status_code == 404
        assert resp.json() == {"error": "Route not found", "path": "/does/not/exist", "method": "GET"}

    def test_query_string_kept_in_path(self, client):
        resp = client.delete("/missing?x=1")

        assert resp.json() == {"error": "Route not found", "path": "/missing?x=1", "method": "DELETE"}

    def test_wrong_method_on_known_path(self, client):
        resp = client.get("/chat")

        assert resp.status_code == 404
        assert resp.json()["error"] == "Route not found"

    def test_not_found_logged_as_warning(self, client, caplog):
        client.get("/nope")

        [record] = records_with_message(caplog, "Route not found")
        assert record.levelname == "WARNING"


# ── CORS ─────────────────────────────────────────────────────

class TestCORS:
    def test_preflight_allowed_in_development(self, client):
        resp = client.options(
            "/chat",
            headers={
                "origin": "http://localhost:5173",
                "access-control-request-method": "POST",
                "access-control-request-headers": "Content-Type",
            },
        )

        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == "*"
        assert "access-control-allow-credentials" not in resp.headers

    def test_production_restricts_origins(self):
        client = _build_client(environment="production", allowed_origins="https://app.example")

        allowed = client.get("/health", headers={"origin": "https://app.example"})
        denied = client.get("/health", headers={"origin": "https://evil.example"})

        assert allowed.headers["access-control-allow-origin"] == "https://app.example"
        assert "access-control-allow-origin" not in denied.headers


# ── Static assets ────────────────────────────────────────────

class TestStaticAssets:
    def test_existing_file_served_without_request_logging(self, tmp_path, caplog):
        (tmp_path / "index.html").write_text("<h1>chat</h1>")
        client = _build_client(static_dir=str(tmp_path))

        resp = client.get("/index.html")

        assert resp.status_code == 200
        assert resp.text == "<h1>chat</h1>"
        assert not records_with_message(caplog, "Incoming request")

    def test_missing_file_falls_through_to_routes(self, tmp_path):
        client = _build_client(static_dir=str(tmp_path))

        assert client.get("/health").status_code == 200
        assert client.get("/missing.css").status_code == 404

    def test_traversal_outside_directory_rejected(self, tmp_path):
        public = tmp_path / "public"
        public.mkdir()
        (tmp_path / "secret.txt").write_text("secret")
        client = _build_client(static_dir=str(public))

        resp = client.get("/../secret.txt")

        assert resp.status_code == 404

    @pytest.mark.parametrize("path", ["/a%00b", "/" + "x" * 5000])
    def test_unusable_file_names_fall_through_to_routes(self, tmp_path, caplog, path):
        client = _build_client(static_dir=str(tmp_path))

        resp = client.get(path)

        assert resp.status_code == 404
        assert resp.json()["error"] == "Route not found"
        assert len(records_with_message(caplog, "Outgoing response")) == 1
