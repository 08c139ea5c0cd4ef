import httpx
import pytest
from fastapi.testclient import TestClient

from content_forge.app import create_app
from content_forge.config import Settings

WEBHOOK = "https://hooks.example.test/upload"
STATUS_HOOK = "https://hooks.example.test/status"

PDF_FILES = {"data": ("brief.pdf", b"%PDF-1.4 fake brief", "application/pdf")}


def make_client(handler, **overrides):
    settings = Settings(webhook_url=WEBHOOK, **overrides)
    return TestClient(create_app(settings, transport=httpx.MockTransport(handler)))


def assert_cors(resp, methods="POST, OPTIONS"):
    assert resp.headers["access-control-allow-origin"] == "*"
    assert resp.headers["access-control-allow-methods"] == methods
    assert resp.headers["access-control-allow-headers"] == "Content-Type"


def test_body_is_forwarded_verbatim():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["content_type"] = request.headers["content-type"]
        seen["body"] = request.content
        return httpx.Response(200, json={"webViewLink": "https://drive.example/doc"})

    client = make_client(handler)
    resp = client.post("/api/upload-document", files=PDF_FILES)

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "data": {"webViewLink": "https://drive.example/doc"}}
    assert_cors(resp)
    assert seen["url"] == WEBHOOK
    assert seen["content_type"].startswith("multipart/form-data; boundary=")
    assert b'name="data"; filename="brief.pdf"' in seen["body"]
    assert b"%PDF-1.4 fake brief" in seen["body"]


def test_job_id_text_body_is_parsed_as_json():
    client = make_client(lambda request: httpx.Response(200, text='{"jobId": "J"}'))
    resp = client.post("/api/upload-document", files=PDF_FILES)
    assert resp.json() == {"success": True, "data": {"jobId": "J"}}


def test_plain_text_body_becomes_the_link():
    client = make_client(lambda request: httpx.Response(200, text="https://docs.google.com/d/abc"))
    resp = client.post("/api/upload-document", files=PDF_FILES)
    assert resp.json() == {"success": True, "data": {"webViewLink": "https://docs.google.com/d/abc"}}


def test_upstream_error_status_is_relayed():
    client = make_client(lambda request: httpx.Response(502, text="bad gateway"))
    resp = client.post("/api/upload-document", files=PDF_FILES)
    assert resp.status_code == 502
    assert resp.json() == {"error": "N8N webhook failed: bad gateway"}
    assert_cors(resp)


def test_declared_json_that_does_not_parse_is_a_500():
    def handler(request):
        return httpx.Response(200, content=b"<html>", headers={"content-type": "application/json"})

    client = make_client(handler)
    resp = client.post("/api/upload-document", files=PDF_FILES)
    assert resp.status_code == 500
    assert resp.json()["error"]
    assert_cors(resp)


def test_transport_error_is_a_500():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(handler)
    resp = client.post("/api/upload-document", files=PDF_FILES)
    assert resp.status_code == 500
    assert "Could not connect to the upstream webhook" in resp.json()["error"]
    assert_cors(resp)


def test_timeout_message_mentions_timeout():
    def handler(request):
        raise httpx.ReadTimeout("read timed out", request=request)

    client = make_client(handler, timeout_seconds=5)
    resp = client.post("/api/upload-document", files=PDF_FILES)
    assert resp.status_code == 500
    assert resp.json() == {"error": "Upstream webhook timeout after 5 seconds"}
    assert_cors(resp)


def test_empty_body_is_rejected_without_calling_upstream():
    def handler(request):
        raise AssertionError("upstream must not be called")

    client = make_client(handler)
    resp = client.post("/api/upload-document")
    assert resp.status_code == 400
    assert_cors(resp)
    assert client.get("/api/metrics").json()["failed_requests"] == 1


def test_preflight():
    client = make_client(lambda request: httpx.Response(200))
    resp = client.options("/api/upload-document")
    assert resp.status_code == 204
    assert resp.content == b""
    assert_cors(resp)
    assert resp.headers["access-control-max-age"] == "86400"


def test_metrics_count_upstream_calls():
    answers = iter([httpx.Response(200, json={"webViewLink": "L"}), httpx.Response(503, text="down")])
    client = make_client(lambda request: next(answers))
    client.post("/api/upload-document", files=PDF_FILES)
    client.post("/api/upload-document", files=PDF_FILES)

    snapshot = client.get("/api/metrics").json()
    assert snapshot["total_requests"] == 2
    assert snapshot["success_requests"] == 1
    assert snapshot["failed_requests"] == 1
    assert snapshot["last_error"] == "N8N webhook failed: down"


def test_status_requires_job_id():
    client = make_client(lambda request: httpx.Response(200), status_webhook_url=STATUS_HOOK)
    resp = client.get("/api/check-status")
    assert resp.status_code == 400


def test_status_not_configured():
    client = make_client(lambda request: httpx.Response(200))
    resp = client.get("/api/check-status", params={"jobId": "J"})
    assert resp.status_code == 501
    assert "STATUS_WEBHOOK_URL" in resp.json()["error"]


@pytest.mark.parametrize(
    "upstream, expected",
    [
        ({"status": "pending"}, {"status": "pending"}),
        ({"status": "completed", "data": {"webViewLink": "L"}}, {"status": "completed", "data": {"webViewLink": "L"}}),
        ({"status": "Completed", "webViewLink": "L"}, {"status": "completed", "data": {"webViewLink": "L"}}),
        ({"status": "failed"}, {"status": "failed"}),
        ({"status": "queued"}, {"status": "pending"}),
    ],
)
def test_status_is_normalized(upstream, expected):
    seen = {}

    def handler(request):
        seen["job"] = request.url.params["jobId"]
        seen["base"] = f"{request.url.scheme}://{request.url.host}{request.url.path}"
        return httpx.Response(200, json=upstream)

    client = make_client(handler, status_webhook_url=STATUS_HOOK)
    resp = client.get("/api/check-status", params={"jobId": "J"})

    assert resp.status_code == 200
    assert resp.json() == expected
    assert_cors(resp, methods="GET, OPTIONS")
    assert seen == {"job": "J", "base": STATUS_HOOK}


def test_status_upstream_error_is_relayed():
    client = make_client(lambda request: httpx.Response(404, text="no such job"), status_webhook_url=STATUS_HOOK)
    resp = client.get("/api/check-status", params={"jobId": "J"})
    assert resp.status_code == 404
    assert resp.json() == {"error": "Status webhook failed: no such job"}


def test_index_carries_poll_settings():
    client = make_client(lambda request: httpx.Response(200), poll_max_attempts=12)
    resp = client.get("/")
    assert resp.status_code == 200
    assert "ContentForgeAI" in resp.text
    assert '"pollMaxAttempts": 12' in resp.text
    assert '"pollIntervalMs": 3000' in resp.text
    assert "Finalizing your article..." in resp.text


def test_health():
    client = make_client(lambda request: httpx.Response(200))
    assert client.get("/health").json() == {"status": "ok"}


def test_status_preflight():
    client = make_client(lambda request: httpx.Response(200))
    resp = client.options("/api/check-status")
    assert resp.status_code == 204
    assert resp.content == b""
    assert_cors(resp, methods="GET, OPTIONS")
    assert resp.headers["access-control-max-age"] == "86400"


def test_status_errors_carry_cors():
    client = make_client(lambda request: httpx.Response(200))
    assert_cors(client.get("/api/check-status"), methods="GET, OPTIONS")
    assert_cors(client.get("/api/check-status", params={"jobId": "J"}), methods="GET, OPTIONS")


def test_page_stops_stage_ticker_on_transient_error():
    client = make_client(lambda request: httpx.Response(200))
    html = client.get("/").text
    transient = html.split('message.includes("timeout")) {', 1)[1].split("} else {", 1)[0]
    assert "clearInterval(stageTimer)" in transient
