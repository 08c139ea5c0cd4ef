"""Forwarding of uploads and status lookups to the upstream webhooks."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from content_forge.config import Settings

logger = logging.getLogger(__name__)


# -----------------------------
# CORS
# -----------------------------

PREFLIGHT_MAX_AGE_SECONDS = 86400


def cors_headers(methods: str = "POST, OPTIONS", preflight: bool = False) -> Dict[str, str]:
    """Permissive CORS headers for the API routes.

    >>> cors_headers()["Access-Control-Allow-Origin"]
    '*'
    >>> cors_headers(preflight=True)["Access-Control-Max-Age"]
    '86400'
    """
    headers = {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Methods": methods,
        "Access-Control-Allow-Headers": "Content-Type",
    }
    if preflight:
        headers["Access-Control-Max-Age"] = str(PREFLIGHT_MAX_AGE_SECONDS)
    return headers


# -----------------------------
# Upstream results
# -----------------------------

@dataclass
class UpstreamResult:
    """Outcome of one upstream call.

    Exactly one of ``data`` (2xx) and ``error_text`` (non-2xx) is set.
    """

    status_code: int
    latency_ms: float
    data: Optional[Any] = None
    error_text: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error_text is None


def parse_upstream_body(response: httpx.Response) -> Any:
    """Interpret a successful webhook body.

    JSON is parsed when declared. Otherwise the text is tried as JSON, and
    anything that is not JSON is taken to be the result link itself.

    Raises
    ------
    ValueError
        If the body is declared as JSON but does not parse.
    """
    content_type = response.headers.get("content-type", "")
    if "application/json" in content_type:
        return response.json()
    text = response.text
    try:
        return json.loads(text)
    except ValueError:
        return {"webViewLink": text}


def normalize_status(payload: Any) -> Dict[str, Any]:
    """Reduce a status webhook answer to ``{"status": ..., "data": {...}}``.

    >>> normalize_status({"status": "COMPLETED", "webViewLink": "https://x"})
    {'status': 'completed', 'data': {'webViewLink': 'https://x'}}
    >>> normalize_status({"state": "running"})
    {'status': 'pending'}
    """
    if not isinstance(payload, dict):
        return {"status": "pending"}
    status = str(payload.get("status") or "").lower()
    if status not in ("pending", "completed", "failed"):
        status = "pending"
    result: Dict[str, Any] = {"status": status}
    data = payload.get("data")
    link = None
    if isinstance(data, dict):
        link = data.get("webViewLink")
    link = link or payload.get("webViewLink")
    if link:
        result["data"] = {"webViewLink": link}
    return result


def describe_transport_error(ex: Exception, settings: Settings) -> str:
    """Turn a low-level exception into a short message for the page.

    Timeouts always mention "timeout" so the page keeps waiting instead of
    reporting a failure.
    """
    if isinstance(ex, httpx.TimeoutException):
        return f"Upstream webhook timeout after {settings.timeout_seconds:g} seconds"
    if isinstance(ex, httpx.ConnectError):
        return f"Could not connect to the upstream webhook: {ex}"
    return str(ex) or type(ex).__name__


# -----------------------------
# Upstream calls
# -----------------------------

class WebhookProxy:
    """Calls the upload and status webhooks.

    Parameters
    ----------
    settings:
        Upstream URLs and timeouts.
    transport:
        Optional ``httpx`` transport, used instead of the network (tests pass
        an ``httpx.MockTransport``).
    """

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        timeout = httpx.Timeout(
            self.settings.timeout_seconds,
            connect=self.settings.connect_timeout_seconds,
        )
        return httpx.AsyncClient(timeout=timeout, transport=self.transport)

    async def forward_upload(self, body: bytes, content_type: Optional[str]) -> UpstreamResult:
        """POST the multipart body, unchanged, to the upload webhook."""
        headers = {}
        if content_type:
            headers["Content-Type"] = content_type

        t0 = time.perf_counter()
        async with self._client() as client:
            resp = await client.post(self.settings.webhook_url, content=body, headers=headers)
        latency_ms = (time.perf_counter() - t0) * 1000.0

        if not resp.is_success:
            logger.warning("Upload webhook answered %s after %.0f ms", resp.status_code, latency_ms)
            return UpstreamResult(resp.status_code, latency_ms, error_text=resp.text)

        logger.info(
            "Forwarded %d bytes, webhook answered %s after %.0f ms",
            len(body),
            resp.status_code,
            latency_ms,
        )
        return UpstreamResult(resp.status_code, latency_ms, data=parse_upstream_body(resp))

    async def check_status(self, job_id: str) -> UpstreamResult:
        """GET the status webhook for ``job_id`` and normalize its answer."""
        if not self.settings.status_webhook_url:
            raise RuntimeError("status webhook is not configured")

        t0 = time.perf_counter()
        async with self._client() as client:
            resp = await client.get(self.settings.status_webhook_url, params={"jobId": job_id})
        latency_ms = (time.perf_counter() - t0) * 1000.0

        if not resp.is_success:
            logger.warning("Status webhook answered %s for job %s", resp.status_code, job_id)
            return UpstreamResult(resp.status_code, latency_ms, error_text=resp.text)

        status = normalize_status(parse_upstream_body(resp))
        logger.debug("Job %s is %s", job_id, status["status"])
        return UpstreamResult(resp.status_code, latency_ms, data=status)
