"""
ContentForgeAI upload proxy.

Serves the single upload page and relays the uploaded PDF brief to the
n8n automation webhook that writes the article. The webhook answers either
with a Google Drive link (``webViewLink``) right away or with a ``jobId``
that the page polls through ``/api/check-status``.

Run locally with::

    uvicorn content_forge.app:app --port 8000

or ``content-forge-server``.
"""

from __future__ import annotations

import logging
import os
import time
from typing import Any, Dict, Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, Response

from content_forge.config import Settings, configure_logging
from content_forge.metrics import Metrics
from content_forge.page import render_index
from content_forge.proxy import WebhookProxy, cors_headers, describe_transport_error

logger = logging.getLogger(__name__)

UPLOAD_METHODS = "POST, OPTIONS"
STATUS_METHODS = "GET, OPTIONS"


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Build the application.

    Parameters
    ----------
    settings:
        Configuration; read from the environment when omitted.
    transport:
        Optional ``httpx`` transport for the upstream calls.

    Returns
    -------
    FastAPI
        The configured application.
    """
    settings = settings or Settings.from_env()
    app = FastAPI(title="ContentForgeAI upload proxy")
    app.state.settings = settings
    app.state.metrics = Metrics()
    app.state.proxy = WebhookProxy(settings, transport=transport)

    # -----------------------------
    # Page
    # -----------------------------

    @app.get("/", response_class=HTMLResponse)
    async def index() -> str:
        """Render the single-page UI."""
        return render_index(settings)

    @app.get("/health")
    async def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/metrics")
    async def api_metrics() -> Dict[str, Any]:
        """Return a snapshot of operational metrics."""
        return await app.state.metrics.snapshot()

    # -----------------------------
    # Upload proxy
    # -----------------------------

    @app.post("/api/upload-document")
    async def upload_document(request: Request) -> JSONResponse:
        """Forward the multipart body to the webhook and relay its answer."""
        headers = cors_headers(UPLOAD_METHODS)
        metrics: Metrics = app.state.metrics
        t0 = time.perf_counter()
        try:
            body = await request.body()
            if not body:
                msg = "Request body was empty. Please upload a PDF file."
                await metrics.record_failure(latency_ms=None, error=msg)
                return JSONResponse(
                    status_code=400,
                    content={"error": msg},
                    headers=headers,
                )

            result = await app.state.proxy.forward_upload(body, request.headers.get("content-type"))
            if not result.ok:
                msg = f"N8N webhook failed: {result.error_text}"
                await metrics.record_failure(latency_ms=result.latency_ms, error=msg)
                return JSONResponse(status_code=result.status_code, content={"error": msg}, headers=headers)

            await metrics.record_success(latency_ms=result.latency_ms)
            return JSONResponse(content={"success": True, "data": result.data}, headers=headers)
        except Exception as ex:
            logger.exception("Proxy error")
            latency_ms = (time.perf_counter() - t0) * 1000.0
            msg = describe_transport_error(ex, settings)
            await metrics.record_failure(latency_ms=latency_ms, error=msg)
            return JSONResponse(status_code=500, content={"error": msg}, headers=headers)

    @app.options("/api/upload-document")
    async def upload_document_preflight() -> Response:
        return Response(status_code=204, headers=cors_headers(UPLOAD_METHODS, preflight=True))

    # -----------------------------
    # Job status
    # -----------------------------

    @app.get("/api/check-status")
    async def check_status(jobId: Optional[str] = None) -> JSONResponse:
        """Look up an asynchronous job on the status webhook."""
        headers = cors_headers(STATUS_METHODS)
        if not jobId or not jobId.strip():
            return JSONResponse(status_code=400, content={"error": "Missing jobId query parameter."}, headers=headers)
        if not settings.status_webhook_url:
            return JSONResponse(
                status_code=501,
                content={"error": "Status endpoint is not configured. Set STATUS_WEBHOOK_URL."},
                headers=headers,
            )

        await app.state.metrics.record_status_check()
        try:
            result = await app.state.proxy.check_status(jobId.strip())
        except Exception as ex:
            logger.exception("Status check failed for job %s", jobId)
            return JSONResponse(
                status_code=500,
                content={"error": describe_transport_error(ex, settings)},
                headers=headers,
            )

        if not result.ok:
            return JSONResponse(
                status_code=result.status_code,
                content={"error": f"Status webhook failed: {result.error_text}"},
                headers=headers,
            )
        return JSONResponse(content=result.data, headers=headers)

    @app.options("/api/check-status")
    async def check_status_preflight() -> Response:
        return Response(status_code=204, headers=cors_headers(STATUS_METHODS, preflight=True))

    return app


app = create_app()


def main() -> None:
    """Console entry point: run the proxy with uvicorn."""
    import uvicorn

    settings: Settings = app.state.settings
    configure_logging(settings.log_level)
    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", 8000)))


if __name__ == "__main__":
    main()
