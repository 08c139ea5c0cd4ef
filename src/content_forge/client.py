"""Python client for the upload proxy, driving an ``UploadSession``."""

from __future__ import annotations

import logging
import time
from typing import Any, BinaryIO, Callable, Dict, Optional

import requests

from content_forge.session import PDF_CONTENT_TYPE, Status, UploadSession

logger = logging.getLogger(__name__)

UPLOAD_PATH = "/api/upload-document"
STATUS_PATH = "/api/check-status"

# The form field the webhook reads the binary from.
UPLOAD_FIELD = "data"


class ProxyError(Exception):
    """A proxy call that did not produce a usable JSON answer.

    The message starts with ``HTTP <status>`` when the proxy answered, so a
    gateway 524 is recognisable from the message alone.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def _error_from_response(resp: requests.Response) -> ProxyError:
    detail = resp.text
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        detail = body["error"]
    return ProxyError(f"HTTP {resp.status_code}: {detail or 'Failed to submit'}", resp.status_code)


class ProxyClient:
    """Thin ``requests`` wrapper around the two proxy routes.

    Parameters
    ----------
    base_url:
        Where the proxy runs, e.g. ``http://127.0.0.1:8000``.
    timeout:
        Seconds to wait for the upload answer. The webhook can be slow.
    """

    def __init__(self, base_url: str, timeout: float = 300.0, status_timeout: float = 20.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.status_timeout = status_timeout

    def submit(self, filename: str, fileobj: BinaryIO) -> Dict[str, Any]:
        files = {UPLOAD_FIELD: (filename, fileobj, PDF_CONTENT_TYPE)}
        try:
            resp = requests.post(self.base_url + UPLOAD_PATH, files=files, timeout=self.timeout)
        except requests.exceptions.ConnectionError as ex:
            # ConnectTimeout lands here too: nothing was uploaded, so it is fatal.
            raise ProxyError(f"Could not connect to {self.base_url}. Is the proxy running?") from ex
        except requests.exceptions.Timeout as ex:
            raise ProxyError(f"Request timeout: {ex}") from ex
        except requests.exceptions.RequestException as ex:
            raise ProxyError(f"Upload request failed: {ex}") from ex
        if not resp.ok:
            raise _error_from_response(resp)
        try:
            return resp.json()
        except ValueError as ex:
            raise ProxyError(f"Proxy answered with invalid JSON: {resp.text[:200]}", resp.status_code) from ex

    def check_status(self, job_id: str) -> Dict[str, Any]:
        try:
            resp = requests.get(
                self.base_url + STATUS_PATH,
                params={"jobId": job_id},
                timeout=self.status_timeout,
            )
        except requests.exceptions.RequestException as ex:
            raise ProxyError(str(ex)) from ex
        if not resp.ok:
            raise _error_from_response(resp)
        try:
            return resp.json()
        except ValueError as ex:
            raise ProxyError(f"Status answer was not JSON: {resp.text[:200]}", resp.status_code) from ex


def submit_document(session: UploadSession, client: ProxyClient, filename: str, fileobj: BinaryIO) -> Status:
    """Submit the selected file and apply the answer to ``session``."""
    if not session.begin_submit():
        return session.status
    try:
        payload = client.submit(filename, fileobj)
    except ProxyError as ex:
        logger.warning("Upload failed: %s", ex)
        return session.apply_submit_error(str(ex))
    return session.apply_submit_result(payload)


def poll_until_done(
    session: UploadSession,
    client: ProxyClient,
    interval: float,
    sleep: Callable[[float], None] = time.sleep,
    on_tick: Optional[Callable[[UploadSession], None]] = None,
) -> Status:
    """Poll the job in ``session`` until it completes, fails or hits the cap.

    Each tick waits ``interval`` seconds first, the way an interval timer
    fires. ``on_tick`` is called after every tick (the UIs use it to redraw).
    """
    while session.status is Status.POLLING:
        sleep(interval)
        try:
            payload = client.check_status(session.job_id)
        except ProxyError as ex:
            logger.warning("Polling error: %s", ex)
            session.apply_poll_error(str(ex))
        else:
            session.apply_poll_result(payload)
        if on_tick is not None:
            on_tick(session)
    return session.status
