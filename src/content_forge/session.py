"""Upload session state machine.

The browser page keeps the same states in JavaScript; this module is the
Python rendition used by the CLI and the Streamlit frontend, and is where
the transitions are unit tested.

States::

    idle -> submitting -> completed
                       -> idle (with error)
                       -> polling -> completed | failed
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from content_forge.config import POLL_MAX_ATTEMPTS_DEFAULT

PDF_CONTENT_TYPE = "application/pdf"

STAGES: List[str] = [
    "Uploading your content brief...",
    "Analyzing document structure...",
    "Extracting key requirements...",
    "Researching top competitors...",
    "Optimizing for YMYL & SEO...",
    "Generating premium content...",
    "Finalizing your article...",
]

POLLING_STAGE = "Checking processing status..."
STILL_PROCESSING_STAGE = "Still processing - this may take up to 2 minutes..."

MSG_INVALID_SELECTED = "Please select a valid PDF file"
MSG_INVALID_DROPPED = "Please drop a valid PDF file"
MSG_NO_FILE = "Please select a file first"
MSG_STILL_PROCESSING = (
    "Processing is taking longer than expected. "
    "Your content is still being generated. Please wait..."
)
MSG_INVALID_RESPONSE = "Invalid response from server"
MSG_PROCESSING_FAILED = "Processing failed. Please try again."
MSG_POLL_TIMEOUT = "Processing timeout. Please contact support."

TRANSIENT_MARKERS = ("524", "timeout")


class Status(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    POLLING = "polling"
    COMPLETED = "completed"
    FAILED = "failed"


class InvalidTransition(RuntimeError):
    """Raised when an event arrives in a state that cannot accept it."""


def is_transient_error(message: str) -> bool:
    """Return True for errors that mean "still working" rather than "failed".

    Gateways in front of the webhook cut long requests with a 524 while the
    workflow keeps running, so such errors are not fatal.

    >>> is_transient_error("HTTP 524: A timeout occurred")
    True
    >>> is_transient_error("HTTP 502: bad gateway")
    False
    """
    return any(marker in message for marker in TRANSIENT_MARKERS)


def extract_job_id(payload: Dict[str, Any]) -> Optional[str]:
    """Find a job identifier in a proxy response envelope.

    The webhook result is wrapped as ``{"success": true, "data": ...}``, but
    a bare ``{"jobId": ...}`` is accepted as well.
    """
    data = payload.get("data")
    if isinstance(data, dict) and data.get("jobId"):
        return str(data["jobId"])
    if payload.get("jobId"):
        return str(payload["jobId"])
    return None


def extract_link(payload: Dict[str, Any]) -> Optional[str]:
    data = payload.get("data")
    if isinstance(data, dict) and data.get("webViewLink"):
        return str(data["webViewLink"])
    return None


@dataclass
class UploadSession:
    """State of one upload, from file selection to result link."""

    max_attempts: int = POLL_MAX_ATTEMPTS_DEFAULT
    status: Status = Status.IDLE
    file_name: Optional[str] = None
    file_size: Optional[int] = None
    error: str = ""
    stage: str = ""
    result_link: str = ""
    job_id: str = ""
    polling_attempts: int = 0

    @property
    def has_file(self) -> bool:
        return self.file_name is not None

    @property
    def is_busy(self) -> bool:
        return self.status in (Status.SUBMITTING, Status.POLLING)

    def select_file(self, name: str, size: int, content_type: Optional[str], dropped: bool = False) -> bool:
        """Accept a picked or dropped file if it is declared as a PDF.

        A rejected file only sets the error; the previously selected file,
        if any, stays selected.
        """
        if content_type != PDF_CONTENT_TYPE:
            self.error = MSG_INVALID_DROPPED if dropped else MSG_INVALID_SELECTED
            return False
        self.file_name = name
        self.file_size = size
        self.error = ""
        return True

    def begin_submit(self) -> bool:
        if not self.has_file:
            self.error = MSG_NO_FILE
            return False
        if self.is_busy:
            raise InvalidTransition(f"cannot submit while {self.status.value}")
        self.status = Status.SUBMITTING
        self.error = ""
        self.stage = STAGES[0]
        return True

    def advance_stage(self) -> str:
        """Move the cosmetic progress label one step; it stops at the last one."""
        if self.status is not Status.SUBMITTING:
            return self.stage
        try:
            index = STAGES.index(self.stage)
        except ValueError:
            return self.stage
        if index < len(STAGES) - 1:
            self.stage = STAGES[index + 1]
        return self.stage

    def apply_submit_result(self, payload: Dict[str, Any]) -> Status:
        self._require(Status.SUBMITTING)
        link = extract_link(payload)
        if link:
            self._complete(link)
            return self.status
        job_id = extract_job_id(payload)
        if job_id:
            self.job_id = job_id
            self.polling_attempts = 0
            self.status = Status.POLLING
            self.stage = POLLING_STAGE
            return self.status
        return self.apply_submit_error(MSG_INVALID_RESPONSE)

    def apply_submit_error(self, message: str) -> Status:
        self._require(Status.SUBMITTING)
        if is_transient_error(message):
            self.error = MSG_STILL_PROCESSING
            self.stage = STILL_PROCESSING_STAGE
            return self.status
        self.error = f"Failed to submit: {message}. Please try again."
        self.status = Status.IDLE
        self.stage = ""
        return self.status

    def apply_poll_result(self, payload: Dict[str, Any]) -> Status:
        """Handle one status response; returns the status after the tick."""
        self._require(Status.POLLING)
        status = str(payload.get("status", "")).lower()
        data = payload.get("data")
        link = data.get("webViewLink") if isinstance(data, dict) else None
        if status == "completed" and link:
            self._complete(str(link))
        elif status == "failed":
            self._fail(MSG_PROCESSING_FAILED)
        else:
            self._count_attempt()
        return self.status

    def apply_poll_error(self, message: str) -> Status:
        """A failed status request still uses up one attempt."""
        self._require(Status.POLLING)
        self._count_attempt()
        return self.status

    def reset(self) -> None:
        self.status = Status.IDLE
        self.file_name = None
        self.file_size = None
        self.error = ""
        self.stage = ""
        self.result_link = ""
        self.job_id = ""
        self.polling_attempts = 0

    def _count_attempt(self) -> None:
        self.polling_attempts += 1
        if self.polling_attempts >= self.max_attempts:
            self._fail(MSG_POLL_TIMEOUT)

    def _complete(self, link: str) -> None:
        self.result_link = link
        self.status = Status.COMPLETED
        self.stage = ""
        self.error = ""

    def _fail(self, message: str) -> None:
        self.error = message
        self.status = Status.FAILED
        self.stage = ""

    def _require(self, status: Status) -> None:
        if self.status is not status:
            raise InvalidTransition(f"expected {status.value}, session is {self.status.value}")
