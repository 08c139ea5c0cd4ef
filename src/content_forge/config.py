"""Runtime configuration for the ContentForge upload proxy.

Everything is read from environment variables. A ``.env`` file next to the
working directory is loaded first when present, so local development does
not need exported variables.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


# -----------------------------
# Defaults
# -----------------------------

WEBHOOK_URL_DEFAULT = "https://serbay.app.n8n.cloud/webhook/87f97854-d2b0-4c35-baf8-4ed9d48ef702"

# The webhook runs a long LLM pipeline; keep the read timeout generous.
WEBHOOK_TIMEOUT_SECONDS_DEFAULT = 300.0
WEBHOOK_CONNECT_TIMEOUT_SECONDS_DEFAULT = 10.0

# 40 polls every 3 seconds is two minutes.
POLL_INTERVAL_SECONDS_DEFAULT = 3.0
POLL_MAX_ATTEMPTS_DEFAULT = 40

STAGE_INTERVAL_SECONDS_DEFAULT = 8.0

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be a number, got {raw!r}")


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an integer, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    """Settings shared by the server and the Python clients.

    Attributes
    ----------
    webhook_url:
        Upstream automation webhook receiving the uploaded PDF.
    status_webhook_url:
        Optional upstream endpoint answering job status lookups. When it is
        ``None`` the status route reports that polling is not configured.
    timeout_seconds, connect_timeout_seconds:
        Bounds for every upstream call.
    poll_interval_seconds, poll_max_attempts:
        Status poll cadence and cap used by the page and by the CLI.
    stage_interval_seconds:
        How often the cosmetic progress label advances.
    """

    webhook_url: str = WEBHOOK_URL_DEFAULT
    status_webhook_url: Optional[str] = None
    timeout_seconds: float = WEBHOOK_TIMEOUT_SECONDS_DEFAULT
    connect_timeout_seconds: float = WEBHOOK_CONNECT_TIMEOUT_SECONDS_DEFAULT
    poll_interval_seconds: float = POLL_INTERVAL_SECONDS_DEFAULT
    poll_max_attempts: int = POLL_MAX_ATTEMPTS_DEFAULT
    stage_interval_seconds: float = STAGE_INTERVAL_SECONDS_DEFAULT
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        return cls(
            webhook_url=os.environ.get("WEBHOOK_URL", WEBHOOK_URL_DEFAULT),
            status_webhook_url=os.environ.get("STATUS_WEBHOOK_URL") or None,
            timeout_seconds=_env_float("WEBHOOK_TIMEOUT_SECONDS", WEBHOOK_TIMEOUT_SECONDS_DEFAULT),
            connect_timeout_seconds=_env_float(
                "WEBHOOK_CONNECT_TIMEOUT_SECONDS", WEBHOOK_CONNECT_TIMEOUT_SECONDS_DEFAULT
            ),
            poll_interval_seconds=_env_float("POLL_INTERVAL_SECONDS", POLL_INTERVAL_SECONDS_DEFAULT),
            poll_max_attempts=_env_int("POLL_MAX_ATTEMPTS", POLL_MAX_ATTEMPTS_DEFAULT),
            stage_interval_seconds=_env_float("STAGE_INTERVAL_SECONDS", STAGE_INTERVAL_SECONDS_DEFAULT),
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the server and the CLI."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )
