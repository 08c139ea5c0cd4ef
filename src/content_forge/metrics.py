"""In-memory operational metrics for upstream webhook calls."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class Metrics:
    """Counters for briefs relayed to the n8n webhook.

    Notes
    -----
    ``total_requests`` counts every upload the proxy answered, including
    uploads rejected before reaching the webhook (latency ``None``).
    Status lookups only bump ``status_requests``; their latency is not
    tracked because the page polls them every few seconds.
    """

    total_requests: int = 0
    success_requests: int = 0
    failed_requests: int = 0
    status_requests: int = 0
    last_latency_ms: Optional[float] = None
    latency_ms_sum: float = 0.0
    latency_ms_count: int = 0
    last_error: Optional[str] = None
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    async def record_success(self, latency_ms: float) -> None:
        async with self.lock:
            self.total_requests += 1
            self.success_requests += 1
            self.last_latency_ms = latency_ms
            self.latency_ms_sum += latency_ms
            self.latency_ms_count += 1
            self.last_error = None

    async def record_failure(self, latency_ms: Optional[float], error: str) -> None:
        async with self.lock:
            self.total_requests += 1
            self.failed_requests += 1
            self.last_latency_ms = latency_ms
            self.last_error = error

    async def record_status_check(self) -> None:
        async with self.lock:
            self.status_requests += 1

    async def snapshot(self) -> Dict[str, Any]:
        async with self.lock:
            avg = None
            if self.latency_ms_count > 0:
                avg = self.latency_ms_sum / self.latency_ms_count
            return {
                "total_requests": self.total_requests,
                "success_requests": self.success_requests,
                "failed_requests": self.failed_requests,
                "status_requests": self.status_requests,
                "last_latency_ms": self.last_latency_ms,
                "avg_latency_ms": avg,
                "last_error": self.last_error,
            }
