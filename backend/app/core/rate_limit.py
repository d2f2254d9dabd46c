"""In-memory per-client rate limiting for auth, booking and report endpoints."""

from __future__ import annotations

import logging
import time
from collections import defaultdict

from fastapi import HTTPException, Request, status

logger = logging.getLogger(__name__)


class RateLimiter:
    """Sliding-window limiter keyed by client IP.

    State lives in process memory, so limits apply per worker.
    """

    def __init__(self, name: str, max_requests: int = 5, window_seconds: int = 60):
        self.name = name
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._requests: dict[str, list[float]] = defaultdict(list)

    def _get_client_ip(self, request: Request) -> str:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
        return request.client.host if request.client else "unknown"

    def _cleanup(self, key: str, now: float) -> None:
        cutoff = now - self.window_seconds
        self._requests[key] = [t for t in self._requests[key] if t > cutoff]

    def check(self, request: Request) -> None:
        """Record the request, or raise 429 if the client is over its limit."""
        now = time.time()
        key = self._get_client_ip(request)
        self._cleanup(key, now)

        if len(self._requests[key]) >= self.max_requests:
            logger.warning("Rate limit %s exceeded for %s", self.name, key)
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail=f"Rate limit exceeded. Max {self.max_requests} requests per {self.window_seconds}s.",
            )

        self._requests[key].append(now)

    def reset(self) -> None:
        self._requests.clear()


auth_limiter = RateLimiter("auth", max_requests=10, window_seconds=60)
order_limiter = RateLimiter("orders", max_requests=20, window_seconds=60)
report_limiter = RateLimiter("reports", max_requests=5, window_seconds=60)
