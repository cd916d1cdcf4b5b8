"""Middleware for request logging, timing, and repeated auth failure detection."""

import logging
import time
import uuid
from collections import deque
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app import config

logger = logging.getLogger("jokes_api.http")


class AuthFailureTracker:
    """Sliding-window count of rejected API keys per client IP."""

    def __init__(
        self,
        window: Optional[float] = None,
        threshold: Optional[int] = None,
    ):
        if window is None:
            window = config.AUTH_FAILURE_WINDOW
        if threshold is None:
            threshold = config.AUTH_FAILURE_THRESHOLD
        self.window = window
        self.threshold = threshold
        self._failures: dict[str, deque] = {}

    def __len__(self) -> int:
        """Number of client IPs with failures inside the window."""
        return len(self._failures)

    def record(self, client_ip: str, now: Optional[float] = None) -> int:
        """Record one failure and return the count inside the window.

        Expired failures of every client are dropped, along with clients
        left with none.
        """
        now = time.monotonic() if now is None else now
        self._failures.setdefault(client_ip, deque()).append(now)
        cutoff = now - self.window
        for ip in list(self._failures):
            failures = self._failures[ip]
            while failures and failures[0] <= cutoff:
                failures.popleft()
            if not failures:
                del self._failures[ip]
        return len(self._failures.get(client_ip, ()))

    def exceeded(self, count: int) -> bool:
        return count >= self.threshold


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with structured fields and flag key guessing."""

    def __init__(self, app, tracker: Optional[AuthFailureTracker] = None):
        super().__init__(app)
        self.tracker = tracker if tracker is not None else AuthFailureTracker()

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        client_ip = request.headers.get(
            "X-Forwarded-For", request.client.host if request.client else "unknown"
        )
        start_time = time.monotonic()

        response = await call_next(request)

        log_data = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "client_ip": client_ip,
            "user_agent": request.headers.get("User-Agent", "unknown"),
            "response_time_ms": round((time.monotonic() - start_time) * 1000, 2),
            "event_type": "http_request",
        }

        if response.status_code == 403:
            log_data["event_type"] = "auth_failure"
            logger.warning("Rejected API key", extra=log_data)
            self._check_brute_force(client_ip)
        elif response.status_code >= 500:
            log_data["event_type"] = "server_error"
            logger.error("Server error", extra=log_data)
        elif response.status_code >= 400:
            logger.warning("Client error", extra=log_data)
        else:
            logger.info("Request completed", extra=log_data)

        response.headers["X-Request-ID"] = request_id
        return response

    def _check_brute_force(self, client_ip: str) -> None:
        count = self.tracker.record(client_ip)
        if self.tracker.exceeded(count):
            logger.critical(
                "Possible API key brute force detected",
                extra={
                    "event_type": "brute_force_detected",
                    "client_ip": client_ip,
                    "failure_count": count,
                    "window_seconds": self.tracker.window,
                },
            )
